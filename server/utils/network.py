"""
Network helpers for the server.
"""

import socket

from common.constants import UNAVAILABLE_IP


def get_local_ip() -> str:
    """
    Return the primary non-loopback IPv4 address of this host.

    Falls back to a hostname lookup, and to ``Unavailable`` when neither
    yields a non-loopback address.
    """
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            # No packet is sent; connecting a UDP socket only selects the default interface
            s.connect(('8.8.8.8', 80))
            address = s.getsockname()[0]
            if not address.startswith('127.'):
                return address
    except OSError:
        pass

    try:
        address = socket.gethostbyname(socket.gethostname())
        if not address.startswith('127.'):
            return address
    except OSError:
        pass

    return UNAVAILABLE_IP


def create_listening_socket(host: str, port: int, backlog: int) -> socket.socket:
    """Bind a non-blocking TCP listening socket. Raises OSError on bind failure."""
    sock = socket.create_server((host, port), backlog=backlog)
    sock.setblocking(False)
    return sock
