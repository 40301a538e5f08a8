"""
Shared server state.

Owned by the server lifecycle and handed by reference to the acceptor and
heartbeat loops, which only read the running flag.
"""

import socket
from dataclasses import dataclass
from typing import Optional


@dataclass
class ServerState:
    """Running flag, bound port and listening socket of one server."""
    running: bool = False
    port: Optional[int] = None
    listen_socket: Optional[socket.socket] = None

    def close_listen_socket(self):
        """Close the listening socket if one is open. Safe to call twice."""
        sock = self.listen_socket
        self.listen_socket = None
        if sock is not None:
            sock.close()
