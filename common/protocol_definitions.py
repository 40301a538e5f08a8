"""
Protocol definitions for the LAN Broadcast Chat system.

The wire format is plain newline-terminated text. This module builds every
line the server emits and parses the few lines a client can send, so client
and server agree on a single rendering of each message.
"""

from typing import Optional

from common.constants import (
    ENCODING, LINE_TERMINATOR, DEFAULT_CLIENT_NAME, ProtocolLines
)


def encode_line(text: str) -> bytes:
    """Encode one outgoing line, appending the line terminator."""
    return (text + LINE_TERMINATOR).encode(ENCODING)


def decode_line(raw: bytes) -> str:
    """Decode one incoming line and strip its terminator (LF or CRLF)."""
    return raw.decode(ENCODING, errors='replace').rstrip('\r\n')


def normalize_name(raw: Optional[str]) -> str:
    """Return the display name for a handshake reply; blank means Anonymous."""
    if raw is None:
        return DEFAULT_CLIENT_NAME
    name = raw.strip()
    return name or DEFAULT_CLIENT_NAME


def format_join(name: str) -> str:
    return f"{name}{ProtocolLines.JOIN_SUFFIX}"


def format_leave(name: str) -> str:
    return f"{name}{ProtocolLines.LEAVE_SUFFIX}"


def format_chat(name: str, message: str) -> str:
    return f"{name}: {message}"


def format_operator_message(display_name: str, server_ip: str, text: str) -> str:
    """Line sent when the server operator types a message."""
    return f"{display_name} ({server_ip}): {text}"


def create_disconnect_message(name: str) -> str:
    """Line a client sends to leave gracefully."""
    return f"{ProtocolLines.DISCONNECT_PREFIX}{name}"


def parse_disconnect(line: str) -> Optional[str]:
    """
    Recognise a graceful-leave request.

    Returns the departing name carried by ``DISCONNECT <name>``. A bare
    ``DISCONNECT`` (or a blank payload) returns an empty string, meaning the
    sender's own name should be used. Any other line returns None.
    """
    if line.startswith(ProtocolLines.DISCONNECT_PREFIX):
        return line[len(ProtocolLines.DISCONNECT_PREFIX):].strip()
    if line.strip() == ProtocolLines.DISCONNECT:
        return ''
    return None


def is_heartbeat(line: str) -> bool:
    return line == ProtocolLines.HEARTBEAT


def is_shutdown(line: str) -> bool:
    return line in (ProtocolLines.SHUTTING_DOWN, ProtocolLines.SHUT_DOWN)
