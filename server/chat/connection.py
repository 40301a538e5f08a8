"""
Client connection module.

One ClientConnection per accepted socket. It owns the stream pair, runs
the name handshake, relays chat lines through the Broadcaster and cleans
up after itself however its read loop ends.
"""

import asyncio
from typing import Optional

from common.constants import ProtocolLines
from common.protocol_definitions import (
    encode_line, decode_line, normalize_name, parse_disconnect,
    format_join, format_leave, format_chat
)
from server.chat.broadcaster import Broadcaster
from server.chat.registry import ClientRegistry
from server.utils.logger import logger


class ClientConnection:
    """Server-side session for one connected client."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
                 registry: ClientRegistry, broadcaster: Broadcaster, echo_to_sender: bool = True):
        self.reader = reader
        self.writer = writer
        self.registry = registry
        self.broadcaster = broadcaster
        self.echo_to_sender = echo_to_sender
        self.addr = writer.get_extra_info('peername')
        self.name: Optional[str] = None
        self._error = False
        self._closed = False

    def __repr__(self):
        return f"<ClientConnection name={self.name!r} addr={self.addr}>"

    def check_error(self) -> bool:
        """True once a write has failed or the transport is going away."""
        if not self._error and (self._closed or self.writer.is_closing()):
            self._error = True
        return self._error

    async def send_line(self, text: str) -> bool:
        """
        Write one line and flush it.

        Returns False without writing if an earlier write failed; the error
        flag is sticky so the Broadcaster prunes this connection.
        """
        if self.check_error():
            return False
        try:
            self.writer.write(encode_line(text))
            await self.writer.drain()
            return True
        except (ConnectionError, OSError) as e:
            self._error = True
            logger.debug(f"Write to {self.name or self.addr} failed: {e}")
            return False

    async def close(self):
        """Close the transport. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self.writer.close()
        try:
            await self.writer.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug(f"Error closing {self.name or self.addr}: {e}")

    async def _read_line(self) -> Optional[str]:
        """Next line from the peer, or None at end of stream."""
        raw = await self.reader.readline()
        if not raw:
            return None
        return decode_line(raw)

    async def _handshake(self):
        if not await self.send_line(ProtocolLines.NAME_PROMPT):
            raise ConnectionResetError("peer went away before the name prompt")
        self.name = normalize_name(await self._read_line())

        await self.registry.register(self, self.name)
        logger.log_join(self.name, self.addr)
        await self.broadcaster.broadcast_line(format_join(self.name))

    async def _relay(self) -> Optional[str]:
        """
        Relay lines until the peer goes away.

        Returns the name from a DISCONNECT request, or None if the stream
        simply ended.
        """
        exclude = None if self.echo_to_sender else self

        while True:
            line = await self._read_line()
            if line is None:
                return None

            departing = parse_disconnect(line)
            if departing is not None:
                return departing or self.name

            logger.log_chat(self.name, line)
            await self.broadcaster.broadcast_line(format_chat(self.name, line), exclude=exclude)

    async def run(self):
        """Handshake, relay, then clean up regardless of how the loop ended."""
        farewell = None
        graceful = False

        try:
            await self._handshake()
            farewell = await self._relay()
            graceful = farewell is not None
        except asyncio.CancelledError:
            logger.info(f"Connection cancelled for {self.name or self.addr}")
            raise
        except (ConnectionError, OSError, ValueError) as e:
            logger.info(f"Client disconnected: {self.name or 'Unknown'} ({e})")
        finally:
            await self.registry.unregister(self)
            await self.close()

            if not graceful:
                farewell = self.name
            if farewell is not None:
                logger.log_leave(farewell, graceful)
                await self.broadcaster.broadcast_line(format_leave(farewell))
