"""
Chat client module.

This module handles client-side chat messaging functionality: connecting,
answering the name prompt, sending lines and leaving with DISCONNECT.
"""

import asyncio
from typing import Callable, Optional

from common.constants import ProtocolLines
from common.protocol_definitions import (
    encode_line, decode_line, create_disconnect_message, is_heartbeat, is_shutdown
)
from client.utils.config import ClientConfig
from client.utils.logger import logger


class ChatClient:
    """Client-side chat functionality."""

    def __init__(self, config: Optional[ClientConfig] = None):
        self.config = config or ClientConfig()
        self.reader: Optional[asyncio.StreamReader] = None
        self.writer: Optional[asyncio.StreamWriter] = None
        self.running = False
        self.message_handler: Optional[Callable[[str], None]] = None

    def set_message_handler(self, handler: Callable[[str], None]):
        """Set the handler called with every line the server sends."""
        self.message_handler = handler

    async def connect(self, retry_count: Optional[int] = None) -> bool:
        """Establish connection to the server with retry logic and exponential backoff."""
        retry_count = retry_count or self.config.connect_retries
        info = self.config.get_connection_info()
        host, port = info["host"], info["port"]

        for attempt in range(1, retry_count + 1):
            try:
                self.reader, self.writer = await asyncio.open_connection(host, port)
                logger.log_connection(host, port, True)
                self.running = True
                return True
            except OSError as e:
                logger.log_connection(host, port, False)
                logger.log_error("connection", e)
                if attempt < retry_count:
                    delay = self.config.retry_delay * (2 ** (attempt - 1))
                    logger.info(f"[INFO] Retrying connection in {delay}s (attempt {attempt}/{retry_count})...")
                    await asyncio.sleep(delay)

        logger.error(f"[ERROR] Failed to connect after {retry_count} attempts")
        return False

    async def read_line(self) -> Optional[str]:
        """Next line from the server, or None once the server closes."""
        raw = await self.reader.readline()
        if not raw:
            return None
        return decode_line(raw)

    async def send_line(self, text: str) -> bool:
        """Send one raw line to the server."""
        if not self.writer:
            logger.error("[ERROR] Not connected to server")
            return False
        try:
            self.writer.write(encode_line(text))
            await self.writer.drain()
            return True
        except (ConnectionError, OSError) as e:
            logger.log_error("send", e)
            return False

    async def join(self) -> bool:
        """Wait for the name prompt and answer it."""
        prompt = await self.read_line()
        if prompt != ProtocolLines.NAME_PROMPT:
            logger.warning(f"Unexpected greeting from server: {prompt!r}")
            return False
        logger.show_login_info(self.config.username)
        return await self.send_line(self.config.username)

    async def send_chat(self, message: str) -> bool:
        """Send a chat message."""
        return await self.send_line(message)

    async def listen_for_messages(self):
        """Pass every server line to the message handler until the server closes."""
        while self.running:
            try:
                line = await self.read_line()
            except (ConnectionError, OSError) as e:
                logger.log_error("receive", e)
                break
            if line is None:
                logger.info("[INFO] Server closed connection")
                break
            if is_heartbeat(line) and not self.config.show_heartbeats:
                continue
            if is_shutdown(line):
                logger.info(f"[INFO] {line}")
            if self.message_handler:
                self.message_handler(line)
        self.running = False

    async def disconnect(self):
        """Leave gracefully and close the connection."""
        if not self.writer:
            return
        if self.running:
            await self.send_line(create_disconnect_message(self.config.username))
        self.running = False
        writer, self.writer = self.writer, None
        writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionError, OSError):
            pass
