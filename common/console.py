"""
Console input shared by the server operator console and the terminal client.

Lines are read on a daemon thread with plain ``os.read`` calls and fed into
an asyncio.StreamReader, so a pending read never holds the event loop (or
interpreter shutdown) hostage.
"""

import asyncio
import io
import os
import sys
import threading
from typing import Optional

from common.constants import ENCODING

READ_CHUNK = 4096


class ConsoleReader:
    """Line reader over a blocking input stream."""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin
        self.fd = self._fileno(self.stream)
        self.reader: Optional[asyncio.StreamReader] = None
        self._thread: Optional[threading.Thread] = None

    @staticmethod
    def _fileno(stream) -> Optional[int]:
        try:
            return stream.fileno()
        except (AttributeError, ValueError, io.UnsupportedOperation):
            return None

    def start(self):
        """Start the reader thread. Must be called from the event loop."""
        if self._thread is not None:
            return
        loop = asyncio.get_running_loop()
        self.reader = asyncio.StreamReader()
        self._thread = threading.Thread(target=self._pump, args=(loop,),
                                        name='console-reader', daemon=True)
        self._thread.start()

    def _read_chunk(self) -> bytes:
        if self.fd is not None:
            return os.read(self.fd, READ_CHUNK)
        return self.stream.readline().encode(ENCODING)

    def _pump(self, loop: asyncio.AbstractEventLoop):
        while True:
            try:
                data = self._read_chunk()
            except (OSError, ValueError):
                data = b''
            try:
                if data:
                    loop.call_soon_threadsafe(self.reader.feed_data, data)
                else:
                    loop.call_soon_threadsafe(self.reader.feed_eof)
            except RuntimeError:
                # Event loop already closed
                return
            if not data:
                return

    async def readline(self) -> str:
        """Next line including its terminator, or '' at end of input."""
        self.start()
        raw = await self.reader.readline()
        return raw.decode(ENCODING, errors='replace')
