"""
Connection acceptor module.

Runs the accept loop on the server's listening socket and starts one task
per accepted client.
"""

import asyncio
import socket
from typing import Awaitable, Callable, Optional, Set

from common.constants import ACCEPT_RETRY_DELAY, MAX_LINE_LENGTH
from server.chat.state import ServerState
from server.utils.logger import logger

ClientHandler = Callable[[asyncio.StreamReader, asyncio.StreamWriter], Awaitable[None]]


class ConnectionAcceptor:
    """Accept loop feeding a client handler."""

    def __init__(self, state: ServerState, handler: ClientHandler,
                 retry_delay: float = ACCEPT_RETRY_DELAY, max_line_length: int = MAX_LINE_LENGTH):
        self.state = state
        self.handler = handler
        self.retry_delay = retry_delay
        self.max_line_length = max_line_length
        self.task: Optional[asyncio.Task] = None
        self.client_tasks: Set[asyncio.Task] = set()

    async def accept(self, listen_socket: socket.socket):
        """Wait for the next incoming connection."""
        loop = asyncio.get_running_loop()
        return await loop.sock_accept(listen_socket)

    async def run(self):
        while self.state.running:
            listen_socket = self.state.listen_socket
            if listen_socket is None:
                break
            try:
                sock, addr = await self.accept(listen_socket)
            except OSError as e:
                # Expected once the server has stopped
                if not self.state.running:
                    break
                logger.log_error("accept", e)
                await asyncio.sleep(self.retry_delay)
                continue

            logger.log_connection(addr)
            self.spawn(sock)

    def spawn(self, sock: socket.socket) -> asyncio.Task:
        """Start a task serving one accepted socket."""
        task = asyncio.create_task(self._serve(sock))
        self.client_tasks.add(task)
        task.add_done_callback(self._client_done)
        return task

    async def _serve(self, sock: socket.socket):
        try:
            reader, writer = await asyncio.open_connection(sock=sock, limit=self.max_line_length)
        except OSError as e:
            logger.log_error("stream setup", e)
            sock.close()
            return
        await self.handler(reader, writer)

    def _client_done(self, task: asyncio.Task):
        self.client_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Client task failed with exception: {task.exception()}")

    def start(self) -> asyncio.Task:
        """Launch the accept loop; returns the existing task if already running."""
        if self.task is None or self.task.done():
            self.task = asyncio.create_task(self.run())
        return self.task

    async def stop(self):
        """Stop accepting and close the listening socket."""
        task, self.task = self.task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self.state.close_listen_socket()
