#!/usr/bin/env python3
"""
LAN Broadcast Chat Server - Main Entry Point

Ties the registry, broadcaster, acceptor and heartbeat together behind a
start/stop lifecycle, and exposes the operator broadcast used by the
server console.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from common.console import ConsoleReader
from common.constants import (
    ProtocolLines, ConsoleCommands, DEFAULT_SERVER_HOST, DEFAULT_PORT, HEARTBEAT_INTERVAL, LOG_DIR
)
from common.protocol_definitions import format_operator_message
from server.chat.acceptor import ConnectionAcceptor
from server.chat.broadcaster import Broadcaster, BroadcastResult
from server.chat.connection import ClientConnection
from server.chat.heartbeat import HeartbeatMonitor
from server.chat.registry import ClientRegistry
from server.chat.state import ServerState
from server.utils.config import ServerConfig
from server.utils.logger import logger
from server.utils.network import get_local_ip, create_listening_socket


class ChatServer:
    """Start/stop orchestration for the broadcast chat server."""

    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig(host, port)
        self.state = ServerState()
        self.registry = ClientRegistry()
        self.broadcaster = Broadcaster(self.registry)
        self.acceptor: Optional[ConnectionAcceptor] = None
        self.heartbeat: Optional[HeartbeatMonitor] = None
        self.server_ip: Optional[str] = None
        logger.set_logs_dir(self.config.get_log_settings()["logs_dir"])

    @property
    def running(self) -> bool:
        return self.state.running

    @property
    def port(self) -> Optional[int]:
        return self.state.port

    @property
    def connection_count(self) -> int:
        return len(self.registry)

    async def participant_names(self) -> List[str]:
        return await self.registry.names()

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Serve one accepted client until it goes away."""
        connection = ClientConnection(reader, writer, self.registry, self.broadcaster,
                                      echo_to_sender=self.config.echo_to_sender)
        await connection.run()

    async def start(self, port: Optional[int] = None) -> str:
        """
        Bind the listening socket and launch the acceptor and heartbeat.

        Returns the server's IP address. Calling start() on a running server
        does nothing. A bind failure is logged and the OSError propagates;
        the server stays stopped.
        """
        if self.state.running:
            logger.warning("Server is already running")
            return self.server_ip

        port = self.config.port if port is None else port
        try:
            listen_socket = create_listening_socket(self.config.host, port, self.config.backlog)
        except OSError as e:
            logger.log_error("starting server", e)
            raise

        self.state.listen_socket = listen_socket
        self.state.port = listen_socket.getsockname()[1]
        self.state.running = True
        self.server_ip = get_local_ip()

        self.acceptor = ConnectionAcceptor(self.state, self.handle_client,
                                           retry_delay=self.config.accept_retry_delay,
                                           max_line_length=self.config.max_line_length)
        self.heartbeat = HeartbeatMonitor(self.state, self.broadcaster,
                                          interval=self.config.heartbeat_interval,
                                          timeout=self.config.heartbeat_timeout)
        self.acceptor.start()
        self.heartbeat.start()

        logger.log_server_started(self.server_ip, self.state.port)
        return self.server_ip

    async def stop(self):
        """
        Stop accepting, stop the heartbeat and tell every client.

        Client sockets are left open; clients disconnect on their own after
        the shutdown lines, or are pruned on the next failed write.
        """
        if not self.state.running:
            return

        self.state.running = False
        await self.acceptor.stop()
        await self.heartbeat.stop()

        await self.broadcaster.broadcast_line(ProtocolLines.SHUTTING_DOWN)
        result = await self.broadcaster.broadcast_line(ProtocolLines.SHUT_DOWN)
        logger.log_server_stopped(result.delivered)

    async def operator_broadcast(self, display_name: str, text: str) -> BroadcastResult:
        """Send a line typed by the server operator to every client."""
        display_name = display_name.strip() or self.config.operator_name
        logger.log_operator_message(display_name, text)
        line = format_operator_message(display_name, self.server_ip or get_local_ip(), text)
        return await self.broadcaster.broadcast_line(line)

    async def run_console(self, stream=None):
        """
        Operator console: every line typed is broadcast, ``/who`` lists
        participants, ``/quit`` or end of input stops the server.
        """
        console = ConsoleReader(stream or sys.stdin)

        while self.state.running:
            line = await console.readline()
            if not line:
                break
            text = line.rstrip('\r\n')
            if not text:
                continue
            if text == ConsoleCommands.QUIT:
                break
            if text == ConsoleCommands.WHO:
                names = await self.participant_names()
                logger.info(f"Online ({len(names)}): {', '.join(names) or '-'}")
                continue
            await self.operator_broadcast(self.config.operator_name, text)

        await self.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='LAN Broadcast Chat Server')
    parser.add_argument('--host', type=str, default=DEFAULT_SERVER_HOST,
                        help=f'Host to bind to (default: {DEFAULT_SERVER_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'TCP port to listen on (default: {DEFAULT_PORT})')
    parser.add_argument('--heartbeat-interval', type=float, default=HEARTBEAT_INTERVAL,
                        help=f'Seconds between heartbeats (default: {HEARTBEAT_INTERVAL})')
    parser.add_argument('--name', type=str, default='',
                        help='Display name for operator messages (default: Server)')
    parser.add_argument('--no-echo', action='store_true',
                        help='Do not echo chat lines back to their sender')
    parser.add_argument('--logs-dir', type=str, default=LOG_DIR,
                        help=f'Directory for the chat audit log (default: {LOG_DIR})')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    return parser


async def serve(args: argparse.Namespace):
    config = ServerConfig(args.host, args.port, heartbeat_interval=args.heartbeat_interval,
                          echo_to_sender=not args.no_echo, operator_name=args.name,
                          logs_dir=args.logs_dir)
    server = ChatServer(config=config)
    await server.start()
    try:
        await server.run_console()
    finally:
        await server.stop()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.debug:
        logger.set_level(logging.DEBUG)

    try:
        asyncio.run(serve(args))
    except KeyboardInterrupt:
        logger.info("Server shutting down...")
    except OSError as e:
        logger.error(f"Server failed to start: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
