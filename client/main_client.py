#!/usr/bin/env python3
"""
LAN Broadcast Chat Client - Main Entry Point

Terminal client: prints every line the server relays and sends every line
typed on stdin. ``/quit`` or end of input leaves the chat gracefully.
"""

import argparse
import asyncio
import sys

from client.chat.chat_client import ChatClient
from client.utils.config import ClientConfig
from client.utils.logger import logger
from common.console import ConsoleReader
from common.constants import ConsoleCommands, DEFAULT_HOST, DEFAULT_PORT


class TerminalChat:
    """Wires a ChatClient to the terminal."""

    def __init__(self, config: ClientConfig, input_stream=None, output_stream=None):
        self.config = config
        self.input_stream = input_stream or sys.stdin
        self.output_stream = output_stream or sys.stdout
        self.console = ConsoleReader(self.input_stream)
        self.client = ChatClient(config)
        self.client.set_message_handler(self.display)

    def display(self, line: str):
        print(line, file=self.output_stream, flush=True)

    async def read_input(self):
        while self.client.running:
            line = await self.console.readline()
            if not line:
                break
            text = line.rstrip('\r\n')
            if text == ConsoleCommands.QUIT:
                break
            if text and not await self.client.send_chat(text):
                break

    async def run(self) -> bool:
        if not await self.client.connect():
            return False
        if not await self.client.join():
            await self.client.disconnect()
            return False

        logger.show_interactive_mode_info()
        listener = asyncio.create_task(self.client.listen_for_messages())
        typing = asyncio.create_task(self.read_input())
        try:
            await asyncio.wait({listener, typing}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            await self.client.disconnect()
            listener.cancel()
            typing.cancel()
        return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='LAN Broadcast Chat Client')
    parser.add_argument('--host', type=str, default=DEFAULT_HOST,
                        help=f'Server address (default: {DEFAULT_HOST})')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help=f'Server TCP port (default: {DEFAULT_PORT})')
    parser.add_argument('--name', type=str, default=None,
                        help='Display name (default: generated)')
    parser.add_argument('--show-heartbeats', action='store_true',
                        help='Print HEARTBEAT lines from the server')
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = ClientConfig(args.host, args.port, args.name)
    config.show_heartbeats = args.show_heartbeats

    try:
        ok = asyncio.run(TerminalChat(config).run())
    except KeyboardInterrupt:
        logger.info("[INFO] Exiting...")
        return 0
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
