#!/usr/bin/env python3
"""
Unit tests for the per-client session in server/chat/connection.py

Covers the handshake, chat relay, graceful DISCONNECT and the cleanup that
runs however the read loop ends.
"""

import asyncio
import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from server.chat.broadcaster import Broadcaster
from server.chat.connection import ClientConnection
from server.chat.registry import ClientRegistry


class ScriptedReader:
    """Returns queued lines from readline(); exceptions in the script are raised."""

    def __init__(self, *items):
        self.items = list(items)

    async def readline(self):
        if not self.items:
            return b''
        item = self.items.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class FakeWriter:
    """Collects written bytes; can be told to fail like a reset socket."""

    def __init__(self, broken: bool = False, peer=('127.0.0.1', 50000)):
        self.buffer = bytearray()
        self.broken = broken
        self.closed = False
        self.close_calls = 0
        self.peer = peer

    def get_extra_info(self, key, default=None):
        return self.peer if key == 'peername' else default

    def write(self, data):
        if self.broken:
            raise ConnectionResetError("Connection reset by peer")
        self.buffer.extend(data)

    async def drain(self):
        pass

    def is_closing(self):
        return self.closed

    def close(self):
        self.closed = True
        self.close_calls += 1

    async def wait_closed(self):
        pass

    def lines(self):
        return self.buffer.decode('utf-8').splitlines()


class SlowClosingWriter(FakeWriter):
    """Holds wait_closed() open until released."""

    def __init__(self):
        super().__init__()
        self.closing = asyncio.Event()
        self.release = asyncio.Event()

    async def wait_closed(self):
        self.closing.set()
        await self.release.wait()


class Observer:
    """A registered bystander that records every broadcast it receives."""

    def __init__(self):
        self.lines = []

    async def send_line(self, text):
        self.lines.append(text)
        return True


class TestClientConnection(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.registry = ClientRegistry()
        self.broadcaster = Broadcaster(self.registry)
        self.observer = Observer()
        await self.registry.register(self.observer, "observer")

    def _connection(self, *script, writer=None, echo=True):
        writer = writer or FakeWriter()
        reader = ScriptedReader(*script)
        return ClientConnection(reader, writer, self.registry, self.broadcaster, echo_to_sender=echo), writer

    async def test_handshake_prompts_and_announces_join(self):
        """The new client is prompted and receives its own join line."""
        conn, writer = self._connection(b"Alice\n")

        await conn.run()

        self.assertEqual(writer.lines()[:2], ["Please enter your name:", "Alice has joined the chat."])
        self.assertEqual(conn.name, "Alice")
        self.assertIn("Alice has joined the chat.", self.observer.lines)

    async def test_blank_name_becomes_anonymous(self):
        conn, _ = self._connection(b"   \r\n")
        await conn.run()
        self.assertEqual(conn.name, "Anonymous")
        self.assertEqual(self.observer.lines[0], "Anonymous has joined the chat.")

    async def test_eof_at_name_prompt_joins_as_anonymous(self):
        conn, _ = self._connection()
        await conn.run()
        self.assertEqual(self.observer.lines, ["Anonymous has joined the chat.", "Anonymous has left the chat."])

    async def test_chat_line_is_echoed_to_sender(self):
        conn, writer = self._connection(b"Bob\n", b"hi\n")

        await conn.run()

        self.assertIn("Bob: hi", writer.lines())
        self.assertEqual(self.observer.lines, [
            "Bob has joined the chat.",
            "Bob: hi",
            "Bob has left the chat.",
        ])

    async def test_no_echo_mode_skips_sender(self):
        conn, writer = self._connection(b"Bob\n", b"hi\n", echo=False)
        await conn.run()
        self.assertNotIn("Bob: hi", writer.lines())
        self.assertIn("Bob: hi", self.observer.lines)

    async def test_graceful_disconnect_announces_payload_name_once(self):
        """DISCONNECT Alice yields exactly one leave line and no generic one."""
        conn, _ = self._connection(b"Bob\n", b"DISCONNECT Alice\n", b"never read\n")

        await conn.run()

        leaves = [line for line in self.observer.lines if line.endswith("has left the chat.")]
        self.assertEqual(leaves, ["Alice has left the chat."])
        self.assertNotIn("Bob: never read", self.observer.lines)

    async def test_bare_disconnect_uses_own_name(self):
        conn, _ = self._connection(b"Bob\n", b"DISCONNECT\n")
        await conn.run()
        self.assertEqual(self.observer.lines[-1], "Bob has left the chat.")
        self.assertEqual(self.observer.lines.count("Bob has left the chat."), 1)

    async def test_leave_is_sent_only_to_remaining_clients(self):
        conn, writer = self._connection(b"Bob\n", b"DISCONNECT Bob\n")
        await conn.run()
        self.assertNotIn("Bob has left the chat.", writer.lines())

    async def test_read_error_terminates_with_cleanup(self):
        """A reset mid-session closes, unregisters and announces the leave."""
        conn, writer = self._connection(b"Carol\n", b"first\n", ConnectionResetError("reset"))

        await conn.run()

        self.assertTrue(writer.closed)
        self.assertNotIn(conn, self.registry)
        self.assertEqual(self.observer.lines[-2:], ["Carol: first", "Carol has left the chat."])
        self.assertEqual(len(self.registry), 1)

    async def test_oversized_line_terminates_connection(self):
        conn, _ = self._connection(b"Dave\n", ValueError("Separator is not found, and chunk exceed the limit"))
        await conn.run()
        self.assertEqual(self.observer.lines[-1], "Dave has left the chat.")

    async def test_error_before_name_skips_leave_announcement(self):
        conn, writer = self._connection(ConnectionResetError("reset"))

        await conn.run()

        self.assertIsNone(conn.name)
        self.assertEqual(self.observer.lines, [])
        self.assertTrue(writer.closed)

    async def test_dead_peer_at_prompt_is_never_registered(self):
        conn, _ = self._connection(b"Ghost\n", writer=FakeWriter(broken=True))

        await conn.run()

        self.assertIsNone(conn.name)
        self.assertEqual(self.observer.lines, [])
        self.assertEqual(len(self.registry), 1)

    async def test_send_line_error_flag_is_sticky(self):
        writer = FakeWriter()
        conn, _ = self._connection(writer=writer)

        self.assertTrue(await conn.send_line("ok"))
        writer.broken = True
        self.assertFalse(await conn.send_line("fails"))
        writer.broken = False
        self.assertFalse(await conn.send_line("still refused"))
        self.assertTrue(conn.check_error())
        self.assertEqual(writer.lines(), ["ok"])

    async def test_close_is_idempotent(self):
        conn, writer = self._connection()
        await conn.close()
        await conn.close()
        self.assertEqual(writer.close_calls, 1)
        self.assertFalse(await conn.send_line("after close"))

    async def test_registered_peer_with_broken_socket_is_pruned_on_join(self):
        """A bystander whose socket died is removed by the next broadcast."""
        dead_conn, dead_writer = self._connection(b"Zed\n", b"still here\n")
        await self.registry.register(dead_conn, "Zed")
        dead_writer.broken = True

        conn, _ = self._connection(b"Eve\n")
        await conn.run()

        self.assertNotIn(dead_conn, self.registry)
        self.assertEqual(dead_writer.lines(), [])


    async def test_leaving_connection_is_unregistered_before_close(self):
        """A broadcast racing a graceful leave neither reaches nor prunes the leaver."""
        writer = SlowClosingWriter()
        conn, _ = self._connection(b"Bob\n", b"DISCONNECT Bob\n", writer=writer)

        session = asyncio.create_task(conn.run())
        await asyncio.wait_for(writer.closing.wait(), timeout=5)

        self.assertNotIn(conn, self.registry)
        result = await self.broadcaster.broadcast_line("meanwhile")
        self.assertEqual(result.pruned, [])
        self.assertEqual(result.attempted, 1)

        writer.release.set()
        await asyncio.wait_for(session, timeout=5)

        leaves = [line for line in self.observer.lines if line.endswith("has left the chat.")]
        self.assertEqual(leaves, ["Bob has left the chat."])
        self.assertNotIn("meanwhile", writer.lines())

if __name__ == '__main__':
    unittest.main()
