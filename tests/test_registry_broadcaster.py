#!/usr/bin/env python3
"""
Unit tests for the client registry and broadcaster.

Tests the invariants of the shared connection registry:
- Idempotent register/unregister and exact counting
- One delivery attempt per registered connection
- Inline pruning of connections whose write fails
- Exclusion of a single connection (no-echo mode)
"""

import asyncio
import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from server.chat.broadcaster import Broadcaster
from server.chat.registry import ClientRegistry


class FakeConnection:
    """Stands in for a ClientConnection; records what it is sent."""

    def __init__(self, name: str, fail: bool = False):
        self.name = name
        self.fail = fail
        self.attempts = 0
        self.lines = []

    async def send_line(self, text: str) -> bool:
        self.attempts += 1
        if self.fail:
            return False
        self.lines.append(text)
        return True


class TestClientRegistry(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.registry = ClientRegistry()

    async def test_register_is_idempotent(self):
        conn = FakeConnection("A")
        self.assertTrue(await self.registry.register(conn, "A"))
        self.assertFalse(await self.registry.register(conn, "A"))
        self.assertEqual(len(self.registry), 1)
        self.assertIn(conn, self.registry)

    async def test_unregister_absent_is_noop(self):
        conn = FakeConnection("A")
        self.assertFalse(await self.registry.unregister(conn))
        await self.registry.register(conn, "A")
        self.assertTrue(await self.registry.unregister(conn))
        self.assertFalse(await self.registry.unregister(conn))
        self.assertEqual(len(self.registry), 0)

    async def test_count_tracks_joins_minus_leaves(self):
        """Count equals completed registrations minus processed removals."""
        conns = [FakeConnection(f"user{i}") for i in range(10)]
        for conn in conns:
            await self.registry.register(conn, conn.name)
        for conn in conns[:4]:
            await self.registry.unregister(conn)
            await self.registry.unregister(conn)  # double removal must not double-count
        self.assertEqual(len(self.registry), 6)
        self.assertEqual(sorted(await self.registry.names()), sorted(c.name for c in conns[4:]))

    async def test_snapshot_is_a_copy(self):
        a, b = FakeConnection("A"), FakeConnection("B")
        await self.registry.register(a, "A")
        snapshot = await self.registry.snapshot()
        await self.registry.register(b, "B")
        self.assertEqual(snapshot, [(a, "A")])

    async def test_lock_held_helpers_require_lock(self):
        with self.assertRaises(RuntimeError):
            self.registry.members_locked()
        async with self.registry.lock:
            self.assertEqual(self.registry.members_locked(), [])

    async def test_concurrent_registration(self):
        conns = [FakeConnection(f"user{i}") for i in range(50)]
        await asyncio.gather(*(self.registry.register(c, c.name) for c in conns))
        await asyncio.gather(*(self.registry.unregister(c) for c in conns[::2]))
        self.assertEqual(len(self.registry), 25)


class TestBroadcaster(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.registry = ClientRegistry()
        self.broadcaster = Broadcaster(self.registry)

    async def _register(self, *conns):
        for conn in conns:
            await self.registry.register(conn, conn.name)

    async def test_delivers_to_every_connection(self):
        conns = [FakeConnection(n) for n in "ABC"]
        await self._register(*conns)

        result = await self.broadcaster.broadcast_line("hello")

        self.assertEqual(result.attempted, 3)
        self.assertEqual(result.delivered, 3)
        self.assertEqual(result.pruned, [])
        for conn in conns:
            self.assertEqual(conn.lines, ["hello"])

    async def test_failed_write_prunes_exactly_that_connection(self):
        """N attempts, each failure prunes one; the next broadcast targets N-1."""
        good_a, dead, good_b = FakeConnection("A"), FakeConnection("B", fail=True), FakeConnection("C")
        await self._register(good_a, dead, good_b)

        first = await self.broadcaster.broadcast_line("one")
        self.assertEqual(first.attempted, 3)
        self.assertEqual(first.delivered, 2)
        self.assertEqual(first.pruned, ["B"])
        self.assertNotIn(dead, self.registry)

        second = await self.broadcaster.broadcast_line("two")
        self.assertEqual(second.attempted, 2)
        self.assertEqual(dead.attempts, 1)
        self.assertEqual(good_a.lines, ["one", "two"])

    async def test_empty_registry(self):
        result = await self.broadcaster.broadcast_line("nobody home")
        self.assertEqual((result.attempted, result.delivered), (0, 0))

    async def test_exclude_skips_one_connection(self):
        sender, other = FakeConnection("A"), FakeConnection("B")
        await self._register(sender, other)

        result = await self.broadcaster.broadcast_line("A: hi", exclude=sender)

        self.assertEqual(result.attempted, 1)
        self.assertEqual(sender.lines, [])
        self.assertEqual(other.lines, ["A: hi"])

    async def test_registration_waits_for_broadcast(self):
        """A connection registered during a broadcast is not part of it."""
        release = asyncio.Event()

        class SlowConnection(FakeConnection):
            async def send_line(self, text):
                await release.wait()
                return await super().send_line(text)

        slow, late = SlowConnection("slow"), FakeConnection("late")
        await self._register(slow)

        broadcast = asyncio.create_task(self.broadcaster.broadcast_line("first"))
        await asyncio.sleep(0)
        register = asyncio.create_task(self.registry.register(late, "late"))
        await asyncio.sleep(0)
        self.assertNotIn(late, self.registry)

        release.set()
        result = await broadcast
        await register

        self.assertEqual(result.attempted, 1)
        self.assertEqual(late.lines, [])
        self.assertIn(late, self.registry)


if __name__ == '__main__':
    unittest.main()
