"""
Client registry module.

The registry is the single source of truth for who is online. It maps each
live ClientConnection to its display name under one asyncio.Lock; the same
lock is held by the Broadcaster for a whole broadcast, so membership can
never change in the middle of one.
"""

import asyncio
from typing import Dict, List, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from server.chat.connection import ClientConnection


class ClientRegistry:
    """Lock-guarded set of broadcast-eligible connections and their names."""

    def __init__(self):
        # Connection set and name map in one dict so they cannot diverge
        self._names: Dict['ClientConnection', str] = {}
        self.lock = asyncio.Lock()

    async def register(self, connection: 'ClientConnection', name: str) -> bool:
        """Add a connection. Returns False if it was already registered."""
        async with self.lock:
            if connection in self._names:
                return False
            self._names[connection] = name
            return True

    async def unregister(self, connection: 'ClientConnection') -> bool:
        """Remove a connection and its name. Returns False if it was absent."""
        async with self.lock:
            return self._names.pop(connection, None) is not None

    async def snapshot(self) -> List[Tuple['ClientConnection', str]]:
        """Stable copy of (connection, name) pairs."""
        async with self.lock:
            return list(self._names.items())

    async def names(self) -> List[str]:
        """Display names of everyone currently online."""
        async with self.lock:
            return list(self._names.values())

    def _require_lock(self):
        if not self.lock.locked():
            raise RuntimeError("registry lock not held")

    def members_locked(self) -> List[Tuple['ClientConnection', str]]:
        """Copy of the members. Caller must hold ``self.lock``."""
        self._require_lock()
        return list(self._names.items())

    def discard_locked(self, connection: 'ClientConnection') -> bool:
        """Remove a connection while iterating. Caller must hold ``self.lock``."""
        self._require_lock()
        return self._names.pop(connection, None) is not None

    def __contains__(self, connection) -> bool:
        return connection in self._names

    def __len__(self) -> int:
        return len(self._names)
