"""
Broadcaster module.

Sends a line to every registered connection and prunes the ones that can
no longer be written to. This is the only place dead connections are
removed, for chat lines and heartbeats alike.
"""

from dataclasses import dataclass, field
from typing import List, Optional, TYPE_CHECKING

from server.chat.registry import ClientRegistry
from server.utils.logger import logger

if TYPE_CHECKING:
    from server.chat.connection import ClientConnection


@dataclass
class BroadcastResult:
    """Outcome of one broadcast."""
    attempted: int = 0
    delivered: int = 0
    pruned: List[str] = field(default_factory=list)


class Broadcaster:
    """Delivers lines to all registered clients."""

    def __init__(self, registry: ClientRegistry):
        self.registry = registry

    async def broadcast_line(self, text: str, exclude: Optional['ClientConnection'] = None) -> BroadcastResult:
        """
        Send ``text`` to every registered connection.

        The registry lock is held for the entire iteration. A connection whose
        write fails (or whose error flag is already set) is removed from the
        registry within the same pass. ``exclude`` skips one connection without
        counting it as an attempt.
        """
        result = BroadcastResult()

        async with self.registry.lock:
            for connection, name in self.registry.members_locked():
                if connection is exclude:
                    continue
                result.attempted += 1
                if await connection.send_line(text):
                    result.delivered += 1
                else:
                    self.registry.discard_locked(connection)
                    result.pruned.append(name)
                    logger.log_pruned(name)

        return result
