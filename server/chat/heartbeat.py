"""
Heartbeat module.

Every interval the monitor broadcasts a HEARTBEAT line. Clients whose
socket has died fail that write and are pruned by the Broadcaster; there
is no per-client acknowledgement tracking.
"""

import asyncio
from typing import Optional

from common.constants import ProtocolLines, HEARTBEAT_INTERVAL, HEARTBEAT_TIMEOUT
from server.chat.broadcaster import Broadcaster
from server.chat.state import ServerState
from server.utils.logger import logger


class HeartbeatMonitor:
    """Periodic liveness broadcast."""

    def __init__(self, state: ServerState, broadcaster: Broadcaster,
                 interval: float = HEARTBEAT_INTERVAL, timeout: float = HEARTBEAT_TIMEOUT):
        self.state = state
        self.broadcaster = broadcaster
        self.interval = interval
        # Documented only; dead clients are found by failed writes
        self.timeout = timeout
        self.task: Optional[asyncio.Task] = None
        self.beats = 0

    async def beat(self):
        """Send one heartbeat to every registered client."""
        result = await self.broadcaster.broadcast_line(ProtocolLines.HEARTBEAT)
        self.beats += 1
        logger.log_heartbeat(result.delivered, len(result.pruned))
        return result

    async def run(self):
        while self.state.running:
            await asyncio.sleep(self.interval)
            if not self.state.running:
                break
            try:
                await self.beat()
            except Exception as e:
                logger.log_error("heartbeat", e)

    def start(self) -> asyncio.Task:
        """Launch the heartbeat loop; returns the existing task if already running."""
        if self.task is None or self.task.done():
            logger.info(f"Heartbeat every {self.interval}s (timeout {self.timeout}s not enforced)")
            self.task = asyncio.create_task(self.run())
        return self.task

    async def stop(self):
        """Cancel the heartbeat loop and wait for it to finish."""
        task, self.task = self.task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
