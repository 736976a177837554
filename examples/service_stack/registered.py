"""Units registered by name instead of being loaded from a path."""

from __future__ import annotations

import asyncio
import logging

from runnerkit.runtime import runnable

LOGGER = logging.getLogger(__name__)


@runnable("heartbeat")
class Heartbeat:
    async def configure(self) -> None:
        self.beats = 0

    async def run(self, args=None) -> int:
        count = int(args[0]) if args else 3
        for _ in range(count):
            self.beats += 1
            LOGGER.info("heartbeat %d", self.beats)
            await asyncio.sleep(0)
        return self.beats
