"""
Per-turn countdown driving the time-up transition
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class TurnTimer:
    """Repeating countdown that fires a callback when a turn runs out of time"""

    def __init__(
        self,
        time_limit: float,
        on_expire: Callable[[], Awaitable[None]],
        tick_interval: float = 0.1,
    ):
        self.time_limit = time_limit
        self.tick_interval = tick_interval
        self.on_expire = on_expire
        self.time_remaining = time_limit
        self.is_running = False
        self.task: asyncio.Task | None = None

    async def start(self):
        """Start counting down from the full time limit"""
        if self.is_running:
            logger.warning("Turn timer is already running")
            return

        self.time_remaining = self.time_limit
        self.is_running = True
        self.task = asyncio.create_task(self._tick_loop())
        logger.debug(f"Turn timer started: limit={self.time_limit}s")

    async def stop(self):
        """Stop the countdown; safe to call from the expiry callback itself"""
        if not self.is_running:
            return

        self.is_running = False
        if self.task and self.task is not asyncio.current_task():
            self.task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self.task
        logger.debug("Turn timer stopped")

    def reset(self):
        """Give the next player a full turn"""
        self.time_remaining = self.time_limit

    async def _tick_loop(self):
        """Main countdown loop"""
        while self.is_running:
            try:
                await asyncio.sleep(self.tick_interval)
                if not self.is_running:
                    break

                self.time_remaining = max(0.0, self.time_remaining - self.tick_interval)
                if self.time_remaining <= 0:
                    self.is_running = False
                    logger.info("Turn time expired")
                    await self.on_expire()
                    break

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in turn timer: {e}", exc_info=True)
                self.is_running = False
                break
