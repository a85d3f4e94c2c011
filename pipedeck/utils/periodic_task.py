"""Cancellable recurring timer for asyncio code."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Run an async callback every ``interval`` seconds until cancelled.

    ``start()`` does nothing while the task is armed, and each tick awaits
    the callback before waiting again, so at most one callback is running
    at a time.
    """

    def __init__(
        self,
        callback: Callable[[], Awaitable[Any]],
        interval: float,
        *,
        name: str = "periodic",
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._callback = callback
        self.interval = interval
        self.name = name
        self._task: asyncio.Task[None] | None = None
        self._reset = asyncio.Event()

    @property
    def armed(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """Arm the timer. Returns False when it was already armed."""
        if self.armed:
            return False
        self._reset.clear()
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)
        logger.debug(f"Armed {self.name} timer every {self.interval}s")
        return True

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.debug(f"Cancelled {self.name} timer")

    def restart(self) -> None:
        """Make the next tick a full interval away.

        A callback that is already running is left to finish; the interval
        starts over once it returns.
        """
        if not self.start():
            self._reset.set()

    async def _run(self) -> None:
        while True:
            self._reset.clear()
            try:
                await asyncio.wait_for(self._reset.wait(), self.interval)
            except asyncio.TimeoutError:
                pass
            else:
                continue
            try:
                await self._callback()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(f"{self.name} tick failed")
