"""Base controller with async patterns shared by pipedeck controllers.

Controllers run service calls on the event loop owned by the UI (or by the
CLI's ``asyncio.run``). Each call is wrapped into a ``WorkerResult`` so that
callers can report outcomes without handling transport errors themselves.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any

from pipedeck.models.errors import NetworkFailure

logger = logging.getLogger(__name__)


@dataclass
class WorkerResult:
    """Result wrapper for controller operations."""

    success: bool
    data: Any | None = None
    error: str | None = None
    duration_ms: float = 0.0


class AsyncControllerMixin:
    """Mixin providing timed, failure-wrapped service calls.

    After ``_mark_closed()`` completions are discarded, so a request that
    was in flight when the controller was torn down has no effect.
    """

    def __init__(self) -> None:
        self._load_start_time: float | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _mark_closed(self) -> None:
        self._closed = True

    async def _call(self, operation: str, request: Awaitable[Any]) -> WorkerResult:
        """Await a service request, converting ``NetworkFailure`` to a result."""
        self._load_start_time = time.monotonic()
        try:
            data = await request
        except NetworkFailure as exc:
            duration_ms = (time.monotonic() - self._load_start_time) * 1000
            logger.warning(f"{operation} failed after {duration_ms:.0f}ms: {exc}")
            return WorkerResult(success=False, error=str(exc), duration_ms=duration_ms)

        duration_ms = (time.monotonic() - self._load_start_time) * 1000
        logger.debug(f"{operation} completed in {duration_ms:.0f}ms")
        return WorkerResult(success=True, data=data, duration_ms=duration_ms)


class BaseController(AsyncControllerMixin, ABC):
    """Base controller class.

    Subclasses implement ``refresh`` to pull fresh remote state and ``close``
    to release timers and connections.
    """

    @abstractmethod
    async def refresh(self) -> WorkerResult:
        """Fetch remote state and push it to the view.

        Returns:
            WorkerResult describing the outcome
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Stop background work. Later completions must be ignored."""
        ...
