"""Tests for base controller module."""

from __future__ import annotations

import pytest

from pipedeck.controllers.base.base_controller import (
    AsyncControllerMixin,
    BaseController,
    WorkerResult,
)
from pipedeck.models.errors import NetworkFailure


class TestWorkerResult:
    """Tests for WorkerResult dataclass."""

    def test_worker_result_defaults(self) -> None:
        """Test WorkerResult default values."""
        result = WorkerResult(success=True)
        assert result.data is None
        assert result.error is None
        assert result.duration_ms == 0.0


class TestAsyncControllerMixin:
    """Tests for AsyncControllerMixin._call."""

    @pytest.fixture
    def mixin(self) -> AsyncControllerMixin:
        """Create mixin instance for testing."""
        return AsyncControllerMixin()

    @pytest.mark.asyncio
    async def test_call_success(self, mixin: AsyncControllerMixin) -> None:
        """Successful requests carry their data."""

        async def request() -> str:
            return "payload"

        result = await mixin._call("fetch", request())
        assert result.success is True
        assert result.data == "payload"
        assert result.duration_ms >= 0

    @pytest.mark.asyncio
    async def test_call_network_failure(self, mixin: AsyncControllerMixin) -> None:
        """NetworkFailure becomes a failed result."""

        async def request() -> str:
            raise NetworkFailure("down", endpoint="status")

        result = await mixin._call("fetch", request())
        assert result.success is False
        assert result.error == "down"

    @pytest.mark.asyncio
    async def test_call_other_errors_propagate(self, mixin: AsyncControllerMixin) -> None:
        """Errors other than NetworkFailure are not swallowed."""

        async def request() -> str:
            raise KeyError("bug")

        with pytest.raises(KeyError):
            await mixin._call("fetch", request())

    def test_closed_flag(self, mixin: AsyncControllerMixin) -> None:
        """_mark_closed flips closed."""
        assert mixin.closed is False
        mixin._mark_closed()
        assert mixin.closed is True


class TestBaseController:
    """Tests for BaseController abstract class."""

    def test_base_controller_is_abstract(self) -> None:
        """Test that BaseController cannot be instantiated directly."""
        with pytest.raises(TypeError):
            BaseController()  # type: ignore[abstract]

    def test_concrete_controller(self) -> None:
        """A subclass implementing refresh and close can be built."""

        class ConcreteController(BaseController):
            async def refresh(self) -> WorkerResult:
                return WorkerResult(success=True)

            async def close(self) -> None:
                self._mark_closed()

        controller = ConcreteController()
        assert isinstance(controller, AsyncControllerMixin)
