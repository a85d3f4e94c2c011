"""Tests for constants and enums."""

from __future__ import annotations

from pipedeck.constants import (
    AUTOSAVE_INTERVAL,
    GAUGE_CEILING,
    GAUGE_FLOOR,
    STATUS_POLL_INTERVAL,
    UNTITLED_PIPELINE,
)
from pipedeck.constants.enums import ContainerState, GroupState, LinkType, NodeKind, PipelineAction, Severity
from pipedeck.keyboard import APP_BINDINGS, PIPELINE_SCREEN_BINDINGS


class TestValues:
    """Tests for scalar constants."""

    def test_timer_intervals(self) -> None:
        """Status is polled every 5s and auto-save runs every 60s."""
        assert STATUS_POLL_INTERVAL == 5
        assert AUTOSAVE_INTERVAL == 60

    def test_gauge_range(self) -> None:
        """Gauges never show exactly 0 or 100."""
        assert 0 < GAUGE_FLOOR < GAUGE_CEILING < 100

    def test_untitled(self) -> None:
        """The placeholder title is Untitled."""
        assert UNTITLED_PIPELINE == "Untitled"


class TestEnums:
    """Tests for enum values used on the wire."""

    def test_wire_values(self) -> None:
        """Enum values match the stored and reported strings."""
        assert {k.value for k in NodeKind} == {"source", "container", "kubernetes"}
        assert {t.value for t in LinkType} == {"file", "tcp", "udp", "socket"}
        assert PipelineAction.START.value == "startflow"
        assert GroupState.FAILED.value == "Failed"
        assert ContainerState.BUSY.value == "Busy"
        assert Severity.INFO.value == "information"


class TestBindings:
    """Tests for keyboard bindings."""

    def test_pipeline_actions_are_bound(self) -> None:
        """Every pipeline action has a key."""
        actions = {binding.action for binding in PIPELINE_SCREEN_BINDINGS}
        assert {"save", "execute", "play_pause", "destroy", "refresh"} <= actions

    def test_app_bindings(self) -> None:
        """Help and quit are bound app-wide."""
        assert {binding.key for binding in APP_BINDINGS} == {"?", "q"}
