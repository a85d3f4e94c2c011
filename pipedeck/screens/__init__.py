"""Screens for the pipedeck TUI."""

from pipedeck.screens.pipeline import PipelineScreen

__all__ = ["PipelineScreen"]
