"""Pipeline screen."""

from pipedeck.screens.pipeline.pipeline_screen import PipelineScreen
from pipedeck.screens.pipeline.presenter import (
    PipelinePresenter,
    PipelineRendered,
    PipelineStatusUpdated,
)

__all__ = [
    "PipelinePresenter",
    "PipelineRendered",
    "PipelineScreen",
    "PipelineStatusUpdated",
]
