"""Pipeline lifecycle controller."""

from pipedeck.controllers.pipeline.controller import PipelineController

__all__ = ["PipelineController"]
