"""Controllers for pipedeck."""

from pipedeck.controllers.base import BaseController, WorkerResult
from pipedeck.controllers.pipeline import PipelineController

__all__ = ["BaseController", "PipelineController", "WorkerResult"]
