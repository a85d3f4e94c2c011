"""Exception hierarchy shared by the graph model, services and controllers."""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for pipedeck errors."""


class MalformedDocument(PipelineError):
    """Raised when a stored pipeline document has missing or invalid references."""

    def __init__(self, message: str, *, node_id: str | None = None) -> None:
        super().__init__(message)
        self.node_id = node_id


class InvalidEmbedding(PipelineError):
    """Raised when an embed would violate the parent/child type rule."""

    def __init__(self, parent_id: str, child_id: str, reason: str) -> None:
        super().__init__(f"Cannot embed {child_id} in {parent_id}: {reason}")
        self.parent_id = parent_id
        self.child_id = child_id
        self.reason = reason


class InvalidLink(PipelineError):
    """Raised when a link would connect incompatible endpoints."""


class UnparsableQuantity(PipelineError, ValueError):
    """Raised by strict quantity parsing when no numeral can be extracted."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Cannot parse quantity: {value!r}")
        self.value = value


class NetworkFailure(PipelineError):
    """Raised when a request to the persistence or execution service fails."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str = "",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code


class ConfigError(PipelineError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when settings fail to load."""


class ConfigSaveError(ConfigError):
    """Raised when settings fail to save."""


__all__ = [
    "ConfigError",
    "ConfigLoadError",
    "ConfigSaveError",
    "InvalidEmbedding",
    "InvalidLink",
    "MalformedDocument",
    "NetworkFailure",
    "PipelineError",
    "UnparsableQuantity",
]
