"""Service contracts and their HTTP implementations."""

from pipedeck.api.http_client import (
    ApiClient,
    HttpExecutionService,
    HttpPersistenceService,
    HttpSecretsService,
)
from pipedeck.api.protocols import (
    ExecutionService,
    PersistenceService,
    Renderer,
    SecretsService,
)

__all__ = [
    "ApiClient",
    "ExecutionService",
    "HttpExecutionService",
    "HttpPersistenceService",
    "HttpSecretsService",
    "PersistenceService",
    "Renderer",
    "SecretsService",
]
