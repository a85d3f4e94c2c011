"""HTTP clients for the persistence, execution and secrets services.

Every endpoint lives under ``{server_url}/api/v1/`` and answers with the
envelope ``{"code": int, "result": str, "message": any}``; the payload is
``message``. Transport errors, HTTP errors and envelopes whose code is not
200 all surface as ``NetworkFailure``.
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any
from urllib.parse import quote

import httpx

from pipedeck.constants.enums import PipelineAction
from pipedeck.constants.timeouts import SERVICE_REQUEST_TIMEOUT
from pipedeck.constants.values import API_PREFIX
from pipedeck.models.errors import NetworkFailure

logger = logging.getLogger(__name__)

_ENVELOPE_OK = 200


class ApiClient:
    """Thin async wrapper over ``httpx.AsyncClient`` that unwraps envelopes."""

    def __init__(
        self,
        server_url: str,
        *,
        timeout: float = SERVICE_REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = f"{server_url.rstrip('/')}{API_PREFIX}/"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any | None = None,
    ) -> Any:
        """Send a request and return the envelope's ``message``.

        Raises:
            NetworkFailure: On transport errors, HTTP status >= 400, an
                unreadable body or an envelope code other than 200.
        """
        logger.debug(f"{method} {endpoint}")
        try:
            response = await self._client.request(method, endpoint, json=json)
        except httpx.HTTPError as exc:
            raise NetworkFailure(f"{method} {endpoint} failed: {exc}", endpoint=endpoint) from exc

        if response.status_code >= 400:
            raise NetworkFailure(
                f"{method} {endpoint} returned HTTP {response.status_code}",
                endpoint=endpoint,
                status_code=response.status_code,
            )
        try:
            envelope = response.json()
        except ValueError as exc:
            raise NetworkFailure(
                f"{method} {endpoint} returned a non-JSON body",
                endpoint=endpoint,
                status_code=response.status_code,
            ) from exc

        if not isinstance(envelope, dict):
            raise NetworkFailure(
                f"{method} {endpoint} returned an unexpected body",
                endpoint=endpoint,
                status_code=response.status_code,
            )
        code = envelope.get("code", response.status_code)
        if code != _ENVELOPE_OK:
            raise NetworkFailure(
                f"{method} {endpoint}: {envelope.get('message') or envelope.get('result') or 'error'}",
                endpoint=endpoint,
                status_code=code if isinstance(code, int) else response.status_code,
            )
        return envelope.get("message")


def _segment(value: str) -> str:
    return quote(value, safe="")


class HttpPersistenceService:
    """Bucket store over ``/bucket`` endpoints."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def get(self, bucket: str, key: str) -> str:
        message = await self._client.request("GET", f"bucket/{_segment(bucket)}/{_segment(key)}")
        return "" if message is None else str(message)

    async def put(self, bucket: str, child: str | None, key: str, value: str) -> None:
        body: dict[str, str] = {"bucket": bucket, "key": key, "value": value}
        if child:
            body["child"] = child
        await self._client.request("PUT", "bucket", json=body)

    async def delete(self, bucket: str, key: str) -> None:
        await self._client.request("DELETE", f"bucket/{_segment(bucket)}/{_segment(key)}")

    async def create_bucket(self, bucket: str, child: str | None = None) -> None:
        body: dict[str, str] = {"bucket": bucket}
        if child:
            body["child"] = child
        await self._client.request("POST", "bucket", json=body)


class HttpExecutionService:
    """Flow control and status over the execution endpoints."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def dispatch(self, action: PipelineAction, pipeline: str) -> Any:
        return await self._client.request(
            "POST", PipelineAction(action).value, json={"pipeline": pipeline}
        )

    async def status(self, pipeline: str) -> dict[str, Any]:
        message = await self._client.request("GET", f"status/{_segment(pipeline)}")
        if not isinstance(message, dict):
            raise NetworkFailure(
                f"status/{pipeline} returned no status document",
                endpoint=f"status/{pipeline}",
            )
        return message


class HttpSecretsService:
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def encrypt(self, value: str) -> str:
        message = await self._client.request("POST", "encrypt", json={"value": value})
        return "" if message is None else str(message)
