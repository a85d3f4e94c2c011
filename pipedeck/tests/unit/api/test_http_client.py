"""Tests for the HTTP service adapters, using httpx.MockTransport."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from pipedeck.api import (
    ApiClient,
    ExecutionService,
    HttpExecutionService,
    HttpPersistenceService,
    HttpSecretsService,
    PersistenceService,
    SecretsService,
)
from pipedeck.constants.enums import PipelineAction
from pipedeck.models.errors import NetworkFailure

Handler = Callable[[httpx.Request], httpx.Response]


def _envelope(message, code: int = 200) -> httpx.Response:
    return httpx.Response(200, json={"code": code, "result": "ok", "message": message})


class Recorder:
    """MockTransport handler that records requests and answers each with a fresh response."""

    def __init__(self, respond: Callable[[], httpx.Response]) -> None:
        self._respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond()

    @property
    def body(self) -> dict:
        return json.loads(self.requests[-1].content)


def _client(handler: Handler) -> ApiClient:
    return ApiClient("http://pipedeck.test/", transport=httpx.MockTransport(handler))


class TestApiClient:
    """Tests for envelope handling."""

    @pytest.mark.asyncio
    async def test_returns_message(self) -> None:
        """The envelope's message is the payload."""
        recorder = Recorder(lambda: _envelope({"status": "Running"}))
        async with _client(recorder) as client:
            assert await client.request("GET", "status/x") == {"status": "Running"}
        assert str(recorder.requests[0].url) == "http://pipedeck.test/api/v1/status/x"

    @pytest.mark.asyncio
    async def test_envelope_error_code(self) -> None:
        """A code other than 200 is a NetworkFailure carrying that code."""
        async with _client(Recorder(lambda: _envelope("no such bucket", code=404))) as client:
            with pytest.raises(NetworkFailure) as excinfo:
                await client.request("GET", "bucket/a/b")
        assert excinfo.value.status_code == 404
        assert "no such bucket" in str(excinfo.value)

    @pytest.mark.asyncio
    async def test_http_error_status(self) -> None:
        """HTTP errors are NetworkFailures."""
        async with _client(Recorder(lambda: httpx.Response(500, text="boom"))) as client:
            with pytest.raises(NetworkFailure) as excinfo:
                await client.request("GET", "status/x")
        assert excinfo.value.status_code == 500
        assert excinfo.value.endpoint == "status/x"

    @pytest.mark.asyncio
    async def test_non_json_body(self) -> None:
        """A body that is not JSON is a NetworkFailure."""
        async with _client(Recorder(lambda: httpx.Response(200, text="<html>"))) as client:
            with pytest.raises(NetworkFailure):
                await client.request("GET", "status/x")

    @pytest.mark.asyncio
    async def test_transport_error(self) -> None:
        """Connection errors are NetworkFailures."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(refuse) as client:
            with pytest.raises(NetworkFailure):
                await client.request("GET", "status/x")


class TestPersistenceService:
    """Tests for HttpPersistenceService."""

    def test_satisfies_protocol(self) -> None:
        """The adapter implements the persistence contract."""
        service = HttpPersistenceService(_client(Recorder(lambda: _envelope(None))))
        assert isinstance(service, PersistenceService)

    @pytest.mark.asyncio
    async def test_get_quotes_key(self) -> None:
        """Keys are sent as single path segments."""
        recorder = Recorder(lambda: _envelope("ZG9j"))
        async with _client(recorder) as client:
            assert await HttpPersistenceService(client).get("pipeline", "Word Count") == "ZG9j"
        request = recorder.requests[0]
        assert request.method == "GET"
        assert request.url.path == "/api/v1/bucket/pipeline/Word Count"

    @pytest.mark.asyncio
    async def test_put_body(self) -> None:
        """put sends bucket, key and value, with child only when set."""
        recorder = Recorder(lambda: _envelope(None))
        async with _client(recorder) as client:
            await HttpPersistenceService(client).put("pipeline", None, "flow", "ZG9j")
        assert recorder.requests[0].method == "PUT"
        assert recorder.body == {"bucket": "pipeline", "key": "flow", "value": "ZG9j"}

    @pytest.mark.asyncio
    async def test_create_bucket_and_delete(self) -> None:
        """Bucket creation posts; delete addresses the key."""
        recorder = Recorder(lambda: _envelope(None))
        async with _client(recorder) as client:
            service = HttpPersistenceService(client)
            await service.create_bucket("files", "word_count")
            assert recorder.body == {"bucket": "files", "child": "word_count"}
            await service.delete("pipeline", "flow")
        assert recorder.requests[-1].method == "DELETE"
        assert recorder.requests[-1].url.path == "/api/v1/bucket/pipeline/flow"


class TestExecutionService:
    """Tests for HttpExecutionService."""

    def test_satisfies_protocol(self) -> None:
        """The adapter implements the execution contract."""
        assert isinstance(HttpExecutionService(_client(Recorder(lambda: _envelope(None)))), ExecutionService)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "action, endpoint",
        [
            (PipelineAction.EXECUTE, "execute"),
            (PipelineAction.START, "startflow"),
            (PipelineAction.STOP, "stopflow"),
            (PipelineAction.DESTROY, "destroyflow"),
        ],
    )
    async def test_dispatch(self, action: PipelineAction, endpoint: str) -> None:
        """Each action posts the pipeline name to its endpoint."""
        recorder = Recorder(lambda: _envelope("ok"))
        async with _client(recorder) as client:
            await HttpExecutionService(client).dispatch(action, "flow")
        assert recorder.requests[0].method == "POST"
        assert recorder.requests[0].url.path == f"/api/v1/{endpoint}"
        assert recorder.body == {"pipeline": "flow"}

    @pytest.mark.asyncio
    async def test_status_requires_document(self) -> None:
        """A status message that is not a mapping is a NetworkFailure."""
        async with _client(Recorder(lambda: _envelope("pending"))) as client:
            with pytest.raises(NetworkFailure):
                await HttpExecutionService(client).status("flow")


class TestSecretsService:
    """Tests for HttpSecretsService."""

    @pytest.mark.asyncio
    async def test_encrypt(self) -> None:
        """encrypt returns the server's ciphertext."""
        recorder = Recorder(lambda: _envelope("c2VjcmV0"))
        async with _client(recorder) as client:
            service = HttpSecretsService(client)
            assert isinstance(service, SecretsService)
            assert await service.encrypt("secret") == "c2VjcmV0"
        assert recorder.body == {"value": "secret"}
