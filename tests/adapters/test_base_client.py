"""Tests for the shared REST client: status mapping, transport errors, lifecycle."""

from __future__ import annotations

import httpx
import pytest

from ai_adapters.adapters.base_client import (
    ApiResponse,
    BaseApiClient,
    extract_error_message,
    parse_retry_after,
)
from ai_adapters.core.exceptions import (
    ClientAPIError,
    NetworkError,
    NonTransientAIError,
    RateLimitError,
    ResponseFormatError,
    TransientAIError,
)
from tests.http_helpers import ScriptedTransport, error_response, json_response


class DummyApi(BaseApiClient):
    provider_name = "dummy"

    def _build_headers(self) -> dict[str, str]:
        return {"Authorization": "Bearer secret"}

    async def ping(self) -> ApiResponse:
        return await self._post("/v1/ping", json_body={"ping": True})


def make_api(transport: ScriptedTransport, **kwargs) -> DummyApi:
    return DummyApi(base_url="https://api.test/", http_client=transport.client(), **kwargs)


class TestPost:
    @pytest.mark.asyncio
    async def test_success_returns_raw_response(self) -> None:
        transport = ScriptedTransport([json_response({"ok": True}, headers={"x-id": "1"})])
        api = make_api(transport)

        response = await api.ping()

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert response.headers["x-id"] == "1"
        request = transport.requests[0]
        assert str(request.url) == "https://api.test/v1/ping"
        assert request.headers["authorization"] == "Bearer secret"
        assert transport.json_body() == {"ping": True}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (429, RateLimitError),
            (408, TransientAIError),
            (500, TransientAIError),
            (503, TransientAIError),
            (400, ClientAPIError),
            (401, ClientAPIError),
            (404, ClientAPIError),
        ],
    )
    async def test_error_statuses_map_to_taxonomy(self, status: int, expected: type) -> None:
        api = make_api(ScriptedTransport([error_response(status, "nope")]))

        with pytest.raises(expected) as exc_info:
            await api.ping()

        assert exc_info.value.status_code == status
        assert exc_info.value.provider == "dummy"
        assert "nope" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_retry_after_header_parsed(self) -> None:
        response = error_response(429, "slow", headers={"retry-after": "7"})
        api = make_api(ScriptedTransport([response]))

        with pytest.raises(RateLimitError) as exc_info:
            await api.ping()

        assert exc_info.value.retry_after == 7.0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("refused"),
            httpx.ReadTimeout("slow"),
            httpx.RemoteProtocolError("reset"),
        ],
    )
    async def test_transport_failures_become_network_errors(self, error: Exception) -> None:
        api = make_api(ScriptedTransport([error]))

        with pytest.raises(NetworkError) as exc_info:
            await api.ping()

        assert exc_info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_oversized_response_is_non_transient(self) -> None:
        big = httpx.Response(200, content=b"x" * (2 * 1024 * 1024))
        api = make_api(ScriptedTransport([big]), max_response_size_mb=1)

        with pytest.raises(NonTransientAIError) as exc_info:
            await api.ping()

        assert not isinstance(exc_info.value, TransientAIError)
        assert exc_info.value.context["max_size"] == 1024 * 1024


class TestApiResponse:
    def _response(self, content: bytes) -> ApiResponse:
        return ApiResponse(status_code=200, headers={}, content=content, provider="dummy")

    @pytest.mark.parametrize("content", [b"", b"   ", b"null"])
    def test_empty_or_null_body_decodes_to_none(self, content: bytes) -> None:
        assert self._response(content).json() is None

    def test_invalid_json_raises_response_format_error(self) -> None:
        with pytest.raises(ResponseFormatError):
            self._response(b"{not json").json()


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self) -> None:
        transport = ScriptedTransport([json_response({})])
        http_client = transport.client()
        api = DummyApi(base_url="https://api.test", http_client=http_client)

        async with api:
            await api.ping()

        assert not http_client.is_closed
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_use_after_close_raises(self) -> None:
        api = make_api(ScriptedTransport([json_response({})]))
        await api.aclose()

        with pytest.raises(RuntimeError, match="closed"):
            await api.ping()

    @pytest.mark.asyncio
    async def test_owned_client_created_lazily_and_closed(self) -> None:
        api = DummyApi(base_url="https://api.test")
        client = api._ensure_client()
        assert api._ensure_client() is client

        await api.aclose()
        assert client.is_closed


class TestHelpers:
    def test_extract_error_message_variants(self) -> None:
        assert extract_error_message(error_response(400, "bad")) == "bad"
        assert extract_error_message(json_response({"error": "plain"}, status_code=400)) == "plain"
        assert (
            extract_error_message(json_response({"message": "top"}, status_code=400)) == "top"
        )
        assert extract_error_message(httpx.Response(502, content=b"Bad Gateway")) == "Bad Gateway"

    def test_parse_retry_after(self) -> None:
        assert parse_retry_after(None) is None
        assert parse_retry_after("2.5") == 2.5
        assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") is None
