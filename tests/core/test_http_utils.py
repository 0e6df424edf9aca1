"""Tests for HTTP response size validation."""

from __future__ import annotations

import httpx
import pytest

from ai_adapters.core.http_utils import ResponseSizeError, validate_response_size

MAX_SIZE = 10 * 1024 * 1024


def make_response(content: bytes = b"", headers: dict[str, str] | None = None) -> httpx.Response:
    return httpx.Response(200, content=content, headers=headers)


class TestValidateResponseSize:
    @pytest.mark.asyncio
    async def test_under_limit_passes(self) -> None:
        response = make_response(b"x" * 100)
        await validate_response_size(response, MAX_SIZE, "TestService")

    @pytest.mark.asyncio
    async def test_content_length_header_over_limit(self) -> None:
        response = make_response(b"small")
        response.headers["content-length"] = str(MAX_SIZE + 1)

        with pytest.raises(ResponseSizeError) as exc_info:
            await validate_response_size(response, MAX_SIZE, "TestService")

        assert exc_info.value.actual_size == MAX_SIZE + 1
        assert exc_info.value.max_size == MAX_SIZE
        assert "exceeds limit" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_body_size_used_without_header(self) -> None:
        response = make_response(b"x" * 2048)
        del response.headers["content-length"]

        with pytest.raises(ResponseSizeError):
            await validate_response_size(response, 1024, "TestService")

    @pytest.mark.asyncio
    async def test_malformed_content_length_falls_back_to_body(self) -> None:
        response = make_response(b"x" * 10)
        response.headers["content-length"] = "not-a-number"
        await validate_response_size(response, 1024, "TestService")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, -1, 2 * 1024 * 1024 * 1024])
    async def test_invalid_limits_rejected(self, limit: int) -> None:
        with pytest.raises(ValueError, match="max_size_bytes"):
            await validate_response_size(make_response(b"x"), limit, "TestService")
