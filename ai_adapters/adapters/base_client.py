"""Shared REST client used by every vendor API wrapper.

Owns the ``httpx.AsyncClient`` lifecycle and turns transport failures and
HTTP error statuses into the ``ModelClientError`` hierarchy, so the retry
policy only ever has to look at exception types.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from ai_adapters.core.exceptions import (
    ModelClientError,
    NetworkError,
    NonTransientAIError,
    ResponseFormatError,
    error_for_status,
)
from ai_adapters.core.http_utils import ResponseSizeError, validate_response_size
from ai_adapters.core.logging_utils import truncate_log_content

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiResponse:
    """Successful HTTP exchange, before any vendor-specific mapping."""

    status_code: int
    headers: Mapping[str, str]
    content: bytes
    provider: str

    @property
    def is_empty(self) -> bool:
        return not self.content.strip()

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON.

        An empty body or a literal ``null`` decodes to ``None``.

        Raises:
            ResponseFormatError: If the body is not valid JSON.
        """
        if self.is_empty:
            return None
        try:
            return json.loads(self.content)
        except ValueError as exc:
            msg = f"Invalid JSON in response body: {exc}"
            raise ResponseFormatError(
                msg,
                provider=self.provider,
                status_code=self.status_code,
                context={"body_preview": truncate_log_content(self.text, 200)},
            ) from exc


def extract_error_message(response: httpx.Response) -> str:
    """Pull a human-readable message out of a vendor error body."""
    try:
        data = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase or "Unknown API error"

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if isinstance(data.get("message"), str):
            return data["message"]
    return "Unknown API error"


def parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        logger.warning("invalid_retry_after_header", extra={"retry_after": value})
        return None


class BaseApiClient:
    """Base class for vendor REST clients.

    Subclasses provide :attr:`provider_name` and :meth:`_build_headers`; the
    base class handles the HTTP client, error mapping and the response size
    guard.

    An ``http_client`` may be injected (tests use ``httpx.MockTransport``);
    an injected client is not closed by :meth:`aclose`.
    """

    provider_name = "unknown"

    def __init__(
        self,
        *,
        base_url: str,
        timeout_sec: float = 60.0,
        max_connections: int = 20,
        max_keepalive_connections: int = 10,
        keepalive_expiry: float = 30.0,
        max_response_size_mb: int = 10,
        debug_payloads: bool = False,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout_sec, connect=10.0, read=timeout_sec)
        self._limits = httpx.Limits(
            max_keepalive_connections=max_keepalive_connections,
            max_connections=max_connections,
            keepalive_expiry=keepalive_expiry,
        )
        self._max_response_size_bytes = int(max_response_size_mb) * 1024 * 1024
        self._debug_payloads = debug_payloads
        self._client = http_client
        self._owns_client = http_client is None
        self._closed = False

    @property
    def base_url(self) -> str:
        return self._base_url

    def _build_headers(self) -> dict[str, str]:
        return {}

    def _redacted_headers(self, headers: dict[str, str]) -> dict[str, str]:
        return dict(headers)

    async def __aenter__(self) -> BaseApiClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._closed:
            return
        self._closed = True
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Lazily construct the AsyncClient."""
        if self._closed:
            msg = "Client has been closed"
            raise RuntimeError(msg)
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                limits=self._limits,
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    @asynccontextmanager
    async def _request_context(self) -> AsyncGenerator[httpx.AsyncClient]:  # type: ignore[type-arg, unused-ignore]
        """Yield the HTTP client, mapping transport failures to ``NetworkError``."""
        client = self._ensure_client()
        try:
            yield client
        except httpx.TimeoutException as e:
            msg = f"Request timeout: {e}"
            raise NetworkError(msg, provider=self.provider_name) from e
        except httpx.TransportError as e:
            msg = f"Connection failed: {e}"
            raise NetworkError(msg, provider=self.provider_name) from e

    async def _post(
        self,
        path: str,
        *,
        json_body: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> ApiResponse:
        """POST to ``path`` and return the raw successful response.

        Raises:
            TransientAIError: For 408/429/5xx statuses and transport failures.
            NonTransientAIError: For other error statuses and oversized bodies.
        """
        headers = self._build_headers()
        if self._debug_payloads:
            logger.debug(
                "api_request",
                extra={
                    "provider": self.provider_name,
                    "endpoint": path,
                    "headers": self._redacted_headers(headers),
                    "payload": truncate_log_content(
                        json.dumps(json_body if json_body is not None else data, default=str)
                    ),
                },
            )

        async with self._request_context() as client:
            response = await client.post(
                f"{self._base_url}{path}",
                json=json_body,
                data=data,
                files=files,
                headers=headers,
            )

        if response.status_code >= 400:
            raise self._error_from_response(path, response)

        try:
            await validate_response_size(
                response, self._max_response_size_bytes, self.provider_name
            )
        except ResponseSizeError as e:
            raise NonTransientAIError(
                str(e),
                provider=self.provider_name,
                status_code=response.status_code,
                context={"actual_size": e.actual_size, "max_size": e.max_size},
            ) from e

        if self._debug_payloads:
            logger.debug(
                "api_response",
                extra={
                    "provider": self.provider_name,
                    "endpoint": path,
                    "status_code": response.status_code,
                    "body": truncate_log_content(response.text),
                },
            )

        return ApiResponse(
            status_code=response.status_code,
            headers=response.headers,
            content=response.content,
            provider=self.provider_name,
        )

    def _error_from_response(self, path: str, response: httpx.Response) -> ModelClientError:
        message = extract_error_message(response)
        logger.debug(
            "api_error_response",
            extra={
                "provider": self.provider_name,
                "endpoint": path,
                "status_code": response.status_code,
                "error": message,
            },
        )
        return error_for_status(
            response.status_code,
            message,
            provider=self.provider_name,
            retry_after=parse_retry_after(response.headers.get("retry-after")),
            context={"endpoint": path},
        )
