"""Low-level REST wrapper around the Anthropic-compatible messages endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ai_adapters.adapters.anthropic.request_builder import (
    DEFAULT_ANTHROPIC_VERSION,
    DEFAULT_MAX_TOKENS,
    AnthropicRequestBuilder,
)
from ai_adapters.adapters.base_client import ApiResponse, BaseApiClient

if TYPE_CHECKING:
    import httpx

DEFAULT_ANTHROPIC_BASE_URL = "https://api.anthropic.com"
MESSAGES_PATH = "/v1/messages"


class AnthropicApi(BaseApiClient):
    """Single ``POST /v1/messages`` call, no retries."""

    provider_name = "anthropic"

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_ANTHROPIC_BASE_URL,
        anthropic_version: str = DEFAULT_ANTHROPIC_VERSION,
        default_max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout_sec: float = 60.0,
        max_response_size_mb: int = 10,
        debug_payloads: bool = False,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key or not isinstance(api_key, str) or not api_key.strip():
            msg = "API key is required and must be a non-empty string"
            raise ValueError(msg)
        super().__init__(
            base_url=base_url,
            timeout_sec=timeout_sec,
            max_response_size_mb=max_response_size_mb,
            debug_payloads=debug_payloads,
            http_client=http_client,
        )
        self._request_builder = AnthropicRequestBuilder(
            api_key,
            anthropic_version=anthropic_version,
            default_max_tokens=default_max_tokens,
        )

    @property
    def request_builder(self) -> AnthropicRequestBuilder:
        return self._request_builder

    def _build_headers(self) -> dict[str, str]:
        return self._request_builder.build_headers()

    def _redacted_headers(self, headers: dict[str, str]) -> dict[str, str]:
        return self._request_builder.get_redacted_headers(headers)

    async def messages(self, body: dict[str, Any]) -> ApiResponse:
        return await self._post(MESSAGES_PATH, json_body=body)
