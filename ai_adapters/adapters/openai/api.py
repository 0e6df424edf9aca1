"""Low-level REST wrapper around the OpenAI-compatible endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ai_adapters.adapters.base_client import ApiResponse, BaseApiClient
from ai_adapters.adapters.openai.request_builder import OpenAIRequestBuilder

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com"

CHAT_COMPLETIONS_PATH = "/v1/chat/completions"
EMBEDDINGS_PATH = "/v1/embeddings"
IMAGES_PATH = "/v1/images/generations"
SPEECH_PATH = "/v1/audio/speech"
TRANSCRIPTIONS_PATH = "/v1/audio/transcriptions"


class OpenAIApi(BaseApiClient):
    """One call per endpoint, no retries.

    The capability clients in this package add options merging, retries and
    response mapping on top.
    """

    provider_name = "openai"

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_OPENAI_BASE_URL,
        organization: str | None = None,
        timeout_sec: float = 60.0,
        max_response_size_mb: int = 10,
        debug_payloads: bool = False,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._validate_api_key(api_key)
        super().__init__(
            base_url=base_url,
            timeout_sec=timeout_sec,
            max_response_size_mb=max_response_size_mb,
            debug_payloads=debug_payloads,
            http_client=http_client,
        )
        self._request_builder = OpenAIRequestBuilder(api_key, organization=organization)

    @staticmethod
    def _validate_api_key(api_key: str) -> None:
        """Validate API key format."""
        if not api_key or not isinstance(api_key, str):
            msg = "API key is required and must be a non-empty string"
            raise ValueError(msg)
        if len(api_key.strip()) < 10:
            msg = "API key appears to be invalid (too short)"
            raise ValueError(msg)

    @property
    def request_builder(self) -> OpenAIRequestBuilder:
        return self._request_builder

    def _build_headers(self) -> dict[str, str]:
        return self._request_builder.build_headers()

    def _redacted_headers(self, headers: dict[str, str]) -> dict[str, str]:
        return self._request_builder.get_redacted_headers(headers)

    async def chat_completions(self, body: dict[str, Any]) -> ApiResponse:
        return await self._post(CHAT_COMPLETIONS_PATH, json_body=body)

    async def embeddings(self, body: dict[str, Any]) -> ApiResponse:
        return await self._post(EMBEDDINGS_PATH, json_body=body)

    async def create_image(self, body: dict[str, Any]) -> ApiResponse:
        return await self._post(IMAGES_PATH, json_body=body)

    async def create_speech(self, body: dict[str, Any]) -> ApiResponse:
        """Synthesize speech; the response content is raw audio bytes."""
        return await self._post(SPEECH_PATH, json_body=body)

    async def create_transcription(
        self,
        audio: bytes,
        filename: str,
        form: dict[str, str],
    ) -> ApiResponse:
        """Upload ``audio`` as multipart form data."""
        files = {"file": (filename, audio, "application/octet-stream")}
        return await self._post(TRANSCRIPTIONS_PATH, data=form, files=files)
