"""Text-to-speech over ``POST /v1/audio/speech``.

The endpoint answers with raw audio bytes rather than JSON, so rate-limit
headers are the only metadata available.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ai_adapters.adapters.openai.request_builder import OpenAIRequestBuilder
from ai_adapters.adapters.response_utils import build_metadata, log_empty_body
from ai_adapters.core.options import merge_layers
from ai_adapters.core.retry import DEFAULT_RETRY_POLICY, RetryPolicy
from ai_adapters.models.options import SpeechOptions
from ai_adapters.models.responses import SpeechGeneration, SpeechResponse

if TYPE_CHECKING:
    from ai_adapters.adapters.base_client import ApiResponse
    from ai_adapters.adapters.openai.api import OpenAIApi
    from ai_adapters.core.retry import RetryContext
    from ai_adapters.models.requests import SpeechRequest

logger = logging.getLogger(__name__)

DEFAULT_SPEECH_MODEL = "tts-1"
DEFAULT_SPEECH_VOICE = "alloy"
HARD_DEFAULT_OPTIONS = SpeechOptions(
    model=DEFAULT_SPEECH_MODEL,
    voice=DEFAULT_SPEECH_VOICE,
    response_format="mp3",
)


class OpenAISpeechClient:
    """OpenAI-compatible speech synthesis client with retries."""

    provider_name = "openai"
    capability = "speech"

    def __init__(
        self,
        api: OpenAIApi,
        *,
        default_options: SpeechOptions | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._api = api
        self._default_options = default_options
        self._retry_policy = retry_policy or DEFAULT_RETRY_POLICY

    @property
    def default_options(self) -> SpeechOptions | None:
        return self._default_options

    def resolve_options(self, request: SpeechRequest) -> SpeechOptions:
        return merge_layers(HARD_DEFAULT_OPTIONS, self._default_options, request.options)

    async def call(self, request: SpeechRequest) -> SpeechResponse:
        """Synthesize ``request.text`` (or the merged ``options.input``).

        Raises:
            ValueError: If there is no text to synthesize.
        """
        if request is None:
            msg = "Speech request must not be None"
            raise ValueError(msg)

        text = request.text or self.resolve_options(request).input
        if not text or not text.strip():
            msg = "Speech request has no text to synthesize"
            raise ValueError(msg)

        async def attempt(context: RetryContext) -> SpeechResponse:
            options = self.resolve_options(request)
            body = OpenAIRequestBuilder.build_speech_body(text, options)
            response = await self._api.create_speech(body)
            return self._to_response(response, options)

        return await self._retry_policy.execute(attempt)

    def _to_response(self, response: ApiResponse, options: SpeechOptions) -> SpeechResponse:
        metadata = build_metadata(
            response,
            model=options.model,
            extra={"content_type": response.headers.get("content-type")},
        )
        if not response.content:
            log_empty_body(response, self.capability, options.model)
            return SpeechResponse(metadata=metadata)

        return SpeechResponse(
            results=[SpeechGeneration(audio=response.content)],
            metadata=metadata,
        )
