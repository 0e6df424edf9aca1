"""Audio transcription over ``POST /v1/audio/transcriptions``."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ai_adapters.adapters.openai.request_builder import OpenAIRequestBuilder
from ai_adapters.adapters.response_utils import (
    build_metadata,
    log_empty_body,
    mapping_errors,
    require_mapping,
)
from ai_adapters.core.options import merge_layers
from ai_adapters.core.retry import DEFAULT_RETRY_POLICY, RetryPolicy
from ai_adapters.models.options import TranscriptionOptions
from ai_adapters.models.responses import Transcription, TranscriptionResponse

if TYPE_CHECKING:
    from ai_adapters.adapters.base_client import ApiResponse
    from ai_adapters.adapters.openai.api import OpenAIApi
    from ai_adapters.core.retry import RetryContext
    from ai_adapters.models.requests import TranscriptionRequest

logger = logging.getLogger(__name__)

DEFAULT_TRANSCRIPTION_MODEL = "whisper-1"
HARD_DEFAULT_OPTIONS = TranscriptionOptions(
    model=DEFAULT_TRANSCRIPTION_MODEL,
    response_format="json",
)

# Formats answered with plain text instead of a JSON object
TEXT_FORMATS = frozenset({"text", "srt", "vtt"})


class OpenAITranscriptionClient:
    """OpenAI-compatible transcription client with retries."""

    provider_name = "openai"
    capability = "transcription"

    def __init__(
        self,
        api: OpenAIApi,
        *,
        default_options: TranscriptionOptions | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._api = api
        self._default_options = default_options
        self._retry_policy = retry_policy or DEFAULT_RETRY_POLICY

    @property
    def default_options(self) -> TranscriptionOptions | None:
        return self._default_options

    def resolve_options(self, request: TranscriptionRequest) -> TranscriptionOptions:
        return merge_layers(HARD_DEFAULT_OPTIONS, self._default_options, request.options)

    async def call(self, request: TranscriptionRequest) -> TranscriptionResponse:
        if request is None:
            msg = "Transcription request must not be None"
            raise ValueError(msg)

        async def attempt(context: RetryContext) -> TranscriptionResponse:
            options = self.resolve_options(request)
            form = OpenAIRequestBuilder.build_transcription_form(options)
            response = await self._api.create_transcription(request.audio, request.filename, form)
            return self._to_response(response, options)

        return await self._retry_policy.execute(attempt)

    def _to_response(
        self, response: ApiResponse, options: TranscriptionOptions
    ) -> TranscriptionResponse:
        if response.is_empty:
            log_empty_body(response, self.capability, options.model)
            return TranscriptionResponse(metadata=build_metadata(response, model=options.model))

        if options.response_format in TEXT_FORMATS:
            return TranscriptionResponse(
                results=[Transcription(text=response.text)],
                metadata=build_metadata(response, model=options.model),
            )

        data = require_mapping(response.json(), response)
        duration = data.get("duration")
        with mapping_errors(response):
            transcription = Transcription(
                text=data.get("text") or "",
                language=data.get("language"),
                duration=float(duration) if isinstance(duration, (int, float)) else None,
            )
        return TranscriptionResponse(
            results=[transcription],
            metadata=build_metadata(
                response,
                model=options.model,
                extra={"segments": data.get("segments"), "task": data.get("task")},
            ),
        )
