"""OpenAI request builder for constructing API payloads."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ai_adapters.models.options import (
        ChatOptions,
        EmbeddingOptions,
        ImageOptions,
        SpeechOptions,
        TranscriptionOptions,
    )
    from ai_adapters.models.requests import Message

logger = logging.getLogger(__name__)


# OpenAI chat pricing per 1M tokens
# https://openai.com/api/pricing/
OPENAI_PRICING: dict[str, dict[str, float]] = {
    "gpt-4o": {"input": 2.50, "output": 10.00},
    "gpt-4o-2024-05-13": {"input": 5.00, "output": 15.00},
    "gpt-4o-mini": {"input": 0.15, "output": 0.60},
    "gpt-4-turbo": {"input": 10.00, "output": 30.00},
    "gpt-4": {"input": 30.00, "output": 60.00},
    "gpt-3.5-turbo": {"input": 0.50, "output": 1.50},
    "o1": {"input": 15.00, "output": 60.00},
    "o1-mini": {"input": 3.00, "output": 12.00},
    "o3-mini": {"input": 1.10, "output": 4.40},
}


class OpenAIRequestBuilder:
    """Builds request headers and payloads for OpenAI API calls."""

    def __init__(self, api_key: str, *, organization: str | None = None) -> None:
        self._api_key = api_key
        self._organization = organization

    def build_headers(self) -> dict[str, str]:
        """Build HTTP headers for the request.

        ``Content-Type`` is left to httpx so JSON and multipart bodies share
        the same headers.
        """
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
        }
        if self._organization:
            headers["OpenAI-Organization"] = self._organization
        return headers

    def get_redacted_headers(self, headers: dict[str, str]) -> dict[str, str]:
        """Return headers with sensitive values redacted."""
        redacted = dict(headers)
        if "Authorization" in redacted:
            redacted["Authorization"] = "Bearer [REDACTED]"
        return redacted

    @staticmethod
    def build_chat_body(messages: list[Message], options: ChatOptions) -> dict[str, Any]:
        body: dict[str, Any] = {
            "model": options.model,
            "messages": [message.to_dict() for message in messages],
        }
        if options.temperature is not None:
            body["temperature"] = options.temperature
        if options.max_tokens is not None:
            body["max_tokens"] = options.max_tokens
        if options.top_p is not None:
            body["top_p"] = options.top_p
        if options.stop:
            body["stop"] = list(options.stop)
        if options.user:
            body["user"] = options.user
        return body

    @staticmethod
    def build_embedding_body(inputs: list[str], options: EmbeddingOptions) -> dict[str, Any]:
        body: dict[str, Any] = {"model": options.model, "input": list(inputs)}
        if options.encoding_format:
            body["encoding_format"] = options.encoding_format
        if options.dimensions is not None:
            body["dimensions"] = options.dimensions
        if options.user:
            body["user"] = options.user
        return body

    @staticmethod
    def build_image_body(prompt: str, options: ImageOptions) -> dict[str, Any]:
        body: dict[str, Any] = {"model": options.model, "prompt": prompt}
        if options.n is not None:
            body["n"] = options.n
        if options.size:
            body["size"] = options.size
        if options.response_format:
            body["response_format"] = options.response_format
        if options.quality:
            body["quality"] = options.quality
        if options.style:
            body["style"] = options.style
        if options.user:
            body["user"] = options.user
        return body

    @staticmethod
    def build_speech_body(text: str, options: SpeechOptions) -> dict[str, Any]:
        body: dict[str, Any] = {"model": options.model, "input": text, "voice": options.voice}
        if options.response_format:
            body["response_format"] = options.response_format
        if options.speed is not None:
            body["speed"] = options.speed
        return body

    @staticmethod
    def build_transcription_form(options: TranscriptionOptions) -> dict[str, str]:
        """Build the non-file multipart fields of a transcription upload."""
        form = {"model": str(options.model)}
        if options.language:
            form["language"] = options.language
        if options.prompt:
            form["prompt"] = options.prompt
        if options.response_format:
            form["response_format"] = options.response_format
        if options.temperature is not None:
            form["temperature"] = str(options.temperature)
        return form


def _lookup_pricing(model: str) -> dict[str, float] | None:
    pricing = OPENAI_PRICING.get(model)
    if pricing:
        return pricing
    # Dated snapshots (gpt-4o-mini-2024-07-18) fall back to the longest known prefix
    candidates = [known for known in OPENAI_PRICING if model.startswith(f"{known}-")]
    if not candidates:
        return None
    return OPENAI_PRICING[max(candidates, key=len)]


def calculate_cost(
    model: str,
    prompt_tokens: int,
    completion_tokens: int,
) -> float | None:
    """Calculate the cost of an OpenAI API call.

    Returns:
        Estimated cost in USD, or None if model pricing is unknown.
    """
    pricing = _lookup_pricing(model)
    if not pricing:
        return None

    # Pricing is per 1M tokens
    input_cost = (prompt_tokens / 1_000_000) * pricing["input"]
    output_cost = (completion_tokens / 1_000_000) * pricing["output"]
    return input_cost + output_cost
