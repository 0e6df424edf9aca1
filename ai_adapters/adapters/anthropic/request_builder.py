"""Anthropic request builder for constructing API payloads."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ai_adapters.models.options import ChatOptions
    from ai_adapters.models.requests import Message

logger = logging.getLogger(__name__)

DEFAULT_ANTHROPIC_VERSION = "2023-06-01"
DEFAULT_MAX_TOKENS = 1024

# Anthropic pricing per 1M tokens
# https://www.anthropic.com/pricing
ANTHROPIC_PRICING: dict[str, dict[str, float]] = {
    "claude-opus-4-5-20250929": {"input": 15.00, "output": 75.00},
    "claude-sonnet-4-5-20250929": {"input": 3.00, "output": 15.00},
    "claude-3-5-sonnet-20241022": {"input": 3.00, "output": 15.00},
    "claude-3-5-haiku-20241022": {"input": 0.80, "output": 4.00},
    "claude-3-opus-20240229": {"input": 15.00, "output": 75.00},
    "claude-3-haiku-20240307": {"input": 0.25, "output": 1.25},
}


class AnthropicRequestBuilder:
    """Builds request headers and payloads for Anthropic API calls."""

    def __init__(
        self,
        api_key: str,
        *,
        anthropic_version: str = DEFAULT_ANTHROPIC_VERSION,
        default_max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> None:
        self._api_key = api_key
        self._anthropic_version = anthropic_version
        self._default_max_tokens = default_max_tokens

    def build_headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._api_key,
            "anthropic-version": self._anthropic_version,
            "Accept": "application/json",
        }

    def get_redacted_headers(self, headers: dict[str, str]) -> dict[str, str]:
        """Return headers with sensitive values redacted."""
        redacted = dict(headers)
        if "x-api-key" in redacted:
            redacted["x-api-key"] = "[REDACTED]"
        return redacted

    def build_request_body(self, messages: list[Message], options: ChatOptions) -> dict[str, Any]:
        """Build the request body for the Anthropic messages API.

        System messages move to the top-level ``system`` field and
        ``max_tokens`` is always sent because the API requires it.
        """
        system_content, conversation = self._extract_system_message(messages)

        body: dict[str, Any] = {
            "model": options.model,
            "messages": [self._convert_message(message) for message in conversation],
            "max_tokens": options.max_tokens or self._default_max_tokens,
        }
        if system_content:
            body["system"] = system_content

        # Anthropic caps temperature at 1.0
        if options.temperature is not None:
            body["temperature"] = min(options.temperature, 1.0)
        if options.top_p is not None:
            body["top_p"] = options.top_p
        if options.stop:
            body["stop_sequences"] = list(options.stop)
        if options.user:
            body["metadata"] = {"user_id": options.user}
        return body

    @staticmethod
    def _extract_system_message(messages: list[Message]) -> tuple[str | None, list[Message]]:
        system_content: str | None = None
        conversation: list[Message] = []

        for message in messages:
            if message.role == "system":
                # Multiple system messages are concatenated
                system_content = (
                    f"{system_content}\n\n{message.content}" if system_content else message.content
                )
            else:
                conversation.append(message)

        return system_content, conversation

    @staticmethod
    def _convert_message(message: Message) -> dict[str, Any]:
        return {"role": message.role, "content": message.content}


def calculate_cost(
    model: str,
    prompt_tokens: int,
    completion_tokens: int,
) -> float | None:
    """Calculate the cost of an Anthropic API call.

    Returns:
        Estimated cost in USD, or None if model pricing is unknown.
    """
    pricing = ANTHROPIC_PRICING.get(model)
    if not pricing:
        # Aliases without the date suffix (claude-3-5-haiku-latest)
        for known_model, prices in ANTHROPIC_PRICING.items():
            if model.startswith(known_model.rsplit("-", 1)[0]):
                pricing = prices
                break

    if not pricing:
        return None

    input_cost = (prompt_tokens / 1_000_000) * pricing["input"]
    output_cost = (completion_tokens / 1_000_000) * pricing["output"]
    return input_cost + output_cost
