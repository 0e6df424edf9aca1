"""Anthropic-compatible chat client."""

from ai_adapters.adapters.anthropic.api import AnthropicApi
from ai_adapters.adapters.anthropic.chat import AnthropicChatClient

__all__ = ["AnthropicApi", "AnthropicChatClient"]
