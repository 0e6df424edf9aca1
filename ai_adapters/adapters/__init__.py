"""Retrying model clients for OpenAI- and Anthropic-compatible REST APIs.

Key components:
- ModelClientProtocol: interface shared by every capability client
- ModelClientFactory: builds clients from configuration
- BaseApiClient: shared HTTP lifecycle and error mapping
- OpenAI*Client / AnthropicChatClient: one client per capability
"""

from ai_adapters.adapters.anthropic import AnthropicApi, AnthropicChatClient
from ai_adapters.adapters.base_client import ApiResponse, BaseApiClient
from ai_adapters.adapters.factory import ModelClientFactory
from ai_adapters.adapters.openai import (
    OpenAIApi,
    OpenAIChatClient,
    OpenAIEmbeddingClient,
    OpenAIImageClient,
    OpenAISpeechClient,
    OpenAITranscriptionClient,
)
from ai_adapters.adapters.protocol import ModelClientProtocol

__all__ = [
    "AnthropicApi",
    "AnthropicChatClient",
    "ApiResponse",
    "BaseApiClient",
    "ModelClientFactory",
    "ModelClientProtocol",
    "OpenAIApi",
    "OpenAIChatClient",
    "OpenAIEmbeddingClient",
    "OpenAIImageClient",
    "OpenAISpeechClient",
    "OpenAITranscriptionClient",
]
