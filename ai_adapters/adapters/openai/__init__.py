"""OpenAI-compatible capability clients.

All of them share one :class:`OpenAIApi` REST client.
"""

from ai_adapters.adapters.openai.api import OpenAIApi
from ai_adapters.adapters.openai.chat import OpenAIChatClient
from ai_adapters.adapters.openai.embedding import OpenAIEmbeddingClient
from ai_adapters.adapters.openai.image import OpenAIImageClient
from ai_adapters.adapters.openai.speech import OpenAISpeechClient
from ai_adapters.adapters.openai.transcription import OpenAITranscriptionClient

__all__ = [
    "OpenAIApi",
    "OpenAIChatClient",
    "OpenAIEmbeddingClient",
    "OpenAIImageClient",
    "OpenAISpeechClient",
    "OpenAITranscriptionClient",
]
