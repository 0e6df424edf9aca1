from __future__ import annotations

from ._validators import _ensure_api_key, validate_model_name
from .llm import AnthropicConfig, OpenAIConfig
from .retry import RetryConfig
from .settings import AppConfig, RuntimeConfig, Settings, load_config

__all__ = [
    "AnthropicConfig",
    "AppConfig",
    "OpenAIConfig",
    "RetryConfig",
    "RuntimeConfig",
    "Settings",
    "_ensure_api_key",
    "load_config",
    "validate_model_name",
]
