from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from ._validators import _ensure_api_key
from .llm import AnthropicConfig, OpenAIConfig
from .retry import RetryConfig

logger = logging.getLogger(__name__)

VALID_PROVIDERS = frozenset({"openai", "anthropic"})


class RuntimeConfig(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    request_timeout_sec: int = Field(default=60, validation_alias="REQUEST_TIMEOUT_SEC")
    debug_payloads: bool = Field(default=False, validation_alias="DEBUG_PAYLOADS")
    max_response_size_mb: int = Field(default=10, validation_alias="MAX_RESPONSE_SIZE_MB")
    llm_provider: str = Field(default="openai", validation_alias="LLM_PROVIDER")

    @field_validator("llm_provider", mode="before")
    @classmethod
    def _validate_llm_provider(cls, value: Any) -> str:
        provider = str(value or "openai").lower().strip()
        if provider not in VALID_PROVIDERS:
            msg = f"Invalid LLM provider: {provider}. Must be one of {sorted(VALID_PROVIDERS)}"
            raise ValueError(msg)
        return provider

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, value: Any) -> str:
        log_level = str(value or "INFO").upper()
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if log_level not in valid_levels:
            msg = f"Invalid log level: {value}. Must be one of {valid_levels}"
            raise ValueError(msg)
        return log_level

    @field_validator("request_timeout_sec", mode="before")
    @classmethod
    def _validate_timeout(cls, value: Any) -> int:
        try:
            timeout = int(str(value or 60))
        except ValueError as exc:
            msg = "Timeout must be a valid integer"
            raise ValueError(msg) from exc
        if timeout <= 0:
            msg = "Timeout must be positive"
            raise ValueError(msg)
        if timeout > 3600:
            msg = "Timeout too large (max 3600 seconds)"
            raise ValueError(msg)
        return timeout

    @field_validator("max_response_size_mb", mode="before")
    @classmethod
    def _validate_max_response_size(cls, value: Any) -> int:
        try:
            size = int(str(value or 10))
        except ValueError as exc:
            msg = "Max response size must be a valid integer"
            raise ValueError(msg) from exc
        if size < 1 or size > 1024:
            msg = "Max response size must be between 1 and 1024 MB"
            raise ValueError(msg)
        return size


@dataclass(frozen=True)
class AppConfig:
    openai: OpenAIConfig
    anthropic: AnthropicConfig
    retry: RetryConfig
    runtime: RuntimeConfig


class Settings(BaseSettings):
    """Settings loaded from environment variables and an optional ``.env`` file.

    Nested models are populated by matching ``validation_alias`` on each field,
    so every setting is a flat variable such as ``OPENAI_API_KEY``.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    anthropic: AnthropicConfig = Field(default_factory=AnthropicConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)

    @model_validator(mode="before")
    @classmethod
    def _build_nested_from_env(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Build nested config objects from flat environment variables.

        Constructor arguments take precedence over the environment.
        """
        if not isinstance(data, dict):
            return data

        result = dict(data)
        merged_source = {**dict(os.environ), **data}

        for field_name, field_info in cls.model_fields.items():
            annotation = field_info.annotation
            if not isinstance(annotation, type) or not issubclass(annotation, BaseModel):
                continue

            nested_data: dict[str, Any] = {}
            for nested_field_name, nested_field in annotation.model_fields.items():
                env_value = cls._resolve_env_value(merged_source, nested_field)
                if env_value is not None:
                    nested_data[nested_field_name] = env_value

            if nested_data:
                if field_name in result and isinstance(result[field_name], dict):
                    result[field_name] = {**nested_data, **result[field_name]}
                else:
                    result[field_name] = nested_data

        return result

    @staticmethod
    def _resolve_env_value(data: dict[str, Any], field: Any) -> Any | None:
        """Resolve the value for a field using its aliases."""
        aliases: list[str] = []
        alias = field.validation_alias
        if isinstance(alias, AliasChoices):
            aliases.extend(choice for choice in alias.choices if isinstance(choice, str))
        elif isinstance(alias, str):
            aliases.append(alias)
        if field.alias:
            aliases.append(field.alias)

        for name in aliases:
            if name in data:
                return data[name]
        return None

    @model_validator(mode="after")
    def _ensure_provider_key(self) -> Settings:
        # Only the selected provider needs credentials
        provider = self.runtime.llm_provider
        if provider == "openai":
            _ensure_api_key(self.openai.api_key, name="OpenAI")
        elif provider == "anthropic":
            _ensure_api_key(self.anthropic.api_key, name="Anthropic")
        return self

    def as_app_config(self) -> AppConfig:
        return AppConfig(
            openai=self.openai,
            anthropic=self.anthropic,
            retry=self.retry,
            runtime=self.runtime,
        )


def load_config(**overrides: Any) -> AppConfig:
    """Load configuration from environment variables and ``.env``.

    Keyword arguments override the environment per section, e.g.
    ``load_config(runtime={"llm_provider": "anthropic"})``.

    Raises:
        RuntimeError: If configuration validation fails.
    """
    try:
        settings = Settings(**overrides)
    except (ValidationError, ValueError) as exc:
        msg = f"Configuration validation failed: {exc}"
        raise RuntimeError(msg) from exc

    config = settings.as_app_config()
    logger.debug(
        "config_loaded",
        extra={
            "provider": config.runtime.llm_provider,
            "max_attempts": config.retry.max_attempts,
        },
    )
    return config
