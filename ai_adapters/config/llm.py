from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ._validators import (
    _ensure_api_key,
    _parse_optional_float,
    _validate_base_url,
    validate_model_name,
)


class OpenAIConfig(BaseModel):
    """OpenAI-compatible API configuration, one default model per capability."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_key: str = Field(default="", validation_alias="OPENAI_API_KEY")
    base_url: str = Field(default="https://api.openai.com", validation_alias="OPENAI_BASE_URL")
    organization: str | None = Field(default=None, validation_alias="OPENAI_ORGANIZATION")
    chat_model: str = Field(default="gpt-4o-mini", validation_alias="OPENAI_CHAT_MODEL")
    embedding_model: str = Field(
        default="text-embedding-ada-002", validation_alias="OPENAI_EMBEDDING_MODEL"
    )
    image_model: str = Field(default="dall-e-3", validation_alias="OPENAI_IMAGE_MODEL")
    speech_model: str = Field(default="tts-1", validation_alias="OPENAI_SPEECH_MODEL")
    speech_voice: str = Field(default="alloy", validation_alias="OPENAI_SPEECH_VOICE")
    transcription_model: str = Field(
        default="whisper-1", validation_alias="OPENAI_TRANSCRIPTION_MODEL"
    )
    temperature: float | None = Field(default=None, validation_alias="OPENAI_TEMPERATURE")

    @field_validator("api_key", mode="before")
    @classmethod
    def _validate_api_key(cls, value: Any) -> str:
        if value in (None, ""):
            return ""
        return _ensure_api_key(str(value), name="OpenAI")

    @field_validator("base_url", mode="before")
    @classmethod
    def _validate_url(cls, value: Any) -> str:
        return _validate_base_url(value, default="https://api.openai.com")

    @field_validator(
        "chat_model",
        "embedding_model",
        "image_model",
        "speech_model",
        "transcription_model",
        mode="before",
    )
    @classmethod
    def _validate_model(cls, value: Any, info: ValidationInfo) -> str:
        if value in (None, ""):
            return cls.model_fields[info.field_name].default
        return validate_model_name(str(value))

    @field_validator("organization", mode="before")
    @classmethod
    def _validate_organization(cls, value: Any) -> str | None:
        if value in (None, ""):
            return None
        org = str(value).strip()
        if len(org) > 100:
            msg = "OpenAI organization ID appears too long"
            raise ValueError(msg)
        return org

    @field_validator("temperature", mode="before")
    @classmethod
    def _validate_temperature(cls, value: Any) -> float | None:
        return _parse_optional_float(value, name="Temperature", minimum=0.0, maximum=2.0)


class AnthropicConfig(BaseModel):
    """Anthropic-compatible API configuration."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    api_key: str = Field(default="", validation_alias="ANTHROPIC_API_KEY")
    base_url: str = Field(
        default="https://api.anthropic.com", validation_alias="ANTHROPIC_BASE_URL"
    )
    model: str = Field(default="claude-3-5-haiku-20241022", validation_alias="ANTHROPIC_MODEL")
    max_tokens: int = Field(default=1024, validation_alias="ANTHROPIC_MAX_TOKENS")
    version: str = Field(default="2023-06-01", validation_alias="ANTHROPIC_VERSION")

    @field_validator("api_key", mode="before")
    @classmethod
    def _validate_api_key(cls, value: Any) -> str:
        if value in (None, ""):
            return ""
        return _ensure_api_key(str(value), name="Anthropic")

    @field_validator("base_url", mode="before")
    @classmethod
    def _validate_url(cls, value: Any) -> str:
        return _validate_base_url(value, default="https://api.anthropic.com")

    @field_validator("model", mode="before")
    @classmethod
    def _validate_model(cls, value: Any) -> str:
        if value in (None, ""):
            return "claude-3-5-haiku-20241022"
        return validate_model_name(str(value))

    @field_validator("max_tokens", mode="before")
    @classmethod
    def _validate_max_tokens(cls, value: Any) -> int:
        if value in (None, ""):
            return 1024
        try:
            tokens = int(str(value))
        except ValueError as exc:
            msg = "Max tokens must be a valid integer"
            raise ValueError(msg) from exc
        if tokens <= 0:
            msg = "Max tokens must be positive"
            raise ValueError(msg)
        if tokens > 200000:
            msg = "Max tokens too large"
            raise ValueError(msg)
        return tokens
