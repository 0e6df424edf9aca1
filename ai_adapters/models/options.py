"""Portable per-capability options.

Every field is optional: ``None`` means "not set in this layer" and lets the
value from a less specific layer through (see ``ai_adapters.core.options``).
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatOptions(BaseModel):
    """Options for chat completion calls."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    model: str | None = Field(default=None, description="Model identifier.")
    temperature: float | None = Field(
        default=None, ge=0.0, le=2.0, description="Sampling temperature."
    )
    max_tokens: int | None = Field(
        default=None, gt=0, description="Maximum tokens to generate in the completion."
    )
    top_p: float | None = Field(default=None, ge=0.0, le=1.0, description="Nucleus sampling.")
    stop: list[str] | None = Field(default=None, description="Stop sequences.")
    user: str | None = Field(default=None, description="End-user identifier for abuse tracking.")


class EmbeddingOptions(BaseModel):
    """Options for embedding calls."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    model: str | None = Field(default=None, description="Model identifier.")
    encoding_format: Literal["float", "base64"] | None = Field(
        default=None, description="Vector encoding returned by the server."
    )
    dimensions: int | None = Field(
        default=None, gt=0, description="Requested output dimensionality."
    )
    user: str | None = Field(default=None, description="End-user identifier.")


class ImageOptions(BaseModel):
    """Options for image generation calls."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    model: str | None = Field(default=None, description="Model identifier.")
    n: int | None = Field(default=None, ge=1, le=10, description="Number of images.")
    width: int | None = Field(default=None, gt=0, description="Image width in pixels.")
    height: int | None = Field(default=None, gt=0, description="Image height in pixels.")
    response_format: Literal["url", "b64_json"] | None = Field(
        default=None, description="Return image URLs or base64 payloads."
    )
    quality: str | None = Field(default=None, description="Quality hint (standard, hd).")
    style: str | None = Field(default=None, description="Style hint (vivid, natural).")
    user: str | None = Field(default=None, description="End-user identifier.")

    @property
    def size(self) -> str | None:
        """Vendor ``WIDTHxHEIGHT`` size string, when both sides are set."""
        if self.width is None or self.height is None:
            return None
        return f"{self.width}x{self.height}"


class SpeechOptions(BaseModel):
    """Options for text-to-speech calls."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    model: str | None = Field(default=None, description="Model identifier.")
    input: str | None = Field(
        default=None, description="Text to synthesize when the request carries none."
    )
    voice: str | None = Field(default=None, description="Voice name.")
    response_format: str | None = Field(
        default=None, description="Audio container (mp3, opus, aac, flac, wav, pcm)."
    )
    speed: float | None = Field(default=None, ge=0.25, le=4.0, description="Playback speed.")


class TranscriptionOptions(BaseModel):
    """Options for audio transcription calls."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    model: str | None = Field(default=None, description="Model identifier.")
    language: str | None = Field(default=None, description="ISO-639-1 language of the audio.")
    prompt: str | None = Field(default=None, description="Text to guide the transcription.")
    response_format: Literal["json", "text", "srt", "verbose_json", "vtt"] | None = Field(
        default=None, description="Transcript format."
    )
    temperature: float | None = Field(
        default=None, ge=0.0, le=1.0, description="Sampling temperature."
    )
