"""Portable requests accepted by the model clients."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ai_adapters.models.options import (
    ChatOptions,
    EmbeddingOptions,
    ImageOptions,
    SpeechOptions,
    TranscriptionOptions,
)

Role = Literal["system", "user", "assistant"]


class Message(BaseModel):
    """A single chat message."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    role: Role = Field(description="Author of the message.")
    content: str = Field(description="Message text.")

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class ChatRequest(BaseModel):
    """Conversation to complete."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    messages: list[Message] = Field(min_length=1, description="Conversation so far.")
    options: ChatOptions | None = Field(default=None, description="Per-call options.")

    @classmethod
    def from_text(
        cls, text: str, *, system: str | None = None, options: ChatOptions | None = None
    ) -> ChatRequest:
        """Build a single-turn request, optionally preceded by a system prompt."""
        messages = []
        if system:
            messages.append(Message(role="system", content=system))
        messages.append(Message(role="user", content=text))
        return cls(messages=messages, options=options)


class EmbeddingRequest(BaseModel):
    """Texts to embed."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    inputs: list[str] = Field(min_length=1, description="Texts to embed, in order.")
    options: EmbeddingOptions | None = Field(default=None, description="Per-call options.")

    @field_validator("inputs")
    @classmethod
    def _validate_inputs(cls, value: list[str]) -> list[str]:
        if any(not item for item in value):
            msg = "Embedding inputs must be non-empty strings"
            raise ValueError(msg)
        return value


class ImageRequest(BaseModel):
    """Prompt for image generation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    prompt: str = Field(min_length=1, description="Image description.")
    options: ImageOptions | None = Field(default=None, description="Per-call options.")


class SpeechRequest(BaseModel):
    """Text to synthesize.

    ``text`` may be omitted when the merged options carry ``input``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    text: str | None = Field(default=None, description="Text to synthesize.")
    options: SpeechOptions | None = Field(default=None, description="Per-call options.")


class TranscriptionRequest(BaseModel):
    """Audio to transcribe."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    audio: bytes = Field(min_length=1, description="Raw audio file contents.")
    filename: str = Field(
        default="audio.mp3",
        min_length=1,
        description="File name sent with the upload; its extension tells the server the format.",
    )
    options: TranscriptionOptions | None = Field(default=None, description="Per-call options.")
