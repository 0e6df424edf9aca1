"""Portable responses returned by the model clients."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ai_adapters.core.rate_limit import RateLimit


class Usage(BaseModel):
    """Token accounting reported by the upstream."""

    model_config = ConfigDict(frozen=True)

    prompt_tokens: int | None = Field(default=None, description="Tokens consumed by the input.")
    generation_tokens: int | None = Field(
        default=None, description="Tokens produced by the model."
    )
    total_tokens: int | None = Field(default=None, description="Total tokens billed.")
    cost_usd: float | None = Field(
        default=None, description="Estimated USD cost, when the model's pricing is known."
    )


class ResponseMetadata(BaseModel):
    """Metadata shared by every capability."""

    model_config = ConfigDict(frozen=True)

    model: str | None = Field(default=None, description="Model that served the call.")
    usage: Usage | None = Field(default=None, description="Token usage, when reported.")
    rate_limit: RateLimit = Field(
        default_factory=RateLimit, description="Quota snapshot from response headers."
    )
    extra: dict[str, Any] = Field(
        default_factory=dict, description="Vendor fields with no portable counterpart."
    )


class Generation(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Generated text.")
    finish_reason: str | None = Field(default=None, description="Why generation stopped.")


class Embedding(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int = Field(description="Position of the source text in the request.")
    vector: list[float] = Field(description="Embedding vector.")


class ImageGeneration(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str | None = Field(default=None, description="Hosted image URL.")
    b64_json: str | None = Field(default=None, description="Base64-encoded image.")
    revised_prompt: str | None = Field(
        default=None, description="Prompt as rewritten by the server."
    )


class SpeechGeneration(BaseModel):
    model_config = ConfigDict(frozen=True)

    audio: bytes = Field(description="Synthesized audio.")


class Transcription(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str = Field(description="Transcript.")
    language: str | None = Field(default=None, description="Detected language.")
    duration: float | None = Field(default=None, description="Audio duration in seconds.")


ResultT = TypeVar("ResultT", bound=BaseModel)


class ModelResponse(BaseModel, Generic[ResultT]):
    """Results of one call plus metadata.

    ``results`` is empty when the upstream returned no body.
    """

    model_config = ConfigDict(frozen=True)

    results: list[ResultT] = Field(default_factory=list)
    metadata: ResponseMetadata = Field(default_factory=ResponseMetadata)

    @property
    def result(self) -> ResultT | None:
        """First result, or ``None`` when there are none."""
        return self.results[0] if self.results else None


ChatResponse = ModelResponse[Generation]
EmbeddingResponse = ModelResponse[Embedding]
ImageResponse = ModelResponse[ImageGeneration]
SpeechResponse = ModelResponse[SpeechGeneration]
TranscriptionResponse = ModelResponse[Transcription]
