from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from ai_adapters.core.retry import RetryPolicy


class RetryConfig(BaseModel):
    """Retry and backoff settings shared by every model client."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    max_attempts: int = Field(default=10, validation_alias="RETRY_MAX_ATTEMPTS")
    initial_delay_sec: float = Field(default=2.0, validation_alias="RETRY_INITIAL_DELAY_SEC")
    multiplier: float = Field(default=5.0, validation_alias="RETRY_MULTIPLIER")
    max_delay_sec: float = Field(default=180.0, validation_alias="RETRY_MAX_DELAY_SEC")
    jitter: float = Field(default=0.0, validation_alias="RETRY_JITTER")

    @field_validator("max_attempts", mode="before")
    @classmethod
    def _validate_max_attempts(cls, value: Any) -> int:
        try:
            parsed = int(str(value if value not in (None, "") else 10))
        except ValueError as exc:
            msg = "Retry max attempts must be a valid integer"
            raise ValueError(msg) from exc
        if parsed < 1 or parsed > 100:
            msg = "Retry max attempts must be between 1 and 100"
            raise ValueError(msg)
        return parsed

    @field_validator("initial_delay_sec", "max_delay_sec", mode="before")
    @classmethod
    def _validate_delay(cls, value: Any, info: ValidationInfo) -> float:
        default = cls.model_fields[info.field_name].default
        try:
            parsed = float(str(value if value not in (None, "") else default))
        except ValueError as exc:
            msg = f"{info.field_name.replace('_', ' ')} must be a valid number"
            raise ValueError(msg) from exc
        if parsed < 0 or parsed > 3600:
            msg = f"{info.field_name.replace('_', ' ').capitalize()} must be between 0 and 3600"
            raise ValueError(msg)
        return parsed

    @field_validator("multiplier", mode="before")
    @classmethod
    def _validate_multiplier(cls, value: Any) -> float:
        try:
            parsed = float(str(value if value not in (None, "") else 5.0))
        except ValueError as exc:
            msg = "Retry multiplier must be a valid number"
            raise ValueError(msg) from exc
        if parsed < 1:
            msg = "Retry multiplier must be at least 1"
            raise ValueError(msg)
        return parsed

    @field_validator("jitter", mode="before")
    @classmethod
    def _validate_jitter(cls, value: Any) -> float:
        try:
            parsed = float(str(value if value not in (None, "") else 0.0))
        except ValueError as exc:
            msg = "Retry jitter must be a valid number"
            raise ValueError(msg) from exc
        if not 0 <= parsed < 1:
            msg = "Retry jitter must be in [0, 1)"
            raise ValueError(msg)
        return parsed

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_attempts,
            initial_delay=self.initial_delay_sec,
            multiplier=self.multiplier,
            max_delay=self.max_delay_sec,
            jitter=self.jitter,
        )
