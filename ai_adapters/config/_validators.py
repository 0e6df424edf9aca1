from __future__ import annotations

from typing import Any


def validate_model_name(model: str) -> str:
    """Validate a model identifier such as ``gpt-4o-mini`` or ``org/model:tag``."""
    if not model:
        msg = "Model name cannot be empty"
        raise ValueError(msg)
    if len(model) > 100:
        msg = "Model name too long"
        raise ValueError(msg)

    if ".." in model or "<" in model or ">" in model or "\\" in model:
        msg = "Model name contains invalid characters"
        raise ValueError(msg)

    allowed = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_.:/")
    if any(ch not in allowed for ch in model):
        msg = "Model name contains invalid characters"
        raise ValueError(msg)

    return model


def _ensure_api_key(value: str, *, name: str) -> str:
    value = value.strip() if value else ""
    if not value:
        msg = f"{name} API key is required"
        raise ValueError(msg)
    if len(value) > 500:
        msg = f"{name} API key appears to be too long"
        raise ValueError(msg)
    if any(char in value for char in [" ", "\n", "\t"]):
        msg = f"{name} API key contains invalid characters"
        raise ValueError(msg)
    return value


def _validate_base_url(value: Any, *, default: str) -> str:
    url = str(value or default).strip().rstrip("/")
    if not url.startswith(("http://", "https://")):
        msg = f"Base URL must start with http:// or https://, got {url!r}"
        raise ValueError(msg)
    return url


def _parse_optional_float(value: Any, *, name: str, minimum: float, maximum: float) -> float | None:
    if value in (None, ""):
        return None
    try:
        parsed = float(str(value))
    except ValueError as exc:
        msg = f"{name} must be a valid number"
        raise ValueError(msg) from exc
    if not minimum <= parsed <= maximum:
        msg = f"{name} must be between {minimum} and {maximum}"
        raise ValueError(msg)
    return parsed
