"""Helpers shared by the capability clients when mapping vendor responses."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from ai_adapters.core.exceptions import ResponseFormatError
from ai_adapters.core.rate_limit import extract_rate_limit
from ai_adapters.models.responses import ResponseMetadata, Usage

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ai_adapters.adapters.base_client import ApiResponse

logger = logging.getLogger(__name__)


def log_empty_body(response: ApiResponse, capability: str, model: str | None) -> None:
    logger.warning(
        "empty_response_body",
        extra={
            "provider": response.provider,
            "capability": capability,
            "model": model,
            "status_code": response.status_code,
        },
    )


def require_mapping(data: Any, response: ApiResponse) -> dict[str, Any]:
    """Return ``data`` if it is a JSON object, else raise ``ResponseFormatError``."""
    if not isinstance(data, dict):
        msg = f"Expected a JSON object, got {type(data).__name__}"
        raise ResponseFormatError(
            msg, provider=response.provider, status_code=response.status_code
        )
    return data


def require_mapping_list(
    data: dict[str, Any], field: str, response: ApiResponse
) -> list[dict[str, Any]]:
    """Return ``data[field]`` as a list of JSON objects; a missing field is empty."""
    items = data.get(field) or []
    if not isinstance(items, list):
        msg = f"Field '{field}' must be a list"
        raise ResponseFormatError(
            msg, provider=response.provider, status_code=response.status_code
        )
    return [require_mapping(item, response) for item in items]


@contextmanager
def mapping_errors(response: ApiResponse) -> Iterator[None]:
    """Re-raise pydantic validation failures as ``ResponseFormatError``."""
    try:
        yield
    except ValidationError as exc:
        msg = f"Response body does not match the expected shape: {exc.error_count()} error(s)"
        raise ResponseFormatError(
            msg,
            provider=response.provider,
            status_code=response.status_code,
            context={"errors": exc.errors(include_url=False)},
        ) from exc


def as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def usage_from_counts(
    prompt_tokens: Any,
    generation_tokens: Any,
    total_tokens: Any = None,
    *,
    cost_usd: float | None = None,
) -> Usage | None:
    """Build :class:`Usage`, deriving the total when only the parts are known."""
    prompt = as_int(prompt_tokens)
    generation = as_int(generation_tokens)
    total = as_int(total_tokens)
    if prompt is None and generation is None and total is None:
        return None
    if total is None and prompt is not None:
        total = prompt + (generation or 0)
    return Usage(
        prompt_tokens=prompt,
        generation_tokens=generation,
        total_tokens=total,
        cost_usd=cost_usd,
    )


def build_metadata(
    response: ApiResponse,
    *,
    model: str | None,
    usage: Usage | None = None,
    extra: dict[str, Any] | None = None,
) -> ResponseMetadata:
    return ResponseMetadata(
        model=model,
        usage=usage,
        rate_limit=extract_rate_limit(response.headers),
        extra={key: value for key, value in (extra or {}).items() if value is not None},
    )
