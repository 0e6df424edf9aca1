"""Response size guard applied to every upstream HTTP response."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

MAX_RESPONSE_LIMIT_BYTES = 1024 * 1024 * 1024


class ResponseSizeError(ValueError):
    """Raised when a response exceeds the maximum allowed size."""

    def __init__(self, message: str, *, actual_size: int | None = None, max_size: int) -> None:
        super().__init__(message)
        self.actual_size = actual_size
        self.max_size = max_size


async def validate_response_size(
    response: httpx.Response,
    max_size_bytes: int,
    service_name: str,
) -> None:
    """Reject responses larger than ``max_size_bytes``.

    The ``Content-Length`` header is checked first; when it is missing or
    malformed the size of the already-read body is used instead.

    Raises:
        ResponseSizeError: If the response exceeds ``max_size_bytes``.
        ValueError: If ``max_size_bytes`` is not a positive integer up to 1GB.
    """
    if not isinstance(max_size_bytes, int) or max_size_bytes <= 0:
        msg = f"max_size_bytes must be a positive integer, got {max_size_bytes}"
        raise ValueError(msg)

    if max_size_bytes > MAX_RESPONSE_LIMIT_BYTES:
        msg = f"max_size_bytes too large (max 1GB), got {max_size_bytes}"
        raise ValueError(msg)

    size: int | None = None
    content_length = response.headers.get("content-length")
    if content_length:
        try:
            size = int(content_length)
        except ValueError:
            logger.warning(
                "invalid_content_length_header",
                extra={
                    "service": service_name,
                    "content_length": content_length,
                    "status_code": response.status_code,
                },
            )

    if size is None:
        size = len(response.content)

    if size > max_size_bytes:
        logger.error(
            "response_size_exceeded",
            extra={
                "service": service_name,
                "actual_size": size,
                "max_size": max_size_bytes,
                "status_code": response.status_code,
            },
        )
        msg = f"{service_name} response size ({size} bytes) exceeds limit ({max_size_bytes} bytes)"
        raise ResponseSizeError(msg, actual_size=size, max_size=max_size_bytes)

    if size > max_size_bytes * 0.5:
        logger.warning(
            "large_response_size",
            extra={
                "service": service_name,
                "actual_size": size,
                "max_size": max_size_bytes,
                "percentage": round(100 * size / max_size_bytes, 1),
            },
        )
