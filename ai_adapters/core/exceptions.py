"""Exception hierarchy shared by every model client.

Errors fall into two families that drive the retry policy:

- ``TransientAIError``: worth retrying (5xx, 408, 429, network failures, timeouts).
- ``NonTransientAIError``: retrying cannot help (other 4xx, malformed bodies).

Precondition failures (missing request, empty input) are plain ``ValueError``
raised before any network activity.
"""

from __future__ import annotations

from typing import Any


class ModelClientError(Exception):
    """Base exception for model client errors."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
        attempt: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.attempt = attempt
        self.context = context or {}
        if status_code is not None:
            self.context["status_code"] = status_code


class TransientAIError(ModelClientError):
    """Raised for upstream failures that may succeed on retry."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
        attempt: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message, provider=provider, status_code=status_code, attempt=attempt, context=context
        )
        self.context.setdefault("error_type", "transient")


class RateLimitError(TransientAIError):
    """Raised when the upstream rejects a call with 429 Too Many Requests."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = 429,
        attempt: int | None = None,
        retry_after: float | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message, provider=provider, status_code=status_code, attempt=attempt, context=context
        )
        self.retry_after = retry_after
        if retry_after is not None:
            self.context["retry_after"] = retry_after
        self.context["error_type"] = "rate_limit"


class NetworkError(TransientAIError):
    """Raised when the request never produced an HTTP response (timeouts, resets)."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        attempt: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, provider=provider, attempt=attempt, context=context)
        self.context["error_type"] = "network"


class NonTransientAIError(ModelClientError):
    """Raised for failures that retrying cannot fix."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
        attempt: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message, provider=provider, status_code=status_code, attempt=attempt, context=context
        )
        self.context.setdefault("error_type", "non_transient")


class ClientAPIError(NonTransientAIError):
    """Raised when the upstream answers with a 4xx client error."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
        attempt: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message, provider=provider, status_code=status_code, attempt=attempt, context=context
        )
        self.context["error_type"] = "client"


class ResponseFormatError(NonTransientAIError):
    """Raised when a successful response body cannot be interpreted."""

    def __init__(
        self,
        message: str,
        *,
        provider: str | None = None,
        status_code: int | None = None,
        attempt: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message, provider=provider, status_code=status_code, attempt=attempt, context=context
        )
        self.context["error_type"] = "response_format"


TRANSIENT_STATUS_CODES = frozenset({408, 429})


def is_transient_status(status_code: int) -> bool:
    """Return True when an HTTP status is worth retrying."""
    return status_code in TRANSIENT_STATUS_CODES or status_code >= 500


def error_for_status(
    status_code: int,
    message: str,
    *,
    provider: str | None = None,
    retry_after: float | None = None,
    context: dict[str, Any] | None = None,
) -> ModelClientError:
    """Build the exception matching an HTTP error status."""
    text = f"{status_code} - {message}"
    if status_code == 429:
        return RateLimitError(
            text,
            provider=provider,
            status_code=status_code,
            retry_after=retry_after,
            context=context,
        )
    if is_transient_status(status_code):
        return TransientAIError(text, provider=provider, status_code=status_code, context=context)
    return ClientAPIError(text, provider=provider, status_code=status_code, context=context)
