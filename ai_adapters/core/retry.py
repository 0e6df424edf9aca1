"""Retry policy applied to every upstream model call.

A :class:`RetryPolicy` runs an async operation up to ``max_attempts`` times,
sleeping with exponential backoff between attempts. Only exceptions listed in
``retry_on`` are retried; anything else propagates unchanged on first
occurrence. Once attempts are exhausted the last retryable error propagates
unchanged as well.

Per-call state lives in a fresh :class:`RetryContext`, so a single policy can
be shared by concurrent callers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, TypeVar

from ai_adapters.core.backoff import sleep_backoff
from ai_adapters.core.exceptions import ModelClientError, TransientAIError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryContext:
    """Mutable bookkeeping for one ``RetryPolicy.execute`` call."""

    max_attempts: int
    attempt: int = 0
    retry_count: int = 0
    last_error: BaseException | None = None
    delays: list[float] = field(default_factory=list)

    @property
    def attempts_remaining(self) -> int:
        return max(0, self.max_attempts - self.attempt)


class RetryListener:
    """Callbacks fired by :class:`RetryPolicy`. Override what you need."""

    def on_error(self, context: RetryContext, error: BaseException) -> None:
        """Called after every failed retryable attempt."""

    def on_success(self, context: RetryContext, result: Any) -> None:
        """Called once when an attempt succeeds."""


class LoggingRetryListener(RetryListener):
    """Emit a structured warning for every retryable failure."""

    def on_error(self, context: RetryContext, error: BaseException) -> None:
        logger.warning(
            "retry_error",
            extra={
                "retry_count": context.retry_count,
                "attempt": context.attempt,
                "max_attempts": context.max_attempts,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with exponential backoff.

    Defaults: 10 attempts, 2 s initial delay, x5 multiplier, 3 minute cap.
    """

    max_attempts: int = 10
    initial_delay: float = 2.0
    multiplier: float = 5.0
    max_delay: float = 180.0
    jitter: float = 0.0
    retry_on: tuple[type[BaseException], ...] = (TransientAIError,)
    listeners: tuple[RetryListener, ...] = (LoggingRetryListener(),)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            msg = f"max_attempts must be at least 1, got {self.max_attempts}"
            raise ValueError(msg)
        if self.initial_delay < 0 or self.max_delay < 0:
            msg = "Backoff delays must be non-negative"
            raise ValueError(msg)
        if self.multiplier < 1:
            msg = f"multiplier must be >= 1, got {self.multiplier}"
            raise ValueError(msg)
        if not 0 <= self.jitter < 1:
            msg = f"jitter must be in [0, 1), got {self.jitter}"
            raise ValueError(msg)

    def with_listener(self, listener: RetryListener) -> RetryPolicy:
        """Return a copy of this policy with an extra listener registered."""
        return replace(self, listeners=(*self.listeners, listener))

    def is_retryable(self, error: BaseException) -> bool:
        return isinstance(error, self.retry_on)

    async def execute(self, operation: Callable[[RetryContext], Awaitable[T]]) -> T:
        """Run ``operation`` under this policy and return its result."""
        context = RetryContext(max_attempts=self.max_attempts)

        while True:
            context.attempt += 1
            try:
                result = await operation(context)
            except Exception as exc:
                if not self.is_retryable(exc):
                    logger.debug(
                        "non_transient_error_no_retry",
                        extra={
                            "attempt": context.attempt,
                            "error": str(exc),
                            "error_type": type(exc).__name__,
                        },
                    )
                    raise

                context.retry_count += 1
                context.last_error = exc
                if isinstance(exc, ModelClientError):
                    exc.attempt = context.attempt
                for listener in self.listeners:
                    listener.on_error(context, exc)

                if context.attempt >= self.max_attempts:
                    logger.warning(
                        "retry_exhausted",
                        extra={
                            "total_attempts": context.attempt,
                            "error": str(exc),
                            "error_type": type(exc).__name__,
                        },
                    )
                    raise

                delay = await sleep_backoff(
                    context.retry_count - 1,
                    initial_delay=self.initial_delay,
                    multiplier=self.multiplier,
                    max_delay=self.max_delay,
                    jitter=self.jitter,
                )
                context.delays.append(delay)
                continue

            if context.retry_count:
                logger.info(
                    "retry_succeeded",
                    extra={"attempt": context.attempt, "retry_count": context.retry_count},
                )
            for listener in self.listeners:
                listener.on_success(context, result)
            return result


DEFAULT_RETRY_POLICY = RetryPolicy()
