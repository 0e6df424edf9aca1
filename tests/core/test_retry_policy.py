"""Tests for RetryPolicy: bounded retries with exponential backoff."""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock, patch

import pytest

from ai_adapters.core.exceptions import (
    ClientAPIError,
    NetworkError,
    NonTransientAIError,
    RateLimitError,
    TransientAIError,
)
from ai_adapters.core.retry import (
    DEFAULT_RETRY_POLICY,
    RetryContext,
    RetryListener,
    RetryPolicy,
)


class RecordingListener(RetryListener):
    def __init__(self) -> None:
        self.errors: list[tuple[int, BaseException]] = []
        self.successes: list[tuple[int, object]] = []

    def on_error(self, context: RetryContext, error: BaseException) -> None:
        self.errors.append((context.retry_count, error))

    def on_success(self, context: RetryContext, result: object) -> None:
        self.successes.append((context.retry_count, result))


def failing_then(result: object, *errors: BaseException) -> AsyncMock:
    """Operation that raises ``errors`` in order, then returns ``result``."""
    return AsyncMock(side_effect=[*errors, result])


@pytest.fixture
def no_sleep():
    with patch("ai_adapters.core.backoff.asyncio.sleep", new=AsyncMock()) as mock_sleep:
        yield mock_sleep


class TestRetryPolicyDefaults:
    def test_default_values(self) -> None:
        policy = RetryPolicy()
        assert policy.max_attempts == 10
        assert policy.initial_delay == 2.0
        assert policy.multiplier == 5.0
        assert policy.max_delay == 180.0
        assert policy.jitter == 0.0
        assert policy.retry_on == (TransientAIError,)

    def test_shared_default_instance(self) -> None:
        assert DEFAULT_RETRY_POLICY == RetryPolicy()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": 0},
            {"initial_delay": -1.0},
            {"max_delay": -1.0},
            {"multiplier": 0.5},
            {"jitter": 1.0},
            {"jitter": -0.1},
        ],
    )
    def test_invalid_configuration_rejected(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(**kwargs)

    def test_is_retryable(self) -> None:
        policy = RetryPolicy()
        assert policy.is_retryable(TransientAIError("x"))
        assert policy.is_retryable(RateLimitError("x"))
        assert policy.is_retryable(NetworkError("x"))
        assert not policy.is_retryable(ClientAPIError("x", status_code=400))
        assert not policy.is_retryable(ValueError("x"))


class TestRetryPolicyExecute:
    """Behaviour of RetryPolicy.execute."""

    @pytest.mark.asyncio
    async def test_success_first_try(self, no_sleep: AsyncMock) -> None:
        listener = RecordingListener()
        policy = RetryPolicy(listeners=(listener,))
        operation = AsyncMock(return_value="ok")

        assert await policy.execute(operation) == "ok"
        assert operation.await_count == 1
        assert listener.errors == []
        assert listener.successes == [(0, "ok")]
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failures", [1, 2, 5, 9])
    async def test_k_transient_failures_then_success(
        self, no_sleep: AsyncMock, failures: int
    ) -> None:
        """k transient failures below the ceiling end in success with retry count k."""
        listener = RecordingListener()
        policy = RetryPolicy(listeners=(listener,))
        errors = [TransientAIError(f"fail {i}") for i in range(failures)]
        operation = failing_then("done", *errors)

        assert await policy.execute(operation) == "done"
        assert operation.await_count == failures + 1
        assert [count for count, _ in listener.errors] == list(range(1, failures + 1))
        assert listener.successes == [(failures, "done")]
        assert no_sleep.await_count == failures

    @pytest.mark.asyncio
    async def test_non_transient_error_raised_immediately(self, no_sleep: AsyncMock) -> None:
        listener = RecordingListener()
        policy = RetryPolicy(listeners=(listener,))
        error = ClientAPIError("400 - bad request", status_code=400)
        operation = AsyncMock(side_effect=error)

        with pytest.raises(ClientAPIError) as exc_info:
            await policy.execute(operation)

        assert exc_info.value is error
        assert operation.await_count == 1
        assert listener.errors == []
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_plain_exception_is_not_retried(self, no_sleep: AsyncMock) -> None:
        operation = AsyncMock(side_effect=KeyError("missing"))
        with pytest.raises(KeyError):
            await RetryPolicy().execute(operation)
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_exhaustion_propagates_last_transient_error(self, no_sleep: AsyncMock) -> None:
        policy = RetryPolicy(max_attempts=4)
        errors = [TransientAIError(f"fail {i}") for i in range(4)]
        operation = AsyncMock(side_effect=errors)

        with pytest.raises(TransientAIError) as exc_info:
            await policy.execute(operation)

        assert exc_info.value is errors[-1]
        assert exc_info.value.attempt == 4
        assert operation.await_count == 4
        # No sleep after the final attempt
        assert no_sleep.await_count == 3

    @pytest.mark.asyncio
    async def test_single_attempt_policy_never_sleeps(self, no_sleep: AsyncMock) -> None:
        operation = AsyncMock(side_effect=NetworkError("reset"))
        with pytest.raises(NetworkError):
            await RetryPolicy(max_attempts=1).execute(operation)
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_backoff_delays_grow_and_cap(self, no_sleep: AsyncMock) -> None:
        policy = RetryPolicy(max_attempts=6, initial_delay=2.0, multiplier=5.0, max_delay=180.0)
        operation = AsyncMock(side_effect=[TransientAIError("x")] * 5 + ["ok"])

        await policy.execute(operation)

        slept = [call.args[0] for call in no_sleep.await_args_list]
        assert slept == [2.0, 10.0, 50.0, 180.0, 180.0]

    @pytest.mark.asyncio
    async def test_context_passed_to_operation(self, no_sleep: AsyncMock) -> None:
        seen: list[tuple[int, int]] = []

        async def operation(context: RetryContext) -> str:
            seen.append((context.attempt, context.retry_count))
            if context.attempt < 3:
                raise TransientAIError("again")
            return "ok"

        await RetryPolicy().execute(operation)
        assert seen == [(1, 0), (2, 1), (3, 2)]

    @pytest.mark.asyncio
    async def test_non_retryable_after_transient_stops(self, no_sleep: AsyncMock) -> None:
        operation = AsyncMock(
            side_effect=[TransientAIError("x"), NonTransientAIError("fatal"), "never"]
        )
        with pytest.raises(NonTransientAIError):
            await RetryPolicy().execute(operation)
        assert operation.await_count == 2

    @pytest.mark.asyncio
    async def test_custom_retry_on(self, no_sleep: AsyncMock) -> None:
        policy = RetryPolicy(retry_on=(KeyError,))
        operation = failing_then("ok", KeyError("a"))
        assert await policy.execute(operation) == "ok"

    @pytest.mark.asyncio
    async def test_cancellation_is_not_swallowed(self) -> None:
        operation = AsyncMock(side_effect=asyncio.CancelledError())
        with pytest.raises(asyncio.CancelledError):
            await RetryPolicy().execute(operation)
        assert operation.await_count == 1

    @pytest.mark.asyncio
    async def test_concurrent_calls_keep_separate_counts(self, no_sleep: AsyncMock) -> None:
        listener = RecordingListener()
        policy = RetryPolicy(listeners=(listener,))

        first = failing_then("a", TransientAIError("1"))
        second = failing_then("b", TransientAIError("1"), TransientAIError("2"))

        results = await asyncio.gather(policy.execute(first), policy.execute(second))

        assert results == ["a", "b"]
        assert sorted(listener.successes) == [(1, "a"), (2, "b")]

    def test_with_listener_returns_copy(self) -> None:
        listener = RecordingListener()
        policy = RetryPolicy()
        extended = policy.with_listener(listener)

        assert listener in extended.listeners
        assert listener not in policy.listeners
        assert len(extended.listeners) == len(policy.listeners) + 1


class TestRetryLogging:
    @pytest.mark.asyncio
    async def test_retry_error_warning_logged(
        self, no_sleep: AsyncMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        operation = failing_then("ok", RateLimitError("429 - slow down"))

        with caplog.at_level(logging.INFO, logger="ai_adapters.core.retry"):
            await RetryPolicy().execute(operation)

        retry_records = [r for r in caplog.records if r.getMessage() == "retry_error"]
        assert len(retry_records) == 1
        assert retry_records[0].levelno == logging.WARNING
        assert retry_records[0].retry_count == 1
        assert retry_records[0].error_type == "RateLimitError"
        assert any(r.getMessage() == "retry_succeeded" for r in caplog.records)

    @pytest.mark.asyncio
    async def test_retry_exhausted_logged(
        self, no_sleep: AsyncMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        operation = AsyncMock(side_effect=TransientAIError("down"))

        with caplog.at_level(logging.WARNING, logger="ai_adapters.core.retry"):
            with pytest.raises(TransientAIError):
                await RetryPolicy(max_attempts=2).execute(operation)

        exhausted = [r for r in caplog.records if r.getMessage() == "retry_exhausted"]
        assert len(exhausted) == 1
        assert exhausted[0].total_attempts == 2
