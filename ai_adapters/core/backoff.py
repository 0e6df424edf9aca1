"""Exponential backoff with optional jitter.

Every adapter retries through :class:`ai_adapters.core.retry.RetryPolicy`,
which delegates the delay arithmetic and the sleep to this module so the
algorithm lives in one place.
"""

from __future__ import annotations

import asyncio
import random


def compute_backoff_delay(
    retry_number: int,
    *,
    initial_delay: float = 2.0,
    multiplier: float = 5.0,
    max_delay: float = 180.0,
    jitter: float = 0.0,
) -> float:
    """Return the delay in seconds before the next attempt.

    Delay formula: ``min(max_delay, initial_delay * multiplier^retry_number) * (1 + uniform(-jitter, jitter))``

    Args:
        retry_number: Number of retries already slept for (0 before the first retry).
        initial_delay: Delay before the first retry, in seconds.
        multiplier: Growth factor applied after each retry.
        max_delay: Upper bound for the un-jittered delay, in seconds.
        jitter: Relative jitter in ``[0, 1)``; 0 disables it.
    """
    if retry_number < 0:
        msg = f"retry_number must be non-negative, got {retry_number}"
        raise ValueError(msg)

    try:
        raw = initial_delay * (multiplier**retry_number)
    except OverflowError:
        raw = max_delay
    base_delay = min(max_delay, max(0.0, raw))
    if jitter <= 0:
        return base_delay
    return base_delay * (1.0 + random.uniform(-jitter, jitter))


async def sleep_backoff(
    retry_number: int,
    *,
    initial_delay: float = 2.0,
    multiplier: float = 5.0,
    max_delay: float = 180.0,
    jitter: float = 0.0,
) -> float:
    """Sleep for the backoff delay and return how long was slept."""
    delay = compute_backoff_delay(
        retry_number,
        initial_delay=initial_delay,
        multiplier=multiplier,
        max_delay=max_delay,
        jitter=jitter,
    )
    await asyncio.sleep(delay)
    return delay
