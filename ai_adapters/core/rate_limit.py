"""Rate-limit metadata parsed from upstream response headers.

OpenAI-compatible servers send ``x-ratelimit-*`` headers whose reset values
are Go-style durations (``6m0s``, ``2d16h15m29s``, ``27h55s451ms``).
Anthropic-compatible servers send ``anthropic-ratelimit-*`` headers whose
reset values are RFC 3339 timestamps. Both are normalized into a
:class:`RateLimit` whose resets are ``timedelta`` values.

Extraction never raises: missing headers leave fields as ``None`` and
malformed values are logged and skipped.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

UTC = dt.UTC

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|d|h|m|s)")
_PLAIN_NUMBER = re.compile(r"\d+(?:\.\d+)?")

_UNIT_SECONDS = {
    "d": 86400.0,
    "h": 3600.0,
    "m": 60.0,
    "s": 1.0,
    "ms": 0.001,
}


class RateLimit(BaseModel):
    """Snapshot of the caller's request and token quotas."""

    model_config = ConfigDict(frozen=True)

    requests_limit: int | None = Field(default=None, description="Maximum requests per window.")
    requests_remaining: int | None = Field(default=None, description="Requests left in window.")
    requests_reset: dt.timedelta | None = Field(
        default=None, description="Time until the request quota resets."
    )
    tokens_limit: int | None = Field(default=None, description="Maximum tokens per window.")
    tokens_remaining: int | None = Field(default=None, description="Tokens left in window.")
    tokens_reset: dt.timedelta | None = Field(
        default=None, description="Time until the token quota resets."
    )

    @property
    def is_empty(self) -> bool:
        """True when no rate-limit header was present."""
        return all(value is None for value in self.model_dump().values())


@dataclass(frozen=True)
class RateLimitHeaders:
    """Header names of one rate-limit header family."""

    requests_limit: str
    requests_remaining: str
    requests_reset: str
    tokens_limit: str
    tokens_remaining: str
    tokens_reset: str


OPENAI_RATE_LIMIT_HEADERS = RateLimitHeaders(
    requests_limit="x-ratelimit-limit-requests",
    requests_remaining="x-ratelimit-remaining-requests",
    requests_reset="x-ratelimit-reset-requests",
    tokens_limit="x-ratelimit-limit-tokens",
    tokens_remaining="x-ratelimit-remaining-tokens",
    tokens_reset="x-ratelimit-reset-tokens",
)

ANTHROPIC_RATE_LIMIT_HEADERS = RateLimitHeaders(
    requests_limit="anthropic-ratelimit-requests-limit",
    requests_remaining="anthropic-ratelimit-requests-remaining",
    requests_reset="anthropic-ratelimit-requests-reset",
    tokens_limit="anthropic-ratelimit-tokens-limit",
    tokens_remaining="anthropic-ratelimit-tokens-remaining",
    tokens_reset="anthropic-ratelimit-tokens-reset",
)

HEADER_FAMILIES: tuple[RateLimitHeaders, ...] = (
    OPENAI_RATE_LIMIT_HEADERS,
    ANTHROPIC_RATE_LIMIT_HEADERS,
)


def parse_duration(value: str) -> dt.timedelta | None:
    """Parse a Go-style duration such as ``2d16h15m29s`` or ``451ms``.

    A bare number is read as seconds. Returns ``None`` when the text is not a
    duration or is too large for ``timedelta``.
    """
    text = value.strip().lower()
    if not text:
        return None

    if _PLAIN_NUMBER.fullmatch(text):
        return _seconds_to_timedelta(float(text))

    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            return None
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()

    if position == 0 or position != len(text):
        return None
    return _seconds_to_timedelta(total)


def _seconds_to_timedelta(seconds: float) -> dt.timedelta | None:
    try:
        return dt.timedelta(seconds=seconds)
    except OverflowError:
        return None


def parse_reset(value: str, *, now: dt.datetime | None = None) -> dt.timedelta | None:
    """Parse a reset header that is either a duration or an RFC 3339 timestamp.

    Timestamps are converted into the time remaining from ``now``, floored at zero.
    """
    duration = parse_duration(value)
    if duration is not None:
        return duration

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        reset_at = dt.datetime.fromisoformat(text)
    except ValueError:
        return None
    if reset_at.tzinfo is None:
        reset_at = reset_at.replace(tzinfo=UTC)

    reference = now or dt.datetime.now(UTC)
    return max(dt.timedelta(0), reset_at - reference)


def to_iso8601_duration(value: dt.timedelta) -> str:
    """Render a duration as ISO 8601 with hours as the largest unit (``PT64H15M29S``)."""
    total_ms = round(value.total_seconds() * 1000)
    sign = "-" if total_ms < 0 else ""
    total_ms = abs(total_ms)

    hours, remainder = divmod(total_ms, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    seconds, millis = divmod(remainder, 1000)

    parts = []
    if hours:
        parts.append(f"{hours}H")
    if minutes:
        parts.append(f"{minutes}M")
    if seconds or millis or not parts:
        parts.append(f"{seconds}.{millis:03d}S" if millis else f"{seconds}S")
    return f"{sign}PT{''.join(parts)}"


def _parse_int(name: str, value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        logger.warning("invalid_rate_limit_header", extra={"header": name, "value": value})
        return None


def _parse_reset_header(name: str, value: str | None, now: dt.datetime | None) -> dt.timedelta | None:
    if value is None:
        return None
    parsed = parse_reset(value, now=now)
    if parsed is None:
        logger.warning("invalid_rate_limit_header", extra={"header": name, "value": value})
    return parsed


def extract_rate_limit(
    headers: Mapping[str, str] | None,
    *,
    now: dt.datetime | None = None,
) -> RateLimit:
    """Build a :class:`RateLimit` from response headers.

    The first header family with any header present wins. Absent headers
    produce an empty ``RateLimit``.
    """
    if not headers:
        return RateLimit()

    lowered = {str(key).lower(): str(value) for key, value in headers.items()}

    for family in HEADER_FAMILIES:
        names = (
            family.requests_limit,
            family.requests_remaining,
            family.requests_reset,
            family.tokens_limit,
            family.tokens_remaining,
            family.tokens_reset,
        )
        if not any(name in lowered for name in names):
            continue

        return RateLimit(
            requests_limit=_parse_int(family.requests_limit, lowered.get(family.requests_limit)),
            requests_remaining=_parse_int(
                family.requests_remaining, lowered.get(family.requests_remaining)
            ),
            requests_reset=_parse_reset_header(
                family.requests_reset, lowered.get(family.requests_reset), now
            ),
            tokens_limit=_parse_int(family.tokens_limit, lowered.get(family.tokens_limit)),
            tokens_remaining=_parse_int(
                family.tokens_remaining, lowered.get(family.tokens_remaining)
            ),
            tokens_reset=_parse_reset_header(
                family.tokens_reset, lowered.get(family.tokens_reset), now
            ),
        )

    return RateLimit()
