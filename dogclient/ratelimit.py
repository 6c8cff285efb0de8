"""Rate-limit metadata parsed from ``X-RateLimit-*`` response headers."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping

logger = logging.getLogger(__name__)

LIMIT_HEADER = "X-RateLimit-Limit"
PERIOD_HEADER = "X-RateLimit-Period"
REMAINING_HEADER = "X-RateLimit-Remaining"
RESET_HEADER = "X-RateLimit-Reset"


@dataclass(frozen=True)
class RateLimit:
    """How many requests remain before throttling, and when the window resets.

    Fields the server did not report (or reported unparseably) are zero.
    """

    # Number of requests allowed in a period.
    limit: int = 0
    # Length of the rate-limit period.
    period: timedelta = timedelta(0)
    # Requests left in the current period.
    remaining: int = 0
    # Time until the current period resets.
    reset: timedelta = timedelta(0)

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> RateLimit:
        """Parse the rate-limit headers, degrading each bad field to zero."""
        return cls(
            limit=_int_from_header(headers, LIMIT_HEADER),
            period=_duration_from_header(headers, PERIOD_HEADER),
            remaining=_int_from_header(headers, REMAINING_HEADER),
            reset=_duration_from_header(headers, RESET_HEADER),
        )


def _header(headers: Mapping[str, str], key: str) -> str | None:
    value = headers.get(key)
    if value is None:
        # plain dicts are case-sensitive, httpx.Headers are not
        value = headers.get(key.lower())
    return value


def _int_from_header(headers: Mapping[str, str], key: str) -> int:
    raw = _header(headers, key)
    if raw is None:
        logger.warning("rate limit header %s missing", key)
        return 0
    try:
        return int(raw, 10)
    except ValueError as exc:
        logger.warning("failed to parse rate limit header %s: %s", key, exc)
        return 0


def _duration_from_header(headers: Mapping[str, str], key: str) -> timedelta:
    # Period and reset are reported as (possibly fractional) seconds.
    raw = _header(headers, key)
    if raw is None:
        logger.warning("rate limit header %s missing", key)
        return timedelta(0)
    try:
        seconds = float(raw)
        if not math.isfinite(seconds):
            raise ValueError(f"non-finite value {raw!r}")
        return timedelta(seconds=seconds)
    except (ValueError, OverflowError) as exc:
        logger.warning("failed to parse rate limit header %s: %s", key, exc)
        return timedelta(0)
