# src/groqai/transport/rate_limit.py

"""Client-side view of the server's rate-limit quota.

The server reports its quota in response headers::

    x-ratelimit-remaining-requests: 0
    x-ratelimit-reset-requests: 2m59.56s
    x-ratelimit-remaining-tokens: 5890
    x-ratelimit-reset-tokens: 7.66s

``RateLimitTracker`` keeps the most recent snapshot per category and tells the
executor how long to hold a request back when a category is exhausted. It is
advisory: the server's answer stays authoritative and an unexpected 429 is
still handled by the retry policy.
"""

import logging
import math
import re
import threading
from collections.abc import Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)

CATEGORIES = ("requests", "tokens")
REMAINING_HEADER = "x-ratelimit-remaining-{}"
RESET_HEADER = "x-ratelimit-reset-{}"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_UNIT_SECONDS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


def parse_reset_duration(value: str) -> float | None:
    """Parse ``"2m59.56s"``, ``"7.66s"``, ``"250ms"`` or bare seconds.

    Returns ``None`` for anything unrecognized.
    """
    value = value.strip()
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        seconds = _parse_compound(value)
    if seconds is None or not math.isfinite(seconds):
        return None
    return max(0.0, seconds)


def _parse_compound(value: str) -> float | None:
    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(value):
        if match.start() != position:
            return None
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()
    if position != len(value):
        return None
    return total


@dataclass(frozen=True)
class RateLimitState:
    """Snapshot of one quota category.

    ``reset_at`` and ``observed_at`` are on the tracker's monotonic clock.
    """

    remaining: int
    reset_at: float
    observed_at: float

    def supersedes(self, other: "RateLimitState | None") -> bool:
        """Whether this snapshot should replace ``other``.

        Newer observations win. On equal timestamps the more conservative
        snapshot wins: fewer remaining, then the later reset.
        """
        if other is None:
            return True
        if self.observed_at != other.observed_at:
            return self.observed_at > other.observed_at
        return (self.remaining, -self.reset_at) < (other.remaining, -other.reset_at)


class RateLimitTracker:
    """Shared, thread-safe record of the latest quota per category."""

    def __init__(self, categories: tuple[str, ...] = CATEGORIES) -> None:
        self._states: dict[str, RateLimitState | None] = {c: None for c in categories}
        self._locks = {c: threading.Lock() for c in categories}

    def observe(self, headers: Mapping[str, str], observed_at: float) -> None:
        """Fold rate-limit headers from one response into the tracked state."""
        lowered = {k.lower(): v for k, v in headers.items()}
        for category in self._states:
            state = self._parse_category(lowered, category, observed_at)
            if state is None:
                continue
            with self._locks[category]:
                current = self._states[category]
                if state.supersedes(current):
                    self._states[category] = state
                    logger.debug(
                        "Rate limit %s: remaining=%d, resets in %.2fs",
                        category,
                        state.remaining,
                        state.reset_at - observed_at,
                    )
                else:
                    logger.debug(
                        "Ignoring stale rate limit observation for %s", category
                    )

    def admission_delay(self, now: float) -> float:
        """Seconds to wait before dispatching. Zero unless a category is exhausted."""
        delay = 0.0
        for state in self.snapshot().values():
            if state is not None and state.remaining <= 0 and state.reset_at > now:
                delay = max(delay, state.reset_at - now)
        return delay

    def reset_after(self, now: float) -> float | None:
        """Last known wait until quota resets, or ``None`` if nothing was observed."""
        delay = self.admission_delay(now)
        if delay > 0:
            return delay
        known = [s.reset_at - now for s in self.snapshot().values() if s is not None]
        if not known:
            return None
        return max(0.0, max(known))

    def snapshot(self) -> dict[str, RateLimitState | None]:
        result = {}
        for category, lock in self._locks.items():
            with lock:
                result[category] = self._states[category]
        return result

    def _parse_category(
        self, headers: Mapping[str, str], category: str, observed_at: float
    ) -> RateLimitState | None:
        raw_remaining = headers.get(REMAINING_HEADER.format(category))
        if raw_remaining is None:
            return None
        try:
            # int() rejects inf and nan with OverflowError / ValueError
            remaining = int(float(raw_remaining))
        except (ValueError, OverflowError):
            logger.debug("Unparseable %s header: %s", category, raw_remaining)
            return None

        reset_seconds = None
        raw_reset = headers.get(RESET_HEADER.format(category))
        if raw_reset is not None:
            reset_seconds = parse_reset_duration(raw_reset)
            if reset_seconds is None:
                logger.debug("Unparseable reset header for %s: %s", category, raw_reset)

        return RateLimitState(
            remaining=remaining,
            reset_at=observed_at + (reset_seconds or 0.0),
            observed_at=observed_at,
        )
