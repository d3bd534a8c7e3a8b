# src/groqai/transport/retry.py

"""Retry decisions for failed attempts.

``RetryPolicy.decide`` classifies an error and picks the delay before the next
attempt: the server's ``Retry-After`` when present, otherwise capped
exponential backoff with jitter. ``wait`` plugs the same decision into
tenacity.
"""

import logging
import random
from dataclasses import dataclass
from email.utils import parsedate_to_datetime
from typing import Union

from tenacity import RetryCallState

from groqai.errors import ApiError, GroqError, TransportError

from .config import ClientConfig

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({408, 429})


@dataclass(frozen=True)
class RetryAfter:
    delay: float


@dataclass(frozen=True)
class GiveUp:
    error: GroqError


RetryDecision = Union[RetryAfter, GiveUp]


def parse_retry_after(value: str | None, now: float) -> float | None:
    """Parse a ``Retry-After`` header into seconds from ``now``.

    Accepts delay-seconds (``"2"``) and HTTP dates
    (``"Wed, 21 Oct 2015 07:28:00 GMT"``). ``now`` is wall-clock epoch seconds.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        moment = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug("Unparseable Retry-After header: %s", value)
        return None
    return max(0.0, moment.timestamp() - now)


class RetryPolicy:
    """Decides whether a failed attempt is retried and how long to wait.

    Holds no state between calls. The attempt counter lives in the caller's
    loop; the random source only perturbs the computed delay.
    """

    def __init__(self, config: ClientConfig, rng: random.Random | None = None) -> None:
        self._config = config
        self._rng = rng or random.Random()

    @property
    def max_attempts(self) -> int:
        return self._config.max_retries

    def is_retryable(self, error: BaseException) -> bool:
        if isinstance(error, TransportError):
            return True
        if isinstance(error, ApiError):
            return error.status in RETRYABLE_STATUSES or 500 <= error.status <= 599
        return False

    def backoff_delay(self, attempt_number: int) -> float:
        """Exponential delay for ``attempt_number`` before jitter, capped."""
        cfg = self._config
        try:
            delay = cfg.backoff_base * cfg.backoff_multiplier**attempt_number
        except OverflowError:
            return cfg.backoff_cap
        return min(cfg.backoff_cap, delay)

    def decide(self, attempt_number: int, error: GroqError) -> RetryDecision:
        """Retry or give up after ``attempt_number`` attempts ended in ``error``.

        A ``GiveUp`` carries ``error`` itself, stamped with the attempt count.
        """
        if not self.is_retryable(error) or attempt_number >= self.max_attempts:
            return GiveUp(error.with_attempts(attempt_number))

        retry_after = getattr(error, "retry_after", None)
        if retry_after is not None:
            return RetryAfter(min(self._config.backoff_cap, retry_after))

        ratio = self._config.jitter_ratio
        factor = self._rng.uniform(1 - ratio, 1 + ratio)
        delay = self.backoff_delay(attempt_number) * factor
        return RetryAfter(min(self._config.backoff_cap, delay))

    def wait(self, retry_state: RetryCallState) -> float:
        """tenacity ``wait`` hook: the delay chosen by ``decide``."""
        error = retry_state.outcome.exception() if retry_state.outcome else None
        if not isinstance(error, GroqError):
            return 0.0
        decision = self.decide(retry_state.attempt_number, error)
        # GiveUp: tenacity's retry and stop conditions end the loop, not this delay.
        return decision.delay if isinstance(decision, RetryAfter) else 0.0
