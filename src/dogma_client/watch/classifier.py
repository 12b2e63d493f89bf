"""Retry decisions for failed watch calls."""

import random
from dataclasses import dataclass
from typing import Optional, Union

from ..config import WatchConfig
from .long_poll import WatchError, WatchErrorKind


@dataclass(frozen=True)
class RetryImmediately:
    pass


@dataclass(frozen=True)
class RetryAfterBackoff:
    delay: float


@dataclass(frozen=True)
class Abort:
    reason: str
    error: WatchError


RetryDecision = Union[RetryImmediately, RetryAfterBackoff, Abort]

# 408 means the server gave up waiting, which is the same as "no change yet".
_TIMEOUT_STATUSES = frozenset({408})
_THROTTLED_STATUSES = frozenset({429})


class BackoffPolicy:
    """Exponential backoff keyed by the number of consecutive failures."""

    def __init__(
        self,
        initial_delay: float = 4.0,
        multiplier: float = 2.0,
        max_delay: float = 64.0,
        jitter_rate: float = 0.2,
        rng: Optional[random.Random] = None,
    ):
        self.initial_delay = initial_delay
        self.multiplier = multiplier
        self.max_delay = max_delay
        self.jitter_rate = jitter_rate
        self._rng = rng or random.Random()

    @classmethod
    def from_config(cls, config: WatchConfig) -> "BackoffPolicy":
        return cls(
            initial_delay=config.backoff_initial_delay,
            multiplier=config.backoff_multiplier,
            max_delay=config.backoff_max_delay,
            jitter_rate=config.jitter_rate,
        )

    def _raw_delay(self, failures: int) -> float:
        return self.initial_delay * (self.multiplier ** (failures - 1))

    def delay_for(self, failures: int) -> float:
        """Delay before the next attempt after ``failures`` consecutive failures."""
        failures = max(1, failures)
        raw = self._raw_delay(failures)
        if raw >= self.max_delay:
            return self.max_delay

        # Jitter never pushes a delay past the next step's raw delay, so the
        # sequence stays non-decreasing.
        headroom = min(raw * self.jitter_rate, self._raw_delay(failures + 1) - raw)
        jitter = headroom * self._rng.random() if headroom > 0 else 0.0
        return min(raw + jitter, self.max_delay)


class ErrorClassifier:
    """Decides whether a watch error is retried, and how soon."""

    def __init__(self, backoff: Optional[BackoffPolicy] = None):
        self.backoff = backoff or BackoffPolicy()

    def classify(self, error: WatchError, failures: int) -> RetryDecision:
        """Map a watch error onto a retry decision.

        Args:
            error: Outcome of the failed long-poll call
            failures: Consecutive transient failures including this one;
                only used to size backoff delays
        """
        if error.kind == WatchErrorKind.TIMEOUT:
            return RetryImmediately()

        if error.kind in (WatchErrorKind.SERVER, WatchErrorKind.TRANSPORT):
            return RetryAfterBackoff(self.backoff.delay_for(failures))

        if error.kind == WatchErrorKind.CLIENT:
            if error.status_code in _TIMEOUT_STATUSES:
                return RetryImmediately()
            if error.status_code in _THROTTLED_STATUSES:
                return RetryAfterBackoff(self.backoff.delay_for(failures))
            return Abort(_client_abort_reason(error.status_code), error)

        return Abort("Watch response could not be decoded", error)


def _client_abort_reason(status_code: Optional[int]) -> str:
    if status_code in (404, 410):
        return "Watch target no longer exists"
    if status_code in (401, 403):
        return "Watch request was not authorized"
    if status_code == 400:
        return "Watch request was rejected as malformed"
    return f"Watch request failed with HTTP {status_code}"
