"""Retry policies for idempotent requests."""

from __future__ import annotations

from dataclasses import dataclass

from tenacity import (
    stop_after_attempt,
    stop_after_delay,
    stop_never,
    wait_exponential,
    wait_fixed,
    wait_random,
)
from tenacity.stop import stop_base
from tenacity.wait import wait_base

# Retry ceiling used when the caller configures neither a policy nor a timeout.
DEFAULT_MAX_ELAPSED_TIME = 60.0


@dataclass(frozen=True)
class BackoffPolicy:
    """Exponential backoff with jitter, bounded by elapsed time and/or retries.

    The wait before retry *n* (1-based) is
    ``initial_interval * multiplier ** (n - 1)`` capped at ``max_interval``,
    plus up to ``jitter`` seconds of random noise added after the cap. A
    ``None`` bound never stops retrying on that axis.
    """

    initial_interval: float = 0.5
    multiplier: float = 1.5
    max_interval: float = 60.0
    jitter: float = 0.25
    max_elapsed_time: float | None = DEFAULT_MAX_ELAPSED_TIME
    max_retries: int | None = None

    @classmethod
    def constant(
        cls,
        interval: float,
        *,
        max_retries: int | None = None,
        max_elapsed_time: float | None = DEFAULT_MAX_ELAPSED_TIME,
    ) -> BackoffPolicy:
        """A policy that waits the same *interval* between every attempt."""
        return cls(
            initial_interval=interval,
            multiplier=1.0,
            max_interval=interval,
            jitter=0.0,
            max_elapsed_time=max_elapsed_time,
            max_retries=max_retries,
        )

    def wait_strategy(self) -> wait_base:
        if self.multiplier == 1.0 and self.jitter == 0.0:
            return wait_fixed(self.initial_interval)
        wait = wait_exponential(
            multiplier=self.initial_interval,
            max=self.max_interval,
            exp_base=self.multiplier,
        )
        if self.jitter:
            wait = wait + wait_random(0, self.jitter)
        return wait

    def stop_strategy(self) -> stop_base:
        stop: stop_base | None = None
        if self.max_retries is not None:
            stop = stop_after_attempt(self.max_retries + 1)
        if self.max_elapsed_time is not None:
            by_time = stop_after_delay(self.max_elapsed_time)
            stop = by_time if stop is None else stop | by_time
        return stop if stop is not None else stop_never


def get_backoff(
    policy: BackoffPolicy | None = None,
    retry_timeout: float | None = None,
) -> BackoffPolicy:
    """Pick the policy for a request.

    An explicit *policy* wins. Otherwise an exponential policy is built whose
    elapsed-time ceiling is *retry_timeout* when set, else
    :data:`DEFAULT_MAX_ELAPSED_TIME`.
    """
    if policy is not None:
        return policy
    if retry_timeout is not None:
        return BackoffPolicy(max_elapsed_time=retry_timeout)
    return BackoffPolicy()
