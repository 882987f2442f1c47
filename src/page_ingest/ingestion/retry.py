"""Generic bounded-retry helper with pluggable backoff."""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Backoff = Callable[[int], float]


def linear_backoff(base_seconds: float) -> Backoff:
    """Delay of ``base_seconds * attempt`` after failed *attempt* (1-based)."""
    if base_seconds < 0:
        raise ValueError(f"base_seconds must be >= 0, got {base_seconds}")

    def _delay(attempt: int) -> float:
        return base_seconds * attempt

    return _delay


def retry_call(
    func: Callable[[], T],
    *,
    max_attempts: int,
    backoff: Backoff,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Callable[[int, BaseException, float], None] | None = None,
) -> T:
    """Call *func* until it succeeds or *max_attempts* is exhausted.

    Parameters
    ----------
    func:
        Zero-argument callable to invoke.
    max_attempts:
        Upper bound on calls to *func*; must be at least 1.
    backoff:
        Maps the number of the attempt that just failed to a delay in seconds.
    retry_on:
        Exception types that trigger a retry.  Anything else propagates at once.
    sleep:
        Blocking delay function, injectable for tests.
    on_retry:
        Optional hook called as ``on_retry(attempt, exc, delay)`` before sleeping.

    Returns
    -------
    T
        Whatever *func* returned on its first successful call.

    Raises
    ------
    BaseException
        The exception from the final attempt, unchanged.  No delay follows it.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

    attempt = 1
    while True:
        try:
            return func()
        except retry_on as exc:
            if attempt >= max_attempts:
                raise
            delay = backoff(attempt)
            if on_retry is not None:
                on_retry(attempt, exc, delay)
            else:
                logger.warning("Attempt %d/%d failed (%s); retrying in %.1fs",
                               attempt, max_attempts, exc, delay)
            sleep(delay)
            attempt += 1
