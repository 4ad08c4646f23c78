"""Retry logic with exponential backoff.

This module provides:
- retry_with_backoff: Bounded exponential backoff retry
- backoff_delays: The wait schedule a given policy produces
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from typing import Any

from alsync.client.api import APIError

logger = logging.getLogger(__name__)

# Default retry configuration
DEFAULT_MAX_RETRIES = 5
DEFAULT_INITIAL_BACKOFF = 0.4  # seconds
DEFAULT_MAX_BACKOFF = 5.0  # seconds
DEFAULT_BACKOFF_MULTIPLIER = 1.8

FailedAttemptCallback = Callable[[int, Exception], None]


def backoff_delays(
    max_retries: int = DEFAULT_MAX_RETRIES,
    initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
    max_backoff: float = DEFAULT_MAX_BACKOFF,
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
) -> Iterator[float]:
    """Yield the wait before each retry."""
    backoff = initial_backoff
    for _ in range(max_retries):
        yield min(backoff, max_backoff)
        backoff *= backoff_multiplier


def retry_with_backoff(
    func: Callable[[], Any],
    max_retries: int = DEFAULT_MAX_RETRIES,
    initial_backoff: float = DEFAULT_INITIAL_BACKOFF,
    max_backoff: float = DEFAULT_MAX_BACKOFF,
    backoff_multiplier: float = DEFAULT_BACKOFF_MULTIPLIER,
    retryable_exceptions: tuple[type[Exception], ...] = (APIError,),
    on_failed_attempt: FailedAttemptCallback | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Any:
    """Execute a function with exponential backoff retry.

    Args:
        func: Function to execute.
        max_retries: Maximum number of retry attempts.
        initial_backoff: Initial backoff time in seconds.
        max_backoff: Maximum backoff time in seconds.
        backoff_multiplier: Multiplier for each retry.
        retryable_exceptions: Tuple of exception types to retry on.
        on_failed_attempt: Called with (attempt number, error) after every
            failed attempt, including the last one.
        sleep: Function used to wait between attempts.

    Returns:
        Result of the function.

    Raises:
        The last exception if all retries fail.
    """
    delays = backoff_delays(max_retries, initial_backoff, max_backoff, backoff_multiplier)

    for attempt in range(1, max_retries + 2):
        try:
            return func()
        except retryable_exceptions as e:
            if on_failed_attempt:
                on_failed_attempt(attempt, e)

            if attempt > max_retries:
                logger.debug(f"All {max_retries} retries failed: {e}")
                raise

            backoff = next(delays)
            # Callers with a callback report failures themselves
            log = logger.debug if on_failed_attempt else logger.warning
            log(
                f"Attempt {attempt}/{max_retries + 1} failed: {e}. "
                f"Retrying in {backoff:.1f}s..."
            )
            sleep(backoff)

    raise RuntimeError("Unexpected retry loop exit")
