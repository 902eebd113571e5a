"""
Bounded retry with truncated exponential backoff.
"""

import time
from collections.abc import Callable
from typing import TypeVar

from fontsync.config.defaults import RETRY_BASE_INTERVAL, RETRY_MAX_INTERVAL
from fontsync.utils.logging import logger

R = TypeVar("R")


def backoff_schedule(
    tries: int,
    base_interval: float = RETRY_BASE_INTERVAL,
    max_interval: float = RETRY_MAX_INTERVAL,
) -> list[float]:
    """Delays slept between consecutive attempts (``tries - 1`` entries)."""
    return [
        min(max_interval, base_interval * 2**attempt)
        for attempt in range(max(1, tries) - 1)
    ]


def retry(
    operation: Callable[[int], R],
    *,
    tries: int,
    retryable: tuple[type[BaseException], ...],
    base_interval: float = RETRY_BASE_INTERVAL,
    max_interval: float = RETRY_MAX_INTERVAL,
    sleep: Callable[[float], None] = time.sleep,
) -> R:
    """
    Call operation until it returns, retrying on retryable exceptions.

    The operation receives the 1-based attempt number so it can decide
    whether an outcome is still worth a retry. On the last attempt any
    exception propagates.

    Args:
        operation: Callable taking the attempt number
        tries: Maximum number of attempts
        retryable: Exception types that trigger another attempt
        base_interval: Delay before the second attempt
        max_interval: Upper bound for any delay
        sleep: Sleep function

    Returns:
        The operation's return value
    """
    delays = backoff_schedule(tries, base_interval, max_interval)
    attempt = 1
    while True:
        try:
            return operation(attempt)
        except retryable as e:
            if attempt > len(delays):
                raise
            delay = delays[attempt - 1]
            logger.warning(f"Attempt {attempt} failed ({e}), retrying in {delay:g}s")
            sleep(delay)
            attempt += 1
