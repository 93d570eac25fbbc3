"""Bounded retry policy shared by all external calls."""

from __future__ import annotations

from tenacity import AsyncRetrying, stop_after_attempt, wait_random_exponential


def external_retry(max_attempts: int = 1) -> AsyncRetrying:
    """
    Retry controller for one external call.

    `max_attempts=1` means a single attempt. The last exception is re-raised
    so callers can degrade the way they normally would.
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_random_exponential(multiplier=0.5, max=8),
        reraise=True,
    )
