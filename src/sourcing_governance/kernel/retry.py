"""
Retry logic with exponential backoff for transient remote failures.

Only transport-level problems are retried (connection resets, 429 and 5xx
responses). A 4xx answer from the approval authority is a decision, not a
glitch, and is never retried.
"""

from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from sourcing_governance.kernel.logging import get_logger

logger = get_logger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def is_transient_http_error(exc: BaseException) -> bool:
    """
    Decide whether an httpx failure is worth retrying

    Args:
        exc: Exception raised by the HTTP client

    Returns:
        True for transport errors and retryable status codes
    """
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(exc, httpx.TransportError)


def _log_before_sleep(retry_state: Any) -> None:
    logger.warning(
        "Transient remote error detected, retrying",
        attempt=retry_state.attempt_number,
        exception=str(retry_state.outcome.exception()) if retry_state.outcome else None,
    )


def transient_http_retrying(
    max_attempts: int = 3,
    min_wait_ms: int = 100,
    max_wait_ms: int = 2000,
) -> AsyncRetrying:
    """
    Build an async retry controller for transient HTTP failures.

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        min_wait_ms: Minimum wait time in milliseconds (default: 100)
        max_wait_ms: Maximum wait time in milliseconds (default: 2000)

    Returns:
        AsyncRetrying usable as ``async for attempt in ...``

    Example:
        async for attempt in transient_http_retrying():
            with attempt:
                response = await client.post(...)
                response.raise_for_status()
    """
    return AsyncRetrying(
        retry=retry_if_exception(is_transient_http_error),
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=1,
            min=min_wait_ms / 1000.0,
            max=max_wait_ms / 1000.0,
        ),
        before_sleep=_log_before_sleep,
        reraise=True,
    )
