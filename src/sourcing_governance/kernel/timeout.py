"""
Timeout handling for remote calls.

Every remote call runs under a bounded time budget. Expiry is reported as a
RemoteTimeout for that single call; the surrounding workflow decides whether
it is a soft or a hard failure.
"""

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sourcing_governance.kernel.errors import RemoteTimeout
from sourcing_governance.kernel.logging import get_logger

logger = get_logger(__name__)

REMOTE_CALL_TIMEOUT = 10.0  # seconds


@asynccontextmanager
async def remote_call_timeout(
    seconds: float = REMOTE_CALL_TIMEOUT,
    operation_name: str = "remote_call",
) -> AsyncGenerator[None, None]:
    """
    Async context manager that raises RemoteTimeout if the body exceeds its budget.

    Args:
        seconds: Maximum seconds to allow for the call
        operation_name: Name of operation for logging

    Raises:
        RemoteTimeout: If the call exceeds the timeout

    Example:
        async with remote_call_timeout(10, "pause_event"):
            await gateway.pause_event(event_id)
    """
    try:
        async with asyncio.timeout(seconds):
            yield
    except TimeoutError as exc:
        logger.error(
            "Remote call exceeded timeout",
            operation=operation_name,
            timeout_seconds=seconds,
        )
        raise RemoteTimeout(operation_name, seconds) from exc
