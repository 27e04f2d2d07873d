"""
Remote call boundary

Workflows never talk to a gateway directly; they go through RemoteCaller,
which applies the time budget, logs, counts, and converts failures into one
of two kinds:

- soft: best-effort calls (pause before editing, resume after, rules fetch,
  notifications). Failures come back as a SoftFailure value.
- hard: intentional operator actions (explicit pause/resume, award
  initiation, modification submission). Failures raise RemoteHardFailure.
"""

import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pydantic import BaseModel

from sourcing_governance.kernel.errors import RemoteCallError, RemoteHardFailure
from sourcing_governance.kernel.logging import get_logger
from sourcing_governance.kernel.metrics import remote_call_duration_seconds, remote_calls_total
from sourcing_governance.kernel.timeout import REMOTE_CALL_TIMEOUT, remote_call_timeout

logger = get_logger(__name__)

T = TypeVar("T")


class SoftFailure(BaseModel):
    """
    Non-fatal remote failure surfaced as advisory text

    Attributes:
        operation: Gateway operation that failed (e.g. "pause_event")
        message: Human-readable warning for a dismissible banner
        error_type: Exception class name, for logs and tests
    """

    operation: str
    message: str
    error_type: str

    model_config = {"frozen": True}


class RemoteCaller:
    """
    Executes gateway calls with a bounded timeout and failure classification
    """

    def __init__(self, timeout_seconds: float = REMOTE_CALL_TIMEOUT) -> None:
        self.timeout_seconds = timeout_seconds

    async def _timed(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        start = time.perf_counter()
        try:
            async with remote_call_timeout(self.timeout_seconds, operation):
                return await call()
        finally:
            remote_call_duration_seconds.labels(operation=operation).observe(
                time.perf_counter() - start
            )

    async def soft(
        self,
        operation: str,
        event_id: str,
        call: Callable[[], Awaitable[T]],
        warning: str | None = None,
    ) -> tuple[T | None, SoftFailure | None]:
        """
        Run a best-effort call

        Any failure is logged and returned; nothing is raised.

        Args:
            operation: Gateway operation name
            event_id: Event the call concerns (for logs)
            call: Zero-argument coroutine factory performing the call
            warning: Advisory text to show instead of the raw error

        Returns:
            (result, None) on success, (None, SoftFailure) on failure
        """
        try:
            result = await self._timed(operation, call)
        except Exception as exc:
            # Any failure, including a timeout, degrades to a warning
            remote_calls_total.labels(operation=operation, outcome="soft_failure").inc()
            logger.warning(
                "Best-effort remote call failed",
                operation=operation,
                event_id=event_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return None, SoftFailure(
                operation=operation,
                message=warning or str(exc),
                error_type=type(exc).__name__,
            )

        remote_calls_total.labels(operation=operation, outcome="success").inc()
        logger.debug("Remote call succeeded", operation=operation, event_id=event_id)
        return result, None

    async def hard(
        self,
        operation: str,
        event_id: str,
        call: Callable[[], Awaitable[T]],
        action: str | None = None,
    ) -> T:
        """
        Run an intentional call that must succeed or report a clear failure

        Args:
            operation: Gateway operation name
            event_id: Event the call concerns
            call: Zero-argument coroutine factory performing the call
            action: Verb used in the user-visible message (defaults to operation)

        Returns:
            Whatever the gateway returned

        Raises:
            RemoteHardFailure: If the gateway raised RemoteCallError (incl. timeout)
        """
        try:
            result = await self._timed(operation, call)
        except RemoteCallError as exc:
            remote_calls_total.labels(operation=operation, outcome="hard_failure").inc()
            logger.error(
                "Remote call failed",
                operation=operation,
                event_id=event_id,
                error=str(exc),
                status_code=exc.status_code,
            )
            raise RemoteHardFailure(action or operation, event_id, str(exc)) from exc

        remote_calls_total.labels(operation=operation, outcome="success").inc()
        logger.info("Remote call succeeded", operation=operation, event_id=event_id)
        return result
