"""
Structured logging for Sourcing Governance.

Everything logs through structlog with key/value context. Context that
belongs to an operator action (correlation id, event id, operation) lives in
structlog's contextvars, so the remote-call logs issued deep inside a
workflow carry the same keys as the workflow's own start/finish lines.

Free-text fields (justifications, notes) and contact data are redacted
before rendering.
"""

import logging
import os
import secrets
import sys
import time
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, bound_contextvars, get_contextvars

CORRELATION_KEY = "correlation_id"

# Free-text and contact fields that must not leak into logs
REDACTED_FIELDS = frozenset(
    {
        "justification",
        "note",
        "requested_by",
        "email",
        "password",
        "token",
        "secret",
        "api_key",
    }
)

REDACTED = "***REDACTED***"


def get_correlation_id() -> str:
    """Return the correlation id of the current action, starting one if needed"""
    cid = get_contextvars().get(CORRELATION_KEY)
    if not cid:
        cid = secrets.token_urlsafe(16)
        bind_contextvars(**{CORRELATION_KEY: cid})
    return cid


def set_correlation_id(correlation_id: str) -> None:
    """Continue an action started elsewhere (e.g. an id received from an API gateway)"""
    bind_contextvars(**{CORRELATION_KEY: correlation_id})


def redact_context(context: dict[str, Any]) -> dict[str, Any]:
    """
    Replace the values of sensitive keys.

    Example:
        >>> redact_context({"justification": "best price", "event_id": "rfq-001"})
        {'justification': '***REDACTED***', 'event_id': 'rfq-001'}
    """
    return {key: REDACTED if key in REDACTED_FIELDS else value for key, value in context.items()}


def _correlate(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault(CORRELATION_KEY, get_correlation_id())
    return event_dict


def _redact(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    return redact_context(event_dict)


def configure_logging(
    *,
    json_output: bool = False,
    log_level: str = "INFO",
) -> None:
    """
    Configure structured logging.

    Args:
        json_output: JSON lines (production) instead of console rendering (development)
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
    """
    level = getattr(logging, log_level.upper())

    # stderr keeps the CLI's stdout machine-readable
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _correlate,
        _redact,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors += [structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger (name is typically __name__)"""
    return structlog.get_logger(name)


def is_production() -> bool:
    """True when ENVIRONMENT is 'production' (case-insensitive)"""
    return os.getenv("ENVIRONMENT", "development").lower() == "production"


class LogOperation:
    """
    Log the start and outcome of a workflow step, with its duration

    While the block runs, the operation name and context are bound to
    structlog's contextvars, so nested logs (remote calls, transitions)
    are attributed to the step. Exceptions are logged and re-raised.

    Example:
        with LogOperation(logger, "initiate_award", event_id="rfq-001"):
            decision = await caller.hard(...)
    """

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        operation: str,
        **context: Any,
    ) -> None:
        self.logger = logger
        self.operation = operation
        self.context = redact_context(context)
        self._bound: Any = None
        self._started = 0.0

    def __enter__(self) -> "LogOperation":
        self._bound = bound_contextvars(operation=self.operation, **self.context)
        self._bound.__enter__()
        self._started = time.perf_counter()
        self.logger.info(f"{self.operation} started")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        duration_ms = round((time.perf_counter() - self._started) * 1000, 2)
        try:
            if exc_type is None:
                self.logger.info(f"{self.operation} completed", duration_ms=duration_ms)
            else:
                # Stack traces only outside production
                self.logger.error(
                    f"{self.operation} failed",
                    duration_ms=duration_ms,
                    error=str(exc_val),
                    error_type=exc_type.__name__,
                    exc_info=not is_production(),
                )
        finally:
            self._bound.__exit__(None, None, None)
