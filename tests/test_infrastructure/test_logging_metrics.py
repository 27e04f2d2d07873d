"""
Test infrastructure components: logging, metrics, retry, timeout, ids, clock.

These tests verify the observability and resilience plumbing that every
workflow relies on.
"""

import asyncio
import uuid
from datetime import datetime, timezone

import httpx
import pytest
import structlog

from sourcing_governance.event.lifecycle import LifecycleAction, transition
from sourcing_governance.event.models import EventStatus
from sourcing_governance.kernel.errors import RemoteTimeout
from sourcing_governance.kernel.ids import generate_id
from sourcing_governance.kernel.logging import (
    LogOperation,
    configure_logging,
    get_correlation_id,
    get_logger,
    is_production,
    redact_context,
    set_correlation_id,
)
from sourcing_governance.kernel.metrics import (
    modification_requests_total,
    transitions_total,
)
from sourcing_governance.kernel.retry import is_transient_http_error, transient_http_retrying
from sourcing_governance.kernel.time import TestTimeProvider
from sourcing_governance.kernel.timeout import remote_call_timeout
from tests.helpers import TEST_NOW, make_event


def _status_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://authority.test/brfq/rfq-001/pause")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError("failed", request=request, response=response)


class TestLoggingFramework:
    """Test structured logging framework."""

    def test_configure_logging_console(self) -> None:
        """Test logging configuration for console output."""
        configure_logging(json_output=False, log_level="INFO")
        logger = get_logger(__name__)
        assert logger is not None

    def test_configure_logging_json(self) -> None:
        """Test logging configuration for JSON output."""
        configure_logging(json_output=True, log_level="DEBUG")
        logger = get_logger(__name__)
        assert logger is not None

    def test_correlation_id(self) -> None:
        """Test correlation ID context management."""
        cid = get_correlation_id()
        assert cid is not None
        assert len(cid) > 0

        custom_id = "test-correlation-123"
        set_correlation_id(custom_id)
        assert get_correlation_id() == custom_id

    def test_redact_context(self) -> None:
        """Test that free-text fields never reach the logs."""
        redacted = redact_context(
            {"justification": "best price", "note": "call me", "event_id": "rfq-001"}
        )

        assert redacted == {
            "justification": "***REDACTED***",
            "note": "***REDACTED***",
            "event_id": "rfq-001",
        }

    def test_is_production(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "Production")
        assert is_production()

        monkeypatch.delenv("ENVIRONMENT")
        assert not is_production()

    def test_log_operation_context_manager(self) -> None:
        """Test LogOperation context manager."""
        configure_logging(json_output=False, log_level="INFO")
        logger = get_logger(__name__)

        # Should not raise exception
        with LogOperation(logger, "test_operation", event_id="rfq-001"):
            pass

    def test_log_operation_binds_redacted_context(self) -> None:
        """Nested logs see the operation and its redacted context, only inside the block."""
        logger = get_logger(__name__)

        with LogOperation(logger, "submit_modification", event_id="rfq-001", note="urgent"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["operation"] == "submit_modification"
            assert bound["event_id"] == "rfq-001"
            assert bound["note"] == "***REDACTED***"

        assert "operation" not in structlog.contextvars.get_contextvars()

    def test_log_operation_with_exception(self) -> None:
        """Test LogOperation logs errors and lets them propagate."""
        configure_logging(json_output=False, log_level="INFO")
        logger = get_logger(__name__)

        with pytest.raises(ValueError):
            with LogOperation(logger, "failing_operation", justification="secret"):
                raise ValueError("Test error")


class TestMetrics:
    """Test Prometheus metrics collection."""

    def test_transitions_metric(self) -> None:
        """Test transitions_total is incremented per applied transition."""
        counter = transitions_total.labels(action="PAUSE", to_status="PAUSED")
        before = counter._value.get()

        transition(make_event(), LifecycleAction.PAUSE, TEST_NOW)

        assert counter._value.get() == before + 1

    def test_noop_transition_is_not_counted(self) -> None:
        counter = transitions_total.labels(action="PAUSE", to_status="PAUSED")
        before = counter._value.get()

        transition(make_event(status=EventStatus.PAUSED), LifecycleAction.PAUSE, TEST_NOW)

        assert counter._value.get() == before

    def test_modification_outcome_labels_exist(self) -> None:
        for outcome in ("submitted", "no_changes", "cancelled"):
            assert modification_requests_total.labels(outcome=outcome)._value.get() >= 0


class TestRetryLogic:
    """Test retry logic with exponential backoff."""

    @pytest.mark.parametrize("status_code", [429, 500, 502, 503, 504])
    def test_server_errors_are_transient(self, status_code: int) -> None:
        assert is_transient_http_error(_status_error(status_code))

    @pytest.mark.parametrize("status_code", [400, 401, 404, 409, 422])
    def test_client_errors_are_not_transient(self, status_code: int) -> None:
        assert not is_transient_http_error(_status_error(status_code))

    def test_transport_errors_are_transient(self) -> None:
        assert is_transient_http_error(httpx.ConnectError("connection refused"))
        assert not is_transient_http_error(ValueError("not http"))

    @pytest.mark.asyncio
    async def test_retrying_recovers_after_transient_failure(self) -> None:
        """Test a transient failure followed by success."""
        call_count = 0

        async for attempt in transient_http_retrying(max_attempts=3, min_wait_ms=1, max_wait_ms=2):
            with attempt:
                call_count += 1
                if call_count < 2:
                    raise httpx.ConnectError("connection reset")

        assert call_count == 2  # Failed once, succeeded on retry

    @pytest.mark.asyncio
    async def test_retrying_gives_up_and_reraises(self) -> None:
        call_count = 0

        with pytest.raises(httpx.HTTPStatusError):
            async for attempt in transient_http_retrying(max_attempts=2, min_wait_ms=1, max_wait_ms=2):
                with attempt:
                    call_count += 1
                    raise _status_error(503)

        assert call_count == 2

    @pytest.mark.asyncio
    async def test_non_transient_error_is_not_retried(self) -> None:
        call_count = 0

        with pytest.raises(httpx.HTTPStatusError):
            async for attempt in transient_http_retrying(max_attempts=3, min_wait_ms=1, max_wait_ms=2):
                with attempt:
                    call_count += 1
                    raise _status_error(404)

        assert call_count == 1


class TestTimeoutHandling:
    """Test timeout handling."""

    @pytest.mark.asyncio
    async def test_timeout_context_success(self) -> None:
        """Test timeout context with fast operation."""
        async with remote_call_timeout(1, "test_operation"):
            await asyncio.sleep(0)

    @pytest.mark.asyncio
    async def test_timeout_context_timeout(self) -> None:
        """Test timeout context raises RemoteTimeout."""
        with pytest.raises(RemoteTimeout) as exc_info:
            async with remote_call_timeout(0.01, "slow_operation"):
                await asyncio.sleep(1)

        assert exc_info.value.operation == "slow_operation"
        assert exc_info.value.seconds == 0.01


class TestIdsAndTime:
    """Test id generation and the frozen clock."""

    def test_generated_ids_are_version_7(self) -> None:
        value = uuid.UUID(generate_id())

        assert value.version == 7
        assert value.variant == uuid.RFC_4122

    def test_generated_ids_are_unique(self) -> None:
        assert len({generate_id() for _ in range(100)}) == 100

    def test_test_clock_advances(self) -> None:
        clock = TestTimeProvider(datetime(2025, 1, 15, 12, 0, 0))

        assert clock.now().tzinfo == timezone.utc
        assert clock.advance(days=1, hours=2) == datetime(2025, 1, 16, 14, 0, 0, tzinfo=timezone.utc)
        assert clock.now() == datetime(2025, 1, 16, 14, 0, 0, tzinfo=timezone.utc)
