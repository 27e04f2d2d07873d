"""
Tests for the HTTP gateway

Uses httpx.MockTransport so no network is involved: each test installs a
handler that plays the approval authority.
"""

import json
from collections.abc import Callable

import httpx
import pytest

from sourcing_governance.gateway.base import ProcurementGateway
from sourcing_governance.gateway.http import HttpProcurementGateway
from sourcing_governance.kernel.errors import RemoteCallError
from sourcing_governance.kernel.policy import GovernancePolicy

BASE_URL = "https://authority.test/api"


def make_gateway(
    handler: Callable[[httpx.Request], httpx.Response], attempts: int = 3
) -> HttpProcurementGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    return HttpProcurementGateway(
        BASE_URL, client=client, retry_attempts=attempts, min_wait_ms=1, max_wait_ms=2
    )


def test_satisfies_gateway_protocol() -> None:
    assert isinstance(HttpProcurementGateway(BASE_URL), ProcurementGateway)


@pytest.mark.asyncio
async def test_pause_posts_reason_id() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True})

    async with make_gateway(handler) as gateway:
        await gateway.pause_event("rfq-001", "supplier-query")

    [request] = seen
    assert request.method == "POST"
    assert request.url.path == "/api/brfq/rfq-001/pause"
    assert json.loads(request.content) == {"reasonId": "supplier-query"}


@pytest.mark.asyncio
async def test_resume_posts_to_resume_endpoint() -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(204)

    async with make_gateway(handler) as gateway:
        await gateway.resume_event("rfq-001")

    assert paths == ["/api/brfq/rfq-001/resume"]


@pytest.mark.asyncio
async def test_transient_errors_are_retried() -> None:
    """Test that a 503 followed by success counts as success"""
    attempts: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        if len(attempts) < 3:
            return httpx.Response(503, json={"error": "busy"})
        return httpx.Response(200, json={"success": True})

    async with make_gateway(handler) as gateway:
        await gateway.resume_event("rfq-001")

    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_persistent_server_error_becomes_remote_call_error() -> None:
    attempts: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        return httpx.Response(502, json={"message": "upstream down"})

    async with make_gateway(handler, attempts=2) as gateway:
        with pytest.raises(RemoteCallError) as exc_info:
            await gateway.pause_event("rfq-001", "supplier-query")

    assert len(attempts) == 2
    assert exc_info.value.status_code == 502
    assert "upstream down" in str(exc_info.value)


@pytest.mark.asyncio
async def test_gateway_from_policy_uses_policy_retry_attempts() -> None:
    attempts: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        return httpx.Response(503, json={"error": "busy"})

    policy = GovernancePolicy(remote_retry_attempts=4, remote_timeout_seconds=5.0)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=BASE_URL)
    gateway = HttpProcurementGateway.from_policy(
        BASE_URL, policy, client=client, min_wait_ms=1, max_wait_ms=2
    )

    assert gateway.timeout_seconds == 5.0
    async with gateway:
        with pytest.raises(RemoteCallError):
            await gateway.resume_event("rfq-001")

    assert len(attempts) == 4


@pytest.mark.asyncio
async def test_client_errors_are_not_retried() -> None:
    """Test that a 4xx is a decision, not a glitch"""
    attempts: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        return httpx.Response(409, json={"error": "Event is not live"})

    async with make_gateway(handler) as gateway:
        with pytest.raises(RemoteCallError) as exc_info:
            await gateway.pause_event("rfq-001", "supplier-query")

    assert len(attempts) == 1
    assert exc_info.value.status_code == 409
    assert str(exc_info.value) == "pause_event failed: Event is not live"


@pytest.mark.asyncio
async def test_transport_errors_become_remote_call_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with make_gateway(handler, attempts=2) as gateway:
        with pytest.raises(RemoteCallError) as exc_info:
            await gateway.resume_event("rfq-001")

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_fetch_award_rules_returns_document() -> None:
    config = {"rules": [{"type": "value_threshold", "threshold": 100}]}

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert request.url.path == "/api/admin/workflow/award"
        return httpx.Response(200, json=config)

    async with make_gateway(handler) as gateway:
        assert await gateway.fetch_award_rules() == config


@pytest.mark.asyncio
async def test_fetch_award_rules_empty_body_is_none() -> None:
    async with make_gateway(lambda request: httpx.Response(200)) as gateway:
        assert await gateway.fetch_award_rules() is None


@pytest.mark.asyncio
async def test_modification_request_receipt_from_nested_data() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/brfq/rfq-001/modification-request"
        return httpx.Response(201, json={"success": True, "data": {"id": 42, "resume": True}})

    async with make_gateway(handler) as gateway:
        receipt = await gateway.submit_modification_request("rfq-001", {"note": "x"})

    assert receipt.created
    assert receipt.resume
    assert receipt.request_id == "42"


@pytest.mark.asyncio
async def test_modification_request_receipt_defaults() -> None:
    async with make_gateway(lambda request: httpx.Response(204)) as gateway:
        receipt = await gateway.submit_modification_request("rfq-001", {})

    assert receipt.created
    assert not receipt.resume
    assert receipt.request_id is None


@pytest.mark.asyncio
async def test_initiate_award_parses_decision() -> None:
    sent: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={
                "approved": False,
                "message": "Approval workflow started.",
                "warnings": ["Estimated award value 190 exceeds threshold 100."],
                "awardId": "aw-7",
            },
        )

    async with make_gateway(handler) as gateway:
        decision = await gateway.initiate_award("rfq-001", {"selected_suppliers": ["sup-a"]})

    assert sent == [{"event_id": "rfq-001", "selected_suppliers": ["sup-a"]}]
    assert not decision.approved
    assert decision.award_id == "aw-7"
    assert decision.warnings == ["Estimated award value 190 exceeds threshold 100."]
    assert decision.award is None


@pytest.mark.asyncio
async def test_initiate_award_ignores_malformed_award_record() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"approved": True, "award": {"winners": []}})

    async with make_gateway(handler) as gateway:
        decision = await gateway.initiate_award("rfq-001", {})

    assert decision.approved
    assert decision.award is None


@pytest.mark.asyncio
async def test_initiate_award_without_decision_is_an_error() -> None:
    async with make_gateway(lambda request: httpx.Response(200, json={"ok": 1})) as gateway:
        with pytest.raises(RemoteCallError):
            await gateway.initiate_award("rfq-001", {})


@pytest.mark.asyncio
async def test_send_notification_wraps_payload() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(202)

    async with make_gateway(handler) as gateway:
        await gateway.send_notification("award.winners", {"event_id": "rfq-001"})

    assert bodies == [{"kind": "award.winners", "payload": {"event_id": "rfq-001"}}]
