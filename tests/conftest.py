"""
Pytest configuration and shared fixtures

Fun fact: The name "conftest" comes from pytest's configuration testing
framework. Files named conftest.py are automatically discovered and their
fixtures are available to all tests in the same directory and subdirectories!
"""

from datetime import datetime, timezone

import pytest

from sourcing_governance.award.workflow import AwardInitiationWorkflow
from sourcing_governance.event.models import EventStatus, ProcurementEvent
from sourcing_governance.event.projections import EventRegistry
from sourcing_governance.gateway.memory import InMemoryGateway
from sourcing_governance.governance import SourcingGovernance
from sourcing_governance.kernel.policy import GovernancePolicy
from sourcing_governance.kernel.remote import RemoteCaller
from sourcing_governance.kernel.time import TestTimeProvider
from sourcing_governance.modification.coordinator import PauseResumeCoordinator
from tests.helpers import make_event, make_quote


@pytest.fixture
def test_time() -> TestTimeProvider:
    """
    Provide a controllable time provider for deterministic tests

    Default time: 2025-01-15 12:00:00 UTC, inside the bidding window of the
    default test event.
    """
    return TestTimeProvider(datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def policy() -> GovernancePolicy:
    """Provide default governance policy with a short remote budget for tests"""
    return GovernancePolicy(remote_timeout_seconds=0.5)


@pytest.fixture
def gateway() -> InMemoryGateway:
    """Provide a fresh in-memory approval authority"""
    return InMemoryGateway()


@pytest.fixture
def caller(policy: GovernancePolicy) -> RemoteCaller:
    return RemoteCaller(policy.remote_timeout_seconds)


@pytest.fixture
def registry() -> EventRegistry:
    return EventRegistry()


@pytest.fixture
def coordinator(
    gateway: InMemoryGateway,
    policy: GovernancePolicy,
    test_time: TestTimeProvider,
    caller: RemoteCaller,
    registry: EventRegistry,
) -> PauseResumeCoordinator:
    """Provide a pause/resume coordinator wired to the in-memory gateway"""
    return PauseResumeCoordinator(gateway, policy, test_time, caller, registry)


@pytest.fixture
def award_workflow(
    gateway: InMemoryGateway,
    policy: GovernancePolicy,
    test_time: TestTimeProvider,
    caller: RemoteCaller,
) -> AwardInitiationWorkflow:
    """Provide an award workflow wired to the in-memory gateway"""
    return AwardInitiationWorkflow(gateway, policy, test_time, caller)


@pytest.fixture
def governance(
    gateway: InMemoryGateway,
    policy: GovernancePolicy,
    test_time: TestTimeProvider,
) -> SourcingGovernance:
    """Provide the façade wired to the in-memory gateway"""
    return SourcingGovernance(gateway, policy, test_time)


@pytest.fixture
def live_event() -> ProcurementEvent:
    """
    An approved event whose bidding window is open

    Quotes: sup-a quoted 100 + 50, sup-b quoted 40, sup-c (uninvited) quoted 500.
    """
    return make_event(
        quotes=[
            make_quote("sup-a", 100, 50),
            make_quote("sup-b", 40),
            make_quote("sup-c", 500),
        ],
    )


@pytest.fixture
def paused_event(live_event: ProcurementEvent) -> ProcurementEvent:
    """The live event after an operator pause"""
    return live_event.with_changes(status=EventStatus.PAUSED)
