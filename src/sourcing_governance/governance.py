"""
SourcingGovernance - Main façade class

This is the primary interface for governing sourcing events. It wires the
lifecycle, the award workflow and the pause/resume coordinator to one
gateway, one policy and one clock, and keeps the local event cache current.

Example:
    >>> from sourcing_governance import SourcingGovernance
    >>> from sourcing_governance.gateway import InMemoryGateway
    >>> sg = SourcingGovernance(InMemoryGateway())
    >>> sg.register(event)
    >>> session = await sg.enter_modification(event.id)
    >>> session.edit(close_at=new_close)
    >>> result = await sg.submit_modification(session, requested_by="buyer-alice")
    >>> outcome = await sg.initiate_award(event.id, ["sup-a"], "Lowest compliant bid")
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sourcing_governance.award.models import AwardCheckResult, AwardOutcome
from sourcing_governance.award.workflow import AwardInitiationWorkflow, complete_award
from sourcing_governance.event.invariants import parse_event
from sourcing_governance.event.lifecycle import (
    LifecycleAction,
    allowed_actions,
    effective_status,
    transition,
)
from sourcing_governance.event.models import AwardRecord, EventStatus, ProcurementEvent
from sourcing_governance.event.projections import EventRegistry
from sourcing_governance.gateway.base import ProcurementGateway
from sourcing_governance.kernel.errors import InvalidEventData
from sourcing_governance.kernel.policy import GovernancePolicy
from sourcing_governance.kernel.remote import RemoteCaller
from sourcing_governance.kernel.time import RealTimeProvider, TimeProvider
from sourcing_governance.modification.coordinator import PauseResumeCoordinator
from sourcing_governance.modification.models import (
    ExitResult,
    ModificationRequest,
    ModificationSession,
)
from sourcing_governance.modification.requests import apply_modification, reject_modification


class SourcingGovernance:
    """
    Sourcing governance façade

    Provides a unified API for:
    - Event registration and lifecycle transitions (submit, approve, reject)
    - Operator pause/resume
    - Governed editing of live events
    - Award checks and initiation
    - Resolution of modification requests and escalated awards
    """

    def __init__(
        self,
        gateway: ProcurementGateway,
        policy: GovernancePolicy | None = None,
        time_provider: TimeProvider | None = None,
    ) -> None:
        """
        Initialize the façade

        Args:
            gateway: Port to the remote approval authority
            policy: Governance policy (uses defaults if None)
            time_provider: Time provider (uses real time if None)
        """
        self.gateway = gateway
        self.policy = policy or GovernancePolicy()
        self.time_provider = time_provider or RealTimeProvider()
        self.caller = RemoteCaller(self.policy.remote_timeout_seconds)

        self.registry = EventRegistry()
        self.coordinator = PauseResumeCoordinator(
            gateway, self.policy, self.time_provider, self.caller, self.registry
        )
        self.awards = AwardInitiationWorkflow(
            gateway, self.policy, self.time_provider, self.caller
        )

    # Event cache

    def register(self, event: ProcurementEvent | dict[str, Any]) -> ProcurementEvent:
        """Add (or replace) an event in the local cache"""
        parsed = parse_event(event)
        self.registry.put(parsed)
        return parsed

    def get(self, event_id: str) -> ProcurementEvent:
        """
        Get a cached event

        Raises:
            InvalidEventData: If the event is not registered
        """
        event = self.registry.get(event_id)
        if event is None:
            raise InvalidEventData(f"Event {event_id} is not registered")
        return event

    def reconcile(self, fresh: ProcurementEvent | dict[str, Any]) -> ProcurementEvent:
        """Overwrite the cached event with an authoritative read"""
        return self.registry.reconcile(parse_event(fresh), self.time_provider.now())

    def status(self, event_id: str) -> EventStatus:
        """Effective status (LIVE for an open approved event)"""
        return effective_status(self.get(event_id), self.time_provider.now())

    def allowed_actions(self, event_id: str) -> list[LifecycleAction]:
        """Actions that can be applied to the event right now"""
        return allowed_actions(self.get(event_id), self.time_provider.now())

    def _apply(
        self, event_id: str, action: LifecycleAction, actor_id: str | None = None
    ) -> ProcurementEvent:
        event = self.get(event_id)
        now = self.time_provider.now()
        updated = transition(event, action, now)
        self.registry.record(event, updated, action.value, now, actor_id=actor_id)
        return updated

    def submit_for_approval(self, event_id: str, actor_id: str | None = None) -> ProcurementEvent:
        """DRAFT -> PENDING_APPROVAL"""
        return self._apply(event_id, LifecycleAction.SUBMIT, actor_id)

    def approve(self, event_id: str, actor_id: str | None = None) -> ProcurementEvent:
        """PENDING_APPROVAL -> APPROVED (LIVE once open)"""
        return self._apply(event_id, LifecycleAction.APPROVE, actor_id)

    def reject(self, event_id: str, actor_id: str | None = None) -> ProcurementEvent:
        """PENDING_APPROVAL -> REJECTED"""
        return self._apply(event_id, LifecycleAction.REJECT, actor_id)

    # Operator pause/resume

    async def pause(
        self, event_id: str, reason_id: str | None, actor_id: str | None = None
    ) -> ProcurementEvent:
        """Pause a live event (hard call, reason required)"""
        return await self.coordinator.pause(self.get(event_id), reason_id, actor_id)

    async def resume(self, event_id: str, actor_id: str | None = None) -> ProcurementEvent:
        """Resume a paused event (hard call)"""
        return await self.coordinator.resume(self.get(event_id), actor_id)

    # Governed editing

    async def enter_modification(
        self, event_id: str, actor_id: str | None = None
    ) -> ModificationSession:
        """Pause (best effort) and open an edit session"""
        return await self.coordinator.enter_modification(self.get(event_id), actor_id)

    async def cancel_modification(
        self, session: ModificationSession, actor_id: str | None = None
    ) -> ExitResult:
        """Discard edits, restore the snapshot and resume when appropriate"""
        return await self.coordinator.cancel(session, actor_id)

    async def submit_modification(
        self,
        session: ModificationSession,
        edited: ProcurementEvent | None = None,
        requested_by: str = "unknown",
        note: str = "",
    ) -> ExitResult:
        """Diff the edits and submit a modification request when anything changed"""
        return await self.coordinator.submit(session, edited, requested_by, note)

    def approve_modification(
        self, request: ModificationRequest, actor_id: str | None = None
    ) -> ProcurementEvent:
        """Apply an approved modification request and reopen the event"""
        event = self.get(request.event_id)
        now = self.time_provider.now()
        updated = apply_modification(event, request, now)
        self.registry.record(
            event,
            updated,
            "APPROVE_MODIFICATION",
            now,
            actor_id=actor_id,
            payload={"request_id": request.request_id},
        )
        return updated

    def reject_modification(
        self, request: ModificationRequest, actor_id: str | None = None
    ) -> ProcurementEvent:
        """Reject a modification request and reopen the event unchanged"""
        event = self.get(request.event_id)
        now = self.time_provider.now()
        updated = reject_modification(event, request, now)
        self.registry.record(
            event,
            updated,
            "REJECT_MODIFICATION",
            now,
            actor_id=actor_id,
            payload={"request_id": request.request_id},
        )
        return updated

    # Awards

    async def check_award(
        self, event_id: str, selected_suppliers: Iterable[str]
    ) -> AwardCheckResult:
        """Evaluate award rules for a selection without submitting"""
        return await self.awards.check(self.get(event_id), selected_suppliers)

    async def initiate_award(
        self,
        event_id: str,
        selected_suppliers: Iterable[str],
        justification: str,
        requested_by: str | None = None,
    ) -> AwardOutcome:
        """Initiate an award; the cache reflects AWARDED when auto-approved"""
        event = self.get(event_id)
        outcome = await self.awards.initiate(event, selected_suppliers, justification, requested_by)
        self.registry.record(
            event,
            outcome.event,
            LifecycleAction.AWARD.value,
            self.time_provider.now(),
            actor_id=requested_by,
            payload={"outcome": outcome.kind.value, "award_id": outcome.award_id},
        )
        return outcome

    def complete_award(
        self, event_id: str, award: AwardRecord, at: datetime | None = None
    ) -> ProcurementEvent:
        """Apply an award approved by the escalated workflow"""
        event = self.get(event_id)
        now = at or self.time_provider.now()
        updated = complete_award(event, award, now)
        self.registry.record(event, updated, LifecycleAction.AWARD.value, now)
        return updated
