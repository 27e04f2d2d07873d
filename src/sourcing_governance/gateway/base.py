"""
Gateway contract for the remote approval authority

The approval authority persists events, evaluates and records awards, and
delivers notifications. This package never talks to it directly; workflows
depend on the ProcurementGateway protocol and adapters implement it.

Every method raises RemoteCallError (or a subclass) on failure and nothing
else.
"""

from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from sourcing_governance.event.models import AwardRecord


class ModificationReceipt(BaseModel):
    """
    Answer to a modification request submission

    Attributes:
        created: Whether a request was recorded
        resume: The authority asks the client to resume the event right away
        request_id: Remote identifier of the recorded request
    """

    created: bool = True
    resume: bool = False
    request_id: str | None = None

    model_config = {"frozen": True}


class AwardDecision(BaseModel):
    """
    Answer to an award initiation

    Attributes:
        approved: True when the award was finalized without escalation
        award: Award record as stored remotely (optional)
        message: Human-readable outcome
        warnings: Reasons the authority attached (e.g. triggered rules)
        award_id: Remote award identifier
    """

    approved: bool
    award: AwardRecord | None = None
    message: str = ""
    warnings: list[str] = Field(default_factory=list)
    award_id: str | None = None

    model_config = {"frozen": True}


@runtime_checkable
class ProcurementGateway(Protocol):
    """Async port to the remote approval authority"""

    async def pause_event(self, event_id: str, reason_id: str | None = None) -> None:
        """Suspend bidding on an event"""
        ...

    async def resume_event(self, event_id: str) -> None:
        """Resume bidding on a paused event"""
        ...

    async def fetch_award_rules(self) -> Any:
        """Fetch the award workflow configuration (list, document, JSON text or None)"""
        ...

    async def submit_modification_request(
        self, event_id: str, payload: dict[str, Any]
    ) -> ModificationReceipt:
        """Record a modification request for approval"""
        ...

    async def initiate_award(self, event_id: str, payload: dict[str, Any]) -> AwardDecision:
        """Submit a proposed award"""
        ...

    async def send_notification(self, kind: str, payload: dict[str, Any]) -> None:
        """Deliver a notification (award.winners, award.losers, award.internal, ...)"""
        ...
