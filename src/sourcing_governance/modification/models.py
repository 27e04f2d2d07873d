"""
Modification Domain Models - editing a live event under governance
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from sourcing_governance.event.models import EventStatus, ModificationSnapshot, ProcurementEvent
from sourcing_governance.kernel.errors import SessionClosed
from sourcing_governance.kernel.remote import SoftFailure


class FieldChange(BaseModel):
    """
    Before/after values of one changed field

    Serialized as {"from": ..., "to": ...}; `from` is a Python keyword, so
    the attribute is `from_`.
    """

    from_: Any = Field(default=None, alias="from")
    to: Any = None

    model_config = {"frozen": True, "populate_by_name": True}


class ModificationRequest(BaseModel):
    """
    Request to apply edits made while an event was paused

    Only created for a non-empty diff.

    Attributes:
        event_id: Event the edits apply to
        requested_by: Operator submitting the edits
        requested_at: Submission time
        requested_fields: Changed field names, in watch-list order
        summary: field -> FieldChange(from_, to)
        note: Free-text note for the approver
        request_id: Remote identifier once recorded
    """

    event_id: str
    requested_by: str
    requested_at: datetime
    requested_fields: list[str]
    summary: dict[str, FieldChange]
    note: str = ""
    request_id: str | None = None

    model_config = {"frozen": True}

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready body for the approval authority"""
        return self.model_dump(mode="json", by_alias=True, exclude={"request_id"})


class ModificationSession(BaseModel):
    """
    In-progress editing session returned by enter_modification

    Attributes:
        session_id: Local session identifier
        event: Working copy of the event (status MODIFYING while open)
        snapshot: Pre-edit values, restored on cancel
        prior_status: Status before entering (APPROVED for a live event, or PAUSED)
        paused_by_session: Entering paused a live event, so leaving resumes it
        warning: Pause failure on entry, shown as a dismissible warning
        opened_at: When the session started
        closed: Session was cancelled or submitted
        cancelled: Cancel was requested; in-flight results are disregarded
    """

    session_id: str
    event: ProcurementEvent
    snapshot: ModificationSnapshot
    prior_status: EventStatus
    paused_by_session: bool = False
    warning: SoftFailure | None = None
    opened_at: datetime
    closed: bool = False
    cancelled: bool = False

    def ensure_open(self) -> None:
        """
        Raises:
            SessionClosed: If the session was already cancelled or submitted
        """
        if self.closed:
            raise SessionClosed(self.event.id)

    def edit(self, **changes: Any) -> ProcurementEvent:
        """
        Apply local edits to the working copy

        Returns:
            The updated working copy
        """
        self.ensure_open()
        self.event = self.event.with_changes(**changes)
        return self.event


class ExitOutcome(str, Enum):
    """How a modification session ended"""

    CANCELLED = "CANCELLED"  # Snapshot restored
    NO_CHANGES = "NO_CHANGES"  # Empty diff, no request created
    SUBMITTED = "SUBMITTED"  # Modification request recorded


class ExitResult(BaseModel):
    """
    Result of leaving a modification session

    Attributes:
        outcome: Cancelled, no changes or submitted
        event: Event after leaving (APPROVED when resumed, else PAUSED)
        request: The recorded modification request (SUBMITTED only)
        resumed: Event was resumed remotely
        warnings: Best-effort failures (e.g. resume failed)
    """

    outcome: ExitOutcome
    event: ProcurementEvent
    request: ModificationRequest | None = None
    resumed: bool = False
    warnings: list[SoftFailure] = Field(default_factory=list)

    model_config = {"frozen": True}
