"""
Event Domain Models - the sourcing event under governance

A ProcurementEvent (RFQ/BRFQ) is an immutable value object: lifecycle
transitions return a new instance instead of mutating shared state. The
pre-edit ModificationSnapshot is an immutable value too, with a pure
restore() that puts its fields back onto an event.

Fun fact: The oldest known request for quotation is a Mesopotamian clay tablet
asking several merchants for copper prices - the bids were baked, not emailed!
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class EventStatus(str, Enum):
    """
    Event lifecycle states

    DRAFT → PENDING_APPROVAL → APPROVED (LIVE once open) → PAUSED/MODIFYING → AWARDED
                          ↓
                       REJECTED

    LIVE is derived (APPROVED and open_at <= now) and never stored.
    """

    DRAFT = "DRAFT"  # Being prepared by the buyer
    PENDING_APPROVAL = "PENDING_APPROVAL"  # Submitted, awaiting internal approval
    APPROVED = "APPROVED"  # Approved; live once the bidding window opens
    LIVE = "LIVE"  # Derived only: approved and open
    PAUSED = "PAUSED"  # Bidding suspended
    MODIFYING = "MODIFYING"  # Paused for editing, snapshot retained
    REJECTED = "REJECTED"  # Approval rejected (terminal)
    AWARDED = "AWARDED"  # Winners selected (terminal)


TERMINAL_STATUSES: frozenset[EventStatus] = frozenset(
    {EventStatus.REJECTED, EventStatus.AWARDED}
)

# Fields an operator may edit on a live event, captured by the snapshot
SNAPSHOT_FIELDS: tuple[str, ...] = (
    "title",
    "open_at",
    "close_at",
    "items",
    "negotiation_controls",
    "suppliers_selected",
    "publish_on_approval",
)


def as_utc(value: datetime | None) -> datetime | None:
    """Read a datetime without an offset as UTC so it compares with the clock"""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class QuoteLineItem(BaseModel):
    """
    One priced line of a supplier quote

    `cost` is kept as received: quotes arrive from suppliers as loosely
    typed documents, and the value calculator decides what counts as a
    usable number.
    """

    description: str | None = None
    quantity: Any = None
    cost: Any = None

    model_config = {"frozen": True, "extra": "allow"}


class Quote(BaseModel):
    """
    A supplier's quote (one revision) for an event

    Attributes:
        quote_id: Quote identifier (None for quotes built in memory)
        supplier_id: Quoting supplier
        submitted_at: When the revision was submitted
        items: Priced line items
    """

    quote_id: str | None = None
    supplier_id: str
    submitted_at: datetime | None = None
    items: list[QuoteLineItem] = Field(default_factory=list)

    model_config = {"frozen": True}


class AwardRecord(BaseModel):
    """
    Record of an award decision

    Attributes:
        winners: Awarded supplier ids (more than one = split award)
        justification: Buyer's justification for the award
        awarded_at: When the award became effective
        award_id: Remote award identifier, when the authority returned one
    """

    winners: list[str] = Field(..., min_length=1)
    justification: str
    awarded_at: datetime
    award_id: str | None = None

    model_config = {"frozen": True}


class ProcurementEvent(BaseModel):
    """
    The sourcing event under governance

    Attributes:
        id: Opaque identifier
        title: Event title
        status: Stored lifecycle state (never LIVE)
        open_at: Start of the bidding window
        close_at: End of the bidding window
        categories: Category identifiers, matched by category rules
        suppliers_invited: Suppliers invited to bid
        suppliers_selected: Suppliers selected on the event form
        items: Requested line items (loosely typed documents)
        negotiation_controls: Negotiation style ("sealed", "open", ...)
        publish_on_approval: Publish to suppliers as soon as approved
        quotes: Supplier quotes, in submission order
        award: Award record, present iff status is AWARDED
    """

    id: str
    title: str = ""
    status: EventStatus = EventStatus.DRAFT
    open_at: datetime | None = None
    close_at: datetime | None = None
    categories: list[str] = Field(default_factory=list)
    suppliers_invited: set[str] = Field(default_factory=set)
    suppliers_selected: list[str] = Field(default_factory=list)
    items: list[dict[str, Any]] = Field(default_factory=list)
    negotiation_controls: str = "sealed"
    publish_on_approval: bool = False
    quotes: list[Quote] = Field(default_factory=list)
    award: AwardRecord | None = None

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": "rfq-001",
                    "title": "Steel fasteners 2025",
                    "status": "APPROVED",
                    "open_at": "2025-01-10T09:00:00Z",
                    "close_at": "2025-02-01T17:00:00Z",
                    "categories": ["cat-hardware"],
                    "suppliers_invited": ["sup-a", "sup-b"],
                    "quotes": [
                        {"supplier_id": "sup-a", "items": [{"cost": 100}, {"cost": 50}]},
                        {"supplier_id": "sup-b", "items": [{"cost": 40}]},
                    ],
                    "award": None,
                }
            ]
        },
    }

    @field_validator("open_at", "close_at")
    @classmethod
    def _window_is_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    @field_validator("status")
    @classmethod
    def _live_is_derived(cls, value: EventStatus) -> EventStatus:
        # A stored LIVE is an approved event whose window has opened
        if value == EventStatus.LIVE:
            return EventStatus.APPROVED
        return value

    @model_validator(mode="after")
    def _award_iff_awarded(self) -> "ProcurementEvent":
        if (self.award is not None) != (self.status == EventStatus.AWARDED):
            raise ValueError(
                f"award record must be present if and only if status is AWARDED "
                f"(status={self.status.value}, award={'set' if self.award else 'missing'})"
            )
        return self

    def is_terminal(self) -> bool:
        """Check if no further transitions are possible"""
        return self.status in TERMINAL_STATUSES

    def editable_fields(self) -> dict[str, Any]:
        """Return a fresh copy of the fields captured by a modification snapshot"""
        return self.model_dump(include=set(SNAPSHOT_FIELDS))

    def with_changes(self, **changes: Any) -> "ProcurementEvent":
        """
        Return a validated copy with the given fields replaced

        Unlike model_copy(update=...), the copy is re-validated so the
        award/status invariant cannot be bypassed.
        """
        data = self.model_dump()
        data.update(changes)
        return ProcurementEvent.model_validate(data)


class ModificationSnapshot(BaseModel):
    """
    Immutable pre-edit copy of an event's editable fields

    Exactly one snapshot exists per active modification session; it is
    discarded when the session is submitted or cancelled.
    """

    event_id: str
    taken_at: datetime
    title: str = ""
    open_at: datetime | None = None
    close_at: datetime | None = None
    items: list[dict[str, Any]] = Field(default_factory=list)
    negotiation_controls: str = "sealed"
    suppliers_selected: list[str] = Field(default_factory=list)
    publish_on_approval: bool = False

    model_config = {"frozen": True}

    @field_validator("taken_at", "open_at", "close_at")
    @classmethod
    def _times_are_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    @classmethod
    def capture(cls, event: ProcurementEvent, taken_at: datetime) -> "ModificationSnapshot":
        """Capture the editable fields of an event"""
        return cls.model_validate(
            {"event_id": event.id, "taken_at": taken_at, **event.editable_fields()}
        )

    def fields(self) -> dict[str, Any]:
        """Return a fresh copy of the captured field values"""
        return self.model_dump(include=set(SNAPSHOT_FIELDS))


def restore(event: ProcurementEvent, snapshot: ModificationSnapshot) -> ProcurementEvent:
    """
    Put every snapshot field back onto the event

    Pure: returns a new event, status untouched.

    Raises:
        ValueError: If the snapshot belongs to a different event
    """
    if snapshot.event_id != event.id:
        raise ValueError(
            f"Snapshot of event {snapshot.event_id} cannot be restored onto event {event.id}"
        )
    return event.with_changes(**snapshot.fields())
