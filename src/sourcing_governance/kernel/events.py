"""
Audit event model

Every locally applied lifecycle transition is recorded as an immutable audit
event. The remote authority stays the source of truth; these records explain
how the local optimistic state got where it is.

Fun fact: Procurement audit trails predate computers by centuries - Venetian
arsenal clerks logged every timber purchase in bound ledgers that still survive.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class Event(BaseModel):
    """
    Base audit event

    Attributes:
        event_id: Unique audit entry identifier (UUIDv7 for time-ordering)
        stream_id: Procurement event the entry belongs to
        event_type: What happened: 'StatusChanged', 'ModificationRequested', ...
        occurred_at: UTC timestamp of the local transition
        actor_id: Operator who triggered it (None for system actions)
        payload: Entry-specific data (JSON-serializable)
        version: Position in the stream (monotonically increasing)
    """

    event_id: str = Field(..., description="Unique audit entry identifier")
    stream_id: str = Field(..., description="Procurement event identifier")
    event_type: str = Field(..., description="Type of audit entry")
    occurred_at: datetime = Field(..., description="UTC timestamp of the transition")
    actor_id: str | None = Field(default=None, description="Triggering operator")
    payload: dict[str, Any] = Field(default_factory=dict, description="Entry data")
    version: int = Field(..., ge=1, description="Stream version after this entry")

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "event_id": "01908e9a-3b87-7000-8000-123456789abc",
                    "stream_id": "rfq-001",
                    "event_type": "StatusChanged",
                    "occurred_at": "2025-01-15T10:30:00Z",
                    "actor_id": "buyer-alice",
                    "payload": {"action": "PAUSE", "from": "APPROVED", "to": "PAUSED"},
                    "version": 3,
                }
            ]
        },
    }


def create_event(
    *,
    event_id: str,
    stream_id: str,
    event_type: str,
    occurred_at: datetime,
    version: int,
    actor_id: str | None = None,
    payload: dict[str, Any] | None = None,
) -> Event:
    """
    Factory function for creating audit events with all required fields
    """
    return Event(
        event_id=event_id,
        stream_id=stream_id,
        event_type=event_type,
        occurred_at=occurred_at,
        actor_id=actor_id,
        payload=payload or {},
        version=version,
    )
