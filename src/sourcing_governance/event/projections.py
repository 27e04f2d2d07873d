"""
Event Projections - local optimistic cache of sourcing events

The remote authority owns event state. Locally we keep the latest value we
know of, plus an audit trail of the transitions applied since, so a UI or
CLI can show state immediately and reconcile when a fresh read arrives.

Fun fact: This is the same "optimistic UI" trick chat apps use - the message
shows as sent before the server agrees, and is corrected if it disagrees!
"""

from datetime import datetime
from typing import Any

from sourcing_governance.event.models import EventStatus, ProcurementEvent
from sourcing_governance.kernel.events import Event, create_event
from sourcing_governance.kernel.ids import generate_id
from sourcing_governance.kernel.logging import get_logger

logger = get_logger(__name__)


class EventRegistry:
    """
    Projection: latest known state of each event plus its audit trail

    Audit entries are appended for every local transition; reconcile()
    overwrites the cached value with an authoritative read.
    """

    def __init__(self) -> None:
        self.events: dict[str, ProcurementEvent] = {}
        self.history: dict[str, list[Event]] = {}

    def get(self, event_id: str) -> ProcurementEvent | None:
        """Get the cached event by ID"""
        return self.events.get(event_id)

    def put(self, event: ProcurementEvent) -> None:
        """Cache an event without recording a transition"""
        self.events[event.id] = event
        self.history.setdefault(event.id, [])

    def list_by_status(self, status: EventStatus) -> list[ProcurementEvent]:
        """List cached events with the given stored status"""
        return [e for e in self.events.values() if e.status == status]

    def history_of(self, event_id: str) -> list[Event]:
        """Audit trail of an event, oldest first"""
        return list(self.history.get(event_id, []))

    def _append(
        self,
        event_id: str,
        event_type: str,
        occurred_at: datetime,
        actor_id: str | None,
        payload: dict[str, Any],
    ) -> Event:
        stream = self.history.setdefault(event_id, [])
        entry = create_event(
            event_id=generate_id(),
            stream_id=event_id,
            event_type=event_type,
            occurred_at=occurred_at,
            version=len(stream) + 1,
            actor_id=actor_id,
            payload=payload,
        )
        stream.append(entry)
        return entry

    def record(
        self,
        previous: ProcurementEvent,
        updated: ProcurementEvent,
        action: str,
        occurred_at: datetime,
        actor_id: str | None = None,
        payload: dict[str, Any] | None = None,
    ) -> Event | None:
        """
        Cache the result of a local transition and audit it

        Args:
            previous: Event value before the transition
            updated: Event value after the transition
            action: Lifecycle action or workflow step that produced it
            occurred_at: When it happened
            actor_id: Operator who triggered it
            payload: Extra audit data

        Returns:
            The audit entry, or None when nothing changed
        """
        self.events[updated.id] = updated
        if previous == updated:
            return None

        return self._append(
            updated.id,
            "StatusChanged",
            occurred_at,
            actor_id,
            {
                "action": action,
                "from": previous.status.value,
                "to": updated.status.value,
                **(payload or {}),
            },
        )

    def apply_event(self, event: Event) -> None:
        """Apply an audit entry to the cached status (replay)"""
        if event.event_type not in ("StatusChanged", "Reconciled"):
            return
        cached = self.events.get(event.stream_id)
        if cached is None:
            return
        new_status = EventStatus(event.payload["to"])
        if cached.status != new_status and new_status != EventStatus.AWARDED:
            self.events[event.stream_id] = cached.with_changes(status=new_status)
        self.history.setdefault(event.stream_id, []).append(event)

    def reconcile(self, fresh: ProcurementEvent, occurred_at: datetime) -> ProcurementEvent:
        """
        Overwrite the cached state with an authoritative read

        Returns:
            The fresh event (now cached)
        """
        cached = self.events.get(fresh.id)
        self.events[fresh.id] = fresh
        if cached is not None and cached.status != fresh.status:
            logger.warning(
                "Local event state diverged from remote",
                event_id=fresh.id,
                local_status=cached.status.value,
                remote_status=fresh.status.value,
            )
            self._append(
                fresh.id,
                "Reconciled",
                occurred_at,
                None,
                {"from": cached.status.value, "to": fresh.status.value},
            )
        return fresh

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict for storage"""
        return {
            "events": {
                event_id: event.model_dump(mode="json")
                for event_id, event in self.events.items()
            },
            "history": {
                event_id: [entry.model_dump(mode="json") for entry in entries]
                for event_id, entries in self.history.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EventRegistry":
        """Deserialize from dict"""
        registry = cls()
        registry.events = {
            event_id: ProcurementEvent.model_validate(event)
            for event_id, event in data.get("events", {}).items()
        }
        registry.history = {
            event_id: [Event.model_validate(entry) for entry in entries]
            for event_id, entries in data.get("history", {}).items()
        }
        return registry
