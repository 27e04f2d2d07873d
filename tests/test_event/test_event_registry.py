"""
Tests for the EventRegistry projection

Local transitions are cached and audited, and an authoritative read always
wins over the cached value.
"""

from datetime import timedelta

from sourcing_governance.event.models import EventStatus
from sourcing_governance.event.projections import EventRegistry
from tests.helpers import TEST_NOW, make_event


def test_put_and_get() -> None:
    registry = EventRegistry()
    event = make_event()

    registry.put(event)

    assert registry.get("rfq-001") == event
    assert registry.get("missing") is None
    assert registry.history_of("rfq-001") == []


def test_record_appends_status_change() -> None:
    """Test that a transition is cached and audited with from/to"""
    registry = EventRegistry()
    before = make_event()
    after = before.with_changes(status=EventStatus.PAUSED)
    registry.put(before)

    entry = registry.record(before, after, "PAUSE", TEST_NOW, actor_id="buyer-alice")

    assert entry is not None
    assert entry.event_type == "StatusChanged"
    assert entry.stream_id == "rfq-001"
    assert entry.version == 1
    assert entry.actor_id == "buyer-alice"
    assert entry.payload == {"action": "PAUSE", "from": "APPROVED", "to": "PAUSED"}
    assert registry.get("rfq-001") == after


def test_record_without_change_is_not_audited() -> None:
    registry = EventRegistry()
    event = make_event()

    assert registry.record(event, event, "RESUME", TEST_NOW) is None
    assert registry.history_of("rfq-001") == []


def test_versions_increase_per_event() -> None:
    registry = EventRegistry()
    approved = make_event()
    paused = approved.with_changes(status=EventStatus.PAUSED)

    registry.record(approved, paused, "PAUSE", TEST_NOW)
    registry.record(paused, approved, "RESUME", TEST_NOW + timedelta(minutes=1))

    versions = [entry.version for entry in registry.history_of("rfq-001")]
    assert versions == [1, 2]


def test_list_by_status() -> None:
    registry = EventRegistry()
    registry.put(make_event("rfq-1"))
    registry.put(make_event("rfq-2", status=EventStatus.PAUSED))
    registry.put(make_event("rfq-3", status=EventStatus.PAUSED))

    paused_ids = sorted(e.id for e in registry.list_by_status(EventStatus.PAUSED))

    assert paused_ids == ["rfq-2", "rfq-3"]


def test_reconcile_overwrites_and_audits_divergence() -> None:
    """Test that a fresh remote read replaces a diverged local value"""
    registry = EventRegistry()
    registry.put(make_event(status=EventStatus.PAUSED))
    fresh = make_event(status=EventStatus.APPROVED)

    result = registry.reconcile(fresh, TEST_NOW)

    assert result == fresh
    assert registry.get("rfq-001") == fresh
    [entry] = registry.history_of("rfq-001")
    assert entry.event_type == "Reconciled"
    assert entry.payload == {"from": "PAUSED", "to": "APPROVED"}


def test_reconcile_same_status_is_silent() -> None:
    registry = EventRegistry()
    registry.put(make_event())

    registry.reconcile(make_event(title="Renamed upstream"), TEST_NOW)

    assert registry.get("rfq-001").title == "Renamed upstream"
    assert registry.history_of("rfq-001") == []


def test_apply_event_replays_status() -> None:
    source = EventRegistry()
    approved = make_event()
    source.record(approved, approved.with_changes(status=EventStatus.PAUSED), "PAUSE", TEST_NOW)
    [entry] = source.history_of("rfq-001")

    replica = EventRegistry()
    replica.put(approved)
    replica.apply_event(entry)

    assert replica.get("rfq-001").status == EventStatus.PAUSED
    assert replica.history_of("rfq-001") == [entry]


def test_serialization_roundtrip() -> None:
    registry = EventRegistry()
    approved = make_event()
    registry.record(approved, approved.with_changes(status=EventStatus.PAUSED), "PAUSE", TEST_NOW)

    restored = EventRegistry.from_dict(registry.to_dict())

    assert restored.get("rfq-001") == registry.get("rfq-001")
    assert restored.history_of("rfq-001") == registry.history_of("rfq-001")
