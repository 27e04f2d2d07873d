"""
Test Helper Functions - Builders for events and quotes

Provides reusable builders for test data creation. Follows the Builder
pattern so each test states only what matters to it.

Fun fact: The Builder pattern was formalized by the Gang of Four in 1994,
and test data builders keep sourcing scenarios readable - a three-supplier
RFQ fits on one line!
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from sourcing_governance.event.models import (
    AwardRecord,
    EventStatus,
    ProcurementEvent,
    Quote,
    QuoteLineItem,
)

# Matches the default test clock in conftest.py
TEST_NOW = datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


def make_quote(supplier_id: str, *costs: Any, quote_id: str | None = None) -> Quote:
    """
    Builder for a supplier quote with one line item per cost

    Example:
        >>> make_quote("sup-a", 100, 50)  # total 150
    """
    return Quote(
        quote_id=quote_id,
        supplier_id=supplier_id,
        submitted_at=TEST_NOW - timedelta(days=1),
        items=[QuoteLineItem(cost=cost) for cost in costs],
    )


def make_event(
    event_id: str = "rfq-001",
    status: EventStatus = EventStatus.APPROVED,
    open_at: datetime | None = None,
    close_at: datetime | None = None,
    **overrides: Any,
) -> ProcurementEvent:
    """
    Builder for a procurement event

    Defaults: APPROVED, opened 5 days before TEST_NOW (so live), closing on
    2025-02-01, two invited suppliers.

    Args:
        event_id: Event identifier
        status: Stored status
        open_at: Start of the bidding window
        close_at: End of the bidding window
        **overrides: Any other ProcurementEvent field

    Returns:
        ProcurementEvent
    """
    data: dict[str, Any] = {
        "id": event_id,
        "title": "Steel fasteners 2025",
        "status": status,
        "open_at": open_at or TEST_NOW - timedelta(days=5),
        "close_at": close_at or datetime(2025, 2, 1, 17, 0, tzinfo=timezone.utc),
        "categories": ["cat-hardware"],
        "suppliers_invited": {"sup-a", "sup-b"},
        "suppliers_selected": ["sup-a", "sup-b"],
        "items": [{"description": "M8 bolts", "quantity": 1000}],
        "negotiation_controls": "sealed",
        "publish_on_approval": False,
    }
    if status == EventStatus.AWARDED and "award" not in overrides:
        data["award"] = make_award()
    data.update(overrides)
    return ProcurementEvent(**data)


def make_award(*winners: str, justification: str = "Lowest compliant bid") -> AwardRecord:
    """Builder for an award record (defaults to a single winner sup-a)"""
    return AwardRecord(
        winners=list(winners) or ["sup-a"],
        justification=justification,
        awarded_at=TEST_NOW,
    )


def event_document(**overrides: Any) -> dict[str, Any]:
    """JSON-ready event document (as the CLI reads it)"""
    return make_event(**overrides).model_dump(mode="json")
