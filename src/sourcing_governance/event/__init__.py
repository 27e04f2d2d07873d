"""
Event Module - sourcing event state and lifecycle

This module implements the event side of governance:
- Immutable ProcurementEvent values with the award/status invariant
- Pure lifecycle transitions with a derived LIVE status
- Pre-flight validators that run before any remote call
- A local cache with an audit trail of applied transitions
"""

from sourcing_governance.event.lifecycle import (
    LifecycleAction,
    allowed_actions,
    can_transition,
    effective_status,
    is_live,
    transition,
)
from sourcing_governance.event.models import (
    AwardRecord,
    EventStatus,
    ModificationSnapshot,
    ProcurementEvent,
    Quote,
    QuoteLineItem,
    restore,
)
from sourcing_governance.event.projections import EventRegistry

__all__ = [
    "EventStatus",
    "ProcurementEvent",
    "Quote",
    "QuoteLineItem",
    "AwardRecord",
    "ModificationSnapshot",
    "restore",
    "LifecycleAction",
    "transition",
    "effective_status",
    "is_live",
    "allowed_actions",
    "can_transition",
    "EventRegistry",
]
