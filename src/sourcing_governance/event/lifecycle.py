"""
Event Lifecycle - the sourcing event state machine

Transitions are pure functions: they take the current event value and return
the next one, or raise IllegalTransition and leave nothing changed. Remote
side effects (pause, resume, award) happen elsewhere; this module only
decides what is allowed.

    DRAFT ──SUBMIT──▶ PENDING_APPROVAL ──APPROVE──▶ APPROVED ◀──RESUME── PAUSED
                              │                        │  (LIVE once open)  ▲
                            REJECT                  PAUSE ──────────────────┘
                              ▼                        │
                          REJECTED               ENTER_EDIT ─▶ MODIFYING
                                                                  │
                                        CANCEL_EDIT / SUBMIT_EDIT ▼
                                                         PAUSED or APPROVED
    APPROVED / PAUSED ──AWARD──▶ AWARDED
"""

from datetime import datetime
from enum import Enum

from pydantic import ValidationError as PydanticValidationError

from sourcing_governance.event.models import AwardRecord, EventStatus, ProcurementEvent
from sourcing_governance.kernel.errors import IllegalTransition, InvariantViolation
from sourcing_governance.kernel.logging import get_logger
from sourcing_governance.kernel.metrics import illegal_transitions_total, transitions_total

logger = get_logger(__name__)


class LifecycleAction(str, Enum):
    """Actions that move an event between states"""

    SUBMIT = "SUBMIT"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    PAUSE = "PAUSE"
    ENTER_EDIT = "ENTER_EDIT"
    CANCEL_EDIT = "CANCEL_EDIT"
    SUBMIT_EDIT = "SUBMIT_EDIT"
    RESUME = "RESUME"
    AWARD = "AWARD"


# (from status, action) -> allowed target statuses; the first one is the default
TRANSITIONS: dict[tuple[EventStatus, LifecycleAction], tuple[EventStatus, ...]] = {
    (EventStatus.DRAFT, LifecycleAction.SUBMIT): (EventStatus.PENDING_APPROVAL,),
    (EventStatus.PENDING_APPROVAL, LifecycleAction.APPROVE): (EventStatus.APPROVED,),
    (EventStatus.PENDING_APPROVAL, LifecycleAction.REJECT): (EventStatus.REJECTED,),
    (EventStatus.APPROVED, LifecycleAction.PAUSE): (EventStatus.PAUSED,),
    (EventStatus.APPROVED, LifecycleAction.ENTER_EDIT): (EventStatus.MODIFYING,),
    (EventStatus.PAUSED, LifecycleAction.ENTER_EDIT): (EventStatus.MODIFYING,),
    (EventStatus.MODIFYING, LifecycleAction.CANCEL_EDIT): (
        EventStatus.PAUSED,
        EventStatus.APPROVED,
    ),
    (EventStatus.MODIFYING, LifecycleAction.SUBMIT_EDIT): (
        EventStatus.PAUSED,
        EventStatus.APPROVED,
    ),
    (EventStatus.PAUSED, LifecycleAction.RESUME): (EventStatus.APPROVED,),
    (EventStatus.APPROVED, LifecycleAction.AWARD): (EventStatus.AWARDED,),
    (EventStatus.PAUSED, LifecycleAction.AWARD): (EventStatus.AWARDED,),
}

# Actions from APPROVED that only make sense once bidding has opened
LIVE_ONLY_ACTIONS: frozenset[LifecycleAction] = frozenset(
    {LifecycleAction.PAUSE, LifecycleAction.ENTER_EDIT}
)

# Repeating these is a successful no-op rather than an error
NOOP_TRANSITIONS: frozenset[tuple[EventStatus, LifecycleAction]] = frozenset(
    {
        (EventStatus.PAUSED, LifecycleAction.PAUSE),
        (EventStatus.APPROVED, LifecycleAction.RESUME),
    }
)


def is_live(event: ProcurementEvent, now: datetime) -> bool:
    """
    Check whether suppliers can currently bid on the event

    An event is live when it is APPROVED and its bidding window has opened.
    An approved event without an open date is not live.
    """
    if event.status != EventStatus.APPROVED or event.open_at is None:
        return False
    return event.open_at <= now


def effective_status(event: ProcurementEvent, now: datetime) -> EventStatus:
    """Return the status to display: LIVE for an open approved event, else the stored one"""
    if is_live(event, now):
        return EventStatus.LIVE
    return event.status


def is_noop(event: ProcurementEvent, action: LifecycleAction) -> bool:
    """Check if the action would leave an event exactly where it is"""
    return (event.status, action) in NOOP_TRANSITIONS


def _check_guard(
    event: ProcurementEvent,
    action: LifecycleAction,
    now: datetime,
    target: EventStatus | None,
) -> str | None:
    """Return a reason the transition is not allowed, or None when it is"""
    targets = TRANSITIONS.get((event.status, action))
    if targets is None:
        return "no such transition"
    if target is not None and target not in targets:
        return f"target {target.value} not reachable"
    if (
        event.status == EventStatus.APPROVED
        and action in LIVE_ONLY_ACTIONS
        and not is_live(event, now)
    ):
        return "event is not live yet"
    return None


def can_transition(
    event: ProcurementEvent,
    action: LifecycleAction,
    now: datetime,
    target: EventStatus | None = None,
) -> bool:
    """Check if a transition (or an idempotent no-op) is allowed"""
    if is_noop(event, action):
        return True
    return _check_guard(event, action, now, target) is None


def allowed_actions(event: ProcurementEvent, now: datetime) -> list[LifecycleAction]:
    """
    List the actions that may be applied to the event right now

    Idempotent no-ops are not listed; they are accepted but change nothing.
    """
    return [
        action
        for action in LifecycleAction
        if (event.status, action) in TRANSITIONS
        and _check_guard(event, action, now, None) is None
    ]


def transition(
    event: ProcurementEvent,
    action: LifecycleAction,
    now: datetime,
    *,
    target: EventStatus | None = None,
    award: AwardRecord | None = None,
) -> ProcurementEvent:
    """
    Apply a lifecycle action to an event

    Args:
        event: Current event value
        action: Action to apply
        now: Current time (decides whether an approved event is live)
        target: Destination for edit exits (PAUSED or APPROVED, default PAUSED)
        award: Award record, required by AWARD and set in the same step

    Returns:
        The next event value (the same value for an idempotent no-op)

    Raises:
        IllegalTransition: If the action is not allowed from the current status
        InvariantViolation: If AWARD is requested without an award record
    """
    if is_noop(event, action):
        logger.debug(
            "Idempotent transition ignored",
            event_id=event.id,
            action=action.value,
            status=event.status.value,
        )
        return event

    reason = _check_guard(event, action, now, target)
    if reason is not None:
        illegal_transitions_total.labels(
            action=action.value, from_status=event.status.value
        ).inc()
        logger.warning(
            "Illegal transition rejected",
            event_id=event.id,
            action=action.value,
            status=event.status.value,
            reason=reason,
        )
        raise IllegalTransition(event.id, event.status.value, action.value.lower(), reason)

    if action == LifecycleAction.AWARD and award is None:
        raise InvariantViolation(f"Event {event.id}: AWARD requires an award record")

    new_status = target or TRANSITIONS[(event.status, action)][0]
    changes: dict = {"status": new_status}
    if action == LifecycleAction.AWARD:
        changes["award"] = award

    try:
        updated = event.with_changes(**changes)
    except PydanticValidationError as exc:
        raise InvariantViolation(f"Event {event.id}: {exc}") from exc

    transitions_total.labels(action=action.value, to_status=new_status.value).inc()
    logger.info(
        "Event transitioned",
        event_id=event.id,
        action=action.value,
        from_status=event.status.value,
        to_status=new_status.value,
    )
    return updated
