"""
Modification requests - building them from a diff and resolving them

A request is only built for a non-empty diff. Resolution mirrors what the
approval authority does when an administrator decides: approval applies the
proposed values and reopens the event, rejection reopens it unchanged.
"""

from collections.abc import Mapping
from datetime import datetime

from sourcing_governance.event.lifecycle import LifecycleAction, transition
from sourcing_governance.event.models import SNAPSHOT_FIELDS, EventStatus, ProcurementEvent
from sourcing_governance.kernel.errors import IllegalTransition, InvariantViolation
from sourcing_governance.kernel.logging import get_logger
from sourcing_governance.modification.models import FieldChange, ModificationRequest

logger = get_logger(__name__)

RESOLVABLE_STATUSES: frozenset[EventStatus] = frozenset(
    {EventStatus.PAUSED, EventStatus.APPROVED}
)


def build_modification_request(
    event_id: str,
    changes: Mapping[str, FieldChange],
    requested_by: str,
    requested_at: datetime,
    note: str = "",
) -> ModificationRequest | None:
    """
    Build a modification request from a diff

    Returns:
        The request, or None when nothing changed
    """
    if not changes:
        return None
    return ModificationRequest(
        event_id=event_id,
        requested_by=requested_by,
        requested_at=requested_at,
        requested_fields=list(changes),
        summary=dict(changes),
        note=note,
    )


def _check_resolvable(event: ProcurementEvent, request: ModificationRequest) -> None:
    if request.event_id != event.id:
        raise InvariantViolation(
            f"Modification request for event {request.event_id} cannot be applied to event {event.id}"
        )
    if event.status not in RESOLVABLE_STATUSES:
        raise IllegalTransition(event.id, event.status.value, "resolve modification request")


def apply_modification(
    event: ProcurementEvent, request: ModificationRequest, now: datetime
) -> ProcurementEvent:
    """
    Apply an approved modification request

    Every proposed `to` value is written to the event and the event is
    reopened (APPROVED). Fields outside the editable set are ignored.

    Raises:
        InvariantViolation: If the request belongs to another event
        IllegalTransition: If the event is neither PAUSED nor APPROVED
    """
    _check_resolvable(event, request)
    updates = {
        field: change.to
        for field, change in request.summary.items()
        if field in SNAPSHOT_FIELDS
    }
    ignored = sorted(set(request.summary) - set(updates))
    if ignored:
        logger.warning(
            "Ignoring non-editable fields in modification request",
            event_id=event.id,
            fields=ignored,
        )
    updated = event.with_changes(**updates)
    logger.info(
        "Modification request applied",
        event_id=event.id,
        request_id=request.request_id,
        fields=list(updates),
    )
    return transition(updated, LifecycleAction.RESUME, now)


def reject_modification(
    event: ProcurementEvent, request: ModificationRequest, now: datetime
) -> ProcurementEvent:
    """
    Reject a modification request: values stay, the event is reopened

    Raises:
        InvariantViolation: If the request belongs to another event
        IllegalTransition: If the event is neither PAUSED nor APPROVED
    """
    _check_resolvable(event, request)
    logger.info("Modification request rejected", event_id=event.id, request_id=request.request_id)
    return transition(event, LifecycleAction.RESUME, now)
