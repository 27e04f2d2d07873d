"""
Event Invariants - pre-flight checks that run before any network call

Pure functions: they either return a normalized value or raise. Nothing is
sent to the approval authority until these pass, so a rejected request
leaves no trace anywhere.
"""

from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from sourcing_governance.event.models import EventStatus, ProcurementEvent
from sourcing_governance.kernel.errors import (
    IllegalTransition,
    InvalidEventData,
    JustificationTooShort,
    NoSupplierSelected,
    PauseReasonRequired,
    UnknownPauseReason,
)
from sourcing_governance.kernel.policy import GovernancePolicy

AWARDABLE_STATUSES: frozenset[EventStatus] = frozenset(
    {EventStatus.APPROVED, EventStatus.PAUSED}
)


def dedupe_suppliers(supplier_ids: Iterable[Any]) -> list[str]:
    """Drop duplicate and blank supplier ids, keeping first-seen order"""
    seen: set[str] = set()
    result: list[str] = []
    for raw in supplier_ids:
        supplier_id = "" if raw is None else str(raw).strip()
        if not supplier_id or supplier_id in seen:
            continue
        seen.add(supplier_id)
        result.append(supplier_id)
    return result


def validate_award_selection(event_id: str, selected: Iterable[str]) -> list[str]:
    """
    Ensure at least one supplier is selected for an award

    Returns:
        Deduplicated selection in original order

    Raises:
        NoSupplierSelected: If the selection is empty
    """
    suppliers = dedupe_suppliers(selected)
    if not suppliers:
        raise NoSupplierSelected(event_id)
    return suppliers


def validate_justification(justification: str | None, policy: GovernancePolicy) -> str:
    """
    Enforce the minimum justification length (after trimming)

    Raises:
        JustificationTooShort: If the trimmed text is shorter than the policy minimum
    """
    trimmed = (justification or "").strip()
    if len(trimmed) < policy.min_justification_length:
        raise JustificationTooShort(len(trimmed), policy.min_justification_length)
    return trimmed


def validate_awardable(event: ProcurementEvent) -> None:
    """
    Ensure the event is in a state from which an award can be requested

    Raises:
        IllegalTransition: Unless the event is APPROVED or PAUSED
    """
    if event.status not in AWARDABLE_STATUSES:
        raise IllegalTransition(event.id, event.status.value, "award")


def validate_pause_reason(
    event_id: str, reason_id: str | None, policy: GovernancePolicy
) -> str | None:
    """
    Check the reason given for an operator pause

    With an empty catalog any non-blank reason id is accepted.

    Returns:
        The trimmed reason id (None when reasons are not required and none given)

    Raises:
        PauseReasonRequired: If a reason is required and missing
        UnknownPauseReason: If a catalog is configured and the reason is not active in it
    """
    reason = (reason_id or "").strip()
    if not reason:
        if policy.require_pause_reason:
            raise PauseReasonRequired(event_id)
        return None
    if policy.pause_reasons and policy.active_pause_reason(reason) is None:
        raise UnknownPauseReason(reason)
    return reason


def parse_event(data: Any) -> ProcurementEvent:
    """
    Build a ProcurementEvent from a loosely typed document

    Raises:
        InvalidEventData: If the document does not describe a valid event
    """
    if isinstance(data, ProcurementEvent):
        return data
    try:
        return ProcurementEvent.model_validate(data)
    except PydanticValidationError as exc:
        raise InvalidEventData(f"Invalid event document: {exc}") from exc
