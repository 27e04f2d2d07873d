"""
Award Initiation Workflow - from supplier selection to AWARDED

Steps:
1. Pre-flight validation (no side effects, no network)
2. Compute the estimated award value from the event's quotes
3. Fetch and evaluate the award rules (fetch failure -> default rule + warning)
4. Submit the award to the approval authority (must succeed)
5. Auto-approved: mark AWARDED and notify winners, losers and internal
   stakeholders (best effort). Otherwise the event stays as it is until the
   escalated approval completes.

Fun fact: Split awards are as old as public procurement itself - Roman
grain contracts were routinely split between shippers so one lost fleet
could not starve the city!
"""

from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal
from functools import partial

from sourcing_governance.award.models import AwardCheckResult, AwardOutcome, AwardOutcomeKind
from sourcing_governance.award.rules import AwardConfig, evaluate_award_rules, parse_award_config
from sourcing_governance.award.value import compute_award_value
from sourcing_governance.event.invariants import (
    validate_award_selection,
    validate_awardable,
    validate_justification,
)
from sourcing_governance.event.lifecycle import LifecycleAction, transition
from sourcing_governance.event.models import AwardRecord, ProcurementEvent
from sourcing_governance.gateway.base import ProcurementGateway
from sourcing_governance.kernel.logging import LogOperation, get_logger
from sourcing_governance.kernel.metrics import awards_initiated_total
from sourcing_governance.kernel.policy import GovernancePolicy, default_policy
from sourcing_governance.kernel.remote import RemoteCaller, SoftFailure
from sourcing_governance.kernel.time import RealTimeProvider, TimeProvider

logger = get_logger(__name__)

RULES_UNAVAILABLE_WARNING = (
    "Award rules could not be loaded; the default value threshold was applied."
)


def losing_suppliers(event: ProcurementEvent, winners: Iterable[str]) -> list[str]:
    """Invited or quoting suppliers that were not selected, sorted"""
    candidates = set(event.suppliers_invited) | {quote.supplier_id for quote in event.quotes}
    return sorted(candidates - set(winners))


def complete_award(
    event: ProcurementEvent, award: AwardRecord, now: datetime | None = None
) -> ProcurementEvent:
    """
    Apply an award approved later by the escalated approval workflow

    Args:
        event: Event still APPROVED or PAUSED
        award: Award record as approved
        now: Current time (defaults to the award time)

    Raises:
        IllegalTransition: If the event can no longer be awarded
    """
    validate_awardable(event)
    return transition(event, LifecycleAction.AWARD, now or award.awarded_at, award=award)


class AwardInitiationWorkflow:
    """
    Orchestrates award initiation against the approval authority

    Validation and state guards run before any remote call; only the award
    submission itself can block (RemoteHardFailure). Rules fetch and
    notifications are best effort and surface as warnings.
    """

    def __init__(
        self,
        gateway: ProcurementGateway,
        policy: GovernancePolicy | None = None,
        time_provider: TimeProvider | None = None,
        caller: RemoteCaller | None = None,
    ) -> None:
        self.gateway = gateway
        self.policy = policy or default_policy
        self.time_provider = time_provider or RealTimeProvider()
        self.caller = caller or RemoteCaller(self.policy.remote_timeout_seconds)

    async def _load_config(
        self, event_id: str, warnings: list[SoftFailure]
    ) -> AwardConfig:
        raw, failure = await self.caller.soft(
            "fetch_award_rules",
            event_id,
            self.gateway.fetch_award_rules,
            warning=RULES_UNAVAILABLE_WARNING,
        )
        if failure is not None:
            warnings.append(failure)
            return AwardConfig()
        return parse_award_config(raw)

    async def check(
        self, event: ProcurementEvent, selected_suppliers: Iterable[str]
    ) -> AwardCheckResult:
        """
        Evaluate the award rules for a selection without submitting anything

        Used to show warnings before the buyer confirms.
        """
        suppliers = validate_award_selection(event.id, selected_suppliers)
        config = await self._load_config(event.id, [])
        return evaluate_award_rules(
            config.rules,
            compute_award_value(event.quotes, suppliers),
            event.categories,
            len(suppliers),
            default_threshold=self.policy.default_award_threshold,
        )

    async def initiate(
        self,
        event: ProcurementEvent,
        selected_suppliers: Iterable[str],
        justification: str,
        requested_by: str | None = None,
    ) -> AwardOutcome:
        """
        Initiate an award for the selected suppliers

        Args:
            event: Event to award (APPROVED or PAUSED)
            selected_suppliers: Proposed winners (duplicates ignored)
            justification: Buyer's justification (trimmed length >= policy minimum)
            requested_by: Buyer requesting the award

        Returns:
            AwardOutcome: AUTO_APPROVED with the AWARDED event, or
            WORKFLOW_INITIATED with the event unchanged

        Raises:
            NoSupplierSelected: If no supplier is selected
            JustificationTooShort: If the justification is too short
            IllegalTransition: If the event is not APPROVED or PAUSED
            RemoteHardFailure: If the approval authority cannot be reached
        """
        suppliers = validate_award_selection(event.id, selected_suppliers)
        text = validate_justification(justification, self.policy)
        validate_awardable(event)

        with LogOperation(
            logger,
            "initiate_award",
            event_id=event.id,
            supplier_count=len(suppliers),
            requested_by=requested_by,
        ):
            warnings: list[SoftFailure] = []
            value = compute_award_value(event.quotes, suppliers)
            config = await self._load_config(event.id, warnings)
            check = evaluate_award_rules(
                config.rules,
                value,
                event.categories,
                len(suppliers),
                default_threshold=self.policy.default_award_threshold,
            )

            payload = {
                "event_id": event.id,
                "selected_suppliers": suppliers,
                "justification": text,
                "estimated_value": str(value),
                "split_award": len(suppliers) > 1,
                "check_warnings": list(check.reasons),
                "requested_by": requested_by,
            }
            decision = await self.caller.hard(
                "initiate_award",
                event.id,
                partial(self.gateway.initiate_award, event.id, payload),
                action="initiate award for",
            )

            if not decision.approved:
                awards_initiated_total.labels(outcome="workflow_initiated").inc()
                logger.info(
                    "Award approval workflow initiated",
                    event_id=event.id,
                    award_id=decision.award_id,
                    reasons=len(check.reasons),
                )
                return AwardOutcome(
                    kind=AwardOutcomeKind.WORKFLOW_INITIATED,
                    event=event,
                    check=check,
                    estimated_value=value,
                    message=decision.message,
                    warnings=warnings,
                    award_id=decision.award_id,
                )

            now = self.time_provider.now()
            award = decision.award or AwardRecord(
                winners=suppliers,
                justification=text,
                awarded_at=now,
                award_id=decision.award_id,
            )
            if award.award_id is None and decision.award_id is not None:
                award = award.model_copy(update={"award_id": decision.award_id})
            awarded = transition(event, LifecycleAction.AWARD, now, award=award)
            awards_initiated_total.labels(outcome="auto_approved").inc()

            if self.policy.notify_on_auto_award:
                warnings.extend(
                    await self._notify(awarded, award, value, config, requested_by)
                )

            return AwardOutcome(
                kind=AwardOutcomeKind.AUTO_APPROVED,
                event=awarded,
                check=check,
                estimated_value=value,
                message=decision.message,
                warnings=warnings,
                award_id=award.award_id,
            )

    async def _notify(
        self,
        event: ProcurementEvent,
        award: AwardRecord,
        value: Decimal,
        config: AwardConfig,
        requested_by: str | None,
    ) -> list[SoftFailure]:
        """Send award notifications; failures are returned, never raised"""
        audiences = [
            ("award.winners", list(award.winners)),
            ("award.losers", losing_suppliers(event, award.winners)),
            ("award.internal", [requested_by] if requested_by else []),
        ]
        failures: list[SoftFailure] = []
        for kind, recipients in audiences:
            if not recipients:
                continue
            payload = {
                "event_id": event.id,
                "event_title": event.title,
                "award_id": award.award_id,
                "winners": list(award.winners),
                "recipients": recipients,
                "estimated_value": str(value),
                "template": config.notification_mapping.get(kind),
            }
            _, failure = await self.caller.soft(
                "send_notification",
                event.id,
                partial(self.gateway.send_notification, kind, payload),
                warning=f"Award saved, but the {kind} notification could not be sent.",
            )
            if failure is not None:
                failures.append(failure)
        return failures
