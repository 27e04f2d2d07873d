"""
Award Domain Models - results of checking and initiating an award
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, computed_field

from sourcing_governance.event.models import ProcurementEvent
from sourcing_governance.kernel.remote import SoftFailure


class AwardCheckResult(BaseModel):
    """
    Advisory outcome of evaluating award rules

    Attributes:
        reasons: One human-readable message per triggered rule, in rule order
        ok: True iff no rule triggered
    """

    reasons: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ok(self) -> bool:
        return len(self.reasons) == 0


class AwardOutcomeKind(str, Enum):
    """How the approval authority answered an award initiation"""

    AUTO_APPROVED = "AUTO_APPROVED"  # Award finalized, event AWARDED
    WORKFLOW_INITIATED = "WORKFLOW_INITIATED"  # Escalated approval pending, event unchanged


class AwardOutcome(BaseModel):
    """
    Result of AwardInitiationWorkflow.initiate

    Attributes:
        kind: Auto-approved or approval workflow initiated
        event: Event after the call (AWARDED when auto-approved, else unchanged)
        check: Local rule evaluation sent along as warnings
        estimated_value: Computed award value
        message: Message returned by the approval authority
        warnings: Best-effort failures (rules fetch, notifications)
        award_id: Remote award identifier, when returned
    """

    kind: AwardOutcomeKind
    event: ProcurementEvent
    check: AwardCheckResult
    estimated_value: Decimal
    message: str = ""
    warnings: list[SoftFailure] = Field(default_factory=list)
    award_id: str | None = None

    model_config = {"frozen": True}

    @property
    def awarded(self) -> bool:
        """Check if the award was finalized"""
        return self.kind == AwardOutcomeKind.AUTO_APPROVED
