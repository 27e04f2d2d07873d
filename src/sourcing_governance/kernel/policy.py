"""
Governance Policy - configurable parameters of the award and edit workflows

The GovernancePolicy holds the thresholds and limits that the workflows read
instead of hard-coding them: the implicit award threshold, the minimum
justification length, the fields whose edits need approval, remote call
budgets, and the catalog of operator pause reasons.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

DEFAULT_AWARD_THRESHOLD = Decimal("50000")

WATCHED_FIELDS: tuple[str, ...] = (
    "close_at",
    "items",
    "publish_on_approval",
    "negotiation_controls",
    "suppliers_selected",
)


class PauseReason(BaseModel):
    """
    Operator-selectable reason for pausing a live event

    Attributes:
        reason_id: Stable identifier sent to the remote pause call
        label: Human-readable label shown to operators and suppliers
        active: Inactive reasons stay for history but cannot be selected
    """

    reason_id: str
    label: str
    active: bool = True

    model_config = {"frozen": True}


class GovernancePolicy(BaseModel):
    """
    Award and modification governance parameters

    The defaults mirror the behaviour procurement administrators get when
    nothing has been configured: awards above 50,000 need approval and a
    justification of at least ten characters is mandatory.
    """

    policy_version: str = Field(
        default="1.0",
        description="Policy version for tracking changes over time",
    )

    default_award_threshold: Decimal = Field(
        default=DEFAULT_AWARD_THRESHOLD,
        ge=0,
        description="Threshold of the implicit ValueThreshold rule used when no rules are configured",
    )

    min_justification_length: int = Field(
        default=10,
        ge=0,
        description="Minimum award justification length after trimming",
    )

    watched_fields: tuple[str, ...] = Field(
        default=WATCHED_FIELDS,
        description="Event fields whose edits on a live event require a modification request",
    )

    remote_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Time budget of a single remote call",
    )

    remote_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for transient transport failures (HttpProcurementGateway.from_policy)",
    )

    require_pause_reason: bool = Field(
        default=True,
        description="Operator pause requires a selected reason",
    )

    pause_reasons: list[PauseReason] = Field(
        default_factory=list,
        description="Catalog of pause reasons; empty means any non-blank reason id is accepted",
    )

    notify_on_auto_award: bool = Field(
        default=True,
        description="Dispatch winner/loser/internal notifications after an auto-approved award",
    )

    def active_pause_reason(self, reason_id: str) -> PauseReason | None:
        """
        Look up an active pause reason in the catalog

        Returns:
            The matching reason, or None when unknown or inactive
        """
        for reason in self.pause_reasons:
            if reason.reason_id == reason_id and reason.active:
                return reason
        return None


# Default global policy instance
default_policy = GovernancePolicy()
