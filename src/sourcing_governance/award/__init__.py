"""
Award Module - award value, rule evaluation and initiation

This module implements award governance:
- Estimated award value from the cheapest priced quote per winner
- Configurable rules that escalate large, sensitive or split awards
- The initiation workflow against the approval authority
"""

from sourcing_governance.award.models import AwardCheckResult, AwardOutcome, AwardOutcomeKind
from sourcing_governance.award.rules import (
    AwardConfig,
    CategoryThreshold,
    RequireHigherApprovalOnSplit,
    ValueThreshold,
    evaluate_award_rules,
    parse_award_config,
    parse_award_rules,
)
from sourcing_governance.award.value import compute_award_value
from sourcing_governance.award.workflow import AwardInitiationWorkflow, complete_award

__all__ = [
    "compute_award_value",
    "ValueThreshold",
    "CategoryThreshold",
    "RequireHigherApprovalOnSplit",
    "AwardConfig",
    "parse_award_rules",
    "parse_award_config",
    "evaluate_award_rules",
    "AwardCheckResult",
    "AwardOutcome",
    "AwardOutcomeKind",
    "AwardInitiationWorkflow",
    "complete_award",
]
