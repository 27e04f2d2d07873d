"""
Modification Module - pause, edit and resubmit live events

This module implements governed editing:
- Best-effort pause before editing and resume after
- An immutable snapshot restored on cancel
- A watch-list diff that decides whether approval is needed
- Modification requests and their resolution
"""

from sourcing_governance.modification.coordinator import PauseResumeCoordinator
from sourcing_governance.modification.differ import canonical, diff
from sourcing_governance.modification.models import (
    ExitOutcome,
    ExitResult,
    FieldChange,
    ModificationRequest,
    ModificationSession,
)
from sourcing_governance.modification.requests import (
    apply_modification,
    build_modification_request,
    reject_modification,
)

__all__ = [
    "PauseResumeCoordinator",
    "diff",
    "canonical",
    "FieldChange",
    "ModificationRequest",
    "ModificationSession",
    "ExitOutcome",
    "ExitResult",
    "build_modification_request",
    "apply_modification",
    "reject_modification",
]
