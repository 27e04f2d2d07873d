"""
Kernel - shared infrastructure for the governance workflows

Errors, structured logging, metrics, policy, time and id providers, audit
events and the remote call boundary. Domain packages build on these and
never on each other's internals.
"""

from sourcing_governance.kernel.errors import (
    GovernanceError,
    IllegalTransition,
    InvariantViolation,
    RemoteCallError,
    RemoteHardFailure,
    RemoteTimeout,
    ValidationError,
)
from sourcing_governance.kernel.events import Event
from sourcing_governance.kernel.ids import generate_id
from sourcing_governance.kernel.policy import GovernancePolicy, PauseReason
from sourcing_governance.kernel.remote import RemoteCaller, SoftFailure
from sourcing_governance.kernel.time import RealTimeProvider, TestTimeProvider, TimeProvider

__all__ = [
    # IDs & time
    "generate_id",
    "TimeProvider",
    "RealTimeProvider",
    "TestTimeProvider",
    # Audit
    "Event",
    # Policy
    "GovernancePolicy",
    "PauseReason",
    # Remote boundary
    "RemoteCaller",
    "SoftFailure",
    # Errors
    "GovernanceError",
    "ValidationError",
    "IllegalTransition",
    "InvariantViolation",
    "RemoteCallError",
    "RemoteTimeout",
    "RemoteHardFailure",
]
