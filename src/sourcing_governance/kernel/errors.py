"""
Custom exceptions for Sourcing Governance

Well-defined error hierarchy so callers can tell a pre-flight validation
problem from an illegal lifecycle move or a blocking remote failure.

Soft remote failures are NOT exceptions - they are returned as
SoftFailure values (see kernel.remote) so editing is never blocked.
"""


class GovernanceError(Exception):
    """Base exception for all Sourcing Governance errors"""

    pass


# Validation errors (local, pre-flight, no network call made)


class ValidationError(GovernanceError):
    """Base class for local pre-flight validation errors"""

    pass


class NoSupplierSelected(ValidationError):
    """Raised when an award is requested without any selected supplier"""

    def __init__(self, event_id: str) -> None:
        self.event_id = event_id
        super().__init__(f"Event {event_id}: select at least one supplier to award")


class JustificationTooShort(ValidationError):
    """Raised when the award justification is shorter than the policy minimum"""

    def __init__(self, length: int, minimum: int) -> None:
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"Justification has {length} characters after trimming, "
            f"at least {minimum} are required"
        )


class PauseReasonRequired(ValidationError):
    """Raised when an operator pause is requested without a reason"""

    def __init__(self, event_id: str) -> None:
        self.event_id = event_id
        super().__init__(f"Event {event_id}: select a reason for pause")


class UnknownPauseReason(ValidationError):
    """Raised when the pause reason is not an active entry of the catalog"""

    def __init__(self, reason_id: str) -> None:
        self.reason_id = reason_id
        super().__init__(f"Pause reason {reason_id} is unknown or inactive")


class InvalidEventData(ValidationError):
    """Raised when an event document cannot be parsed into a ProcurementEvent"""

    pass


# Lifecycle errors


class InvariantViolation(GovernanceError):
    """
    Raised when a domain invariant would be violated

    Example: an event carrying an award record while not AWARDED.
    """

    pass


class IllegalTransition(GovernanceError):
    """Raised when a lifecycle action is not allowed from the current status"""

    def __init__(self, event_id: str, status: str, action: str, detail: str = "") -> None:
        self.event_id = event_id
        self.status = status
        self.action = action
        message = f"Event {event_id}: cannot {action} while {status}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class SessionClosed(GovernanceError):
    """Raised when a modification session is used after it was cancelled or submitted"""

    def __init__(self, event_id: str) -> None:
        self.event_id = event_id
        super().__init__(f"Modification session for event {event_id} is already closed")


# Remote errors


class RemoteCallError(GovernanceError):
    """
    Raised by gateways when a remote call fails

    Workflows never let this escape: it is converted to a SoftFailure
    or a RemoteHardFailure at the workflow boundary.
    """

    def __init__(self, operation: str, message: str, status_code: int | None = None) -> None:
        self.operation = operation
        self.status_code = status_code
        super().__init__(f"{operation} failed: {message}")


class RemoteTimeout(RemoteCallError):
    """Raised when a remote call exceeds its time budget"""

    def __init__(self, operation: str, seconds: float) -> None:
        self.seconds = seconds
        super().__init__(operation, f"exceeded timeout of {seconds} seconds")


class RemoteHardFailure(GovernanceError):
    """
    Blocking, user-visible failure of an intentional remote action

    Raised for operator pause/resume, award initiation and modification
    request submission. Local state is never advanced when this is raised.
    """

    def __init__(self, operation: str, event_id: str, cause: str) -> None:
        self.operation = operation
        self.event_id = event_id
        self.cause = cause
        super().__init__(f"Could not {operation} event {event_id}: {cause}")
