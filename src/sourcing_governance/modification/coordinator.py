"""
Pause/Resume Coordinator - suspend a live event for safe editing

Pausing and resuming around an edit session is best effort: a failed pause
must never stop an operator from fixing an event, so failures come back as
warnings. Explicit operator pause/resume and the submission of a
modification request are intentional actions and must either succeed or
fail loudly (RemoteHardFailure) with local state untouched.

Session lifecycle:
    enter_modification ─▶ MODIFYING ─┬─ cancel ──────────────▶ snapshot restored
                                     ├─ submit (no changes) ─▶ resumed, no request
                                     └─ submit (changes) ────▶ request recorded, PAUSED
    Leaving returns to the status the event had before entering: a session
    that paused a live event resumes it; one entered from PAUSED stays PAUSED.
"""

from functools import partial

from sourcing_governance.event.invariants import validate_pause_reason
from sourcing_governance.event.lifecycle import (
    LifecycleAction,
    is_noop,
    transition,
)
from sourcing_governance.event.models import (
    EventStatus,
    ModificationSnapshot,
    ProcurementEvent,
    restore,
)
from sourcing_governance.event.projections import EventRegistry
from sourcing_governance.gateway.base import ProcurementGateway
from sourcing_governance.kernel.errors import InvariantViolation, RemoteHardFailure
from sourcing_governance.kernel.ids import generate_id
from sourcing_governance.kernel.logging import LogOperation, get_logger
from sourcing_governance.kernel.metrics import modification_requests_total
from sourcing_governance.kernel.policy import GovernancePolicy, default_policy
from sourcing_governance.kernel.remote import RemoteCaller, SoftFailure
from sourcing_governance.kernel.time import RealTimeProvider, TimeProvider
from sourcing_governance.modification.differ import diff
from sourcing_governance.modification.models import (
    ExitOutcome,
    ExitResult,
    ModificationSession,
)
from sourcing_governance.modification.requests import build_modification_request

logger = get_logger(__name__)

PAUSE_FAILED_WARNING = (
    "The event could not be paused before editing; suppliers may still be able to bid."
)
RESUME_FAILED_WARNING = (
    "The event could not be resumed and remains paused; resume it manually."
)


class PauseResumeCoordinator:
    """
    Coordinates pause, edit and resume of live events

    Example:
        coordinator = PauseResumeCoordinator(gateway)
        session = await coordinator.enter_modification(event)
        session.edit(close_at=new_close)
        result = await coordinator.submit(session, requested_by="buyer-alice")
    """

    def __init__(
        self,
        gateway: ProcurementGateway,
        policy: GovernancePolicy | None = None,
        time_provider: TimeProvider | None = None,
        caller: RemoteCaller | None = None,
        registry: EventRegistry | None = None,
    ) -> None:
        self.gateway = gateway
        self.policy = policy or default_policy
        self.time_provider = time_provider or RealTimeProvider()
        self.caller = caller or RemoteCaller(self.policy.remote_timeout_seconds)
        self.registry = registry

    def _record(
        self,
        previous: ProcurementEvent,
        updated: ProcurementEvent,
        action: LifecycleAction,
        actor_id: str | None = None,
        **payload: object,
    ) -> None:
        if self.registry is not None:
            self.registry.record(
                previous,
                updated,
                action.value,
                self.time_provider.now(),
                actor_id=actor_id,
                payload=dict(payload),
            )

    # Edit sessions (best-effort pause/resume)

    async def enter_modification(
        self, event: ProcurementEvent, actor_id: str | None = None
    ) -> ModificationSession:
        """
        Start editing an event

        A live event is paused first (best effort). Whatever the pause
        outcome, the snapshot is taken and the event moves to MODIFYING.

        Raises:
            IllegalTransition: If the event is neither live nor PAUSED
        """
        now = self.time_provider.now()
        # Guard before any remote call
        editing = transition(event, LifecycleAction.ENTER_EDIT, now)

        warning: SoftFailure | None = None
        paused_by_session = event.status == EventStatus.APPROVED
        if paused_by_session:
            _, warning = await self.caller.soft(
                "pause_event",
                event.id,
                partial(self.gateway.pause_event, event.id, None),
                warning=PAUSE_FAILED_WARNING,
            )

        session = ModificationSession(
            session_id=generate_id(),
            event=editing,
            snapshot=ModificationSnapshot.capture(event, now),
            prior_status=event.status,
            paused_by_session=paused_by_session,
            warning=warning,
            opened_at=now,
        )
        self._record(
            event, editing, LifecycleAction.ENTER_EDIT, actor_id, session_id=session.session_id
        )
        logger.info(
            "Modification session opened",
            event_id=event.id,
            session_id=session.session_id,
            prior_status=event.status.value,
            pause_failed=warning is not None,
        )
        return session

    async def _leave(
        self,
        session: ModificationSession,
        values: ProcurementEvent,
        action: LifecycleAction,
        resume: bool,
    ) -> tuple[ProcurementEvent, bool, list[SoftFailure]]:
        """Move a closing session's event out of MODIFYING, resuming when asked"""
        warnings: list[SoftFailure] = []
        target = EventStatus.PAUSED
        if resume:
            _, failure = await self.caller.soft(
                "resume_event",
                session.event.id,
                partial(self.gateway.resume_event, session.event.id),
                warning=RESUME_FAILED_WARNING,
            )
            if failure is None:
                target = EventStatus.APPROVED
            else:
                warnings.append(failure)

        final = transition(values, action, self.time_provider.now(), target=target)
        return final, target == EventStatus.APPROVED, warnings

    async def cancel(
        self, session: ModificationSession, actor_id: str | None = None
    ) -> ExitResult:
        """
        Discard the edits and leave the session

        Every snapshot field is restored. A session that paused a live event
        resumes it (best effort); one entered from PAUSED returns to PAUSED.

        Raises:
            SessionClosed: If the session was already closed
        """
        session.ensure_open()
        session.cancelled = True
        session.closed = True

        previous = session.event
        restored = restore(session.event, session.snapshot)
        final, resumed, warnings = await self._leave(
            session, restored, LifecycleAction.CANCEL_EDIT, resume=session.paused_by_session
        )
        session.event = final

        modification_requests_total.labels(outcome="cancelled").inc()
        self._record(
            previous, final, LifecycleAction.CANCEL_EDIT, actor_id, session_id=session.session_id
        )
        logger.info(
            "Modification session cancelled",
            event_id=final.id,
            session_id=session.session_id,
            resumed=resumed,
        )
        return ExitResult(
            outcome=ExitOutcome.CANCELLED,
            event=final,
            resumed=resumed,
            warnings=warnings,
        )

    async def submit(
        self,
        session: ModificationSession,
        edited: ProcurementEvent | None = None,
        requested_by: str = "unknown",
        note: str = "",
    ) -> ExitResult:
        """
        Save the edits

        Empty diff: no request is created and the event leaves as in cancel().
        Otherwise a modification request is recorded remotely; the event goes
        back to PAUSED with its current values (the proposal lives in the
        request) and is resumed if the authority asks for it.

        Args:
            session: Open modification session
            edited: Edited event (defaults to the session's working copy)
            requested_by: Operator submitting the edits
            note: Note for the approver

        Returns:
            ExitResult describing how the session ended

        Raises:
            SessionClosed: If the session was already closed
            RemoteHardFailure: If the request could not be recorded; the
                session stays open so the operator can retry
        """
        session.ensure_open()
        edited = edited or session.event
        if edited.id != session.event.id:
            raise InvariantViolation(
                f"Edited event {edited.id} does not belong to session of event {session.event.id}"
            )

        previous = session.event
        now = self.time_provider.now()
        changes = diff(session.snapshot, edited, self.policy.watched_fields)
        request = build_modification_request(edited.id, changes, requested_by, now, note)

        if request is None:
            session.closed = True
            final, resumed, warnings = await self._leave(
                session,
                restore(session.event, session.snapshot),
                LifecycleAction.SUBMIT_EDIT,
                resume=session.paused_by_session,
            )
            session.event = final
            modification_requests_total.labels(outcome="no_changes").inc()
            self._record(
                previous, final, LifecycleAction.SUBMIT_EDIT, requested_by, changed_fields=[]
            )
            logger.info(
                "No changes detected, event left without modification request",
                event_id=final.id,
                session_id=session.session_id,
                resumed=resumed,
            )
            return ExitResult(
                outcome=ExitOutcome.NO_CHANGES,
                event=final,
                resumed=resumed,
                warnings=warnings,
            )

        with LogOperation(
            logger,
            "submit_modification_request",
            event_id=edited.id,
            session_id=session.session_id,
            fields=request.requested_fields,
            requested_by=requested_by,
            note=note,
        ):
            receipt = await self.caller.hard(
                "submit_modification_request",
                edited.id,
                partial(self.gateway.submit_modification_request, edited.id, request.to_payload()),
                action="submit modification request for",
            )

        if session.cancelled:
            logger.warning(
                "Session cancelled while request was in flight, result disregarded",
                event_id=edited.id,
                session_id=session.session_id,
                request_id=receipt.request_id,
            )
            return ExitResult(outcome=ExitOutcome.CANCELLED, event=session.event)

        if not receipt.created:
            modification_requests_total.labels(outcome="refused").inc()
            logger.error(
                "Modification request was not recorded, session left open",
                event_id=edited.id,
                session_id=session.session_id,
            )
            raise RemoteHardFailure(
                "submit modification request for", edited.id, "request was not recorded"
            )

        session.closed = True
        request = request.model_copy(update={"request_id": receipt.request_id})
        final, resumed, warnings = await self._leave(
            session,
            restore(session.event, session.snapshot),
            LifecycleAction.SUBMIT_EDIT,
            resume=receipt.resume,
        )
        session.event = final

        modification_requests_total.labels(outcome="submitted").inc()
        self._record(
            previous,
            final,
            LifecycleAction.SUBMIT_EDIT,
            requested_by,
            changed_fields=request.requested_fields,
            request_id=request.request_id,
        )
        return ExitResult(
            outcome=ExitOutcome.SUBMITTED,
            event=final,
            request=request,
            resumed=resumed,
            warnings=warnings,
        )

    # Explicit operator actions (must succeed or fail loudly)

    async def pause(
        self,
        event: ProcurementEvent,
        reason_id: str | None,
        actor_id: str | None = None,
    ) -> ProcurementEvent:
        """
        Pause a live event on operator request

        Pausing an already paused event is a successful no-op.

        Raises:
            PauseReasonRequired: If no reason was selected
            UnknownPauseReason: If the reason is not in the active catalog
            IllegalTransition: If the event is not live
            RemoteHardFailure: If the remote pause failed (event unchanged)
        """
        if is_noop(event, LifecycleAction.PAUSE):
            return event
        reason = validate_pause_reason(event.id, reason_id, self.policy)
        paused = transition(event, LifecycleAction.PAUSE, self.time_provider.now())

        await self.caller.hard(
            "pause_event",
            event.id,
            partial(self.gateway.pause_event, event.id, reason),
            action="pause",
        )
        self._record(event, paused, LifecycleAction.PAUSE, actor_id, reason_id=reason)
        return paused

    async def resume(
        self, event: ProcurementEvent, actor_id: str | None = None
    ) -> ProcurementEvent:
        """
        Resume a paused event on operator request

        Resuming an already approved event is a successful no-op.

        Raises:
            IllegalTransition: If the event is not PAUSED
            RemoteHardFailure: If the remote resume failed (event unchanged)
        """
        if is_noop(event, LifecycleAction.RESUME):
            return event
        resumed = transition(event, LifecycleAction.RESUME, self.time_provider.now())

        await self.caller.hard(
            "resume_event",
            event.id,
            partial(self.gateway.resume_event, event.id),
            action="resume",
        )
        self._record(event, resumed, LifecycleAction.RESUME, actor_id)
        return resumed
