"""
In-memory gateway - deterministic stand-in for the approval authority

Used by tests, the CLI and offline demos. Records every call and lets a
test inject failures or delays per operation.

Decision model: an award with no local rule warnings is auto-approved, any
warning starts an approval workflow (unless overridden with auto_approve).
"""

import asyncio
from typing import Any

from pydantic import BaseModel, Field

from sourcing_governance.gateway.base import AwardDecision, ModificationReceipt
from sourcing_governance.kernel.errors import RemoteCallError
from sourcing_governance.kernel.ids import generate_id


class GatewayCall(BaseModel):
    """One recorded gateway call"""

    operation: str
    event_id: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)


class InMemoryGateway:
    """
    ProcurementGateway kept entirely in memory

    Example:
        gateway = InMemoryGateway(award_rules=[{"kind": "value_threshold", "threshold": 100}])
        gateway.fail("pause_event")
        ...
        assert gateway.operations() == ["pause_event"]
    """

    def __init__(
        self,
        award_rules: Any = None,
        auto_approve: bool | None = None,
        resume_after_modification: bool = False,
    ) -> None:
        self.award_rules = award_rules
        self.auto_approve = auto_approve
        self.resume_after_modification = resume_after_modification
        self.calls: list[GatewayCall] = []
        self.paused: set[str] = set()
        self.modification_requests: list[dict[str, Any]] = []
        self.awards: dict[str, dict[str, Any]] = {}
        self.notifications: list[tuple[str, dict[str, Any]]] = []
        self._failures: dict[str, tuple[RemoteCallError | None, int | None]] = {}
        self._delays: dict[str, float] = {}

    def fail(
        self,
        operation: str,
        error: RemoteCallError | None = None,
        times: int | None = None,
    ) -> None:
        """
        Make an operation fail

        Args:
            operation: Gateway method name (e.g. "pause_event")
            error: Error to raise (defaults to a RemoteCallError with status 503)
            times: Fail this many calls, then succeed again (None = always)
        """
        self._failures[operation] = (error, times)

    def delay(self, operation: str, seconds: float) -> None:
        """Make an operation take at least this long (timeout tests)"""
        self._delays[operation] = seconds

    def operations(self) -> list[str]:
        """Names of the recorded calls, in order"""
        return [call.operation for call in self.calls]

    async def _call(
        self, operation: str, event_id: str | None, payload: dict[str, Any] | None = None
    ) -> None:
        self.calls.append(
            GatewayCall(operation=operation, event_id=event_id, payload=dict(payload or {}))
        )

        if operation in self._delays:
            await asyncio.sleep(self._delays[operation])

        if operation in self._failures:
            error, remaining = self._failures[operation]
            if remaining is not None:
                if remaining <= 1:
                    del self._failures[operation]
                else:
                    self._failures[operation] = (error, remaining - 1)
            raise error or RemoteCallError(operation, "service unavailable", status_code=503)

    async def pause_event(self, event_id: str, reason_id: str | None = None) -> None:
        await self._call("pause_event", event_id, {"reason_id": reason_id})
        self.paused.add(event_id)

    async def resume_event(self, event_id: str) -> None:
        await self._call("resume_event", event_id)
        self.paused.discard(event_id)

    async def fetch_award_rules(self) -> Any:
        await self._call("fetch_award_rules", None)
        return self.award_rules

    async def submit_modification_request(
        self, event_id: str, payload: dict[str, Any]
    ) -> ModificationReceipt:
        await self._call("submit_modification_request", event_id, payload)
        request_id = generate_id()
        self.modification_requests.append({"request_id": request_id, **payload})
        return ModificationReceipt(
            created=True,
            resume=self.resume_after_modification,
            request_id=request_id,
        )

    async def initiate_award(self, event_id: str, payload: dict[str, Any]) -> AwardDecision:
        await self._call("initiate_award", event_id, payload)
        warnings = list(payload.get("check_warnings") or [])
        approved = self.auto_approve if self.auto_approve is not None else not warnings
        award_id = generate_id()
        self.awards[award_id] = {"event_id": event_id, "approved": approved, **payload}
        if approved:
            return AwardDecision(approved=True, message="Award auto-approved", award_id=award_id)
        return AwardDecision(
            approved=False,
            message="Approval workflow started.",
            warnings=warnings,
            award_id=award_id,
        )

    async def send_notification(self, kind: str, payload: dict[str, Any]) -> None:
        await self._call("send_notification", payload.get("event_id"), {"kind": kind, **payload})
        self.notifications.append((kind, payload))
