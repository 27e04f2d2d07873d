"""
HTTP gateway - talks to the approval authority's REST API with httpx

Transient transport failures (connection errors, 429 and 5xx) are retried
with exponential backoff via tenacity. Whatever still fails is raised as
RemoteCallError so workflows can classify it as soft or hard.

Endpoints:
    POST /brfq/{id}/pause                 {"reasonId": ...}
    POST /brfq/{id}/resume
    GET  /admin/workflow/award            award workflow config
    POST /brfq/{id}/modification-request  modification request payload
    POST /awards/initiate                 award payload
    POST /notifications                   {"kind": ..., "payload": ...}
"""

from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from sourcing_governance.event.models import AwardRecord
from sourcing_governance.gateway.base import AwardDecision, ModificationReceipt
from sourcing_governance.kernel.errors import RemoteCallError
from sourcing_governance.kernel.logging import get_logger
from sourcing_governance.kernel.policy import GovernancePolicy
from sourcing_governance.kernel.retry import transient_http_retrying

logger = get_logger(__name__)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code} {response.reason_phrase}".strip()


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _award_record(raw: Any) -> AwardRecord | None:
    if not isinstance(raw, dict):
        return None
    try:
        return AwardRecord.model_validate(raw)
    except PydanticValidationError as exc:
        logger.warning("Ignoring malformed award record from approval authority", error=str(exc))
        return None


class HttpProcurementGateway:
    """
    ProcurementGateway backed by an HTTP API

    Example:
        async with HttpProcurementGateway("https://sourcing.example.com/api") as gateway:
            await gateway.pause_event("rfq-001", reason_id="supplier-query")
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 10.0,
        retry_attempts: int = 3,
        min_wait_ms: int = 100,
        max_wait_ms: int = 2000,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.retry_attempts = retry_attempts
        self.min_wait_ms = min_wait_ms
        self.max_wait_ms = max_wait_ms
        self.headers = headers or {}
        self._client = client

    @classmethod
    def from_policy(
        cls, base_url: str, policy: GovernancePolicy, **kwargs: Any
    ) -> "HttpProcurementGateway":
        """Build a gateway using the policy's timeout and retry settings"""
        return cls(
            base_url,
            timeout_seconds=policy.remote_timeout_seconds,
            retry_attempts=policy.remote_retry_attempts,
            **kwargs,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_seconds,
                headers=self.headers,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the underlying HTTP client"""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpProcurementGateway":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(
        self, operation: str, method: str, path: str, **kwargs: Any
    ) -> httpx.Response:
        """
        Send a request, retrying transient failures

        Raises:
            RemoteCallError: On any HTTP or transport failure that survives retries
        """
        client = await self._get_client()
        try:
            async for attempt in transient_http_retrying(
                max_attempts=self.retry_attempts,
                min_wait_ms=self.min_wait_ms,
                max_wait_ms=self.max_wait_ms,
            ):
                with attempt:
                    response = await client.request(method, path, **kwargs)
                    response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RemoteCallError(
                operation,
                _error_detail(exc.response),
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise RemoteCallError(operation, str(exc) or type(exc).__name__) from exc

        logger.debug(
            "HTTP call completed",
            operation=operation,
            method=method,
            path=path,
            status_code=response.status_code,
        )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def pause_event(self, event_id: str, reason_id: str | None = None) -> None:
        await self._request(
            "pause_event", "POST", f"/brfq/{event_id}/pause", json={"reasonId": reason_id}
        )

    async def resume_event(self, event_id: str) -> None:
        await self._request("resume_event", "POST", f"/brfq/{event_id}/resume", json={})

    async def fetch_award_rules(self) -> Any:
        response = await self._request("fetch_award_rules", "GET", "/admin/workflow/award")
        return self._json(response)

    async def submit_modification_request(
        self, event_id: str, payload: dict[str, Any]
    ) -> ModificationReceipt:
        response = await self._request(
            "submit_modification_request",
            "POST",
            f"/brfq/{event_id}/modification-request",
            json=payload,
        )
        data = self._json(response)
        if not isinstance(data, dict):
            return ModificationReceipt()
        body = data.get("data") if isinstance(data.get("data"), dict) else data
        return ModificationReceipt(
            created=bool(data.get("success", True)),
            resume=bool(body.get("resume", False)),
            request_id=_optional_str(body.get("id") or body.get("requestId")),
        )

    async def initiate_award(self, event_id: str, payload: dict[str, Any]) -> AwardDecision:
        response = await self._request(
            "initiate_award",
            "POST",
            "/awards/initiate",
            json={"event_id": event_id, **payload},
        )
        data = self._json(response)
        if not isinstance(data, dict) or "approved" not in data:
            raise RemoteCallError("initiate_award", "unexpected response from approval authority")
        warnings = data.get("warnings") or []
        return AwardDecision(
            approved=bool(data["approved"]),
            award=_award_record(data.get("award")),
            message=str(data.get("message") or ""),
            warnings=[str(w) for w in warnings] if isinstance(warnings, list) else [str(warnings)],
            award_id=_optional_str(data.get("awardId") or data.get("award_id")),
        )

    async def send_notification(self, kind: str, payload: dict[str, Any]) -> None:
        await self._request(
            "send_notification", "POST", "/notifications", json={"kind": kind, "payload": payload}
        )
