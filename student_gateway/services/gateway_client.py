"""
Gateway Client
HTTP client for the inbound gateway endpoint, for callers outside the gateway process
"""
from typing import Any, Mapping, Optional

import httpx

from student_gateway.services.backend_client import ErrorKind
from student_gateway.services.dispatcher import DispatchResult
from student_gateway.monitoring.structured_logger import StructuredLogger

class GatewayClient:
    """Posts ``{action, payload}`` to a running gateway and rebuilds the result"""

    def __init__(
        self,
        gateway_url: str,
        logger: StructuredLogger,
        timeout_seconds: float = 35.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.gateway_url = gateway_url
        self.logger = logger
        self.http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            transport=transport,
        )

    async def close(self):
        await self.http_client.aclose()

    async def dispatch(
        self,
        action: Optional[str],
        payload: Optional[Mapping[str, Any]] = None,
    ) -> DispatchResult:
        request_body = {"action": action, "payload": dict(payload) if payload is not None else None}

        try:
            response = await self.http_client.post(self.gateway_url, json=request_body)
        except httpx.TimeoutException as e:
            return DispatchResult.failure(ErrorKind.TIMEOUT, 504, "Request timeout", details=str(e))
        except httpx.ConnectError as e:
            return DispatchResult.failure(
                ErrorKind.UNAVAILABLE, 503, "Gateway unavailable", details=str(e)
            )
        except httpx.HTTPError as e:
            return DispatchResult.failure(
                ErrorKind.CONNECTION_FAILED, 502, "Failed to connect to gateway", details=str(e)
            )

        try:
            content = response.json()
        except ValueError as e:
            self.logger.warning("Gateway returned an unreadable body",
                                action=action,
                                status_code=response.status_code)
            return DispatchResult.failure(
                ErrorKind.CONNECTION_FAILED, 502, "Failed to connect to gateway", details=str(e)
            )

        if response.is_success:
            return DispatchResult.ok(content)

        return self._failure_from_envelope(response.status_code, content)

    def _failure_from_envelope(self, status_code: int, content: Any) -> DispatchResult:
        envelope = content if isinstance(content, dict) else {}

        try:
            error_kind = ErrorKind(envelope.get("errorKind"))
        except ValueError:
            error_kind = ErrorKind.INTERNAL if status_code >= 500 else ErrorKind.VALIDATION

        return DispatchResult.failure(
            error_kind,
            envelope.get("httpStatus", status_code),
            envelope.get("error") or f"HTTP {status_code}",
            details=envelope.get("details"),
        )
