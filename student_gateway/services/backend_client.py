"""
Backend Client for communicating with the backend service
Single attempt per call with a hard timeout and failure classification
"""
import asyncio
import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

import httpx

from student_gateway.core.config import Settings
from student_gateway.monitoring.correlation import get_correlation_id
from student_gateway.monitoring.structured_logger import StructuredLogger

class ErrorKind(str, Enum):
    VALIDATION = "validation"
    BACKEND_ERROR = "backend-error"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"
    CONNECTION_FAILED = "connection-failed"
    INTERNAL = "internal"

@dataclass
class BackendResponse:
    """Raw response of a completed backend call"""
    status_code: int
    reason_phrase: str = ""
    body: bytes = b""
    duration_ms: float = 0
    endpoint: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Decode the body as JSON; raises ValueError when it is not JSON"""
        return json.loads(self.body)

@dataclass
class ClientError:
    """Transport-level failure of a backend call"""
    error_kind: ErrorKind
    status_code: int
    message: str
    details: Optional[str] = None
    duration_ms: float = 0
    endpoint: str = ""

CallResult = Union[BackendResponse, ClientError]

class BackendClient:
    """Client for the single configured backend service"""

    def __init__(
        self,
        settings: Settings,
        logger: StructuredLogger,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.logger = logger
        self.base_url = settings.backend_url
        self.timeout_seconds = settings.backend_timeout_seconds

        self.http_client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Content-Type": "application/json",
                "User-Agent": f"{settings.service_name}/1.0",
            },
            timeout=httpx.Timeout(self.timeout_seconds),
            transport=transport,
        )

    async def start(self):
        self.logger.info("Backend client started", base_url=self.base_url)

    async def close(self):
        await self.http_client.aclose()

    async def call(
        self,
        endpoint: str,
        method: str,
        body: Optional[Any] = None,
        timeout_seconds: Optional[float] = None,
    ) -> CallResult:
        """Make one request to the backend; never raises for transport failures"""
        timeout = timeout_seconds or self.timeout_seconds
        correlation_id = get_correlation_id()
        start_time = time.time()

        self.logger.debug("Making request to backend",
                          method=method,
                          endpoint=endpoint,
                          correlation_id=correlation_id)

        try:
            # wait_for cancels the in-flight request when the ceiling is hit
            response = await asyncio.wait_for(
                self._send(endpoint, method, body, correlation_id),
                timeout=timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            return self._failure(ErrorKind.TIMEOUT, 504, "Request timeout",
                                 e, endpoint, start_time, correlation_id)
        except httpx.ConnectError as e:
            return self._failure(ErrorKind.UNAVAILABLE, 503, "Backend service unavailable",
                                 e, endpoint, start_time, correlation_id)
        except httpx.HTTPError as e:
            return self._failure(ErrorKind.CONNECTION_FAILED, 502, "Failed to connect to backend",
                                 e, endpoint, start_time, correlation_id)

        duration_ms = (time.time() - start_time) * 1000

        self.logger.debug("Backend request completed",
                          method=method,
                          endpoint=endpoint,
                          status_code=response.status_code,
                          duration_ms=round(duration_ms, 2),
                          correlation_id=correlation_id)

        return BackendResponse(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            body=response.content,
            duration_ms=duration_ms,
            endpoint=endpoint,
        )

    async def _send(
        self,
        endpoint: str,
        method: str,
        body: Optional[Any],
        correlation_id: str,
    ) -> httpx.Response:
        method = method.upper()
        request_kwargs: Dict[str, Any] = {"headers": {"X-Correlation-ID": correlation_id}}
        if method != "GET" and body is not None:
            request_kwargs["json"] = body

        return await self.http_client.request(method, endpoint, **request_kwargs)

    def _failure(
        self,
        error_kind: ErrorKind,
        status_code: int,
        message: str,
        exc: BaseException,
        endpoint: str,
        start_time: float,
        correlation_id: str,
    ) -> ClientError:
        duration_ms = (time.time() - start_time) * 1000

        self.logger.error("Backend request failed",
                          endpoint=endpoint,
                          error_kind=error_kind.value,
                          error=str(exc) or type(exc).__name__,
                          error_type=type(exc).__name__,
                          duration_ms=round(duration_ms, 2),
                          correlation_id=correlation_id)

        return ClientError(
            error_kind=error_kind,
            status_code=status_code,
            message=message,
            details=str(exc) or type(exc).__name__,
            duration_ms=duration_ms,
            endpoint=endpoint,
        )
