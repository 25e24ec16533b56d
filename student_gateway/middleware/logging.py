"""
Logging Middleware
Request/response logging with timing; gateway calls also report the dispatched
action and, on failure, its error kind
"""
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from student_gateway.monitoring.structured_logger import StructuredLogger

class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging"""

    def __init__(self, app, logger: StructuredLogger):
        super().__init__(app)
        self.logger = logger

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        correlation_id = getattr(request.state, "correlation_id", None)

        self.logger.info("Incoming request",
                         method=request.method,
                         path=request.url.path,
                         client_ip=self._get_client_ip(request),
                         correlation_id=correlation_id)

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self.logger.error("Request failed",
                              method=request.method,
                              path=request.url.path,
                              error=str(e),
                              error_type=type(e).__name__,
                              duration_ms=round(duration_ms, 2),
                              correlation_id=correlation_id)
            raise

        duration_ms = (time.time() - start_time) * 1000
        self.logger.info("Request completed",
                         method=request.method,
                         path=request.url.path,
                         action=getattr(request.state, "gateway_action", None),
                         error_kind=getattr(request.state, "gateway_error_kind", None),
                         status_code=response.status_code,
                         duration_ms=round(duration_ms, 2),
                         correlation_id=correlation_id)

        response.headers["X-Response-Time"] = f"{round(duration_ms, 2)}ms"
        return response

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP address from request"""
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        if request.client:
            return request.client.host

        return "unknown"
