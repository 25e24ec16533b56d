"""
Request ID Middleware
Generates and tracks unique request IDs for correlation
"""
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from student_gateway.monitoring.correlation import set_correlation_id

class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to generate and track request IDs"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())

        set_correlation_id(correlation_id)
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers["X-Correlation-ID"] = correlation_id
        return response
