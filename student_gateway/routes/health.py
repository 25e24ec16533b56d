"""
Health Check Routes
Service liveness and configuration status
"""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from student_gateway import __version__
from student_gateway.monitoring.correlation import get_correlation_id

router = APIRouter()

@router.get("/health")
async def health_check(request: Request) -> JSONResponse:
    """Basic health check endpoint"""
    settings = request.app.state.settings
    logger = request.app.state.logger

    return JSONResponse(content={
        "status": "healthy",
        "timestamp": logger._get_timestamp(),
        "correlation_id": get_correlation_id(),
        "service": settings.service_name,
        "version": __version__,
        "environment": settings.environment.value,
        "backend": {
            "url": settings.backend_url,
            "timeout_seconds": settings.backend_timeout_seconds,
        },
    })

@router.get("/health/live")
async def liveness_check(request: Request) -> JSONResponse:
    """Kubernetes liveness probe endpoint"""
    return JSONResponse(content={
        "status": "alive",
        "timestamp": request.app.state.logger._get_timestamp(),
        "service": request.app.state.settings.service_name,
    })
