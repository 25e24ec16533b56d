"""
Student Gateway Service - Main FastAPI Application
Dispatches client actions to the backend service
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from student_gateway import __version__
from student_gateway.core.config import Settings, get_settings
from student_gateway.services.backend_client import BackendClient
from student_gateway.services.dispatcher import ActionDispatcher
from student_gateway.routes import gateway, health
from student_gateway.middleware.request_id import RequestIDMiddleware
from student_gateway.middleware.logging import LoggingMiddleware
from student_gateway.monitoring.structured_logger import StructuredLogger, create_logger
from student_gateway.monitoring.correlation import get_correlation_id

def create_app(settings: Optional[Settings] = None,
               logger: Optional[StructuredLogger] = None) -> FastAPI:
    """Create and configure FastAPI application"""
    settings = settings or get_settings()
    logger = logger or create_logger(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager"""
        logger.info("Starting Student Gateway service",
                    service=settings.service_name,
                    environment=settings.environment.value,
                    version=__version__)

        config_issues = settings.validate_configuration()
        if config_issues:
            logger.error("Configuration validation failed", issues=config_issues)
            raise RuntimeError(f"Configuration issues: {', '.join(config_issues)}")

        backend_client = BackendClient(settings, logger)
        await backend_client.start()

        app.state.backend_client = backend_client
        app.state.dispatcher = ActionDispatcher(backend_client, logger)

        logger.info("Student Gateway startup completed", backend_url=settings.backend_url)

        yield

        logger.info("Shutting down Student Gateway service")
        await backend_client.close()

    app = FastAPI(
        title="Student Gateway",
        description="Request-dispatch gateway between the student web client and the backend service",
        version=__version__,
        docs_url="/docs" if settings.enable_swagger_ui else None,
        redoc_url="/redoc" if settings.enable_swagger_ui else None,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.logger = logger

    if settings.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Added last so it runs first and the logging middleware sees the request ID
    if settings.enable_request_logging:
        app.add_middleware(LoggingMiddleware, logger=logger)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(gateway.router, prefix="/api", tags=["gateway"])
    app.include_router(health.router, tags=["health"])

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        correlation_id = get_correlation_id()

        logger.error("HTTP exception occurred",
                     status_code=exc.status_code,
                     detail=exc.detail,
                     path=request.url.path,
                     method=request.method,
                     correlation_id=correlation_id)

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": exc.detail,
                "status": exc.status_code,
                "correlation_id": correlation_id,
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        correlation_id = get_correlation_id()

        logger.error("Unhandled exception occurred",
                     error=str(exc),
                     error_type=type(exc).__name__,
                     path=request.url.path,
                     method=request.method,
                     correlation_id=correlation_id)

        content = {
            "success": False,
            "error": "Internal server error",
            "errorKind": "internal",
            "status": 500,
            "correlation_id": correlation_id,
        }
        if settings.is_development:
            content["details"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    @app.get("/")
    async def root():
        return {
            "service": settings.service_name,
            "version": __version__,
            "environment": settings.environment.value,
            "status": "operational",
            "gateway_url": "/api/gateway",
            "health_url": "/health"
        }

    return app

def run() -> None:
    """Run the development server"""
    settings = get_settings()
    uvicorn.run(
        "student_gateway.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
        access_log=settings.enable_request_logging
    )

if __name__ == "__main__":
    run()
