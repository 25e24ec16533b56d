"""
Gateway Routes
Single entry point translating ``{action, payload}`` into a backend call
"""
import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from student_gateway.core.config import Settings
from student_gateway.services.backend_client import ErrorKind
from student_gateway.services.dispatcher import ActionDispatcher, DispatchResult
from student_gateway.monitoring.correlation import get_correlation_id

router = APIRouter()

class GatewayRequest(BaseModel):
    """Request model for a gateway call"""
    action: Optional[str] = Field(None, description="Action to dispatch")
    payload: Optional[Dict[str, Any]] = Field(None, description="Action-specific payload")

def get_dispatcher(request: Request) -> ActionDispatcher:
    """Dependency to get the action dispatcher from app state"""
    return request.app.state.dispatcher

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_logger(request: Request):
    """Dependency to get logger from app state"""
    return request.app.state.logger

def _respond(request: Request, result: DispatchResult) -> JSONResponse:
    if not result.success and result.error_kind:
        # Reported by the logging middleware
        request.state.gateway_error_kind = result.error_kind.value
    return JSONResponse(content=result.to_content(), status_code=result.http_status)

@router.post("/gateway")
async def gateway(
    request: Request,
    dispatcher: ActionDispatcher = Depends(get_dispatcher),
    settings: Settings = Depends(get_settings),
    logger = Depends(get_logger)
) -> JSONResponse:
    """Dispatch a logical action to the backend service"""
    correlation_id = get_correlation_id()

    try:
        try:
            gateway_request = GatewayRequest.model_validate(await request.json())
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
            logger.warning("Rejected malformed gateway request",
                           error=str(e),
                           correlation_id=correlation_id)
            return _respond(request, DispatchResult.validation_error("Invalid request body"))

        request.state.gateway_action = gateway_request.action
        result = await dispatcher.dispatch(gateway_request.action, gateway_request.payload)

        return _respond(request, result)

    except Exception as e:
        logger.error("Gateway internal error",
                     error=str(e),
                     error_type=type(e).__name__,
                     correlation_id=correlation_id)

        return _respond(request, DispatchResult.failure(
            ErrorKind.INTERNAL,
            500,
            "Internal server error",
            details=str(e) if settings.is_development else None,
        ))
