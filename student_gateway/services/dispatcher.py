"""
Action Dispatcher
Maps a logical gateway action onto a backend endpoint call
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import quote

from student_gateway.services.backend_client import (
    BackendClient, BackendResponse, ClientError, ErrorKind
)
from student_gateway.monitoring.structured_logger import StructuredLogger

# encodeURIComponent leaves these unescaped in addition to quote()'s defaults
_URI_COMPONENT_SAFE = "!~*'()"

class Action(str, Enum):
    VERIFY_BARCODE = "verify-barcode"
    GET_STUDENT_PROFILE = "get-student-profile"
    UPDATE_LANGUAGE = "update-language"
    ANALYZE_HEALTH = "analyze-health"

@dataclass(frozen=True)
class ActionRoute:
    """Backend endpoint mapping for one action"""
    endpoint: str
    method: str = "POST"
    required_fields: Tuple[str, ...] = ()

    @property
    def sends_body(self) -> bool:
        return self.method != "GET"

    def build_endpoint(self, payload: Mapping[str, Any]) -> str:
        path_params = {
            name: quote(str(payload[name]), safe=_URI_COMPONENT_SAFE)
            for name in self.required_fields
        }
        return self.endpoint.format(**path_params)

ACTION_ROUTES: Dict[Action, ActionRoute] = {
    Action.VERIFY_BARCODE: ActionRoute("/api/read-barcode"),
    Action.GET_STUDENT_PROFILE: ActionRoute(
        "/api/student-profile/{uid}", method="GET", required_fields=("uid",)
    ),
    Action.UPDATE_LANGUAGE: ActionRoute("/api/update-language"),
    Action.ANALYZE_HEALTH: ActionRoute("/api/analyze"),
}

@dataclass
class DispatchResult:
    """Outcome of a dispatched action.

    A successful result carries the backend's JSON body untouched in ``data``.
    A failed result carries the normalized error fields.
    """
    success: bool
    data: Any = None
    error_kind: Optional[ErrorKind] = None
    http_status: int = 200
    message: Optional[str] = None
    details: Any = None

    @classmethod
    def ok(cls, data: Any) -> "DispatchResult":
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error_kind: ErrorKind,
        http_status: int,
        message: str,
        details: Any = None,
    ) -> "DispatchResult":
        return cls(
            success=False,
            error_kind=error_kind,
            http_status=http_status,
            message=message,
            details=details,
        )

    @classmethod
    def validation_error(cls, message: str) -> "DispatchResult":
        return cls.failure(ErrorKind.VALIDATION, 400, message)

    def to_content(self) -> Any:
        """JSON body returned to the gateway caller"""
        if self.success:
            return self.data

        content = {
            "success": False,
            "error": self.message,
            "errorKind": self.error_kind.value if self.error_kind else None,
            "httpStatus": self.http_status,
            "status": self.http_status,
        }
        if self.details is not None:
            content["details"] = self.details
        return content

class ActionDispatcher:
    """Gateway between logical actions and the backend client"""

    def __init__(self, backend_client: BackendClient, logger: StructuredLogger):
        self.backend_client = backend_client
        self.logger = logger

    async def dispatch(
        self,
        action: Optional[str],
        payload: Optional[Mapping[str, Any]] = None,
    ) -> DispatchResult:
        """Validate the action, call its backend endpoint and normalize the outcome"""
        if not action:
            return DispatchResult.validation_error("Missing action")

        try:
            resolved_action = Action(action)
        except ValueError:
            self.logger.warning("Rejected unknown gateway action", action=action)
            return DispatchResult.validation_error("Invalid action")

        route = ACTION_ROUTES[resolved_action]
        for name in route.required_fields:
            value = payload.get(name) if payload else None
            if value is None or value == "":
                return DispatchResult.validation_error(f"Missing {name}")

        endpoint = route.build_endpoint(payload or {})
        body = dict(payload) if route.sends_body and payload is not None else None

        self.logger.info("Dispatching gateway action",
                         action=resolved_action.value,
                         endpoint=endpoint,
                         method=route.method)

        outcome = await self.backend_client.call(endpoint, route.method, body)

        if isinstance(outcome, ClientError):
            return DispatchResult.failure(
                outcome.error_kind,
                outcome.status_code,
                outcome.message,
                details=outcome.details,
            )

        return self._from_response(resolved_action, outcome)

    def _from_response(self, action: Action, response: BackendResponse) -> DispatchResult:
        if not response.is_success:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {"message": response.reason_phrase}

            self.logger.warning("Backend returned an error",
                                action=action.value,
                                status_code=response.status_code,
                                details=error_data)

            return DispatchResult.failure(
                ErrorKind.BACKEND_ERROR,
                response.status_code,
                "Backend error",
                details=error_data,
            )

        try:
            data = response.json()
        except ValueError as e:
            self.logger.error("Backend returned an unreadable body",
                              action=action.value,
                              status_code=response.status_code,
                              error=str(e))
            return DispatchResult.failure(
                ErrorKind.CONNECTION_FAILED,
                502,
                "Failed to connect to backend",
                details=str(e),
            )

        self.logger.info("Gateway action completed",
                         action=action.value,
                         status_code=response.status_code,
                         duration_ms=round(response.duration_ms, 2))

        return DispatchResult.ok(data)
