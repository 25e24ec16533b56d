"""
Correlation ID tracking for the current request context
"""
import uuid
from contextvars import ContextVar
from typing import Optional

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

def get_correlation_id() -> str:
    """Get the correlation ID of the current context, generating one if unset"""
    correlation_id = _correlation_id.get()
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
        _correlation_id.set(correlation_id)
    return correlation_id

def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)

def clear_correlation_id() -> None:
    _correlation_id.set(None)
