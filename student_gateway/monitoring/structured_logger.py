"""
Structured Logger
Diagnostic logging built on structlog, emitted only in development
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import structlog

from student_gateway.core.config import Environment, Settings


def _drop_event(logger, method_name, event_dict):
    raise structlog.DropEvent


class StructuredLogger:
    """Key-value logger injected into every gateway component.

    Whether anything is written is decided once, when the logger is built:
    in the development environment events are rendered and handed to the
    stdlib logger named after the service; in every other environment the
    processor chain drops them.
    """

    def __init__(
        self,
        service_name: str,
        environment: str = Environment.DEVELOPMENT.value,
        log_level: str = "INFO",
        enabled: Optional[bool] = None,
    ):
        self.service_name = service_name
        self.environment = environment
        self.enabled = environment == Environment.DEVELOPMENT.value if enabled is None else enabled

        stdlib_logger = logging.getLogger(service_name)
        if self.enabled:
            stdlib_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
            processors = [
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso", utc=True),
                structlog.processors.format_exc_info,
                structlog.processors.KeyValueRenderer(
                    key_order=["timestamp", "level", "event"], sort_keys=True
                ),
            ]
        else:
            processors = [_drop_event]

        self._logger = structlog.wrap_logger(
            stdlib_logger,
            processors=processors,
            wrapper_class=structlog.stdlib.BoundLogger,
        ).bind(service=service_name, environment=environment)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._logger.error(message, **kwargs)

    def _get_timestamp(self) -> str:
        """Get current timestamp"""
        return datetime.now(timezone.utc).isoformat()


def create_logger(settings: Settings) -> StructuredLogger:
    """Build the process-wide logger from settings"""
    if settings.is_development:
        logging.basicConfig(format="%(message)s")
    return StructuredLogger(
        service_name=settings.service_name,
        environment=settings.environment.value,
        log_level=settings.log_level.value,
    )
