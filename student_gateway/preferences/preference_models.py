"""
Language Preference Data Models
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class Language(str, Enum):
    """Supported interface languages"""
    ENGLISH = "English"
    HINDI = "Hindi"

    @classmethod
    def parse(cls, value: Any) -> Optional["Language"]:
        """Return the matching language, or None for unknown values"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


DEFAULT_LANGUAGE = Language.ENGLISH


class SyncStatus(str, Enum):
    """Result of a best-effort sync with the backend"""
    SYNCED = "synced"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class SyncOutcome:
    """Outcome of a background preference sync.

    Returned instead of raising so callers can ignore it; the resolver keeps
    the latest one for diagnostics.
    """
    status: SyncStatus
    action: str
    language: Optional[Language] = None
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def succeeded(self) -> bool:
        return self.status == SyncStatus.SYNCED

    @classmethod
    def skipped(cls, action: str, reason: str) -> "SyncOutcome":
        return cls(status=SyncStatus.SKIPPED, action=action, error=reason)

    @classmethod
    def failed(cls, action: str, error: str) -> "SyncOutcome":
        return cls(status=SyncStatus.FAILED, action=action, error=error)
