"""
Preference Storage Layer
Key-value stores for the durable profile channel and the session channel
"""
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .preference_models import Language
from student_gateway.monitoring.structured_logger import StructuredLogger

PROFILE_KEY = "profile"
SESSION_LANGUAGE_KEY = "appLanguage"
IDENTITY_KEY = "studentId"


class KeyValueStore(ABC):
    """Opaque string key-value store"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get a value, or None if the key is not set"""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Set a value"""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a key; returns whether it existed"""
        pass


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store, lives as long as the process"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> bool:
        return self._values.pop(key, None) is not None


class JsonFileKeyValueStore(KeyValueStore):
    """Durable store persisted as a single JSON object on disk"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, values: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(values), encoding="utf-8")
        tmp_path.replace(self.path)

    def get(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        values = self._load()
        values[key] = value
        self._save(values)

    def delete(self, key: str) -> bool:
        values = self._load()
        if key not in values:
            return False
        del values[key]
        self._save(values)
        return True


class PreferenceStore:
    """Profile and session channels used to cache the language preference"""

    def __init__(self, profile_store: KeyValueStore, session_store: KeyValueStore,
                 logger: StructuredLogger):
        self.profile_store = profile_store
        self.session_store = session_store
        self.logger = logger

    def get_profile(self) -> Optional[Dict[str, Any]]:
        """Cached profile record, or None if absent or unreadable"""
        raw = self.profile_store.get(PROFILE_KEY)
        if not raw:
            return None

        try:
            profile = json.loads(raw)
        except json.JSONDecodeError as e:
            self.logger.warning("Ignoring unreadable profile record", error=str(e))
            return None

        if not isinstance(profile, dict):
            self.logger.warning("Ignoring profile record that is not an object")
            return None
        return profile

    def set_profile(self, profile: Dict[str, Any]) -> None:
        self.profile_store.set(PROFILE_KEY, json.dumps(profile))

    def get_session_language(self) -> Optional[str]:
        return self.session_store.get(SESSION_LANGUAGE_KEY) or None

    def set_session_language(self, language: Language) -> None:
        self.session_store.set(SESSION_LANGUAGE_KEY, language.value)

    def get_identity(self) -> Optional[str]:
        """Student id from the profile channel, falling back to the session"""
        return self.profile_store.get(IDENTITY_KEY) or self.session_store.get(IDENTITY_KEY) or None
