"""
Language Preference Resolver
Cache-first reads and write-through updates of the student's interface language
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional, Protocol, Union

from .preference_models import DEFAULT_LANGUAGE, Language, SyncOutcome, SyncStatus
from .preference_storage import PreferenceStore
from student_gateway.services.backend_client import ErrorKind
from student_gateway.services.dispatcher import Action, DispatchResult
from student_gateway.monitoring.structured_logger import StructuredLogger


class Dispatcher(Protocol):
    async def dispatch(self, action: Optional[str],
                       payload: Optional[Mapping[str, Any]] = None) -> DispatchResult:
        ...


class CacheLookup(ABC):
    """One tier of the read path.

    An authoritative hit ends resolution; a non-authoritative hit is adopted
    but still reconciled with the backend.
    """

    name: str = "cache"
    authoritative: bool = False

    def __init__(self, store: PreferenceStore):
        self.store = store

    @abstractmethod
    def try_get(self) -> Optional[Language]:
        pass

    def _parse(self, value: Any) -> Optional[Language]:
        if value is None:
            return None
        language = Language.parse(value)
        if language is None:
            self.store.logger.warning("Ignoring unsupported cached language",
                                      source=self.name, language=value)
        return language


class ProfileCacheLookup(CacheLookup):
    name = "profile"
    authoritative = True

    def try_get(self) -> Optional[Language]:
        profile = self.store.get_profile()
        if not profile or not profile.get("language"):
            return None
        return self._parse(profile["language"])


class SessionCacheLookup(CacheLookup):
    name = "session"
    authoritative = False

    def try_get(self) -> Optional[Language]:
        return self._parse(self.store.get_session_language())


class PreferenceResolver:
    """Resolves and updates the language preference across memory, caches and backend"""

    def __init__(
        self,
        store: PreferenceStore,
        dispatcher: Dispatcher,
        logger: StructuredLogger,
        forced_language: Optional[Language] = None,
        lookups: Optional[List[CacheLookup]] = None,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.logger = logger
        self.forced_language = forced_language
        self.lookups = lookups if lookups is not None else [
            ProfileCacheLookup(store),
            SessionCacheLookup(store),
        ]

        self._language: Language = forced_language or DEFAULT_LANGUAGE
        # Bumped on every local write so a slower reconciliation cannot overwrite it
        self._version = 0
        self._write_lock = asyncio.Lock()
        self.last_sync: Optional[SyncOutcome] = None

    @property
    def language(self) -> Language:
        return self.forced_language or self._language

    async def resolve(self) -> Language:
        """Read path: forced language, then caches in priority order, then backend"""
        if self.forced_language:
            return self.forced_language

        for lookup in self.lookups:
            cached = lookup.try_get()
            if cached is None:
                continue

            self._language = cached
            if lookup.authoritative:
                self.logger.debug("Language resolved from cache", source=lookup.name,
                                  language=cached.value)
                return self._language
            break

        self.last_sync = await self._reconcile()
        return self._language

    async def update(self, new_language: Union[Language, str]) -> None:
        """Write path: local state first, then a best-effort backend write"""
        language = Language.parse(new_language)
        if language is None:
            raise ValueError(f"Unsupported language: {new_language!r}")

        self._language = language
        self._version += 1
        self.store.set_session_language(language)
        self._write_profile_language(language)

        async with self._write_lock:
            self.last_sync = await self._push(language)

    async def _reconcile(self) -> SyncOutcome:
        action = Action.GET_STUDENT_PROFILE.value
        uid = self.store.get_identity()
        if not uid:
            return SyncOutcome.skipped(action, "no identity")

        version = self._version
        result = await self._dispatch(action, {"uid": uid})
        if not result.success:
            return self._sync_failed(action, result.message or "dispatch failed")

        data = result.data if isinstance(result.data, dict) else {}
        if not data.get("success") or not data.get("language"):
            return self._sync_failed(action, "profile response carried no language")

        language = Language.parse(data["language"])
        if language is None:
            return self._sync_failed(action, f"unsupported language {data['language']!r}")

        if version != self._version:
            return SyncOutcome.skipped(action, "superseded by a local update")

        self._language = language
        self.store.set_session_language(language)
        self._write_profile_language(language)

        self.logger.info("Language reconciled with backend", language=language.value)
        return SyncOutcome(status=SyncStatus.SYNCED, action=action, language=language)

    async def _push(self, language: Language) -> SyncOutcome:
        action = Action.UPDATE_LANGUAGE.value
        uid = self.store.get_identity()
        if not uid:
            return SyncOutcome.skipped(action, "no identity")

        result = await self._dispatch(action, {"uid": uid, "language": language.value})
        if not result.success:
            return self._sync_failed(action, result.message or "dispatch failed")

        return SyncOutcome(status=SyncStatus.SYNCED, action=action, language=language)

    def _write_profile_language(self, language: Language) -> None:
        profile = self.store.get_profile()
        if profile is not None:
            profile["language"] = language.value
            self.store.set_profile(profile)

    async def _dispatch(self, action: str, payload: Mapping[str, Any]) -> DispatchResult:
        try:
            return await self.dispatcher.dispatch(action, payload)
        except Exception as e:
            return DispatchResult.failure(ErrorKind.INTERNAL, 500, str(e) or type(e).__name__)

    def _sync_failed(self, action: str, error: str) -> SyncOutcome:
        self.logger.error("Failed to sync language preference", action=action, error=error)
        return SyncOutcome.failed(action, error)
