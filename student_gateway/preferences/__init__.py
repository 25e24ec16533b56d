"""
Language Preference Management
Caching, resolution and backend synchronization of the interface language
"""

from .preference_models import (
    Language,
    DEFAULT_LANGUAGE,
    SyncStatus,
    SyncOutcome
)

from .preference_storage import (
    KeyValueStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    PreferenceStore
)

from .preference_resolver import (
    CacheLookup,
    ProfileCacheLookup,
    SessionCacheLookup,
    PreferenceResolver
)

__all__ = [
    # Models
    "Language",
    "DEFAULT_LANGUAGE",
    "SyncStatus",
    "SyncOutcome",

    # Storage Layer
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "PreferenceStore",

    # Resolution
    "CacheLookup",
    "ProfileCacheLookup",
    "SessionCacheLookup",
    "PreferenceResolver"
]
