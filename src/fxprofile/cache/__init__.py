"""Profile persistence and caching."""

from .store import ProfileStore, InMemoryProfileStore
from .sqlite import SQLiteProfileStore
from .profile_cache import ProfileCache

__all__ = [
    "ProfileStore",
    "InMemoryProfileStore",
    "SQLiteProfileStore",
    "ProfileCache",
]
