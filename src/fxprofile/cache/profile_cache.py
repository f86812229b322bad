"""Profile cache: the only shared mutable state in fxprofile.

Operations on one owner are serialized by that owner's lock, so a cascading
invalidation is never observed half-done. Different owners proceed
concurrently. The cache does not filter by confidence; consumers that must
not see weak classifications use ``list_confident_profiles``.
"""

from typing import Dict, List, Optional
import logging
import threading

from ..constants import DEFAULT_MIN_CONFIDENCE
from ..parameters import OwnerIdentity, ParameterIdentity, ParameterProfile
from .store import ProfileStore

logger = logging.getLogger(__name__)


class ProfileCache:
    """Keyed cache of parameter profiles over a ProfileStore.

    Pass the cache explicitly to whatever needs it; there is no global instance.

    One lock is kept per owner ever seen, including invalidated owners, so a
    thread already waiting on an owner's lock always shares it with later
    callers. The lock table grows with the number of distinct owners, which is
    bounded by the plugins installed on the host.

    Example:
        >>> cache = ProfileCache(InMemoryProfileStore())
        >>> cache.put(profile.identity, profile)
        >>> cache.get(profile.identity) is profile
        True
    """

    def __init__(self, store: ProfileStore):
        self.store = store
        self._owner_locks: Dict[OwnerIdentity, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def _owner_lock(self, owner: OwnerIdentity) -> threading.RLock:
        with self._locks_guard:
            lock = self._owner_locks.get(owner)
            if lock is None:
                lock = self._owner_locks[owner] = threading.RLock()
            return lock

    def get(self, identity: ParameterIdentity) -> Optional[ParameterProfile]:
        """Profile for a parameter, or None if it was never stored or was invalidated.

        Raises:
            ProfileStoreError: If the store is unavailable
        """
        with self._owner_lock(identity.owner):
            profile = self.store.get(identity)
        logger.debug(f"Cache {'hit' if profile is not None else 'miss'} for {identity}")
        return profile

    def put(self, identity: ParameterIdentity, profile: ParameterProfile) -> None:
        """Store a profile, fully replacing any existing entry.

        Raises:
            ValueError: If the profile belongs to a different identity
            ProfileStoreError: If the store is unavailable
        """
        if profile.identity != identity:
            raise ValueError(f"Profile identity {profile.identity} does not match key {identity}")
        with self._owner_lock(identity.owner):
            self.store.put(profile)
        logger.debug(f"Cached profile for {identity} ({profile.classification.label}, {profile.confidence:.2f})")

    def invalidate_owner(self, owner: OwnerIdentity) -> int:
        """Delete every profile of an owner.

        Returns:
            Number of profiles deleted
        """
        with self._owner_lock(owner):
            deleted = self.store.delete_owner(owner)
        logger.info(f"Invalidated {deleted} cached profiles for {owner}")
        return deleted

    def get_profile(self, identity: ParameterIdentity) -> Optional[ParameterProfile]:
        """Consumer-facing alias of ``get``."""
        return self.get(identity)

    def list_profiles(self, owner: OwnerIdentity) -> List[ParameterProfile]:
        """All profiles of an owner regardless of confidence, by parameter index."""
        with self._owner_lock(owner):
            return self.store.list_owner(owner)

    def list_confident_profiles(
        self,
        owner: OwnerIdentity,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
    ) -> List[ParameterProfile]:
        """Profiles of an owner whose confidence is at least ``min_confidence``."""
        if not (0.0 <= min_confidence <= 1.0):
            raise ValueError(f"min_confidence must be in [0, 1], got {min_confidence}")
        return [p for p in self.list_profiles(owner) if p.confidence >= min_confidence]

    def owners(self) -> List[OwnerIdentity]:
        """Owners with at least one cached profile."""
        return self.store.owners()
