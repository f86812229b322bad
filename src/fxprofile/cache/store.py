"""Persistence store protocol and the in-memory store."""

from typing import Dict, List, Optional, Protocol
import threading

from ..parameters import OwnerIdentity, ParameterIdentity, ParameterProfile


class ProfileStore(Protocol):
    """Protocol for profile persistence.

    A keyed table of profiles indexed by ``(owner, parameter_index)``.
    Implementations raise ProfileStoreError for I/O failures and return
    ``None`` for missing keys.
    """

    def get(self, identity: ParameterIdentity) -> Optional[ParameterProfile]:
        """Load the profile for a parameter, or None if absent."""
        ...

    def put(self, profile: ParameterProfile) -> None:
        """Store a profile, fully replacing any existing one for its identity."""
        ...

    def delete_owner(self, owner: OwnerIdentity) -> int:
        """Delete every profile of an owner.

        Returns:
            Number of profiles deleted
        """
        ...

    def list_owner(self, owner: OwnerIdentity) -> List[ParameterProfile]:
        """All profiles of an owner, ordered by parameter index."""
        ...

    def owners(self) -> List[OwnerIdentity]:
        """All owners with at least one stored profile, sorted."""
        ...


class InMemoryProfileStore:
    """Dictionary-backed store; profiles do not survive the process."""

    def __init__(self):
        self._profiles: Dict[OwnerIdentity, Dict[int, ParameterProfile]] = {}
        self._lock = threading.Lock()

    def get(self, identity: ParameterIdentity) -> Optional[ParameterProfile]:
        with self._lock:
            return self._profiles.get(identity.owner, {}).get(identity.parameter_index)

    def put(self, profile: ParameterProfile) -> None:
        identity = profile.identity
        with self._lock:
            self._profiles.setdefault(identity.owner, {})[identity.parameter_index] = profile

    def delete_owner(self, owner: OwnerIdentity) -> int:
        with self._lock:
            return len(self._profiles.pop(owner, {}))

    def list_owner(self, owner: OwnerIdentity) -> List[ParameterProfile]:
        with self._lock:
            by_index = self._profiles.get(owner, {})
            return [by_index[i] for i in sorted(by_index)]

    def owners(self) -> List[OwnerIdentity]:
        with self._lock:
            return sorted(owner for owner, by_index in self._profiles.items() if by_index)

    def __len__(self) -> int:
        with self._lock:
            return sum(len(by_index) for by_index in self._profiles.values())
