"""Profile cache sitting in front of the profile repository.

Entries are keyed by user id. A tier switch drops the user's own entry;
a change to a tier's definition drops every profile currently cached on
that tier, which is read from the cached profile itself.
"""
from __future__ import annotations

from datetime import datetime, timezone
from threading import Lock
from typing import Callable, Dict, NamedTuple, Optional, Protocol

from .models import Profile, SubscriptionTier


class ProfileCache(Protocol):
    def get(self, user_id: str) -> Optional[Profile]:
        ...

    def put(self, profile: Profile, expires_at: datetime) -> None:
        ...

    def invalidate_user(self, user_id: str) -> None:
        ...

    def invalidate_tier(self, tier: SubscriptionTier) -> None:
        ...


class _CachedProfile(NamedTuple):
    profile: Profile
    expires_at: datetime


class InMemoryProfileCache:
    """In-process cache owned by whoever constructs it.

    Instances are passed explicitly to :class:`EntitlementService`; there is
    no module-level cache. ``clock`` defaults to UTC wall time.
    """

    def __init__(self, *, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._profiles: Dict[str, _CachedProfile] = {}
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._profiles

    def get(self, user_id: str) -> Optional[Profile]:
        with self._lock:
            cached = self._profiles.get(user_id)
            if cached is None:
                return None
            if self._clock() >= cached.expires_at:
                del self._profiles[user_id]
                return None
            return cached.profile

    def put(self, profile: Profile, expires_at: datetime) -> None:
        if expires_at <= self._clock():
            return
        with self._lock:
            self._profiles[profile.user_id] = _CachedProfile(profile, expires_at)

    def invalidate_user(self, user_id: str) -> None:
        with self._lock:
            self._profiles.pop(user_id, None)

    def invalidate_tier(self, tier: SubscriptionTier) -> None:
        with self._lock:
            stale = [
                user_id
                for user_id, cached in self._profiles.items()
                if cached.profile.tier == tier
            ]
            for user_id in stale:
                del self._profiles[user_id]

    def clear(self) -> None:
        with self._lock:
            self._profiles.clear()
