"""In-memory profile storage standing in for the application database."""
from __future__ import annotations

from threading import Lock
from typing import Dict, Iterable, Optional

from .models import Profile, SubscriptionTier


class InMemoryProfileRepository:
    """Thread-safe dictionary of profiles keyed by user id."""

    def __init__(self, profiles: Iterable[Profile] = ()) -> None:
        self._lock = Lock()
        self._profiles: Dict[str, Profile] = {profile.user_id: profile for profile in profiles}

    def add(self, profile: Profile) -> Profile:
        with self._lock:
            self._profiles[profile.user_id] = profile
        return profile

    def get_profile(self, user_id: str) -> Optional[Profile]:
        with self._lock:
            return self._profiles.get(user_id)

    def update_tier(self, user_id: str, tier: SubscriptionTier) -> Optional[Profile]:
        with self._lock:
            profile = self._profiles.get(user_id)
            if profile is None:
                return None
            updated = profile.model_copy(update={"tier": tier})
            self._profiles[user_id] = updated
            return updated
