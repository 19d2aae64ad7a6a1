"""Service resolving a user's tier and computing entitlement answers for it."""
from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Mapping, Optional, Protocol

from . import resolver
from .cache import ProfileCache
from .models import (
    CapabilityValue,
    EntitlementDecision,
    EntitlementSnapshot,
    Profile,
    SignedSnapshot,
    SubscriptionTier,
)
from .resolver import CapabilityLike, TierLike

logger = logging.getLogger("entitlements")


class ProfileRepository(Protocol):
    """Data access layer for user profiles."""

    def get_profile(self, user_id: str) -> Optional[Profile]:
        ...

    def update_tier(self, user_id: str, tier: SubscriptionTier) -> Optional[Profile]:
        ...


class TokenSigner(Protocol):
    """Protocol describing token signing behavior."""

    def sign(self, claims: Mapping[str, object]) -> str:
        ...


class HMACTokenSigner:
    """Simple HMAC based token signer for entitlement snapshots."""

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("secret must be provided")
        self._secret = secret.encode("utf-8")

    def sign(self, claims: Mapping[str, object]) -> str:
        serialized = json.dumps(claims, sort_keys=True, separators=(",", ":")).encode("utf-8")
        digest = hmac.new(self._secret, serialized, hashlib.sha256).digest()
        token_bytes = base64.urlsafe_b64encode(serialized + b"." + digest)
        return token_bytes.decode("utf-8")

    def verify(self, token: str) -> Mapping[str, object]:
        """Return the claims of ``token`` or raise ``ValueError`` if tampered."""

        raw = base64.urlsafe_b64decode(token.encode("utf-8"))
        # Raw digest bytes may contain b".", so split by digest length.
        digest_size = hashlib.sha256().digest_size
        serialized, separator, digest = raw[: -digest_size - 1], raw[-digest_size - 1 : -digest_size], raw[-digest_size:]
        expected = hmac.new(self._secret, serialized, hashlib.sha256).digest()
        if separator != b"." or not serialized or not hmac.compare_digest(digest, expected):
            raise ValueError("invalid entitlement token signature")
        return json.loads(serialized)


class EntitlementService:
    """Coordinates profile lookup, caching, and entitlement resolution.

    The resolver itself is stateless; this service only supplies the tier it
    is asked about. The tier is read from the repository and never written,
    except through :meth:`switch_tier`.
    """

    def __init__(
        self,
        repository: ProfileRepository,
        cache: ProfileCache,
        token_signer: TokenSigner,
        *,
        clock: Optional[Callable[[], datetime]] = None,
        ttl_seconds: int = 300,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._token_signer = token_signer
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._ttl_seconds = max(ttl_seconds, 60)

    def get_profile(self, user_id: str) -> Profile:
        """Return the profile for ``user_id``, served from cache when fresh."""

        cached = self._cache.get(user_id)
        if cached:
            return cached

        profile = self._repository.get_profile(user_id)
        if profile is None:
            raise LookupError(f"No profile found for user={user_id}")

        expires_at = self._clock() + timedelta(seconds=self._ttl_seconds)
        self._cache.put(profile, expires_at)
        return profile

    def get_tier(self, user_id: str) -> SubscriptionTier:
        return self.get_profile(user_id).tier

    def get_snapshot(self, user_id: str) -> SignedSnapshot:
        profile = self.get_profile(user_id)
        snapshot = EntitlementSnapshot(
            user_id=profile.user_id,
            tier=profile.tier,
            capabilities=resolver.entitlements_for(profile.tier),
            generated_at=self._clock(),
        )
        expires_at = snapshot.generated_at + timedelta(seconds=self._ttl_seconds)
        token = self._token_signer.sign(snapshot.to_claims(expires_at))
        return SignedSnapshot(snapshot=snapshot, token=token, expires_at=expires_at)

    def check(
        self,
        user_id: str,
        capability: CapabilityLike,
        *,
        current_count: Optional[int] = None,
        required_tier: Optional[TierLike] = None,
    ) -> EntitlementDecision:
        tier = self.get_tier(user_id)
        decision = resolver.resolve(
            tier,
            capability,
            current_count=current_count,
            required_tier=required_tier,
        )
        if not decision.allowed:
            logger.info(
                "Entitlement denied user=%s tier=%s capability=%s limit_reached=%s",
                user_id,
                decision.tier.value,
                decision.capability.value,
                decision.limit_reached,
            )
        return decision

    def get_value(self, user_id: str, capability: CapabilityLike) -> CapabilityValue:
        return resolver.value_for(self.get_tier(user_id), capability)

    def switch_tier(self, user_id: str, tier: TierLike, *, actor: Profile) -> Profile:
        """Move ``user_id`` to ``tier`` on behalf of an administrator."""

        if not actor.is_admin:
            raise PermissionError("Only administrators can switch subscription tiers")

        target_tier = resolver.coerce_tier(tier)
        updated = self._repository.update_tier(user_id, target_tier)
        if updated is None:
            raise LookupError(f"No profile found for user={user_id}")

        self.invalidate_user(user_id)
        logger.info(
            "Tier switched user=%s tier=%s actor=%s",
            user_id,
            target_tier.value,
            actor.user_id,
        )
        return updated

    def invalidate_user(self, user_id: str) -> None:
        self._cache.invalidate_user(user_id)

    def invalidate_tier(self, tier: SubscriptionTier) -> None:
        self._cache.invalidate_tier(tier)
