"""Entitlement configuration helpers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional
import os

from sagascript.app.entitlements import SubscriptionTier, UnknownTierError


@dataclass(frozen=True)
class EntitlementConfig:
    """Runtime settings for entitlement resolution and enforcement."""

    default_tier: SubscriptionTier
    token_secret: str
    token_ttl_seconds: int
    usage_warn_ratio: float
    upgrade_url: str
    user_id_header: str


def _to_int(value: Optional[str], *, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Expected integer value, got {value!r}") from exc


def _to_float(value: Optional[str], *, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Expected float value, got {value!r}") from exc


def _to_tier(value: Optional[str], *, default: SubscriptionTier) -> SubscriptionTier:
    if value is None or value.strip() == "":
        return default
    try:
        return SubscriptionTier(value.strip().lower())
    except ValueError as exc:
        raise UnknownTierError(value) from exc


def load_entitlement_config(env: Optional[Mapping[str, str]] = None) -> EntitlementConfig:
    """Load :class:`EntitlementConfig` from environment variables."""

    env_mapping = os.environ if env is None else env

    default_tier = _to_tier(
        env_mapping.get("ENTITLEMENT_DEFAULT_TIER"), default=SubscriptionTier.APPRENTICE
    )
    token_secret = env_mapping.get("ENTITLEMENT_TOKEN_SECRET") or "dev-entitlement-secret"
    token_ttl_seconds = max(60, _to_int(env_mapping.get("ENTITLEMENT_TOKEN_TTL_SECONDS"), default=300))

    usage_warn_ratio = _to_float(env_mapping.get("ENTITLEMENT_USAGE_WARN_RATIO"), default=0.8)
    if not 0.0 < usage_warn_ratio <= 1.0:
        raise ValueError(f"ENTITLEMENT_USAGE_WARN_RATIO must be in (0, 1], got {usage_warn_ratio}")

    upgrade_url = env_mapping.get("ENTITLEMENT_UPGRADE_URL", "/subscription")
    user_id_header = env_mapping.get("USER_ID_HEADER", "X-User-Id")

    return EntitlementConfig(
        default_tier=default_tier,
        token_secret=token_secret,
        token_ttl_seconds=token_ttl_seconds,
        usage_warn_ratio=usage_warn_ratio,
        upgrade_url=upgrade_url,
        user_id_header=user_id_header,
    )
