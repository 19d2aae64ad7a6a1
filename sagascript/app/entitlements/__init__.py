"""Subscription tiers, the entitlement table, and the pure resolver over it."""

from .cache import InMemoryProfileCache, ProfileCache
from .catalog import (
    ENTITLEMENT_TABLE,
    TIER_CATALOG,
    TIER_ORDER,
    MonotonicityViolation,
    find_monotonicity_violations,
    get_tier_definition,
    log_monotonicity_report,
    validate_entitlement_table,
)
from .models import (
    DISABLED,
    UNLIMITED,
    Capability,
    CapabilityValue,
    EntitlementConfigurationError,
    EntitlementDecision,
    EntitlementSnapshot,
    Profile,
    SignedSnapshot,
    SubscriptionTier,
    TierDefinition,
    UnknownCapabilityError,
    UnknownTierError,
)
from .repository import InMemoryProfileRepository
from .resolver import (
    can_access,
    entitlements_for,
    get_limit,
    has_reached_limit,
    is_at_least,
    minimum_tier_for,
    resolve,
    tier_rank,
    upgrade_message,
    value_for,
)
from .service import EntitlementService, HMACTokenSigner, ProfileRepository, TokenSigner

__all__ = [
    "ENTITLEMENT_TABLE",
    "TIER_CATALOG",
    "TIER_ORDER",
    "MonotonicityViolation",
    "find_monotonicity_violations",
    "get_tier_definition",
    "log_monotonicity_report",
    "validate_entitlement_table",
    "DISABLED",
    "UNLIMITED",
    "Capability",
    "CapabilityValue",
    "EntitlementConfigurationError",
    "EntitlementDecision",
    "EntitlementSnapshot",
    "Profile",
    "SignedSnapshot",
    "SubscriptionTier",
    "TierDefinition",
    "UnknownCapabilityError",
    "UnknownTierError",
    "InMemoryProfileCache",
    "ProfileCache",
    "InMemoryProfileRepository",
    "can_access",
    "entitlements_for",
    "get_limit",
    "has_reached_limit",
    "is_at_least",
    "minimum_tier_for",
    "resolve",
    "tier_rank",
    "upgrade_message",
    "value_for",
    "EntitlementService",
    "HMACTokenSigner",
    "ProfileRepository",
    "TokenSigner",
]
