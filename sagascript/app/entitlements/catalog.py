"""Static catalog definitions for subscription tiers and their entitlements."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

from .models import (
    UNLIMITED,
    Capability,
    CapabilityValue,
    EntitlementConfigurationError,
    SubscriptionTier,
    TierDefinition,
    UnknownTierError,
    is_numeric_value,
)

logger = logging.getLogger("entitlements")

TIER_ORDER: Tuple[SubscriptionTier, ...] = (
    SubscriptionTier.APPRENTICE,
    SubscriptionTier.WORDSMITH,
    SubscriptionTier.LOREMASTER,
    SubscriptionTier.LEGENDARY,
)

TIER_CATALOG: Mapping[SubscriptionTier, TierDefinition] = MappingProxyType(
    {
        SubscriptionTier.APPRENTICE: TierDefinition(
            tier=SubscriptionTier.APPRENTICE,
            display_name="Apprentice",
            description="Basic series organization and character tracking",
            monthly_price=0,
            icon="ri-quill-pen-line",
            color="text-green-500",
            export_formats="basic",
            backup_frequency="weekly",
            platform_access="web",
        ),
        SubscriptionTier.WORDSMITH: TierDefinition(
            tier=SubscriptionTier.WORDSMITH,
            display_name="The Wordsmith",
            description="Enhanced world-building tools with advanced character management",
            monthly_price=9.99,
            icon="ri-book-open-line",
            color="text-blue-500",
            export_formats="advanced",
            backup_frequency="daily",
            platform_access="web_mobile",
        ),
        SubscriptionTier.LOREMASTER: TierDefinition(
            tier=SubscriptionTier.LOREMASTER,
            display_name="Loremaster",
            description="Comprehensive timeline and multimedia integration",
            monthly_price=19.99,
            icon="ri-map-2-line",
            color="text-purple-500",
            export_formats="advanced",
            backup_frequency="daily",
            platform_access="all",
        ),
        SubscriptionTier.LEGENDARY: TierDefinition(
            tier=SubscriptionTier.LEGENDARY,
            display_name="Legendary",
            description="All features unlocked with priority support",
            monthly_price=49.99,
            icon="ri-sword-line",
            color="text-amber-500",
            export_formats="premium",
            backup_frequency="realtime",
            platform_access="all",
        ),
    }
)

_APPRENTICE: Dict[Capability, CapabilityValue] = {
    Capability.MAX_SERIES: 1,
    Capability.MAX_BOOKS_PER_SERIES: 3,
    Capability.MAX_CHARACTERS_PER_SERIES: 10,
    Capability.MAX_LOCATIONS_PER_SERIES: 10,
    Capability.AI_SUGGESTIONS: True,
    Capability.AI_SUGGESTIONS_LIMIT: 3,
    Capability.WORLD_BUILDING_ADVANCED: False,
    Capability.RELATIONSHIP_MAPPING: False,
    Capability.WRITING_CHALLENGES: False,
    Capability.TIMELINE_MANAGEMENT: False,
    Capability.MULTIMEDIA_INTEGRATION: False,
    Capability.COMMUNITY_COLLABORATION: False,
    Capability.CUSTOM_VOICES: False,
    Capability.PRIORITY_SUPPORT: False,
    Capability.PRIORITY_FEATURES: False,
    Capability.CUSTOM_FEATURE_DEVELOPMENT: False,
    Capability.CLOUD_STORAGE: 5,
}

_WORDSMITH: Dict[Capability, CapabilityValue] = {
    Capability.MAX_SERIES: UNLIMITED,
    Capability.MAX_BOOKS_PER_SERIES: UNLIMITED,
    Capability.MAX_CHARACTERS_PER_SERIES: UNLIMITED,
    Capability.MAX_LOCATIONS_PER_SERIES: UNLIMITED,
    Capability.AI_SUGGESTIONS: True,
    Capability.AI_SUGGESTIONS_LIMIT: 100,
    Capability.WORLD_BUILDING_ADVANCED: True,
    Capability.RELATIONSHIP_MAPPING: True,
    Capability.WRITING_CHALLENGES: True,
    Capability.TIMELINE_MANAGEMENT: True,
    Capability.MULTIMEDIA_INTEGRATION: True,
    Capability.COMMUNITY_COLLABORATION: True,
    Capability.CUSTOM_VOICES: True,
    Capability.PRIORITY_SUPPORT: True,
    Capability.PRIORITY_FEATURES: False,
    Capability.CUSTOM_FEATURE_DEVELOPMENT: False,
    Capability.CLOUD_STORAGE: 25,
}

_LOREMASTER: Dict[Capability, CapabilityValue] = {
    Capability.MAX_SERIES: UNLIMITED,
    Capability.MAX_BOOKS_PER_SERIES: UNLIMITED,
    Capability.MAX_CHARACTERS_PER_SERIES: UNLIMITED,
    Capability.MAX_LOCATIONS_PER_SERIES: UNLIMITED,
    Capability.AI_SUGGESTIONS: True,
    Capability.AI_SUGGESTIONS_LIMIT: 200,
    Capability.WORLD_BUILDING_ADVANCED: True,
    Capability.RELATIONSHIP_MAPPING: True,
    Capability.WRITING_CHALLENGES: True,
    Capability.TIMELINE_MANAGEMENT: True,
    Capability.MULTIMEDIA_INTEGRATION: True,
    Capability.COMMUNITY_COLLABORATION: True,
    Capability.CUSTOM_VOICES: True,
    Capability.PRIORITY_SUPPORT: False,
    Capability.PRIORITY_FEATURES: False,
    Capability.CUSTOM_FEATURE_DEVELOPMENT: False,
    Capability.CLOUD_STORAGE: 50,
}

_LEGENDARY: Dict[Capability, CapabilityValue] = {
    Capability.MAX_SERIES: UNLIMITED,
    Capability.MAX_BOOKS_PER_SERIES: UNLIMITED,
    Capability.MAX_CHARACTERS_PER_SERIES: UNLIMITED,
    Capability.MAX_LOCATIONS_PER_SERIES: UNLIMITED,
    Capability.AI_SUGGESTIONS: True,
    Capability.AI_SUGGESTIONS_LIMIT: UNLIMITED,
    Capability.WORLD_BUILDING_ADVANCED: True,
    Capability.RELATIONSHIP_MAPPING: True,
    Capability.WRITING_CHALLENGES: True,
    Capability.TIMELINE_MANAGEMENT: True,
    Capability.MULTIMEDIA_INTEGRATION: True,
    Capability.COMMUNITY_COLLABORATION: True,
    Capability.CUSTOM_VOICES: True,
    Capability.PRIORITY_SUPPORT: True,
    Capability.PRIORITY_FEATURES: True,
    Capability.CUSTOM_FEATURE_DEVELOPMENT: True,
    Capability.CLOUD_STORAGE: 100,
}


@dataclass(frozen=True)
class MonotonicityViolation:
    """A capability that a higher tier grants less of than a lower one."""

    capability: Capability
    lower_tier: SubscriptionTier
    higher_tier: SubscriptionTier
    lower_value: CapabilityValue
    higher_value: CapabilityValue

    def describe(self) -> str:
        return (
            f"{self.capability.value}: {self.lower_tier.value}={self.lower_value!r}"
            f" > {self.higher_tier.value}={self.higher_value!r}"
        )


def validate_entitlement_table(
    table: Mapping[SubscriptionTier, Mapping[Capability, CapabilityValue]],
) -> None:
    """Raise unless ``table`` defines a valid value for every tier and capability."""

    problems: List[str] = []
    for tier in SubscriptionTier:
        row = table.get(tier)
        if row is None:
            problems.append(f"missing tier {tier.value}")
            continue
        for capability in Capability:
            if capability not in row:
                problems.append(f"missing {tier.value}.{capability.value}")
                continue
            value = row[capability]
            if is_numeric_value(value):
                if value < UNLIMITED:
                    problems.append(f"invalid limit {tier.value}.{capability.value}={value}")
            elif not isinstance(value, bool):
                problems.append(f"invalid value {tier.value}.{capability.value}={value!r}")
        for key in row:
            if not isinstance(key, Capability):
                problems.append(f"unknown capability {tier.value}.{key!r}")
    for key in table:
        if not isinstance(key, SubscriptionTier):
            problems.append(f"unknown tier {key!r}")

    if problems:
        raise EntitlementConfigurationError(
            "Entitlement table is inconsistent: " + "; ".join(problems)
        )


def _as_ceiling(value: CapabilityValue) -> float:
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if value == UNLIMITED:
        return float("inf")
    return float(value)


def find_monotonicity_violations(
    table: Mapping[SubscriptionTier, Mapping[Capability, CapabilityValue]],
) -> List[MonotonicityViolation]:
    """List capabilities that shrink between consecutive tiers.

    The table is hand-authored, so a higher tier granting less than a lower
    one is reported rather than rejected.
    """

    violations: List[MonotonicityViolation] = []
    for capability in Capability:
        for lower, higher in zip(TIER_ORDER, TIER_ORDER[1:]):
            lower_value = table[lower][capability]
            higher_value = table[higher][capability]
            if _as_ceiling(higher_value) < _as_ceiling(lower_value):
                violations.append(
                    MonotonicityViolation(
                        capability=capability,
                        lower_tier=lower,
                        higher_tier=higher,
                        lower_value=lower_value,
                        higher_value=higher_value,
                    )
                )
    return violations


ENTITLEMENT_TABLE: Mapping[SubscriptionTier, Mapping[Capability, CapabilityValue]] = MappingProxyType(
    {
        SubscriptionTier.APPRENTICE: MappingProxyType(_APPRENTICE),
        SubscriptionTier.WORDSMITH: MappingProxyType(_WORDSMITH),
        SubscriptionTier.LOREMASTER: MappingProxyType(_LOREMASTER),
        SubscriptionTier.LEGENDARY: MappingProxyType(_LEGENDARY),
    }
)

validate_entitlement_table(ENTITLEMENT_TABLE)


def get_tier_definition(tier: SubscriptionTier) -> TierDefinition:
    """Return a tier definition, raising if unsupported."""

    try:
        return TIER_CATALOG[tier]
    except KeyError as exc:
        raise UnknownTierError(tier) from exc


def log_monotonicity_report() -> List[MonotonicityViolation]:
    """Log each monotonicity violation in the shipped table."""

    violations = find_monotonicity_violations(ENTITLEMENT_TABLE)
    for violation in violations:
        logger.warning("Entitlement table grants less at a higher tier: %s", violation.describe())
    return violations
