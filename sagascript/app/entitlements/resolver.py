"""Pure entitlement decisions over the static tier table.

Every function here is a deterministic lookup against
:data:`~.catalog.ENTITLEMENT_TABLE`. Denials are ordinary return values;
the only exceptions raised are :class:`~.models.UnknownTierError` and
:class:`~.models.UnknownCapabilityError`, which signal a mismatch between
calling code and the table and must never be defaulted away.
"""
from __future__ import annotations

from typing import Dict, Optional, Union

from .catalog import ENTITLEMENT_TABLE, TIER_ORDER, get_tier_definition
from .models import (
    UNLIMITED,
    Capability,
    CapabilityValue,
    EntitlementDecision,
    SubscriptionTier,
    UnknownCapabilityError,
    UnknownTierError,
    is_numeric_value,
)

TierLike = Union[SubscriptionTier, str]
CapabilityLike = Union[Capability, str]

_TIER_RANKS: Dict[SubscriptionTier, int] = {tier: index for index, tier in enumerate(TIER_ORDER)}


def coerce_tier(tier: TierLike) -> SubscriptionTier:
    """Return the tier enum member for ``tier`` or raise :class:`UnknownTierError`."""

    if isinstance(tier, SubscriptionTier):
        return tier
    try:
        return SubscriptionTier(tier)
    except ValueError as exc:
        raise UnknownTierError(tier) from exc


def coerce_capability(capability: CapabilityLike) -> Capability:
    if isinstance(capability, Capability):
        return capability
    try:
        return Capability(capability)
    except ValueError as exc:
        raise UnknownCapabilityError(capability) from exc


def tier_rank(tier: TierLike) -> int:
    """Return the position of ``tier`` in the canonical ordering."""

    resolved = coerce_tier(tier)
    try:
        return _TIER_RANKS[resolved]
    except KeyError as exc:
        raise UnknownTierError(tier) from exc


def is_at_least(tier: TierLike, minimum: TierLike) -> bool:
    return tier_rank(tier) >= tier_rank(minimum)


def value_for(tier: TierLike, capability: CapabilityLike) -> CapabilityValue:
    """Look up the raw table value for ``capability`` at ``tier``."""

    resolved_tier = coerce_tier(tier)
    resolved_capability = coerce_capability(capability)
    try:
        return ENTITLEMENT_TABLE[resolved_tier][resolved_capability]
    except KeyError as exc:
        raise UnknownCapabilityError(capability) from exc


def can_access(tier: TierLike, capability: CapabilityLike) -> bool:
    """Return whether ``capability`` is enabled at all for ``tier``.

    Flags are returned as-is; numeric values are accessible unless they are
    zero, so both the unlimited sentinel and a positive ceiling grant access.
    """

    value = value_for(tier, capability)
    if isinstance(value, bool):
        return value
    return value != 0


def get_limit(tier: TierLike, capability: CapabilityLike) -> Optional[int]:
    """Return the numeric ceiling for ``capability``, or ``None`` if none applies."""

    value = value_for(tier, capability)
    if not is_numeric_value(value) or value < 0:
        return None
    return value


def has_reached_limit(tier: TierLike, capability: CapabilityLike, current_count: int) -> bool:
    """Return whether ``current_count`` has hit the ceiling for ``capability``.

    Flags and the unlimited sentinel never impose a ceiling.
    """

    limit = get_limit(tier, capability)
    if limit is None:
        return False
    return current_count >= limit


def upgrade_message(required_tier: TierLike) -> str:
    definition = get_tier_definition(coerce_tier(required_tier))
    return (
        f"This feature requires the {definition.display_name} tier or higher. "
        "Please upgrade your subscription to access it."
    )


def minimum_tier_for(capability: CapabilityLike) -> Optional[SubscriptionTier]:
    """Return the lowest tier that can access ``capability``, if any does."""

    resolved = coerce_capability(capability)
    for tier in TIER_ORDER:
        if can_access(tier, resolved):
            return tier
    return None


def _upgrade_target(
    tier: SubscriptionTier,
    capability: Capability,
    required_tier: Optional[SubscriptionTier],
    limit_reached: bool,
) -> Optional[SubscriptionTier]:
    if required_tier is not None and not is_at_least(tier, required_tier):
        return required_tier
    if limit_reached:
        # First tier with a higher ceiling than the current one.
        current = value_for(tier, capability)
        for candidate in TIER_ORDER[tier_rank(tier) + 1 :]:
            value = value_for(candidate, capability)
            if value == UNLIMITED or (is_numeric_value(value) and value > current):
                return candidate
        return None
    # Lowest tier above the caller that grants the capability and satisfies
    # any required tier; the table is not monotonic.
    for candidate in TIER_ORDER[tier_rank(tier) + 1 :]:
        if not can_access(candidate, capability):
            continue
        if required_tier is None or is_at_least(candidate, required_tier):
            return candidate
    return None


def resolve(
    tier: TierLike,
    capability: CapabilityLike,
    current_count: Optional[int] = None,
    required_tier: Optional[TierLike] = None,
) -> EntitlementDecision:
    """Combine access, tier and limit checks into a single decision.

    ``accessible`` requires both that the capability is enabled for ``tier``
    and, when ``required_tier`` is given, that ``tier`` is at least that tier.
    ``limit_reached`` is only evaluated when ``current_count`` is supplied.
    """

    resolved_tier = coerce_tier(tier)
    resolved_capability = coerce_capability(capability)
    resolved_required = coerce_tier(required_tier) if required_tier is not None else None

    accessible = can_access(resolved_tier, resolved_capability)
    if resolved_required is not None:
        accessible = accessible and is_at_least(resolved_tier, resolved_required)

    limit_reached = current_count is not None and has_reached_limit(
        resolved_tier, resolved_capability, current_count
    )

    message: Optional[str] = None
    if not accessible or limit_reached:
        target = _upgrade_target(resolved_tier, resolved_capability, resolved_required, limit_reached)
        if target is not None:
            message = upgrade_message(target)
            resolved_required = resolved_required or target

    return EntitlementDecision(
        tier=resolved_tier,
        capability=resolved_capability,
        value=value_for(resolved_tier, resolved_capability),
        accessible=accessible,
        current_count=current_count,
        limit=get_limit(resolved_tier, resolved_capability),
        limit_reached=limit_reached,
        required_tier=resolved_required,
        upgrade_message=message,
    )


def entitlements_for(tier: TierLike) -> Dict[Capability, CapabilityValue]:
    """Return a copy of every capability value for ``tier``."""

    return dict(ENTITLEMENT_TABLE[coerce_tier(tier)])
