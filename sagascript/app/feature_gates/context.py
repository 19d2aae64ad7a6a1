"""Convenience wrapper binding feature gating helpers to one tier."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from ..entitlements import (
    Capability,
    CapabilityValue,
    EntitlementDecision,
    SubscriptionTier,
    TierDefinition,
    can_access,
    entitlements_for,
    get_limit,
    get_tier_definition,
    has_reached_limit,
    is_at_least,
)
from ..entitlements.resolver import CapabilityLike, TierLike
from .enforcement import DEFAULT_UPGRADE_URL, evaluate_gate, require_capability
from .quota import UsageEvaluation, assert_within_limit, evaluate_usage


@dataclass(frozen=True)
class EntitlementContext:
    """Facade exposing gating-centric helpers for a subject's tier."""

    tier: SubscriptionTier
    user_id: Optional[str] = None
    upgrade_url: str = DEFAULT_UPGRADE_URL
    warn_ratio: float = 0.8

    @property
    def tier_info(self) -> TierDefinition:
        return get_tier_definition(self.tier)

    @property
    def capabilities(self) -> Dict[Capability, CapabilityValue]:
        return entitlements_for(self.tier)

    def has(self, capability: CapabilityLike) -> bool:
        return can_access(self.tier, capability)

    def limit(self, capability: CapabilityLike) -> Optional[int]:
        return get_limit(self.tier, capability)

    def reached_limit(self, capability: CapabilityLike, current_count: int) -> bool:
        return has_reached_limit(self.tier, capability, current_count)

    def is_at_least(self, tier: TierLike) -> bool:
        return is_at_least(self.tier, tier)

    def check(
        self,
        capability: CapabilityLike,
        *,
        required_tier: Optional[TierLike] = None,
        current_count: Optional[int] = None,
    ) -> EntitlementDecision:
        return evaluate_gate(
            self.tier,
            capability,
            required_tier=required_tier,
            current_count=current_count,
        )

    def require(
        self,
        capability: CapabilityLike,
        *,
        required_tier: Optional[TierLike] = None,
        current_count: Optional[int] = None,
        message: Optional[str] = None,
    ) -> EntitlementDecision:
        """Ensure the capability is available, raising :class:`FeatureGateError` if not."""

        return require_capability(
            self.tier,
            capability,
            required_tier=required_tier,
            current_count=current_count,
            message=message,
            upgrade_url=self.upgrade_url,
        )

    def usage(self, capability: CapabilityLike, current_count: int) -> UsageEvaluation:
        return evaluate_usage(self.tier, capability, current_count, warn_ratio=self.warn_ratio)

    def assert_within_limit(self, capability: CapabilityLike, current_count: int) -> UsageEvaluation:
        """Raise when usage has already consumed the tier ceiling."""

        return assert_within_limit(
            self.tier,
            capability,
            current_count,
            upgrade_url=self.upgrade_url,
            warn_ratio=self.warn_ratio,
        )
