"""Usage evaluation against numeric tier limits."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from ..entitlements import Capability, SubscriptionTier, get_limit, has_reached_limit
from ..entitlements.resolver import CapabilityLike, TierLike, coerce_capability, coerce_tier
from .enforcement import DEFAULT_UPGRADE_URL, evaluate_gate
from .exceptions import FeatureGateError

_DEFAULT_WARN_RATIO = 0.8


@dataclass(frozen=True)
class UsageEvaluation:
    """Represents how close a usage count is to its tier ceiling."""

    tier: SubscriptionTier
    capability: Capability
    used: int
    limit: Optional[int]
    percentage: float
    approaching_limit: bool
    at_limit: bool

    @property
    def remaining(self) -> Optional[int]:
        if self.limit is None:
            return None
        return max(self.limit - self.used, 0)

    def to_dict(self) -> dict[str, object]:
        """Serialize the evaluation for logging or API responses."""

        return {
            "tier": self.tier.value,
            "capability": self.capability.value,
            "used": self.used,
            "limit": self.limit,
            "remaining": self.remaining,
            "percentage": self.percentage,
            "approaching_limit": self.approaching_limit,
            "at_limit": self.at_limit,
        }


def evaluate_usage(
    tier: TierLike,
    capability: CapabilityLike,
    current_count: int,
    *,
    warn_ratio: float = _DEFAULT_WARN_RATIO,
) -> UsageEvaluation:
    """Compare ``current_count`` with the ceiling ``tier`` has for ``capability``.

    Unlimited and disabled capabilities report a percentage of zero.
    """

    resolved_tier = coerce_tier(tier)
    resolved_capability = coerce_capability(capability)
    limit = get_limit(resolved_tier, resolved_capability)
    used = max(current_count, 0)

    percentage = (used / limit) * 100 if limit else 0.0

    return UsageEvaluation(
        tier=resolved_tier,
        capability=resolved_capability,
        used=used,
        limit=limit,
        percentage=percentage,
        approaching_limit=percentage > warn_ratio * 100,
        at_limit=has_reached_limit(resolved_tier, resolved_capability, used),
    )


def evaluate_usage_report(
    tier: TierLike,
    counts: Mapping[CapabilityLike, int],
    *,
    warn_ratio: float = _DEFAULT_WARN_RATIO,
) -> dict[Capability, UsageEvaluation]:
    """Evaluate several usage counts for the same tier."""

    return {
        coerce_capability(capability): evaluate_usage(
            tier, capability, count, warn_ratio=warn_ratio
        )
        for capability, count in counts.items()
    }


def assert_within_limit(
    tier: TierLike,
    capability: CapabilityLike,
    current_count: int,
    *,
    upgrade_url: str = DEFAULT_UPGRADE_URL,
    warn_ratio: float = _DEFAULT_WARN_RATIO,
) -> UsageEvaluation:
    """Raise when ``current_count`` leaves no room under the tier ceiling."""

    evaluation = evaluate_usage(tier, capability, current_count, warn_ratio=warn_ratio)
    if evaluation.at_limit:
        decision = evaluate_gate(tier, capability, current_count=evaluation.used)
        raise FeatureGateError.from_decision(decision, upgrade_url=upgrade_url)
    return evaluation
