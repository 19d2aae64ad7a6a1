"""Helpers for enforcing entitlement checks on API and service layers."""
from __future__ import annotations

from typing import Optional

from ..entitlements import EntitlementDecision, resolve
from ..entitlements.resolver import CapabilityLike, TierLike
from .exceptions import FeatureGateError

DEFAULT_UPGRADE_URL = "/subscription"


def evaluate_gate(
    tier: TierLike,
    capability: CapabilityLike,
    *,
    required_tier: Optional[TierLike] = None,
    current_count: Optional[int] = None,
    message: Optional[str] = None,
) -> EntitlementDecision:
    """Decide whether protected content may be shown, without raising.

    A caller-supplied ``message`` replaces the default upgrade message on
    denial.
    """

    decision = resolve(
        tier,
        capability,
        current_count=current_count,
        required_tier=required_tier,
    )
    if message and not decision.allowed:
        decision = decision.model_copy(update={"upgrade_message": message})
    return decision


def require_capability(
    tier: TierLike,
    capability: CapabilityLike,
    *,
    required_tier: Optional[TierLike] = None,
    current_count: Optional[int] = None,
    message: Optional[str] = None,
    upgrade_url: str = DEFAULT_UPGRADE_URL,
) -> EntitlementDecision:
    """Ensure ``tier`` may use ``capability`` before proceeding.

    Parameters
    ----------
    tier:
        The caller's current subscription tier.
    capability:
        The gated capability or usage limit.
    required_tier:
        Optional minimum tier the caller must hold in addition to the
        capability being enabled.
    current_count:
        Current usage; when given, a reached ceiling also blocks.
    message:
        Optional human-friendly message replacing the default upgrade
        message.
    upgrade_url:
        Where the client should send the user to upgrade.
    """

    decision = evaluate_gate(
        tier,
        capability,
        required_tier=required_tier,
        current_count=current_count,
        message=message,
    )
    if not decision.allowed:
        raise FeatureGateError.from_decision(decision, upgrade_url=upgrade_url)
    return decision
