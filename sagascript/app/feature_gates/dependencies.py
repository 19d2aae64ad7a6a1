"""FastAPI dependencies that put feature gates in front of route handlers."""
from __future__ import annotations

from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, status

from ..entitlements import EntitlementDecision, EntitlementService, Profile
from ..entitlements.resolver import CapabilityLike, TierLike
from ..services.entitlements import get_entitlement_config, get_entitlement_service
from .context import EntitlementContext
from .exceptions import FeatureGateError

_USER_ID_HEADER = get_entitlement_config().user_id_header


def get_optional_profile(
    user_id: Optional[str] = Header(None, alias=_USER_ID_HEADER),
    service: EntitlementService = Depends(get_entitlement_service),
) -> Optional[Profile]:
    """Return the caller's profile, or ``None`` for anonymous requests."""

    if not user_id:
        return None
    try:
        return service.get_profile(user_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


def get_current_profile(profile: Optional[Profile] = Depends(get_optional_profile)) -> Profile:
    if profile is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return profile


def get_entitlement_context(
    profile: Optional[Profile] = Depends(get_optional_profile),
) -> EntitlementContext:
    """Bind gating helpers to the caller's tier, or the default tier when anonymous."""

    config = get_entitlement_config()
    tier = profile.tier if profile else config.default_tier
    return EntitlementContext(
        tier=tier,
        user_id=profile.user_id if profile else None,
        upgrade_url=config.upgrade_url,
        warn_ratio=config.usage_warn_ratio,
    )


def capability_required(
    capability: CapabilityLike,
    *,
    required_tier: Optional[TierLike] = None,
) -> Callable[..., EntitlementDecision]:
    """Create a dependency that rejects callers lacking ``capability`` with a 403."""

    def dependency(
        context: EntitlementContext = Depends(get_entitlement_context),
    ) -> EntitlementDecision:
        try:
            return context.require(capability, required_tier=required_tier)
        except FeatureGateError as exc:
            raise exc.to_http_exception() from exc

    return dependency
