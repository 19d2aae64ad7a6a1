"""API routes exposing tier catalog and entitlement checks."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..entitlements import (
    TIER_ORDER,
    Capability,
    EntitlementDecision,
    EntitlementService,
    Profile,
    SubscriptionTier,
    get_tier_definition,
)
from ..feature_gates import EntitlementContext, FeatureGateError, evaluate_usage_report
from ..feature_gates.dependencies import (
    capability_required,
    get_current_profile,
    get_entitlement_context,
)
from ..schemas.entitlements import (
    EntitlementCheckRequest,
    EntitlementCheckResponse,
    EntitlementSnapshotResponse,
    SuggestionQuotaRequest,
    SuggestionQuotaResponse,
    TierListResponse,
    TierResponse,
    TierSwitchRequest,
    TierSwitchResponse,
    UsageItem,
    UsageReportRequest,
    UsageReportResponse,
)
from ..services.entitlements import get_entitlement_service

logger = logging.getLogger("entitlements")

router = APIRouter(prefix="/api/entitlements", tags=["entitlements"])


@router.get("/tiers", response_model=TierListResponse)
def list_tiers() -> TierListResponse:
    return TierListResponse(
        tiers=[TierResponse.from_definition(get_tier_definition(tier)) for tier in TIER_ORDER]
    )


@router.get("/tiers/{tier}", response_model=TierResponse)
def get_tier(tier: str) -> TierResponse:
    try:
        resolved = SubscriptionTier(tier)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown tier {tier!r}") from exc
    return TierResponse.from_definition(get_tier_definition(resolved))


@router.get("/me", response_model=EntitlementSnapshotResponse)
def get_my_entitlements(
    *,
    profile: Profile = Depends(get_current_profile),
    service: EntitlementService = Depends(get_entitlement_service),
) -> EntitlementSnapshotResponse:
    return EntitlementSnapshotResponse.from_signed(service.get_snapshot(profile.user_id))


@router.post("/check", response_model=EntitlementCheckResponse)
def check_entitlement(
    payload: EntitlementCheckRequest,
    *,
    context: EntitlementContext = Depends(get_entitlement_context),
) -> EntitlementCheckResponse:
    decision = context.check(
        payload.capability,
        required_tier=payload.required_tier,
        current_count=payload.current_count,
    )
    if not decision.allowed:
        logger.info(
            "Entitlement check denied user=%s tier=%s capability=%s",
            context.user_id or "anonymous",
            decision.tier.value,
            decision.capability.value,
        )
    return EntitlementCheckResponse.from_decision(decision, upgrade_url=context.upgrade_url)


@router.post("/usage", response_model=UsageReportResponse)
def get_usage_report(
    payload: UsageReportRequest,
    *,
    context: EntitlementContext = Depends(get_entitlement_context),
) -> UsageReportResponse:
    evaluations = evaluate_usage_report(
        context.tier,
        payload.counts,
        warn_ratio=context.warn_ratio,
    )
    return UsageReportResponse(
        tier=context.tier,
        items=[UsageItem.from_evaluation(evaluation) for evaluation in evaluations.values()],
    )


@router.post("/admin/switch-tier", response_model=TierSwitchResponse)
def switch_tier(
    payload: TierSwitchRequest,
    *,
    current_user: Profile = Depends(get_current_profile),
    service: EntitlementService = Depends(get_entitlement_service),
) -> TierSwitchResponse:
    try:
        updated = service.switch_tier(payload.user_id, payload.tier, actor=current_user)
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return TierSwitchResponse(
        user_id=updated.user_id,
        tier=updated.tier,
        display_name=get_tier_definition(updated.tier).display_name,
    )


@router.post("/ai/suggestions/quota", response_model=SuggestionQuotaResponse)
def reserve_ai_suggestion(
    payload: SuggestionQuotaRequest,
    *,
    gate: EntitlementDecision = Depends(capability_required(Capability.AI_SUGGESTIONS)),
    context: EntitlementContext = Depends(get_entitlement_context),
) -> SuggestionQuotaResponse:
    try:
        evaluation = context.assert_within_limit(
            Capability.AI_SUGGESTIONS_LIMIT, payload.used_this_month
        )
    except FeatureGateError as exc:
        raise exc.to_http_exception() from exc
    return SuggestionQuotaResponse(
        tier=context.tier,
        limit=evaluation.limit,
        remaining=evaluation.remaining,
        approaching_limit=evaluation.approaching_limit,
    )
