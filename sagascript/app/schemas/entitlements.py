"""API schemas for entitlement endpoints."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..entitlements import (
    Capability,
    CapabilityValue,
    EntitlementDecision,
    SignedSnapshot,
    SubscriptionTier,
    TierDefinition,
    entitlements_for,
    tier_rank,
)
from ..feature_gates import UsageEvaluation


class TierResponse(BaseModel):
    tier: SubscriptionTier
    rank: int
    display_name: str = Field(alias="displayName")
    description: str
    monthly_price: float = Field(alias="monthlyPrice")
    icon: str
    color: str
    export_formats: str = Field(alias="exportFormats")
    backup_frequency: str = Field(alias="backupFrequency")
    platform_access: str = Field(alias="platformAccess")
    capabilities: Dict[Capability, CapabilityValue]

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_definition(cls, definition: TierDefinition) -> "TierResponse":
        return cls(
            tier=definition.tier,
            rank=tier_rank(definition.tier),
            display_name=definition.display_name,
            description=definition.description,
            monthly_price=definition.monthly_price,
            icon=definition.icon,
            color=definition.color,
            export_formats=definition.export_formats,
            backup_frequency=definition.backup_frequency,
            platform_access=definition.platform_access,
            capabilities=entitlements_for(definition.tier),
        )


class TierListResponse(BaseModel):
    tiers: List[TierResponse]

    model_config = ConfigDict(populate_by_name=True)


class EntitlementSnapshotResponse(BaseModel):
    user_id: str = Field(alias="userId")
    tier: SubscriptionTier
    capabilities: Dict[Capability, CapabilityValue]
    token: str
    generated_at: datetime = Field(alias="generatedAt")
    expires_at: datetime = Field(alias="expiresAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_signed(cls, signed: SignedSnapshot) -> "EntitlementSnapshotResponse":
        return cls(
            user_id=signed.snapshot.user_id,
            tier=signed.snapshot.tier,
            capabilities=signed.snapshot.capabilities,
            token=signed.token,
            generated_at=signed.snapshot.generated_at,
            expires_at=signed.expires_at,
        )


class EntitlementCheckRequest(BaseModel):
    capability: Capability
    required_tier: Optional[SubscriptionTier] = Field(alias="requiredTier", default=None)
    current_count: Optional[int] = Field(alias="currentCount", default=None, ge=0)

    model_config = ConfigDict(populate_by_name=True)


class EntitlementCheckResponse(BaseModel):
    tier: SubscriptionTier
    capability: Capability
    value: CapabilityValue
    accessible: bool
    allowed: bool
    limit: Optional[int] = None
    current_count: Optional[int] = Field(alias="currentCount", default=None)
    limit_reached: bool = Field(alias="limitReached")
    required_tier: Optional[SubscriptionTier] = Field(alias="requiredTier", default=None)
    upgrade_message: Optional[str] = Field(alias="upgradeMessage", default=None)
    upgrade_url: Optional[str] = Field(alias="upgradeUrl", default=None)

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_decision(
        cls, decision: EntitlementDecision, *, upgrade_url: str
    ) -> "EntitlementCheckResponse":
        return cls(
            tier=decision.tier,
            capability=decision.capability,
            value=decision.value,
            accessible=decision.accessible,
            allowed=decision.allowed,
            limit=decision.limit,
            current_count=decision.current_count,
            limit_reached=decision.limit_reached,
            required_tier=decision.required_tier,
            upgrade_message=decision.upgrade_message,
            upgrade_url=None if decision.allowed else upgrade_url,
        )


class UsageReportRequest(BaseModel):
    counts: Dict[Capability, int]

    model_config = ConfigDict(populate_by_name=True)


class UsageItem(BaseModel):
    capability: Capability
    used: int
    limit: Optional[int] = None
    remaining: Optional[int] = None
    percentage: float
    approaching_limit: bool = Field(alias="approachingLimit")
    at_limit: bool = Field(alias="atLimit")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_evaluation(cls, evaluation: UsageEvaluation) -> "UsageItem":
        return cls(
            capability=evaluation.capability,
            used=evaluation.used,
            limit=evaluation.limit,
            remaining=evaluation.remaining,
            percentage=round(evaluation.percentage, 2),
            approaching_limit=evaluation.approaching_limit,
            at_limit=evaluation.at_limit,
        )


class UsageReportResponse(BaseModel):
    tier: SubscriptionTier
    items: List[UsageItem]

    model_config = ConfigDict(populate_by_name=True)


class TierSwitchRequest(BaseModel):
    user_id: str = Field(alias="userId")
    tier: SubscriptionTier

    model_config = ConfigDict(populate_by_name=True)


class TierSwitchResponse(BaseModel):
    user_id: str = Field(alias="userId")
    tier: SubscriptionTier
    display_name: str = Field(alias="displayName")

    model_config = ConfigDict(populate_by_name=True)


class SuggestionQuotaRequest(BaseModel):
    used_this_month: int = Field(alias="usedThisMonth", ge=0)

    model_config = ConfigDict(populate_by_name=True)


class SuggestionQuotaResponse(BaseModel):
    tier: SubscriptionTier
    limit: Optional[int] = None
    remaining: Optional[int] = None
    approaching_limit: bool = Field(alias="approachingLimit")

    model_config = ConfigDict(populate_by_name=True)
