"""Domain models for subscription tiers and capability entitlements."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

CapabilityValue = Union[bool, int]

UNLIMITED = -1
DISABLED = 0


class SubscriptionTier(str, Enum):
    """Canonical identifiers for subscription tiers, lowest first."""

    APPRENTICE = "apprentice"
    WORDSMITH = "wordsmith"
    LOREMASTER = "loremaster"
    LEGENDARY = "legendary"


class Capability(str, Enum):
    """Gated capabilities and usage limits."""

    MAX_SERIES = "maxSeries"
    MAX_BOOKS_PER_SERIES = "maxBooksPerSeries"
    MAX_CHARACTERS_PER_SERIES = "maxCharactersPerSeries"
    MAX_LOCATIONS_PER_SERIES = "maxLocationsPerSeries"
    AI_SUGGESTIONS = "aiSuggestions"
    AI_SUGGESTIONS_LIMIT = "aiSuggestionsLimit"
    WORLD_BUILDING_ADVANCED = "worldBuildingAdvanced"
    RELATIONSHIP_MAPPING = "relationshipMapping"
    WRITING_CHALLENGES = "writingChallenges"
    TIMELINE_MANAGEMENT = "timelineManagement"
    MULTIMEDIA_INTEGRATION = "multimediaIntegration"
    COMMUNITY_COLLABORATION = "communityCollaboration"
    CUSTOM_VOICES = "customVoices"
    PRIORITY_SUPPORT = "prioritySupport"
    PRIORITY_FEATURES = "priorityFeatures"
    CUSTOM_FEATURE_DEVELOPMENT = "customFeatureDevelopment"
    CLOUD_STORAGE = "cloudStorage"


class EntitlementConfigurationError(LookupError):
    """Raised when code and the entitlement table disagree."""


class UnknownTierError(EntitlementConfigurationError):
    def __init__(self, tier: object) -> None:
        super().__init__(f"Unknown subscription tier: {tier!r}")
        self.tier = tier


class UnknownCapabilityError(EntitlementConfigurationError):
    def __init__(self, capability: object) -> None:
        super().__init__(f"Unknown capability: {capability!r}")
        self.capability = capability


@dataclass(frozen=True)
class TierDefinition:
    """Display and plan metadata for a subscription tier."""

    tier: SubscriptionTier
    display_name: str
    description: str
    monthly_price: float
    icon: str
    color: str
    export_formats: str
    backup_frequency: str
    platform_access: str

    @property
    def is_free(self) -> bool:
        return self.monthly_price == 0


def is_numeric_value(value: CapabilityValue) -> bool:
    """Return whether a capability value is an integer limit rather than a flag."""

    return isinstance(value, int) and not isinstance(value, bool)


class EntitlementDecision(BaseModel):
    """Outcome of resolving one capability for one tier."""

    tier: SubscriptionTier
    capability: Capability
    value: CapabilityValue
    accessible: bool
    current_count: Optional[int] = Field(default=None, alias="currentCount")
    limit: Optional[int] = None
    limit_reached: bool = Field(default=False, alias="limitReached")
    required_tier: Optional[SubscriptionTier] = Field(default=None, alias="requiredTier")
    upgrade_message: Optional[str] = Field(default=None, alias="upgradeMessage")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def allowed(self) -> bool:
        return self.accessible and not self.limit_reached


class Profile(BaseModel):
    """The slice of a user profile the entitlement layer reads."""

    user_id: str = Field(alias="userId")
    tier: SubscriptionTier = SubscriptionTier.APPRENTICE
    display_name: Optional[str] = Field(default=None, alias="displayName")
    is_admin: bool = Field(default=False, alias="isAdmin")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class EntitlementSnapshot(BaseModel):
    """Every capability value for a user's tier at a point in time."""

    user_id: str = Field(alias="userId")
    tier: SubscriptionTier
    capabilities: Dict[Capability, CapabilityValue]
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="generatedAt"
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_claims(self, expires_at: datetime) -> Dict[str, object]:
        """Represent the snapshot as token claims."""

        return {
            "sub": self.user_id,
            "tier": self.tier.value,
            "capabilities": {key.value: value for key, value in self.capabilities.items()},
            "generated_at": self.generated_at.isoformat(),
            "expires_at": expires_at.isoformat(),
        }


class SignedSnapshot(BaseModel):
    """Wrapper containing the entitlement snapshot and signed token."""

    snapshot: EntitlementSnapshot
    token: str
    expires_at: datetime = Field(alias="expiresAt")

    model_config = ConfigDict(populate_by_name=True, frozen=True)
