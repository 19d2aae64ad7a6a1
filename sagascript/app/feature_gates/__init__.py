"""Feature gating utilities coordinating entitlement enforcement."""
from .context import EntitlementContext
from .enforcement import DEFAULT_UPGRADE_URL, evaluate_gate, require_capability
from .exceptions import LIMIT_REACHED, UPGRADE_REQUIRED, FeatureGateError
from .quota import UsageEvaluation, assert_within_limit, evaluate_usage, evaluate_usage_report

__all__ = [
    "DEFAULT_UPGRADE_URL",
    "EntitlementContext",
    "FeatureGateError",
    "LIMIT_REACHED",
    "UPGRADE_REQUIRED",
    "UsageEvaluation",
    "assert_within_limit",
    "evaluate_gate",
    "evaluate_usage",
    "evaluate_usage_report",
    "require_capability",
]
