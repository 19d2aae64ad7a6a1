"""Denial errors raised at the feature gate boundary."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from fastapi import HTTPException, status

from ..entitlements import EntitlementDecision

UPGRADE_REQUIRED = "upgrade_required"
LIMIT_REACHED = "limit_reached"


@dataclass
class FeatureGateError(Exception):
    """A gate denial surfaced to API callers as a 403 with an upgrade hint.

    The resolver never raises for denials; only boundary code converts a
    denied :class:`EntitlementDecision` into this error.
    """

    code: str
    message: str
    status_code: int = status.HTTP_403_FORBIDDEN
    detail: Optional[Mapping[str, Any]] = None

    def __post_init__(self) -> None:
        base_detail: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.detail:
            base_detail.update(self.detail)
        object.__setattr__(self, "_payload", base_detail)
        super().__init__(self.message)

    @classmethod
    def from_decision(cls, decision: EntitlementDecision, *, upgrade_url: str) -> "FeatureGateError":
        """Describe why ``decision`` blocks the request."""

        detail: Dict[str, Any] = {
            "capability": decision.capability.value,
            "tier": decision.tier.value,
            "required_tier": decision.required_tier.value if decision.required_tier else None,
            "upgrade_message": decision.upgrade_message,
            "upgrade_url": upgrade_url,
        }
        if decision.accessible and decision.limit_reached:
            detail["limit"] = decision.limit
            detail["current_count"] = decision.current_count
            return cls(
                code=LIMIT_REACHED,
                message=decision.upgrade_message
                or f"Limit reached for '{decision.capability.value}'.",
                detail=detail,
            )
        return cls(
            code=UPGRADE_REQUIRED,
            message=decision.upgrade_message
            or f"Capability '{decision.capability.value}' is not available on this tier.",
            detail=detail,
        )

    @property
    def payload(self) -> Mapping[str, Any]:
        return self._payload

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=dict(self.payload))
