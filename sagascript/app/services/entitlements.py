"""Application wiring for the entitlement service."""
from __future__ import annotations

import logging
from functools import lru_cache

from ..entitlements import (
    EntitlementService,
    HMACTokenSigner,
    InMemoryProfileCache,
    InMemoryProfileRepository,
    log_monotonicity_report,
)
from ...config import EntitlementConfig, load_entitlement_config


logger = logging.getLogger("entitlements")


@lru_cache(maxsize=1)
def get_entitlement_config() -> EntitlementConfig:
    return load_entitlement_config()


@lru_cache(maxsize=1)
def get_profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@lru_cache(maxsize=1)
def get_entitlement_service() -> EntitlementService:
    config = get_entitlement_config()
    violations = log_monotonicity_report()
    logger.debug(
        "Entitlement service ready default_tier=%s ttl=%ss table_warnings=%s",
        config.default_tier.value,
        config.token_ttl_seconds,
        len(violations),
    )
    return EntitlementService(
        repository=get_profile_repository(),
        cache=InMemoryProfileCache(),
        token_signer=HMACTokenSigner(config.token_secret),
        ttl_seconds=config.token_ttl_seconds,
    )


__all__ = ["get_entitlement_config", "get_entitlement_service", "get_profile_repository"]
