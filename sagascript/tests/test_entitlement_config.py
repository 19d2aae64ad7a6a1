from __future__ import annotations

import pytest

from sagascript.app.entitlements import SubscriptionTier, UnknownTierError
from sagascript.config import load_entitlement_config


def test_defaults_without_environment():
    config = load_entitlement_config({})

    assert config.default_tier == SubscriptionTier.APPRENTICE
    assert config.token_ttl_seconds == 300
    assert config.usage_warn_ratio == pytest.approx(0.8)
    assert config.upgrade_url == "/subscription"
    assert config.user_id_header == "X-User-Id"
    assert config.token_secret


def test_values_from_environment():
    config = load_entitlement_config(
        {
            "ENTITLEMENT_DEFAULT_TIER": " Wordsmith ",
            "ENTITLEMENT_TOKEN_SECRET": "s3cret",
            "ENTITLEMENT_TOKEN_TTL_SECONDS": "900",
            "ENTITLEMENT_USAGE_WARN_RATIO": "0.9",
            "ENTITLEMENT_UPGRADE_URL": "/pricing",
        }
    )

    assert config.default_tier == SubscriptionTier.WORDSMITH
    assert config.token_secret == "s3cret"
    assert config.token_ttl_seconds == 900
    assert config.usage_warn_ratio == pytest.approx(0.9)
    assert config.upgrade_url == "/pricing"


def test_ttl_has_a_floor():
    assert load_entitlement_config({"ENTITLEMENT_TOKEN_TTL_SECONDS": "5"}).token_ttl_seconds == 60


def test_unknown_default_tier_fails_loudly():
    with pytest.raises(UnknownTierError):
        load_entitlement_config({"ENTITLEMENT_DEFAULT_TIER": "chronicler"})


@pytest.mark.parametrize(
    "env",
    [
        {"ENTITLEMENT_TOKEN_TTL_SECONDS": "soon"},
        {"ENTITLEMENT_USAGE_WARN_RATIO": "high"},
        {"ENTITLEMENT_USAGE_WARN_RATIO": "1.5"},
    ],
)
def test_malformed_values_raise(env):
    with pytest.raises(ValueError):
        load_entitlement_config(env)
