from __future__ import annotations

import logging

import pytest

from sagascript.app.entitlements import (
    ENTITLEMENT_TABLE,
    TIER_CATALOG,
    TIER_ORDER,
    Capability,
    EntitlementConfigurationError,
    SubscriptionTier,
    UnknownTierError,
    find_monotonicity_violations,
    get_tier_definition,
    log_monotonicity_report,
    validate_entitlement_table,
)


def _mutable_table():
    return {tier: dict(row) for tier, row in ENTITLEMENT_TABLE.items()}


def test_tier_order_covers_every_tier():
    assert list(TIER_ORDER) == list(SubscriptionTier)
    assert set(TIER_CATALOG) == set(SubscriptionTier)


def test_shipped_table_is_valid():
    validate_entitlement_table(ENTITLEMENT_TABLE)


def test_table_is_read_only():
    with pytest.raises(TypeError):
        ENTITLEMENT_TABLE[SubscriptionTier.APPRENTICE][Capability.MAX_SERIES] = 5  # type: ignore[index]


def test_validation_lists_missing_entries():
    table = _mutable_table()
    del table[SubscriptionTier.APPRENTICE][Capability.MAX_SERIES]
    del table[SubscriptionTier.LEGENDARY]

    with pytest.raises(EntitlementConfigurationError) as exc:
        validate_entitlement_table(table)

    message = str(exc.value)
    assert "missing apprentice.maxSeries" in message
    assert "missing tier legendary" in message


@pytest.mark.parametrize("bad_value", [-2, "basic", 2.5, None])
def test_validation_rejects_bad_values(bad_value):
    table = _mutable_table()
    table[SubscriptionTier.WORDSMITH][Capability.CLOUD_STORAGE] = bad_value

    with pytest.raises(EntitlementConfigurationError) as exc:
        validate_entitlement_table(table)

    assert "wordsmith.cloudStorage" in str(exc.value)


def test_validation_rejects_unknown_keys():
    table = _mutable_table()
    table[SubscriptionTier.WORDSMITH]["customCharacterTemplates"] = True

    with pytest.raises(EntitlementConfigurationError) as exc:
        validate_entitlement_table(table)

    assert "customCharacterTemplates" in str(exc.value)


def test_shipped_table_has_one_known_monotonicity_gap():
    violations = find_monotonicity_violations(ENTITLEMENT_TABLE)

    assert [(v.capability, v.lower_tier, v.higher_tier) for v in violations] == [
        (Capability.PRIORITY_SUPPORT, SubscriptionTier.WORDSMITH, SubscriptionTier.LOREMASTER)
    ]


def test_monotonicity_treats_unlimited_as_largest():
    table = _mutable_table()
    table[SubscriptionTier.LOREMASTER][Capability.MAX_SERIES] = 50

    violations = find_monotonicity_violations(table)

    assert any(
        v.capability == Capability.MAX_SERIES
        and v.lower_tier == SubscriptionTier.WORDSMITH
        and v.higher_value == 50
        for v in violations
    )


def test_monotonicity_report_is_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="entitlements"):
        violations = log_monotonicity_report()

    assert len(violations) == 1
    assert "prioritySupport" in caplog.text


def test_get_tier_definition():
    definition = get_tier_definition(SubscriptionTier.LOREMASTER)

    assert definition.display_name == "Loremaster"
    assert definition.monthly_price == pytest.approx(19.99)
    assert definition.platform_access == "all"
    assert get_tier_definition(SubscriptionTier.APPRENTICE).is_free is True


def test_get_tier_definition_unknown():
    with pytest.raises(UnknownTierError):
        get_tier_definition("chronicler")  # type: ignore[arg-type]
