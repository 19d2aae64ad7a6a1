from __future__ import annotations

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from sagascript.app.entitlements import (
    Capability,
    EntitlementService,
    HMACTokenSigner,
    InMemoryProfileCache,
    InMemoryProfileRepository,
    Profile,
    SubscriptionTier,
)
from sagascript.app.feature_gates import EntitlementContext
from sagascript.app.routes import entitlements as entitlement_routes
from sagascript.app.schemas.entitlements import (
    EntitlementCheckRequest,
    EntitlementCheckResponse,
    SuggestionQuotaRequest,
    UsageReportRequest,
)
from sagascript.app.services.entitlements import get_entitlement_service
from sagascript.main import app


@pytest.fixture
def service() -> EntitlementService:
    repository = InMemoryProfileRepository(
        [
            Profile(user_id="writer-1", tier=SubscriptionTier.APPRENTICE),
            Profile(user_id="writer-2", tier=SubscriptionTier.WORDSMITH),
            Profile(user_id="admin-1", tier=SubscriptionTier.LEGENDARY, is_admin=True),
        ]
    )
    return EntitlementService(
        repository=repository,
        cache=InMemoryProfileCache(),
        token_signer=HMACTokenSigner("test-secret"),
    )


@pytest.fixture
def client(service):
    app.dependency_overrides[get_entitlement_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_check_entitlement_returns_denial_as_data():
    context = EntitlementContext(tier=SubscriptionTier.APPRENTICE, user_id="writer-1")
    request = EntitlementCheckRequest(capability=Capability.TIMELINE_MANAGEMENT)

    response = entitlement_routes.check_entitlement(request, context=context)

    assert isinstance(response, EntitlementCheckResponse)
    assert response.allowed is False
    assert response.required_tier == SubscriptionTier.WORDSMITH
    assert response.upgrade_url == "/subscription"


def test_usage_report_route():
    context = EntitlementContext(tier=SubscriptionTier.WORDSMITH)
    request = UsageReportRequest(counts={Capability.AI_SUGGESTIONS_LIMIT: 90, Capability.MAX_SERIES: 12})

    response = entitlement_routes.get_usage_report(request, context=context)

    items = {item.capability: item for item in response.items}
    assert response.tier == SubscriptionTier.WORDSMITH
    assert items[Capability.AI_SUGGESTIONS_LIMIT].approaching_limit is True
    assert items[Capability.AI_SUGGESTIONS_LIMIT].remaining == 10
    assert items[Capability.MAX_SERIES].limit is None


def test_ai_quota_route_raises_when_exhausted():
    context = EntitlementContext(tier=SubscriptionTier.APPRENTICE)

    with pytest.raises(HTTPException) as exc:
        entitlement_routes.reserve_ai_suggestion(
            SuggestionQuotaRequest(used_this_month=3),
            gate=context.require(Capability.AI_SUGGESTIONS),
            context=context,
        )

    assert exc.value.status_code == 403
    assert exc.value.detail["error"] == "limit_reached"


def test_get_tier_unknown_returns_404():
    with pytest.raises(HTTPException) as exc:
        entitlement_routes.get_tier("chronicler")

    assert exc.value.status_code == 404


def test_list_tiers_over_http(client):
    response = client.get("/api/entitlements/tiers")

    assert response.status_code == 200
    tiers = response.json()["tiers"]
    assert [tier["tier"] for tier in tiers] == ["apprentice", "wordsmith", "loremaster", "legendary"]
    assert tiers[0]["displayName"] == "Apprentice"
    assert tiers[0]["capabilities"]["timelineManagement"] is False
    assert tiers[0]["capabilities"]["maxSeries"] == 1
    assert tiers[3]["capabilities"]["aiSuggestionsLimit"] == -1


def test_get_single_tier_over_http(client):
    response = client.get("/api/entitlements/tiers/wordsmith")

    assert response.status_code == 200
    assert response.json()["displayName"] == "The Wordsmith"
    assert response.json()["rank"] == 1


def test_me_requires_user(client):
    assert client.get("/api/entitlements/me").status_code == 401
    assert client.get("/api/entitlements/me", headers={"X-User-Id": "ghost"}).status_code == 404


def test_me_returns_snapshot(client):
    response = client.get("/api/entitlements/me", headers={"X-User-Id": "writer-2"})

    assert response.status_code == 200
    body = response.json()
    assert body["userId"] == "writer-2"
    assert body["tier"] == "wordsmith"
    assert body["capabilities"]["aiSuggestionsLimit"] == 100
    assert body["token"]


def test_check_anonymous_uses_default_tier(client):
    response = client.post("/api/entitlements/check", json={"capability": "timelineManagement"})

    assert response.status_code == 200
    body = response.json()
    assert body["tier"] == "apprentice"
    assert body["allowed"] is False
    assert "The Wordsmith" in body["upgradeMessage"]
    assert body["upgradeUrl"] == "/subscription"


def test_check_with_count_for_user(client):
    response = client.post(
        "/api/entitlements/check",
        json={"capability": "maxSeries", "currentCount": 1},
        headers={"X-User-Id": "writer-2"},
    )

    body = response.json()
    assert body["allowed"] is True
    assert body["limitReached"] is False
    assert body["upgradeUrl"] is None


def test_check_rejects_unknown_capability(client):
    response = client.post("/api/entitlements/check", json={"capability": "teleportation"})

    assert response.status_code == 422


def test_usage_over_http(client):
    response = client.post(
        "/api/entitlements/usage",
        json={"counts": {"maxSeries": 1, "aiSuggestionsLimit": 2}},
        headers={"X-User-Id": "writer-1"},
    )

    assert response.status_code == 200
    items = {item["capability"]: item for item in response.json()["items"]}
    assert items["maxSeries"]["atLimit"] is True
    assert items["aiSuggestionsLimit"]["atLimit"] is False


def test_admin_switch_tier(client):
    response = client.post(
        "/api/entitlements/admin/switch-tier",
        json={"userId": "writer-1", "tier": "loremaster"},
        headers={"X-User-Id": "admin-1"},
    )

    assert response.status_code == 200
    assert response.json() == {"userId": "writer-1", "tier": "loremaster", "displayName": "Loremaster"}

    me = client.get("/api/entitlements/me", headers={"X-User-Id": "writer-1"})
    assert me.json()["tier"] == "loremaster"


def test_switch_tier_forbidden_for_writers(client):
    response = client.post(
        "/api/entitlements/admin/switch-tier",
        json={"userId": "writer-1", "tier": "legendary"},
        headers={"X-User-Id": "writer-2"},
    )

    assert response.status_code == 403


def test_ai_quota_over_http(client):
    allowed = client.post(
        "/api/entitlements/ai/suggestions/quota",
        json={"usedThisMonth": 2},
        headers={"X-User-Id": "writer-1"},
    )
    blocked = client.post(
        "/api/entitlements/ai/suggestions/quota",
        json={"usedThisMonth": 3},
        headers={"X-User-Id": "writer-1"},
    )

    assert allowed.status_code == 200
    assert allowed.json()["remaining"] == 1
    assert blocked.status_code == 403
    detail = blocked.json()["detail"]
    assert detail["error"] == "limit_reached"
    assert detail["required_tier"] == "wordsmith"
