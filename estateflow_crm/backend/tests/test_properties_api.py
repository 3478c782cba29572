# backend/tests/test_properties_api.py
from __future__ import annotations

import pytest

from conftest import ADMIN, AGENT, listing


def _create(client, **overrides) -> dict:
    r = client.post("/api/properties", json=listing(**overrides), headers=AGENT)
    assert r.status_code == 201, r.text
    return r.json()


def test_requires_identity_headers(client):
    r = client.get("/api/properties")
    assert r.status_code == 401


def test_create_and_list_with_filters(client):
    _create(client, title="Marina flat", category="rental", price_type="yearly", location="Dubai Marina")
    _create(client, title="Palm villa", category="luxury", location="Palm Jumeirah")

    r = client.get("/api/properties", params={"type": "rental"}, headers=AGENT)
    body = r.json()
    assert r.status_code == 200
    assert body["total"] == 1
    assert body["data"][0]["title"] == "Marina flat"

    r = client.get("/api/properties", params={"city": "palm"}, headers=AGENT)
    assert [p["title"] for p in r.json()["data"]] == ["Palm villa"]

    r = client.get("/api/properties", params={"page_size": 1, "page": 2}, headers=AGENT)
    body = r.json()
    assert body["total"] == 2
    assert body["page"] == 2
    assert len(body["data"]) == 1


def test_create_rejects_unknown_fields(client):
    payload = listing()
    payload["approval_status"] = "pending"
    r = client.post("/api/properties", json=payload, headers=AGENT)
    assert r.status_code == 422


def test_search(client):
    _create(client, title="Creek Harbour 3-Bed", location="Dubai Creek Harbour")
    _create(client, title="DIFC Loft", location="DIFC")

    r = client.get("/api/properties/search", params={"q": "creek"}, headers=AGENT)
    assert [p["title"] for p in r.json()] == ["Creek Harbour 3-Bed"]

    r = client.get("/api/properties/search", params={"q": ""}, headers=AGENT)
    assert r.json() == []


def test_get_missing_property_is_404(client):
    r = client.get("/api/properties/999", headers=AGENT)
    assert r.status_code == 404
    assert r.json()["detail"]["error"] == "not_found"


def test_approval_flow_over_http(client):
    prop = _create(client, price=100)
    pid = prop["id"]

    r = client.post(f"/api/properties/{pid}/draft-changes", json={"changes": {"price": 150}}, headers=AGENT)
    assert r.status_code == 200
    assert r.json()["pending_changes"] == {"price": 150.0}
    assert r.json()["edited_by"] == "agent-7"

    r = client.post(f"/api/properties/{pid}/submit-approval", headers=AGENT)
    assert r.json()["approval_status"] == "pending"

    r = client.get("/api/properties/approvals/pending", headers=ADMIN)
    assert r.json()["total"] == 1

    r = client.patch(f"/api/properties/{pid}/approve", headers=AGENT)
    assert r.status_code == 403

    r = client.patch(f"/api/properties/{pid}/approve", headers=ADMIN)
    body = r.json()
    assert r.status_code == 200
    assert body["price"] == 150.0
    assert body["approval_status"] == "approved"
    assert body["pending_changes"] is None
    assert body["created_at"] == prop["created_at"]


def test_workflow_errors_map_to_status_codes(client):
    pid = _create(client)["id"]

    r = client.post(f"/api/properties/{pid}/submit-approval", headers=AGENT)
    assert r.status_code == 400
    assert r.json()["detail"]["error"] == "no_pending_changes"

    r = client.patch(f"/api/properties/{pid}/approve", headers=ADMIN)
    assert r.status_code == 409
    assert r.json()["detail"]["current_state"]["approval_status"] == "approved"

    r = client.post(f"/api/properties/{pid}/draft-changes", json={"changes": {"id": 5}}, headers=AGENT)
    assert r.status_code == 400

    r = client.patch(f"/api/properties/{pid}/reject", json={"reason": ""}, headers=ADMIN)
    assert r.status_code == 400


def test_enhance_readiness_and_publish(client):
    pid = _create(client)["id"]

    r = client.post(
        f"/api/properties/{pid}/enhance",
        json={"furnishing_type": "furnished", "portal_configs": [{"portal": "bayut", "location_id": "50"}]},
        headers=AGENT,
    )
    assert r.status_code == 200
    assert r.json()["is_portal_enhanced"] is True

    r = client.get(f"/api/properties/{pid}/readiness", params=[("portal", "bayut"), ("portal", "dubizzle")], headers=AGENT)
    ready = {x["portal"]: x for x in r.json()}
    assert ready["bayut"]["is_ready_for_portal"] is True
    assert ready["dubizzle"]["missing_fields"] == ["location_id"]

    r = client.get(f"/api/properties/{pid}/portal-validation", headers=AGENT)
    assert r.json() == {"bayut": []}

    r = client.post(f"/api/properties/{pid}/publish", json={"portals": ["bayut", "dubizzle"]}, headers=AGENT)
    assert r.status_code == 422
    assert [x["portal"] for x in r.json()["detail"]["portals"]] == ["dubizzle"]

    r = client.post(f"/api/properties/{pid}/publish", json={"portals": ["bayut"]}, headers=AGENT)
    assert r.status_code == 200
    assert r.json()["published_portals"] == ["bayut"]
    assert r.json()["portal_configs"]["bayut"]["portal_status"] == "published"


def test_bulk_enhance_over_http(client):
    a = _create(client, title="One")["id"]
    b = _create(client, title="Two")["id"]

    r = client.post(
        "/api/properties/bulk-enhance",
        json={"property_ids": [a, b], "data": {"compliance_type": "dtcm"}},
        headers=AGENT,
    )
    assert r.status_code == 200
    assert [p["compliance_type"] for p in r.json()] == ["dtcm", "dtcm"]

    r = client.post(
        "/api/properties/bulk-enhance",
        json={"property_ids": [a, 404], "data": {"compliance_type": "rera"}},
        headers=AGENT,
    )
    assert r.status_code == 404


def test_admin_direct_patch_and_delete(client):
    pid = _create(client)["id"]

    r = client.patch(f"/api/properties/{pid}", json={"bedrooms": 3}, headers=AGENT)
    assert r.status_code == 403

    r = client.patch(f"/api/properties/{pid}", json={"bedrooms": 3}, headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["bedrooms"] == 3

    r = client.patch(f"/api/properties/{pid}", json={"amenities": None}, headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["amenities"] == []

    r = client.delete(f"/api/properties/{pid}", headers=ADMIN)
    assert r.status_code == 200
    assert client.get(f"/api/properties/{pid}", headers=AGENT).status_code == 404


def test_plain_user_cannot_edit_or_publish(client):
    pid = _create(client)["id"]
    user = {"X-User-Id": "viewer-1", "X-User-Role": "user"}

    assert client.get(f"/api/properties/{pid}", headers=user).status_code == 200
    assert client.post("/api/properties", json=listing(), headers=user).status_code == 403
    r = client.post(f"/api/properties/{pid}/draft-changes", json={"changes": {"bedrooms": 4}}, headers=user)
    assert r.status_code == 403
    assert client.post(f"/api/properties/{pid}/enhance", json={}, headers=user).status_code == 403
    r = client.post(f"/api/properties/{pid}/publish", json={"portals": ["bayut"]}, headers=user)
    assert r.status_code == 403


def test_portal_locations_from_bundled_catalog(client):
    r = client.get("/api/properties/portal-locations", params={"q": "marina", "portal": "bayut"}, headers=AGENT)
    assert r.status_code == 200
    assert r.json()[0] == {"id": "50", "name": "Dubai Marina", "name_ar": "دبي مارينا", "portal": "bayut"}

    r = client.get("/api/properties/portal-locations", params={"q": "marina", "portal": "zillow"}, headers=AGENT)
    assert r.status_code == 400


def test_request_id_header_round_trips(client):
    r = client.get("/api/health", headers={"X-Request-ID": "req-123"})
    assert r.status_code == 200
    assert r.headers["X-Request-ID"] == "req-123"
    assert r.json()["ok"] is True


@pytest.mark.parametrize("incoming", ["x" * 300, "bad id <script>", ""])
def test_unsafe_request_ids_are_replaced(client, incoming):
    r = client.get("/api/health", headers={"X-Request-ID": incoming})
    rid = r.headers["X-Request-ID"]
    assert rid != incoming
    assert len(rid) == 32
