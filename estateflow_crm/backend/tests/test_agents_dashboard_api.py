# backend/tests/test_agents_dashboard_api.py
from __future__ import annotations

from conftest import ADMIN, AGENT, listing


def _agent(client, name: str, email: str, revenue: float, sales: int = 1) -> dict:
    r = client.post(
        "/api/agents",
        json={"name": name, "email": email, "phone": "+971500000000", "total_revenue": revenue, "sales_count": sales},
        headers=ADMIN,
    )
    assert r.status_code == 201, r.text
    return r.json()


def test_agents_sorted_by_revenue(client):
    _agent(client, "Omar Hassan", "omar@estateflow.com", 5_800_000)
    _agent(client, "Sarah Al-Farsi", "sarah@estateflow.com", 18_500_000)

    r = client.get("/api/agents", headers=AGENT)
    assert [a["name"] for a in r.json()] == ["Sarah Al-Farsi", "Omar Hassan"]


def test_duplicate_agent_email_conflicts(client):
    _agent(client, "Omar Hassan", "omar@estateflow.com", 1)
    r = client.post(
        "/api/agents",
        json={"name": "Other", "email": "omar@estateflow.com", "phone": "+971500000001"},
        headers=ADMIN,
    )
    assert r.status_code == 409


def test_agent_update_and_performance(client):
    agent = _agent(client, "Layla Khan", "layla@estateflow.com", 100, sales=2)
    client.post("/api/properties", json=listing(agent="Layla Khan"), headers=AGENT)

    r = client.patch(f"/api/agents/{agent['id']}", json={"rating": 4.7}, headers=ADMIN)
    assert r.status_code == 200
    assert r.json()["rating"] == 4.7

    r = client.get(f"/api/agents/{agent['id']}/performance", headers=AGENT)
    body = r.json()
    assert body["total_sales"] == 2
    assert body["average_rating"] == 4.7
    assert body["listings"] == 1

    r = client.get(f"/api/agents/{agent['id']}/properties", headers=AGENT)
    assert [p["agent"] for p in r.json()] == ["Layla Khan"]

    assert client.get("/api/agents/999", headers=AGENT).status_code == 404


def test_dashboard_stats_computed_from_data(client):
    _agent(client, "James Mitchell", "james@estateflow.com", 9_200_000, sales=8)
    client.post("/api/properties", json=listing(category="sale", price=2_000_000), headers=AGENT)
    client.post("/api/properties", json=listing(category="luxury", price=10_000_000, status="sold"), headers=AGENT)
    client.post(
        "/api/properties",
        json=listing(category="rental", price=85_000, price_type="yearly", status="rented"),
        headers=AGENT,
    )

    r = client.get("/api/dashboard/stats", headers=AGENT)
    stats = r.json()
    assert stats["total_revenue"] == 12_000_000
    assert stats["rental_revenue"] == 85_000
    assert stats["luxury_inventory"] == 1
    assert stats["published_listings"] == 1
    assert stats["active_agents"] == 1
    assert stats["total_properties"] == 3
    assert stats["pending_approvals"] == 0

    r = client.get("/api/dashboard/agent-performance", headers=AGENT)
    assert r.json() == [{"agent_id": 1, "name": "James Mitchell", "deals": 8, "revenue": 9_200_000}]


def test_portal_stats_counts_active_listings(client):
    pid = client.post("/api/properties", json=listing(), headers=AGENT).json()["id"]
    client.post(
        f"/api/properties/{pid}/enhance",
        json={"portal_configs": [{"portal": "bayut", "location_id": "50"}]},
        headers=AGENT,
    )
    client.post(f"/api/properties/{pid}/publish", json={"portals": ["bayut"]}, headers=AGENT)

    rows = {r["portal"]: r for r in client.get("/api/dashboard/portal-stats", headers=AGENT).json()}
    assert rows["bayut"] == {"portal": "bayut", "name": "Bayut", "listings": 1, "errors": 0}
    assert rows["dubizzle"]["listings"] == 0


def test_workflow_and_audit_logs(client):
    pid = client.post("/api/properties", json=listing(), headers=AGENT).json()["id"]
    client.post(f"/api/properties/{pid}/draft-changes", json={"changes": {"bedrooms": 4}}, headers=AGENT)

    r = client.get("/api/workflow/events", params={"property_id": pid}, headers=AGENT)
    assert [e["event_type"] for e in r.json()] == ["draft_saved"]

    assert client.get("/api/audit", headers=AGENT).status_code == 403
    r = client.get("/api/audit", params={"entity_type": "property"}, headers=ADMIN)
    assert [e["action"] for e in r.json()] == ["property.create"]
