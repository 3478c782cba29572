# backend/tests/test_portal_publish.py
from __future__ import annotations

import pytest
from sqlalchemy import select

from estateflow.config import settings
from estateflow.domain.catalog import is_known_portal, supported_portals
from estateflow.domain.errors import InvalidStateError, PortalReadinessError, ValidationError
from estateflow.models import WorkflowEvent
from estateflow.services.portal_publish import publish, validate_readiness


def test_publish_blocked_when_any_portal_fails(db, make_property):
    prop = make_property(locations={"bayut": "50"}, enhanced=True)

    with pytest.raises(PortalReadinessError) as ei:
        publish(db, prop.id, ["bayut", "dubizzle"], actor_id="agent-7")

    err = ei.value
    assert err.portals == ["dubizzle"]
    assert err.failures[0]["missing_fields"] == ["location_id"]
    assert err.as_dict()["portals"][0]["portal"] == "dubizzle"

    db.refresh(prop)
    assert prop.published_portals == []
    assert prop.portal_configs["bayut"].is_active is False
    assert prop.portal_configs["bayut"].portal_status == "draft"


def test_publish_activates_requested_portals(db, make_property):
    prop = make_property(locations={"bayut": "50", "dubizzle": "51"}, enhanced=True)

    out = publish(db, prop.id, ["bayut", "dubizzle"], actor_id="agent-7")

    assert out.published_portals == ["bayut", "dubizzle"]
    for portal in ("bayut", "dubizzle"):
        cfg = out.portal_configs[portal]
        assert cfg.is_active is True
        assert cfg.portal_status == "published"
        assert cfg.published_at is not None
        assert cfg.last_synced_at is not None
        assert cfg.validation_errors == []


def test_publish_replaces_previous_set(db, make_property):
    prop = make_property(locations={"bayut": "50", "dubizzle": "51"}, enhanced=True)
    publish(db, prop.id, ["bayut", "dubizzle"])

    out = publish(db, prop.id, ["dubizzle"])

    assert out.published_portals == ["dubizzle"]
    assert out.portal_configs["bayut"].is_active is False
    assert out.portal_configs["bayut"].portal_status == "draft"
    assert out.portal_configs["dubizzle"].is_active is True


def test_publish_dedupes_and_keeps_order(db, make_property):
    prop = make_property(locations={"bayut": "50", "property_finder": "70"}, enhanced=True)

    out = publish(db, prop.id, ["property_finder", "bayut", "property_finder"])

    assert out.published_portals == ["property_finder", "bayut"]


def test_publish_requires_enhancement(db, make_property):
    prop = make_property(locations={"bayut": "50"}, enhanced=False)

    with pytest.raises(InvalidStateError):
        publish(db, prop.id, ["bayut"])

    db.refresh(prop)
    assert prop.published_portals == []


@pytest.mark.parametrize("portals", [[], ["  "], ["zillow"], ["bayut", "myspace"]])
def test_publish_rejects_bad_portal_lists(db, make_property, portals):
    prop = make_property(locations={"bayut": "50"}, enhanced=True)

    with pytest.raises(ValidationError):
        publish(db, prop.id, portals)


def test_publish_writes_event(db, make_property):
    prop = make_property(locations={"bayut": "50"}, enhanced=True)
    publish(db, prop.id, ["bayut"], actor_id="agent-7")

    ev = db.scalar(select(WorkflowEvent).where(WorkflowEvent.event_type == "published"))
    assert ev is not None
    assert ev.property_id == prop.id
    assert ev.actor_id == "agent-7"


def test_validate_readiness_defaults_to_every_portal(db, make_property):
    prop = make_property(locations={"bayut": "50"}, enhanced=True)

    out = {r.portal: r for r in validate_readiness(db, prop.id)}

    assert set(out) == {"property_finder", "bayut", "dubizzle"}
    assert out["bayut"].is_ready_for_portal is True
    assert out["dubizzle"].can_publish is False


def test_publish_accepts_a_single_portal_name(db, make_property):
    prop = make_property(locations={"bayut": "50"}, enhanced=True)

    out = publish(db, prop.id, "bayut")

    assert out.published_portals == ["bayut"]
    assert [r.portal for r in validate_readiness(db, prop.id, "bayut")] == ["bayut"]


def test_portal_setting_limits_supported_portals(db, make_property, monkeypatch):
    monkeypatch.setattr(settings, "portals", ["bayut", "zillow"])
    prop = make_property(locations={"bayut": "50", "dubizzle": "51"}, enhanced=True)

    assert supported_portals() == ("bayut",)
    assert is_known_portal("dubizzle") is False
    assert [r.portal for r in validate_readiness(db, prop.id)] == ["bayut"]

    with pytest.raises(ValidationError) as ei:
        publish(db, prop.id, ["bayut", "dubizzle"])
    assert "dubizzle" in str(ei.value)

    db.refresh(prop)
    assert prop.published_portals == []
