# backend/tests/test_portal_enhancement.py
from __future__ import annotations

import pytest

from estateflow.domain.errors import NotFoundError, ValidationError
from estateflow.schemas import EnhancementData
from estateflow.services import approval_workflow as wf
from estateflow.services.portal_enhancement import bulk_enhance, enhance


def test_enhance_sets_fields_and_location_mapping(db, make_property):
    prop = make_property()

    out = enhance(
        db,
        prop.id,
        {
            "furnishing_type": "furnished",
            "amenities": ["balcony", "shared-pool"],
            "portal_configs": [{"portal": "bayut", "location_id": "50", "location_full_name": "Dubai Marina"}],
        },
        actor_id="agent-7",
    )

    assert out.is_portal_enhanced is True
    assert out.portal_enhancement_completed_by == "agent-7"
    assert out.portal_enhancement_completed_at is not None
    assert out.furnishing_type == "furnished"
    assert out.amenities == ["balcony", "shared-pool"]
    cfg = out.portal_configs["bayut"]
    assert cfg.location_id == "50"
    assert cfg.is_active is False
    assert cfg.portal_status == "draft"


def test_enhance_is_idempotent(db, make_property):
    prop = make_property()
    payload = {
        "compliance_type": "rera",
        "portal_configs": [{"portal": "dubizzle", "location_id": "51"}],
    }

    enhance(db, prop.id, payload, actor_id="agent-7")
    out = enhance(db, prop.id, payload, actor_id="agent-7")

    assert out.compliance_type == "rera"
    assert list(out.portal_configs.keys()) == ["dubizzle"]
    assert out.portal_configs["dubizzle"].location_id == "51"


def test_enhance_upserts_existing_mapping(db, make_property):
    prop = make_property(locations={"bayut": "50"})

    out = enhance(db, prop.id, EnhancementData(portal_configs=[{"portal": "bayut", "location_id": "60"}]), actor_id="a")

    assert len(out.portal_configs) == 1
    assert out.portal_configs["bayut"].location_id == "60"


def test_enhance_leaves_approval_state_alone(db, make_property):
    prop = make_property()
    wf.save_draft(db, prop.id, {"price": 10}, edited_by="agent-7")
    wf.submit_for_approval(db, prop.id)

    out = enhance(db, prop.id, {"project_status": "completed"}, actor_id="agent-7")

    assert out.approval_status == "pending"
    assert out.pending_changes == {"price": 10.0}


def test_enhance_with_nothing_supplied_fails(db, make_property):
    prop = make_property()

    for payload in ({}, {"portal_configs": []}, {"furnishing_type": None}):
        with pytest.raises(ValidationError):
            enhance(db, prop.id, payload, actor_id="agent-7")

    db.refresh(prop)
    assert prop.is_portal_enhanced is False


def test_enhance_rejects_bad_payloads(db, make_property):
    prop = make_property()

    bad = (
        {"amenities": ["helipad"]},
        {"furnishing_type": "half"},
        {"portal_configs": [{"portal": "bayut", "location_id": ""}]},
        {"portal_configs": [{"portal": "bayut", "location_id": "1"}, {"portal": "bayut", "location_id": "2"}]},
        {"portal_configs": [{"portal": "zillow", "location_id": "1"}]},
    )
    for payload in bad:
        with pytest.raises(ValidationError):
            enhance(db, prop.id, payload, actor_id="agent-7")

    with pytest.raises(ValidationError):
        enhance(db, prop.id, {"compliance_type": "rera"}, actor_id="")


def test_bulk_enhance_applies_to_every_property(db, make_property):
    a = make_property(title="First")
    b = make_property(title="Second")

    out = bulk_enhance(db, [a.id, b.id], {"furnishing_type": "unfurnished"}, actor_id="admin-1")

    assert [p.id for p in out] == [a.id, b.id]
    assert all(p.is_portal_enhanced and p.furnishing_type == "unfurnished" for p in out)


def test_bulk_enhance_refuses_location_mappings(db, make_property):
    a = make_property()

    with pytest.raises(ValidationError):
        bulk_enhance(db, [a.id], {"portal_configs": [{"portal": "bayut", "location_id": "1"}]}, actor_id="x")

    with pytest.raises(ValidationError):
        bulk_enhance(
            db,
            [a.id],
            EnhancementData(furnishing_type="furnished", portal_configs=[{"portal": "bayut", "location_id": "1"}]),
            actor_id="x",
        )


def test_bulk_enhance_missing_id_writes_nothing(db, make_property):
    a = make_property()

    with pytest.raises(NotFoundError) as ei:
        bulk_enhance(db, [a.id, 999], {"furnishing_type": "furnished"}, actor_id="x")

    assert ei.value.entity_id == 999
    db.refresh(a)
    assert a.is_portal_enhanced is False
    assert a.furnishing_type is None


def test_bulk_enhance_requires_ids(db):
    with pytest.raises(ValidationError):
        bulk_enhance(db, [], {"furnishing_type": "furnished"}, actor_id="x")
