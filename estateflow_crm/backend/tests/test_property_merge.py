# backend/tests/test_property_merge.py
from __future__ import annotations

from estateflow.domain.property_merge import MERGEABLE_FIELDS, PROTECTED_FIELDS, merge, snapshot
from estateflow.schemas import PropertyBase, PropertyPatch


def test_patch_schema_matches_merge_whitelist():
    assert set(PropertyPatch.model_fields) == set(MERGEABLE_FIELDS)
    assert set(PropertyBase.model_fields) == set(MERGEABLE_FIELDS)


def test_protected_fields_never_mergeable():
    assert not set(PROTECTED_FIELDS) & set(MERGEABLE_FIELDS)


def test_merge_drops_unknown_and_protected_keys(make_property):
    prop = make_property(price=100.0)

    merged = merge(snapshot(prop), {"price": 200.0, "id": 9, "created_at": "x", "approval_status": "approved"})

    assert merged["price"] == 200.0
    assert merged["title"] == prop.title
    assert "id" not in merged
    assert "created_at" not in merged
    assert "approval_status" not in merged


def test_patch_changes_only_returns_sent_keys():
    patch = PropertyPatch.model_validate({"bedrooms": 2, "description": None})

    assert patch.changes() == {"bedrooms": 2, "description": None}
