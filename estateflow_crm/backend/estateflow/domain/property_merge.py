# backend/estateflow/domain/property_merge.py
from __future__ import annotations

from typing import Any, Mapping

# Fields a staged edit may change. Everything else on a property (identity,
# timestamps, approval bookkeeping, portal publication state) is owned by the
# workflow services and is never taken from a patch.
MERGEABLE_FIELDS: tuple[str, ...] = (
    # listing
    "title",
    "title_ar",
    "category",
    "status",
    "price",
    "price_type",
    "location",
    "bedrooms",
    "bathrooms",
    "area",
    "agent",
    "assigned_agent_id",
    "image",
    "description",
    "description_ar",
    # portal enhancement attributes
    "furnishing_type",
    "size",
    "property_age",
    "available_from",
    "compliance_type",
    "listing_advertisement_number",
    "project_status",
    "developer",
    "unit_number",
    "floor_number",
    "parking_slots",
    "downpayment",
    "number_of_cheques",
    "amenities",
)

PROTECTED_FIELDS: tuple[str, ...] = ("id", "created_at")

REQUIRED_FIELDS: tuple[str, ...] = (
    "title",
    "category",
    "status",
    "price",
    "location",
    "bedrooms",
    "bathrooms",
    "area",
    "agent",
)


def mergeable_only(patch: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in patch.items() if k in MERGEABLE_FIELDS}


def snapshot(prop: Any) -> dict[str, Any]:
    return {f: getattr(prop, f, None) for f in MERGEABLE_FIELDS}


def merge(current: Mapping[str, Any], patch: Mapping[str, Any]) -> dict[str, Any]:
    """
    Overlay `patch` on `current`, field by field; patch values win.
    Keys outside MERGEABLE_FIELDS are dropped from both sides.
    """
    merged = mergeable_only(current)
    merged.update(mergeable_only(patch))
    return merged


def apply(prop: Any, fields: Mapping[str, Any]) -> list[str]:
    """Write merged fields onto `prop`; returns the names that actually changed."""
    changed: list[str] = []
    for name in MERGEABLE_FIELDS:
        if name not in fields:
            continue
        if getattr(prop, name, None) != fields[name]:
            setattr(prop, name, fields[name])
            changed.append(name)
    return changed
