# backend/estateflow/services/property_store.py
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..domain.errors import NotFoundError
from ..models import PortalConfig, Property

# -----------------------------------------------------------------------------
# Property store
# -----------------------------------------------------------------------------
# The only place the workflow services touch persistence:
#   - get-by-id (optionally row-locked for a read-modify-write)
#   - upsert of a portal config keyed on (property_id, portal)
#   - a compact state dict used in error payloads and log lines
# Callers own the transaction: nothing here commits.
# -----------------------------------------------------------------------------

PORTAL_CONFIG_FIELDS = (
    "is_active",
    "location_id",
    "location_full_name",
    "published_at",
    "last_synced_at",
    "portal_status",
    "validation_errors",
)


def get_property(db: Session, property_id: int, *, for_update: bool = False) -> Property:
    stmt = (
        select(Property)
        .where(Property.id == int(property_id))
        .options(selectinload(Property.portal_configs))
    )
    if for_update:
        # Serialises concurrent transitions on the same row (no-op on SQLite).
        stmt = stmt.with_for_update()

    row = db.execute(stmt).scalar_one_or_none()
    if row is None:
        raise NotFoundError("property", property_id)
    return row


def missing_ids(db: Session, property_ids: list[int]) -> list[int]:
    wanted = {int(x) for x in property_ids}
    found = set(db.scalars(select(Property.id).where(Property.id.in_(wanted))).all())
    return sorted(wanted - found)


def upsert_portal_config(db: Session, prop: Property, portal: str, **fields: Any) -> PortalConfig:
    """
    Insert the config for `portal` if absent, otherwise field-merge into it.
    Only keys named in PORTAL_CONFIG_FIELDS are applied; None values are skipped.
    """
    unknown = [k for k in fields if k not in PORTAL_CONFIG_FIELDS]
    if unknown:
        raise TypeError(f"unknown portal config fields: {unknown}")

    cfg = prop.portal_configs.get(portal)
    if cfg is None:
        cfg = PortalConfig(portal=portal, is_active=False, portal_status="draft", validation_errors=[])
        prop.portal_configs[portal] = cfg

    for k, v in fields.items():
        if v is None:
            continue
        setattr(cfg, k, v)

    db.add(cfg)
    return cfg


def touch(prop: Property, now: Optional[datetime] = None) -> None:
    prop.updated_at = now or datetime.utcnow()


def state_of(prop: Property) -> dict[str, Any]:
    pending = prop.pending_changes
    return {
        "property_id": prop.id,
        "approval_status": prop.approval_status,
        "has_pending_changes": bool(pending),
        "pending_fields": sorted(pending.keys()) if pending else [],
        "is_portal_enhanced": bool(prop.is_portal_enhanced),
        "published_portals": prop.published_portals,
    }
