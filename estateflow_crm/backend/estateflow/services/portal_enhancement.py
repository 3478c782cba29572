# backend/estateflow/services/portal_enhancement.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ..domain import events
from ..domain.audit import audit_write
from ..domain.errors import NotFoundError, ValidationError
from ..models import Property
from ..schemas import BulkEnhancementData, EnhancementData
from .approval_workflow import pydantic_errors
from .property_store import get_property, missing_ids, touch, upsert_portal_config

log = logging.getLogger(__name__)

ENHANCEMENT_FIELDS = ("furnishing_type", "compliance_type", "project_status", "amenities")

D = TypeVar("D", bound=BulkEnhancementData)


def _parse(model: Type[D], data: Union[D, Mapping[str, Any], None]) -> D:
    if type(data) is model:
        return data
    if data is None:
        raise ValidationError("nothing to update", field="data")
    if isinstance(data, BaseModel):
        # e.g. EnhancementData handed to bulk mode: re-check against the narrower model
        data = data.model_dump(exclude_unset=True)
    try:
        return model.model_validate(dict(data))
    except PydanticValidationError as e:
        raise ValidationError("Invalid enhancement data", field="data", errors=pydantic_errors(e)) from e
    except (TypeError, ValueError) as e:
        raise ValidationError("enhancement data must be an object", field="data") from e


def _require_actor(actor_id: Optional[str]) -> str:
    actor = (actor_id or "").strip()
    if not actor:
        raise ValidationError("actor_id is required", field="actor_id")
    return actor


def _apply(db: Session, prop: Property, provided: dict[str, Any], *, actor_id: str, now: datetime) -> dict[str, Any]:
    """Merge supplied fields onto `prop`; returns the before-image of what was touched."""
    before: dict[str, Any] = {}

    for name in ENHANCEMENT_FIELDS:
        if name in provided:
            before[name] = getattr(prop, name)
            setattr(prop, name, provided[name])

    for mapping in provided.get("portal_configs") or []:
        portal = mapping["portal"]
        existing = prop.portal_configs.get(portal)
        before[f"portal_configs.{portal}"] = (
            {"location_id": existing.location_id, "location_full_name": existing.location_full_name}
            if existing is not None
            else None
        )
        upsert_portal_config(
            db,
            prop,
            portal,
            location_id=mapping["location_id"],
            location_full_name=mapping.get("location_full_name"),
        )

    before["is_portal_enhanced"] = bool(prop.is_portal_enhanced)
    prop.is_portal_enhanced = True
    prop.portal_enhancement_completed_at = now
    prop.portal_enhancement_completed_by = actor_id
    touch(prop, now)

    audit_write(
        db,
        actor_id=actor_id,
        action="property.enhance",
        entity_type="property",
        entity_id=prop.id,
        before=before,
        after=provided,
    )
    events.emit_workflow_event(
        db,
        event_type=events.ENHANCED,
        property_id=prop.id,
        actor_id=actor_id,
        payload={"fields": sorted(provided.keys())},
    )
    return before


def enhance(
    db: Session,
    property_id: int,
    data: Union[EnhancementData, Mapping[str, Any], None],
    *,
    actor_id: str,
) -> Property:
    """
    Attach portal metadata to one property. Approval state is not touched.

    Only supplied fields are written; each location mapping upserts that
    portal's config. The enhanced flag flips on whatever was supplied.
    """
    parsed = _parse(EnhancementData, data)
    provided = parsed.provided()
    if not provided:
        raise ValidationError("nothing to update", field="data")
    actor = _require_actor(actor_id)

    prop = get_property(db, property_id, for_update=True)
    _apply(db, prop, provided, actor_id=actor, now=datetime.utcnow())

    db.commit()
    db.refresh(prop)

    log.info("property enhanced", extra={"property_id": prop.id, "actor_id": actor})
    return prop


def bulk_enhance(
    db: Session,
    property_ids: list[int],
    data: Union[BulkEnhancementData, Mapping[str, Any], None],
    *,
    actor_id: str,
) -> list[Property]:
    """
    Same shared payload on many properties (no per-property location mapping).

    Every id is checked up front so an unknown id fails the call before any
    write; after that each property is committed on its own.
    """
    parsed = _parse(BulkEnhancementData, data)
    provided = parsed.provided()
    if not provided:
        raise ValidationError("nothing to update", field="data")
    actor = _require_actor(actor_id)

    ids = list(dict.fromkeys(int(x) for x in (property_ids or [])))
    if not ids:
        raise ValidationError("property_ids must not be empty", field="property_ids")

    missing = missing_ids(db, ids)
    if missing:
        raise NotFoundError("property", missing if len(missing) > 1 else missing[0])

    now = datetime.utcnow()
    out: list[Property] = []
    for pid in ids:
        prop = get_property(db, pid, for_update=True)
        _apply(db, prop, provided, actor_id=actor, now=now)
        db.commit()
        db.refresh(prop)
        out.append(prop)

    log.info("bulk enhanced %d properties", len(out), extra={"actor_id": actor})
    return out
