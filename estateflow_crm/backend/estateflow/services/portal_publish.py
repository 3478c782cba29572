# backend/estateflow/services/portal_publish.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional, Union

from sqlalchemy.orm import Session

from ..domain import events
from ..domain.audit import audit_write
from ..domain.catalog import is_known_portal, supported_portals
from ..domain.errors import InvalidStateError, PortalReadinessError, ValidationError
from ..domain.portal_validation import PortalReadiness, readiness
from ..models import Property
from .property_store import get_property, state_of, touch, upsert_portal_config

log = logging.getLogger(__name__)


def _portal_names(portals: Union[str, Iterable[str], None]) -> list[str]:
    if isinstance(portals, str):
        portals = [portals]
    names = [str(p).strip() for p in (portals or []) if str(p).strip()]
    names = list(dict.fromkeys(names))
    if not names:
        raise ValidationError("Please select at least one portal", field="portals")

    unknown = [p for p in names if not is_known_portal(p)]
    if unknown:
        raise ValidationError(
            f"Unsupported portal(s): {', '.join(unknown)}",
            field="portals",
            errors=[{"field": "portals", "message": f"unsupported portal {p}"} for p in unknown],
        )
    return names


def check_readiness(prop: Property, portals: Iterable[str]) -> list[PortalReadiness]:
    return [readiness(prop, p) for p in portals]


def validate_readiness(db: Session, property_id: int, portals: Union[str, Iterable[str], None] = None) -> list[PortalReadiness]:
    """Readiness per portal; every supported portal when none are named."""
    names = _portal_names(portals) if portals else list(supported_portals())
    prop = get_property(db, property_id)
    return check_readiness(prop, names)


def publish(
    db: Session,
    property_id: int,
    portals: Union[str, Iterable[str], None],
    *,
    actor_id: Optional[str] = None,
) -> Property:
    """
    Publish to exactly `portals`, all or nothing.

    If any requested portal fails validation nothing is written and the error
    lists every failing portal. On success published_portals is replaced (not
    unioned) by the requested set and portals dropped from it are deactivated.
    """
    names = _portal_names(portals)
    prop = get_property(db, property_id, for_update=True)

    failures = [r for r in check_readiness(prop, names) if not r.can_publish]
    if failures:
        raise PortalReadinessError(
            [
                {
                    "portal": r.portal,
                    "missing_fields": list(r.missing_fields),
                    "errors": [e.as_dict() for e in r.validation_errors],
                }
                for r in failures
            ]
        )

    if not prop.is_portal_enhanced:
        raise InvalidStateError(
            "Property is not portal-enhanced. Please complete enhancement first.",
            current_state=state_of(prop),
        )

    now = datetime.utcnow()
    before = prop.published_portals

    for portal in names:
        upsert_portal_config(
            db,
            prop,
            portal,
            is_active=True,
            portal_status="published",
            published_at=now,
            last_synced_at=now,
            validation_errors=[],
        )

    dropped: list[str] = []
    for portal, cfg in prop.portal_configs.items():
        if portal in names:
            continue
        if cfg.is_active or cfg.portal_status == "published":
            cfg.is_active = False
            cfg.portal_status = "draft"
            dropped.append(portal)

    prop.published_portals = names
    touch(prop, now)

    audit_write(
        db,
        actor_id=actor_id,
        action="property.publish",
        entity_type="property",
        entity_id=prop.id,
        before={"published_portals": before},
        after={"published_portals": names},
    )
    events.emit_workflow_event(
        db,
        event_type=events.PUBLISHED,
        property_id=prop.id,
        actor_id=actor_id,
        payload={"portals": names, "unpublished": dropped},
    )
    db.commit()
    db.refresh(prop)

    log.info("published to %s", ",".join(names), extra={"property_id": prop.id, "actor_id": actor_id})
    return prop
