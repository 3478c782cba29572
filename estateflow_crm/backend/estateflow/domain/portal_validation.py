# backend/estateflow/domain/portal_validation.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .catalog import PORTAL_LABELS

# -----------------------------------------------------------------------------
# Portal validation engine
# -----------------------------------------------------------------------------
# Pure functions over a property-shaped object (ORM row or anything with the
# same attributes). Nothing here touches the database or raises on bad data:
# an empty or half-filled property just produces more error entries.
# -----------------------------------------------------------------------------

MIN_TITLE_LEN = 3
MIN_DESCRIPTION_LEN = 10


@dataclass(frozen=True)
class PortalValidationError:
    field: str
    message: str
    portal: Optional[str] = None

    def as_dict(self) -> dict:
        return {"field": self.field, "message": self.message, "portal": self.portal}


@dataclass(frozen=True)
class PortalReadiness:
    portal: str
    can_publish: bool
    is_ready_for_portal: bool
    missing_fields: list[str] = field(default_factory=list)
    validation_errors: list[PortalValidationError] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "portal": self.portal,
            "can_publish": self.can_publish,
            "is_ready_for_portal": self.is_ready_for_portal,
            "missing_fields": list(self.missing_fields),
            "validation_errors": [e.as_dict() for e in self.validation_errors],
        }


def _text(v: Any) -> str:
    if v is None:
        return ""
    return str(v).strip()


def _positive(v: Any) -> bool:
    if v is None or isinstance(v, bool):
        return False
    try:
        return float(v) > 0
    except (TypeError, ValueError):
        return False


def _portal_config(prop: Any, portal: str) -> Any:
    configs = getattr(prop, "portal_configs", None) or {}
    if isinstance(configs, dict):
        return configs.get(portal)
    # tolerate a plain list of configs
    for c in configs:
        if getattr(c, "portal", None) == portal:
            return c
    return None


def _base_errors(prop: Any) -> list[PortalValidationError]:
    errors: list[PortalValidationError] = []

    if len(_text(getattr(prop, "title", None))) < MIN_TITLE_LEN:
        errors.append(PortalValidationError("title", f"Title must be at least {MIN_TITLE_LEN} characters"))
    if len(_text(getattr(prop, "description", None))) < MIN_DESCRIPTION_LEN:
        errors.append(
            PortalValidationError("description", f"Description must be at least {MIN_DESCRIPTION_LEN} characters")
        )
    if not _positive(getattr(prop, "size", None)):
        errors.append(PortalValidationError("size", "Size must be greater than 0"))
    if not _positive(getattr(prop, "price", None)):
        errors.append(PortalValidationError("price", "Price must be greater than 0"))
    if not _text(getattr(prop, "price_type", None)):
        errors.append(PortalValidationError("price_type", "Price type is required"))

    return errors


def validate(prop: Any, portal: str) -> list[PortalValidationError]:
    """
    Every reason `prop` cannot be published to `portal`; empty means publishable.

    Field checks apply to all portals. The portal check only passes when the
    property carries a config for that exact portal with a location id, so a
    property mapped for bayut still fails for dubizzle.
    """
    errors = _base_errors(prop)

    cfg = _portal_config(prop, portal)
    if cfg is None or not _text(getattr(cfg, "location_id", None)):
        label = PORTAL_LABELS.get(portal, portal)
        errors.append(
            PortalValidationError(
                "location_id",
                f"Portal location ID is required for publishing to {label}",
                portal=portal,
            )
        )

    return errors


def readiness(prop: Any, portal: str) -> PortalReadiness:
    errors = validate(prop, portal)

    missing: list[str] = []
    for e in errors:
        if e.field not in missing:
            missing.append(e.field)

    can_publish = len(errors) == 0
    return PortalReadiness(
        portal=portal,
        can_publish=can_publish,
        is_ready_for_portal=can_publish and bool(getattr(prop, "is_portal_enhanced", False)),
        missing_fields=missing,
        validation_errors=errors,
    )


def validation_status(prop: Any) -> dict[str, list[str]]:
    """Messages per configured portal, e.g. {"bayut": [], "dubizzle": ["..."]}."""
    configs = getattr(prop, "portal_configs", None) or {}
    portals = list(configs.keys()) if isinstance(configs, dict) else [getattr(c, "portal", None) for c in configs]
    return {p: [e.message for e in validate(prop, p)] for p in portals if p}
