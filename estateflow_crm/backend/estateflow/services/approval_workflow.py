# backend/estateflow/services/approval_workflow.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import desc, select
from sqlalchemy.orm import Session, selectinload

from ..domain import events
from ..domain.audit import audit_write
from ..domain.catalog import APPROVED, PENDING, REJECTED
from ..domain.errors import InvalidStateError, NoPendingChangesError, ValidationError
from ..domain.property_merge import apply, merge, mergeable_only, snapshot
from ..models import Property
from ..schemas import PropertyBase, PropertyPatch
from .property_store import get_property, state_of, touch

# -----------------------------------------------------------------------------
# Approval workflow
# -----------------------------------------------------------------------------
#   approved|rejected --save_draft--> (same status, pending_changes staged)
#   *                 --submit------> pending      (needs staged changes)
#   pending           --approve-----> approved     (staged changes merged)
#   *                 --reject------> rejected     (staged changes discarded)
#
# Each transition: validate input, lock the row, check state, mutate, write
# the workflow/audit rows, commit once. Any raise happens before the first
# mutation, so a failed call leaves the row untouched.
# -----------------------------------------------------------------------------

log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.utcnow()


def pydantic_errors(e: PydanticValidationError, *, prefix: Optional[str] = None) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "__root__")
        if prefix:
            loc = f"{prefix}.{loc}" if loc else prefix
        out.append({"field": loc or None, "message": err.get("msg", "invalid value")})
    return out


def parse_patch(changes: Union[PropertyPatch, Mapping[str, Any], None]) -> PropertyPatch:
    if changes is None:
        raise ValidationError("No changes provided", field="changes")
    if isinstance(changes, PropertyPatch):
        patch = changes
    else:
        if not isinstance(changes, Mapping):
            raise ValidationError("changes must be an object", field="changes")
        if not changes:
            raise ValidationError("No changes provided", field="changes")
        try:
            patch = PropertyPatch.model_validate(dict(changes))
        except PydanticValidationError as e:
            raise ValidationError("Invalid changes", field="changes", errors=pydantic_errors(e, prefix="changes")) from e

    if not patch.model_fields_set:
        raise ValidationError("No changes provided", field="changes")
    return patch


def save_draft(
    db: Session,
    property_id: int,
    changes: Union[PropertyPatch, Mapping[str, Any], None],
    *,
    edited_by: str,
) -> Property:
    """
    Stage a partial edit without touching live fields or approval status.
    A new draft replaces any previous one.
    """
    patch = parse_patch(changes)
    if not (edited_by or "").strip():
        raise ValidationError("edited_by is required", field="edited_by")

    prop = get_property(db, property_id, for_update=True)
    if prop.approval_status == PENDING:
        raise InvalidStateError(
            "Property is awaiting approval; approve or reject it before drafting new changes",
            current_state=state_of(prop),
        )

    staged = patch.changes(json_safe=True)
    now = _utcnow()

    prop.pending_changes = staged
    prop.edited_by = edited_by
    prop.edited_at = now
    touch(prop, now)

    events.emit_workflow_event(
        db,
        event_type=events.DRAFT_SAVED,
        property_id=prop.id,
        actor_id=edited_by,
        payload={"fields": sorted(staged.keys())},
    )
    db.commit()
    db.refresh(prop)

    log.info("draft saved", extra={"property_id": prop.id, "actor_id": edited_by})
    return prop


def submit_for_approval(db: Session, property_id: int, *, actor_id: Optional[str] = None) -> Property:
    prop = get_property(db, property_id, for_update=True)

    if not prop.pending_changes:
        raise NoPendingChangesError("No pending changes to submit", current_state=state_of(prop))

    prop.approval_status = PENDING
    touch(prop)

    events.emit_workflow_event(
        db,
        event_type=events.APPROVAL_SUBMITTED,
        property_id=prop.id,
        actor_id=actor_id or prop.edited_by,
        payload={"fields": sorted(prop.pending_changes.keys())},
    )
    db.commit()
    db.refresh(prop)

    log.info("submitted for approval", extra={"property_id": prop.id, "approval_status": PENDING})
    return prop


def approve(db: Session, property_id: int, *, approved_by: Optional[str] = None) -> Property:
    """
    Merge the staged patch into the live property.

    The merge is whitelist-driven (MERGEABLE_FIELDS): id, created_at and the
    workflow bookkeeping can never come from the patch, even if a stored draft
    carries them. The merged result is validated against the same schema used
    for creation before anything is written.
    """
    prop = get_property(db, property_id, for_update=True)

    if prop.approval_status != PENDING:
        raise InvalidStateError("Property is not pending approval", current_state=state_of(prop))

    pending = prop.pending_changes
    if not pending:
        raise InvalidStateError("No pending changes to approve", current_state=state_of(prop))

    try:
        patch = PropertyPatch.model_validate(mergeable_only(pending))
    except PydanticValidationError as e:
        raise ValidationError(
            "Staged changes are no longer valid", field="pending_changes", errors=pydantic_errors(e)
        ) from e

    before = snapshot(prop)
    merged = merge(before, patch.changes())

    try:
        PropertyBase.model_validate(merged)
    except PydanticValidationError as e:
        raise ValidationError(
            "Merged property failed validation", field="pending_changes", errors=pydantic_errors(e)
        ) from e

    changed = apply(prop, merged)
    prop.approval_status = APPROVED
    prop.pending_changes = None
    prop.rejection_reason = None
    touch(prop)

    audit_write(
        db,
        actor_id=approved_by,
        action="property.approve",
        entity_type="property",
        entity_id=prop.id,
        before={k: before[k] for k in changed},
        after={k: merged[k] for k in changed},
    )
    events.emit_workflow_event(
        db,
        event_type=events.APPROVED,
        property_id=prop.id,
        actor_id=approved_by,
        payload={"changed_fields": changed, "edited_by": prop.edited_by},
    )
    db.commit()
    db.refresh(prop)

    log.info("approved", extra={"property_id": prop.id, "actor_id": approved_by, "approval_status": APPROVED})
    return prop


def reject(db: Session, property_id: int, reason: Optional[str], *, rejected_by: Optional[str] = None) -> Property:
    reason_s = (reason or "").strip()
    if not reason_s:
        raise ValidationError("Rejection reason required", field="reason")

    prop = get_property(db, property_id, for_update=True)

    previous_status = prop.approval_status
    discarded = prop.pending_changes

    prop.approval_status = REJECTED
    prop.rejection_reason = reason_s
    prop.pending_changes = None
    touch(prop)

    audit_write(
        db,
        actor_id=rejected_by,
        action="property.reject",
        entity_type="property",
        entity_id=prop.id,
        before={"approval_status": previous_status, "pending_changes": discarded},
        after={"approval_status": REJECTED, "rejection_reason": reason_s},
    )
    events.emit_workflow_event(
        db,
        event_type=events.REJECTED,
        property_id=prop.id,
        actor_id=rejected_by,
        payload={"reason": reason_s, "discarded_fields": sorted((discarded or {}).keys())},
    )
    db.commit()
    db.refresh(prop)

    log.info("rejected", extra={"property_id": prop.id, "actor_id": rejected_by, "approval_status": REJECTED})
    return prop


def list_pending(db: Session, *, limit: int = 500) -> list[Property]:
    stmt = (
        select(Property)
        .where(Property.approval_status == PENDING)
        .options(selectinload(Property.portal_configs))
        .order_by(desc(Property.edited_at), desc(Property.id))
        .limit(limit)
    )
    return list(db.scalars(stmt).all())
