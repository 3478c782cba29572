# backend/estateflow/routers/properties.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import desc, func, or_, select
from sqlalchemy.orm import Session, selectinload

from ..auth import Principal, get_principal, require_admin, require_agent
from ..clients.property_finder import PropertyFinderError
from ..config import settings
from ..db import get_db
from ..domain.audit import audit_write
from ..domain.errors import ValidationError, WorkflowError
from ..domain.portal_validation import validation_status
from ..domain.property_merge import apply, merge, snapshot
from ..models import Property
from ..schemas import (
    BulkEnhanceIn,
    DraftChangesIn,
    EnhancementData,
    PendingApprovalsOut,
    PortalLocationOut,
    PortalReadinessOut,
    PropertyBase,
    PropertyCreate,
    PropertyOut,
    PropertyPageOut,
    PublishIn,
    RejectIn,
)
from ..services import approval_workflow, location_lookup, portal_enhancement, portal_publish
from ..services.approval_workflow import parse_patch, pydantic_errors
from ..services.property_store import get_property as load_property
from ..services.property_store import touch

router = APIRouter(prefix="/properties", tags=["properties"])

SEARCH_LIMIT = 20


@contextmanager
def _domain_errors() -> Iterator[None]:
    try:
        yield
    except WorkflowError as e:
        raise HTTPException(status_code=e.status_code, detail=e.as_dict()) from e


# -------------------- listing / search --------------------

@router.get("", response_model=PropertyPageOut)
def list_properties(
    type: Optional[str] = Query(default=None, description="category: rental|sale|luxury"),
    city: Optional[str] = Query(default=None),
    status: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    size = min(page_size or settings.default_page_size, settings.max_page_size)

    q = select(Property)
    if type:
        q = q.where(Property.category == type)
    if city:
        q = q.where(Property.location.ilike(f"%{city.strip()}%"))
    if status:
        q = q.where(Property.status == status)

    total = db.scalar(select(func.count()).select_from(q.subquery())) or 0
    rows = db.scalars(
        q.options(selectinload(Property.portal_configs))
        .order_by(desc(Property.created_at), desc(Property.id))
        .offset((page - 1) * size)
        .limit(size)
    ).all()
    return {"data": list(rows), "total": int(total), "page": page, "page_size": size}


@router.get("/search", response_model=List[PropertyOut])
def search_properties(
    q: str = Query(default=""),
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    term = q.strip()
    if not term:
        return []
    like = f"%{term}%"
    stmt = (
        select(Property)
        .where(or_(Property.title.ilike(like), Property.location.ilike(like)))
        .options(selectinload(Property.portal_configs))
        .order_by(desc(Property.created_at))
        .limit(SEARCH_LIMIT)
    )
    return list(db.scalars(stmt).all())


@router.get("/approvals/pending", response_model=PendingApprovalsOut)
def pending_approvals(db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    rows = approval_workflow.list_pending(db)
    return {"data": rows, "total": len(rows)}


@router.get("/portal-locations", response_model=List[PortalLocationOut])
def portal_locations(
    q: str = Query(default=""),
    portal: str = Query(default="bayut"),
    p: Principal = Depends(get_principal),
):
    with _domain_errors():
        try:
            rows = location_lookup.search_locations(q, portal)
        except PropertyFinderError as e:
            raise HTTPException(status_code=502, detail=str(e)) from e
    return [r.as_dict() for r in rows]


@router.post("/bulk-enhance", response_model=List[PropertyOut])
def bulk_enhance(payload: BulkEnhanceIn, db: Session = Depends(get_db), p: Principal = Depends(require_agent)):
    with _domain_errors():
        return portal_enhancement.bulk_enhance(db, payload.property_ids, payload.data, actor_id=p.user_id)


# -------------------- CRUD --------------------

@router.post("", response_model=PropertyOut, status_code=201)
def create_property(payload: PropertyCreate, db: Session = Depends(get_db), p: Principal = Depends(require_agent)):
    row = Property(**payload.model_dump())
    db.add(row)
    db.flush()
    audit_write(
        db,
        actor_id=p.user_id,
        action="property.create",
        entity_type="property",
        entity_id=row.id,
        after=payload.model_dump(mode="json"),
    )
    db.commit()
    db.refresh(row)
    return row


@router.get("/{property_id}", response_model=PropertyOut)
def get_property(property_id: int, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    with _domain_errors():
        return load_property(db, property_id)


@router.patch("/{property_id}", response_model=PropertyOut)
def update_property(
    property_id: int,
    payload: dict,
    db: Session = Depends(get_db),
    p: Principal = Depends(require_admin),
):
    """Direct edit, bypassing the approval queue (admin only)."""
    with _domain_errors():
        patch = parse_patch(payload)
        prop = load_property(db, property_id, for_update=True)

        before = snapshot(prop)
        merged = merge(before, patch.changes())
        try:
            PropertyBase.model_validate(merged)
        except PydanticValidationError as e:
            raise ValidationError("Updated property failed validation", errors=pydantic_errors(e)) from e

        changed = apply(prop, merged)
        touch(prop)
        audit_write(
            db,
            actor_id=p.user_id,
            action="property.update",
            entity_type="property",
            entity_id=prop.id,
            before={k: before[k] for k in changed},
            after={k: merged[k] for k in changed},
        )
        db.commit()
        db.refresh(prop)
        return prop


@router.delete("/{property_id}")
def delete_property(property_id: int, db: Session = Depends(get_db), p: Principal = Depends(require_admin)):
    with _domain_errors():
        prop = load_property(db, property_id, for_update=True)
    audit_write(
        db,
        actor_id=p.user_id,
        action="property.delete",
        entity_type="property",
        entity_id=prop.id,
        before={"title": prop.title, "location": prop.location},
    )
    db.delete(prop)
    db.commit()
    return {"ok": True, "id": property_id}


# -------------------- approval workflow --------------------

@router.post("/{property_id}/draft-changes", response_model=PropertyOut)
def save_draft_changes(
    property_id: int,
    payload: DraftChangesIn,
    db: Session = Depends(get_db),
    p: Principal = Depends(require_agent),
):
    with _domain_errors():
        return approval_workflow.save_draft(db, property_id, payload.changes, edited_by=p.user_id)


@router.post("/{property_id}/submit-approval", response_model=PropertyOut)
def submit_approval(property_id: int, db: Session = Depends(get_db), p: Principal = Depends(require_agent)):
    with _domain_errors():
        return approval_workflow.submit_for_approval(db, property_id, actor_id=p.user_id)


@router.patch("/{property_id}/approve", response_model=PropertyOut)
def approve(property_id: int, db: Session = Depends(get_db), p: Principal = Depends(require_admin)):
    with _domain_errors():
        return approval_workflow.approve(db, property_id, approved_by=p.user_id)


@router.patch("/{property_id}/reject", response_model=PropertyOut)
def reject(
    property_id: int,
    payload: RejectIn,
    db: Session = Depends(get_db),
    p: Principal = Depends(require_admin),
):
    with _domain_errors():
        return approval_workflow.reject(db, property_id, payload.reason, rejected_by=p.user_id)


# -------------------- portal enhancement / publish --------------------

@router.post("/{property_id}/enhance", response_model=PropertyOut)
def enhance(
    property_id: int,
    payload: EnhancementData,
    db: Session = Depends(get_db),
    p: Principal = Depends(require_agent),
):
    with _domain_errors():
        return portal_enhancement.enhance(db, property_id, payload, actor_id=p.user_id)


@router.get("/{property_id}/readiness", response_model=List[PortalReadinessOut])
def readiness(
    property_id: int,
    portal: Optional[List[str]] = Query(default=None),
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    with _domain_errors():
        return [r.as_dict() for r in portal_publish.validate_readiness(db, property_id, portal)]


@router.get("/{property_id}/portal-validation", response_model=dict[str, List[str]])
def portal_validation(property_id: int, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    with _domain_errors():
        prop = load_property(db, property_id)
    return validation_status(prop)


@router.post("/{property_id}/publish", response_model=PropertyOut)
def publish(
    property_id: int,
    payload: PublishIn,
    db: Session = Depends(get_db),
    p: Principal = Depends(require_agent),
):
    with _domain_errors():
        return portal_publish.publish(db, property_id, payload.portals, actor_id=p.user_id)
