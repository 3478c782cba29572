# backend/estateflow/routers/workflow.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..db import get_db
from ..models import WorkflowEvent
from ..schemas import WorkflowEventOut

router = APIRouter(prefix="/workflow", tags=["workflow"])


@router.get("/events", response_model=list[WorkflowEventOut])
def list_events(
    property_id: int | None = Query(default=None),
    event_type: str | None = Query(default=None),
    limit: int = Query(default=200, ge=1, le=500),
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    q = select(WorkflowEvent).order_by(desc(WorkflowEvent.id))
    if property_id is not None:
        q = q.where(WorkflowEvent.property_id == property_id)
    if event_type:
        q = q.where(WorkflowEvent.event_type == event_type)
    return list(db.scalars(q.limit(limit)).all())
