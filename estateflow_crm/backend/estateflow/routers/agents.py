# backend/estateflow/routers/agents.py
from __future__ import annotations

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import desc, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from ..auth import Principal, get_principal, require_admin
from ..db import get_db
from ..domain.audit import audit_write
from ..models import Agent, Property
from ..schemas import AgentCreate, AgentOut, AgentPerformanceOut, AgentUpdate, PropertyOut

router = APIRouter(prefix="/agents", tags=["agents"])


def _get_agent(db: Session, agent_id: int) -> Agent:
    row = db.get(Agent, agent_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Agent not found")
    return row


def _listings_query(agent: Agent):
    return select(Property).where(or_(Property.assigned_agent_id == agent.id, Property.agent == agent.name))


@router.get("", response_model=List[AgentOut])
def list_agents(db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    return list(db.scalars(select(Agent).order_by(desc(Agent.total_revenue), Agent.id)).all())


@router.post("", response_model=AgentOut, status_code=201)
def create_agent(payload: AgentCreate, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    row = Agent(**payload.model_dump())
    db.add(row)
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Agent with email {payload.email} already exists") from e

    audit_write(
        db,
        actor_id=p.user_id,
        action="agent.create",
        entity_type="agent",
        entity_id=row.id,
        after=payload.model_dump(),
    )
    db.commit()
    db.refresh(row)
    return row


@router.get("/{agent_id}", response_model=AgentOut)
def get_agent(agent_id: int, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    return _get_agent(db, agent_id)


@router.patch("/{agent_id}", response_model=AgentOut)
def update_agent(
    agent_id: int,
    payload: AgentUpdate,
    db: Session = Depends(get_db),
    p: Principal = Depends(require_admin),
):
    row = _get_agent(db, agent_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No changes provided")

    before = {k: getattr(row, k) for k in changes}
    for k, v in changes.items():
        setattr(row, k, v)
    row.updated_at = datetime.utcnow()

    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail="Agent email already in use") from e

    audit_write(
        db,
        actor_id=p.user_id,
        action="agent.update",
        entity_type="agent",
        entity_id=row.id,
        before=before,
        after=changes,
    )
    db.commit()
    db.refresh(row)
    return row


@router.get("/{agent_id}/performance", response_model=AgentPerformanceOut)
def agent_performance(agent_id: int, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    agent = _get_agent(db, agent_id)
    listings = db.scalar(select(func.count()).select_from(_listings_query(agent).subquery())) or 0
    return {
        "agent": agent,
        "total_sales": int(agent.sales_count or 0),
        "total_revenue": float(agent.total_revenue or 0.0),
        "average_rating": float(agent.rating or 0.0),
        "listings": int(listings),
    }


@router.get("/{agent_id}/properties", response_model=List[PropertyOut])
def agent_properties(agent_id: int, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    agent = _get_agent(db, agent_id)
    stmt = (
        _listings_query(agent)
        .options(selectinload(Property.portal_configs))
        .order_by(desc(Property.created_at), desc(Property.id))
    )
    return list(db.scalars(stmt).all())
