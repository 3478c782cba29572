# backend/estateflow/routers/dashboard.py
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..db import get_db
from ..schemas import AgentLeaderboardRowOut, DashboardStatsOut, PortalStatsOut
from ..services.dashboard_rollups import agent_leaderboard, compute_stats, portal_stats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStatsOut)
def stats(db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    return compute_stats(db).as_dict()


@router.get("/agent-performance", response_model=List[AgentLeaderboardRowOut])
def agent_performance(
    limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    return agent_leaderboard(db, limit=limit)


@router.get("/portal-stats", response_model=List[PortalStatsOut])
def portal_stats_view(db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    return portal_stats(db)
