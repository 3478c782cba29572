# backend/estateflow/services/dashboard_rollups.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session, selectinload

from ..domain.catalog import PENDING, PORTAL_LABELS, supported_portals
from ..domain.portal_validation import validate
from ..models import Agent, PortalConfig, Property


@dataclass(frozen=True)
class DashboardStats:
    total_revenue: float
    rental_revenue: float
    luxury_inventory: int
    published_listings: int
    active_agents: int
    total_properties: int
    pending_approvals: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def _sum_price(db: Session, *categories: str) -> float:
    v = db.scalar(select(func.coalesce(func.sum(Property.price), 0.0)).where(Property.category.in_(categories)))
    return float(v or 0.0)


def _count(db: Session, stmt) -> int:
    return int(db.scalar(stmt) or 0)


def compute_stats(db: Session) -> DashboardStats:
    """
    Headline numbers for the dashboard.

    "published_listings" counts listings currently on the market
    (status=available), matching what the listing pages call published.
    """
    return DashboardStats(
        total_revenue=_sum_price(db, "sale", "luxury"),
        rental_revenue=_sum_price(db, "rental"),
        luxury_inventory=_count(db, select(func.count(Property.id)).where(Property.category == "luxury")),
        published_listings=_count(db, select(func.count(Property.id)).where(Property.status == "available")),
        active_agents=_count(db, select(func.count(Agent.id))),
        total_properties=_count(db, select(func.count(Property.id))),
        pending_approvals=_count(db, select(func.count(Property.id)).where(Property.approval_status == PENDING)),
    )


def agent_leaderboard(db: Session, *, limit: int = 10) -> list[dict[str, Any]]:
    rows = db.scalars(select(Agent).order_by(desc(Agent.total_revenue), Agent.id).limit(limit)).all()
    return [
        {"agent_id": a.id, "name": a.name, "deals": int(a.sales_count or 0), "revenue": float(a.total_revenue or 0.0)}
        for a in rows
    ]


def portal_stats(db: Session) -> list[dict[str, Any]]:
    """
    Per portal: active published listings, and how many of those would
    fail validation if republished now.
    """
    out: list[dict[str, Any]] = []
    for portal in supported_portals():
        props = db.scalars(
            select(Property)
            .join(PortalConfig, PortalConfig.property_id == Property.id)
            .where(
                PortalConfig.portal == portal,
                PortalConfig.is_active.is_(True),
                PortalConfig.portal_status == "published",
            )
            .options(selectinload(Property.portal_configs))
        ).all()
        errors = sum(1 for prop in props if validate(prop, portal))
        out.append({"portal": portal, "name": PORTAL_LABELS[portal], "listings": len(props), "errors": errors})
    return out
