# backend/estateflow/cli/seed_demo.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from estateflow.db import Base, SessionLocal, engine
from estateflow.models import Agent, Property


@dataclass(frozen=True)
class SeedResult:
    agents_created: int
    properties_created: int
    property_ids: list[int] = field(default_factory=list)


DEMO_AGENTS: tuple[dict[str, Any], ...] = (
    {"name": "Sarah Al-Farsi", "email": "sarah@estateflow.com", "phone": "+971501234567",
     "sales_count": 12, "total_revenue": 18_500_000, "rating": 4.8},
    {"name": "James Mitchell", "email": "james@estateflow.com", "phone": "+971501234568",
     "sales_count": 8, "total_revenue": 9_200_000, "rating": 4.6},
    {"name": "Omar Hassan", "email": "omar@estateflow.com", "phone": "+971501234569",
     "sales_count": 6, "total_revenue": 5_800_000, "rating": 4.4},
    {"name": "Layla Khan", "email": "layla@estateflow.com", "phone": "+971501234570",
     "sales_count": 9, "total_revenue": 12_100_000, "rating": 4.7},
)

# (title, category, status, price, location, bedrooms, bathrooms, area, agent)
DEMO_PROPERTIES: tuple[tuple, ...] = (
    ("Marina Heights Penthouse", "luxury", "available", 12_500_000, "Dubai Marina", 5, 6, 8500, "Sarah Al-Farsi"),
    ("Downtown Studio Apartment", "rental", "rented", 85_000, "Downtown Dubai", 1, 1, 550, "James Mitchell"),
    ("Palm Villa with Private Beach", "luxury", "reserved", 28_000_000, "Palm Jumeirah", 7, 8, 15000, "Sarah Al-Farsi"),
    ("JBR 2-Bed Sea View", "sale", "available", 2_800_000, "JBR", 2, 2, 1400, "Omar Hassan"),
    ("Business Bay Office Space", "rental", "available", 120_000, "Business Bay", 0, 2, 2200, "James Mitchell"),
    ("Creek Harbour 3-Bed", "sale", "sold", 3_500_000, "Dubai Creek Harbour", 3, 3, 2100, "Layla Khan"),
    ("Emirates Hills Mansion", "luxury", "available", 45_000_000, "Emirates Hills", 9, 12, 25000, "Sarah Al-Farsi"),
    ("Silicon Oasis 1-Bed", "rental", "available", 45_000, "Dubai Silicon Oasis", 1, 1, 750, "Omar Hassan"),
    ("Jumeirah Golf Estates Villa", "sale", "available", 7_200_000, "Jumeirah Golf Estates", 4, 5, 5500, "Layla Khan"),
    ("DIFC Luxury Loft", "luxury", "reserved", 8_900_000, "DIFC", 3, 3, 3200, "James Mitchell"),
)


def _get_or_create_agent(db: Session, data: dict[str, Any]) -> tuple[Agent, bool]:
    row = db.scalar(select(Agent).where(Agent.email == data["email"]))
    if row:
        return row, False
    row = Agent(**data)
    db.add(row)
    db.flush()
    return row, True


def _get_or_create_property(db: Session, entry: tuple, agents: dict[str, Agent]) -> tuple[Property, bool]:
    title, category, status, price, location, bedrooms, bathrooms, area, agent_name = entry
    row = db.scalar(select(Property).where(Property.title == title))
    if row:
        return row, False

    agent = agents.get(agent_name)
    row = Property(
        title=title,
        category=category,
        status=status,
        price=float(price),
        price_type="yearly" if category == "rental" else "sale",
        location=location,
        bedrooms=bedrooms,
        bathrooms=float(bathrooms),
        area=float(area),
        size=float(area),
        agent=agent_name,
        assigned_agent_id=agent.id if agent else None,
        description=f"{title} in {location}, listed by {agent_name}.",
        amenities=[],
        published_portals=[],
    )
    db.add(row)
    db.flush()
    return row, True


def seed_demo(*, create_schema: bool = True, with_properties: bool = True) -> SeedResult:
    if create_schema:
        Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        agents: dict[str, Agent] = {}
        agents_created = 0
        for data in DEMO_AGENTS:
            row, created = _get_or_create_agent(db, data)
            agents[row.name] = row
            agents_created += int(created)

        properties_created = 0
        ids: list[int] = []
        if with_properties:
            for entry in DEMO_PROPERTIES:
                row, created = _get_or_create_property(db, entry, agents)
                properties_created += int(created)
                ids.append(row.id)

        db.commit()
        return SeedResult(agents_created=agents_created, properties_created=properties_created, property_ids=ids)
    finally:
        db.close()
