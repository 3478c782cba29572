# backend/estateflow/models.py
from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.orm.collections import attribute_keyed_dict

from .db import Base


def _loads(s: Optional[str], default: Any) -> Any:
    if not s:
        return default
    try:
        return json.loads(s)
    except ValueError:
        return default


def _dumps(v: Any) -> str:
    return json.dumps(v, ensure_ascii=False, default=str)


# -----------------------------
# Audit / workflow log
# -----------------------------
class AuditEvent(Base):
    __tablename__ = "audit_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    actor_id: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    action: Mapped[str] = mapped_column(String(80), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(80), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(80), nullable=False, index=True)

    before_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    after_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class WorkflowEvent(Base):
    __tablename__ = "workflow_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="SET NULL"), nullable=True, index=True
    )
    actor_id: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    event_type: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    payload_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


# -----------------------------
# Agents
# -----------------------------
class Agent(Base):
    __tablename__ = "agents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    email: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    phone: Mapped[str] = mapped_column(String(40), nullable=False)
    avatar: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    sales_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_revenue: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )


# -----------------------------
# Core domain: Properties / portal configs
# -----------------------------
class Property(Base):
    __tablename__ = "properties"
    __table_args__ = (
        Index("ix_properties_approval_status", "approval_status"),
        Index("ix_properties_is_portal_enhanced", "is_portal_enhanced"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    # listing
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    title_ar: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    category: Mapped[str] = mapped_column(String(20), nullable=False, index=True)  # rental|sale|luxury
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)  # available|reserved|sold|rented
    price: Mapped[float] = mapped_column(Float, nullable=False)
    price_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False)
    bathrooms: Mapped[float] = mapped_column(Float, nullable=False)
    area: Mapped[float] = mapped_column(Float, nullable=False)
    agent: Mapped[str] = mapped_column(String(160), nullable=False)
    assigned_agent_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("agents.id"), nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description_ar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # portal enhancement
    furnishing_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    size: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    property_age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    available_from: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    compliance_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    listing_advertisement_number: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    project_status: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    developer: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    unit_number: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    floor_number: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    parking_slots: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    downpayment: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    number_of_cheques: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    amenities_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    published_portals_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    is_portal_enhanced: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    portal_enhancement_completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    portal_enhancement_completed_by: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    # approval workflow
    approval_status: Mapped[str] = mapped_column(String(20), nullable=False, default="approved")
    pending_changes_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    edited_by: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    edited_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # keyed by portal name: one config per portal, O(1) lookup/upsert
    portal_configs: Mapped[Dict[str, "PortalConfig"]] = relationship(
        back_populates="property",
        collection_class=attribute_keyed_dict("portal"),
        cascade="all, delete-orphan",
    )

    @property
    def amenities(self) -> List[str]:
        return list(_loads(self.amenities_json, []))

    @amenities.setter
    def amenities(self, value: Optional[List[str]]) -> None:
        self.amenities_json = _dumps(list(value or []))

    @property
    def published_portals(self) -> List[str]:
        return list(_loads(self.published_portals_json, []))

    @published_portals.setter
    def published_portals(self, value: Optional[List[str]]) -> None:
        self.published_portals_json = _dumps(list(value or []))

    @property
    def pending_changes(self) -> Optional[Dict[str, Any]]:
        v = _loads(self.pending_changes_json, None)
        return v if isinstance(v, dict) else None

    @pending_changes.setter
    def pending_changes(self, value: Optional[Dict[str, Any]]) -> None:
        self.pending_changes_json = _dumps(value) if value is not None else None


class PortalConfig(Base):
    __tablename__ = "portal_configs"
    __table_args__ = (UniqueConstraint("property_id", "portal", name="uq_portal_configs_property_portal"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), index=True, nullable=False
    )
    portal: Mapped[str] = mapped_column(String(40), nullable=False, index=True)  # property_finder|bayut|dubizzle

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    location_id: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    location_full_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    last_synced_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    portal_status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    validation_errors_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def validation_errors(self) -> List[str]:
        return list(_loads(self.validation_errors_json, []))

    @validation_errors.setter
    def validation_errors(self, value: Optional[List[str]]) -> None:
        self.validation_errors_json = _dumps(list(value or []))

    # declared after the accessors above: the name shadows the builtin inside this class body
    property: Mapped["Property"] = relationship(back_populates="portal_configs")
