# backend/estateflow/schemas.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional, List, Any

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from .domain.catalog import (
    AMENITY_CODES,
    ApprovalStatus,
    Category,
    ComplianceType,
    FurnishingType,
    ListingStatus,
    PortalName,
    PortalStatus,
    PriceType,
    ProjectStatus,
)
from .domain.property_merge import REQUIRED_FIELDS


def _check_amenities(v: Optional[list[str]]) -> Optional[list[str]]:
    if v is None:
        return v
    unknown = [a for a in v if a not in AMENITY_CODES]
    if unknown:
        raise ValueError(f"unknown amenity codes: {', '.join(sorted(set(unknown)))}")
    # set semantics, first occurrence order kept
    return list(dict.fromkeys(v))


def _clear_to_empty(v: Optional[list[str]]) -> list[str]:
    # null in a patch clears the list; a stored property never holds null amenities
    return [] if v is None else _check_amenities(v)


# -------------------- Properties --------------------

class PropertyBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    title_ar: Optional[str] = None
    category: Category
    status: ListingStatus
    price: float = Field(gt=0)
    price_type: Optional[PriceType] = None
    location: str = Field(min_length=1)
    bedrooms: int = Field(ge=0)
    bathrooms: float = Field(ge=0)
    area: float = Field(gt=0)
    agent: str = Field(min_length=1)
    assigned_agent_id: Optional[int] = None
    image: Optional[str] = None
    description: Optional[str] = None
    description_ar: Optional[str] = None

    furnishing_type: Optional[FurnishingType] = None
    size: Optional[float] = Field(default=None, gt=0)
    property_age: Optional[int] = Field(default=None, ge=0)
    available_from: Optional[date] = None
    compliance_type: Optional[ComplianceType] = None
    listing_advertisement_number: Optional[str] = None
    project_status: Optional[ProjectStatus] = None
    developer: Optional[str] = None
    unit_number: Optional[str] = None
    floor_number: Optional[str] = None
    parking_slots: Optional[int] = Field(default=None, ge=0)
    downpayment: Optional[float] = Field(default=None, ge=0)
    number_of_cheques: Optional[int] = Field(default=None, ge=0)
    amenities: List[str] = Field(default_factory=list)

    _amenities = field_validator("amenities")(_check_amenities)


class PropertyCreate(PropertyBase):
    model_config = ConfigDict(extra="forbid")

    published_portals: List[PortalName] = Field(default_factory=list)


class PropertyPatch(BaseModel):
    """
    Typed partial update for a property.

    Only listing and enhancement attributes are accepted; unknown keys
    (including id / created_at / approval fields) are rejected. Use
    `changes()` to get just the keys the caller actually sent.
    """

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    title_ar: Optional[str] = None
    category: Optional[Category] = None
    status: Optional[ListingStatus] = None
    price: Optional[float] = Field(default=None, gt=0)
    price_type: Optional[PriceType] = None
    location: Optional[str] = Field(default=None, min_length=1)
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[float] = Field(default=None, ge=0)
    area: Optional[float] = Field(default=None, gt=0)
    agent: Optional[str] = Field(default=None, min_length=1)
    assigned_agent_id: Optional[int] = None
    image: Optional[str] = None
    description: Optional[str] = None
    description_ar: Optional[str] = None

    furnishing_type: Optional[FurnishingType] = None
    size: Optional[float] = Field(default=None, gt=0)
    property_age: Optional[int] = Field(default=None, ge=0)
    available_from: Optional[date] = None
    compliance_type: Optional[ComplianceType] = None
    listing_advertisement_number: Optional[str] = None
    project_status: Optional[ProjectStatus] = None
    developer: Optional[str] = None
    unit_number: Optional[str] = None
    floor_number: Optional[str] = None
    parking_slots: Optional[int] = Field(default=None, ge=0)
    downpayment: Optional[float] = Field(default=None, ge=0)
    number_of_cheques: Optional[int] = Field(default=None, ge=0)
    amenities: Optional[List[str]] = None

    _amenities = field_validator("amenities")(_clear_to_empty)

    @model_validator(mode="after")
    def _required_not_nulled(self) -> "PropertyPatch":
        nulled = [k for k in REQUIRED_FIELDS if k in self.model_fields_set and getattr(self, k) is None]
        if nulled:
            raise ValueError(f"required fields cannot be cleared: {', '.join(nulled)}")
        return self

    def changes(self, *, json_safe: bool = False) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, mode="json" if json_safe else "python")


class PortalConfigOut(BaseModel):
    portal: str
    is_active: bool
    location_id: Optional[str] = None
    location_full_name: Optional[str] = None
    published_at: Optional[datetime] = None
    last_synced_at: Optional[datetime] = None
    portal_status: PortalStatus
    validation_errors: List[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class PropertyOut(PropertyBase):
    id: int

    published_portals: List[str] = Field(default_factory=list)
    portal_configs: dict[str, PortalConfigOut] = Field(default_factory=dict)

    is_portal_enhanced: bool = False
    portal_enhancement_completed_at: Optional[datetime] = None
    portal_enhancement_completed_by: Optional[str] = None

    approval_status: ApprovalStatus
    pending_changes: Optional[dict[str, Any]] = None
    edited_by: Optional[str] = None
    edited_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertyPageOut(BaseModel):
    data: List[PropertyOut]
    total: int
    page: int
    page_size: int


class PendingApprovalsOut(BaseModel):
    data: List[PropertyOut]
    total: int


# -------------------- Approval workflow --------------------

class DraftChangesIn(BaseModel):
    # raw on purpose: the workflow service parses it into PropertyPatch so a
    # bad key surfaces as a domain ValidationError with field detail
    changes: dict[str, Any] = Field(default_factory=dict)


class RejectIn(BaseModel):
    reason: str = ""


# -------------------- Portal enhancement / publish --------------------

class PortalLocationMapping(BaseModel):
    model_config = ConfigDict(extra="forbid")

    portal: PortalName
    location_id: str = Field(min_length=1)
    location_full_name: Optional[str] = None


class BulkEnhancementData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    furnishing_type: Optional[FurnishingType] = None
    compliance_type: Optional[ComplianceType] = None
    project_status: Optional[ProjectStatus] = None
    amenities: Optional[List[str]] = None

    _amenities = field_validator("amenities")(_check_amenities)

    def provided(self) -> dict[str, Any]:
        """Fields the caller actually supplied; None means "leave untouched"."""
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class EnhancementData(BulkEnhancementData):
    portal_configs: Optional[List[PortalLocationMapping]] = None

    @field_validator("portal_configs")
    @classmethod
    def _one_mapping_per_portal(cls, v: Optional[List[PortalLocationMapping]]):
        if not v:
            return v
        seen: set[str] = set()
        for m in v:
            if m.portal in seen:
                raise ValueError(f"duplicate location mapping for portal {m.portal}")
            seen.add(m.portal)
        return v

    def provided(self) -> dict[str, Any]:
        out = super().provided()
        if not out.get("portal_configs"):
            out.pop("portal_configs", None)
        return out


class BulkEnhanceIn(BaseModel):
    property_ids: List[int]
    data: BulkEnhancementData


class PublishIn(BaseModel):
    portals: List[str] = Field(default_factory=list)


class PortalValidationErrorOut(BaseModel):
    field: str
    message: str
    portal: Optional[str] = None


class PortalReadinessOut(BaseModel):
    portal: str
    can_publish: bool
    is_ready_for_portal: bool
    missing_fields: List[str]
    validation_errors: List[PortalValidationErrorOut]


class PortalLocationOut(BaseModel):
    id: str
    name: str
    name_ar: Optional[str] = None
    portal: str


# -------------------- Agents --------------------

class AgentCreate(BaseModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: str = Field(min_length=3)
    avatar: Optional[str] = None
    sales_count: int = Field(default=0, ge=0)
    total_revenue: float = Field(default=0.0, ge=0)
    rating: float = Field(default=0.0, ge=0, le=5)


class AgentUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = Field(default=None, min_length=3)
    phone: Optional[str] = Field(default=None, min_length=3)
    avatar: Optional[str] = None
    sales_count: Optional[int] = Field(default=None, ge=0)
    total_revenue: Optional[float] = Field(default=None, ge=0)
    rating: Optional[float] = Field(default=None, ge=0, le=5)


class AgentOut(AgentCreate):
    id: int
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class AgentPerformanceOut(BaseModel):
    agent: AgentOut
    total_sales: int
    total_revenue: float
    average_rating: float
    listings: int


# -------------------- Dashboard --------------------

class DashboardStatsOut(BaseModel):
    total_revenue: float
    rental_revenue: float
    luxury_inventory: int
    published_listings: int
    active_agents: int
    total_properties: int
    pending_approvals: int


class AgentLeaderboardRowOut(BaseModel):
    agent_id: int
    name: str
    deals: int
    revenue: float


class PortalStatsOut(BaseModel):
    portal: str
    name: str
    listings: int
    errors: int


# -------------------- Workflow / audit --------------------

class WorkflowEventOut(BaseModel):
    id: int
    property_id: Optional[int] = None
    actor_id: Optional[str] = None
    event_type: str
    payload_json: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class AuditEventOut(BaseModel):
    id: int
    actor_id: Optional[str] = None
    action: str
    entity_type: str
    entity_id: str
    before_json: Optional[str] = None
    after_json: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)
