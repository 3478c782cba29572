# backend/estateflow/domain/catalog.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from ..config import settings

# -----------------------------------------------------------------------------
# Closed vocabularies shared by models, schemas and the workflow services.
# -----------------------------------------------------------------------------

PortalName = Literal["property_finder", "bayut", "dubizzle"]
PORTALS: tuple[str, ...] = ("property_finder", "bayut", "dubizzle")

PORTAL_LABELS = {
    "property_finder": "PropertyFinder",
    "bayut": "Bayut",
    "dubizzle": "dubizzle",
}

Category = Literal["rental", "sale", "luxury"]
ListingStatus = Literal["available", "reserved", "sold", "rented"]
PriceType = Literal["sale", "yearly", "monthly", "weekly", "daily"]
FurnishingType = Literal["unfurnished", "semi-furnished", "furnished"]
ComplianceType = Literal["rera", "dtcm", "adrec"]
ProjectStatus = Literal["completed", "off_plan", "completed_primary", "off_plan_primary"]
PortalStatus = Literal["draft", "published", "pending", "error"]
ApprovalStatus = Literal["approved", "pending", "rejected"]

APPROVED = "approved"
PENDING = "pending"
REJECTED = "rejected"


@dataclass(frozen=True)
class Amenity:
    code: str
    label_en: str
    label_ar: Optional[str]
    category: str


AMENITIES: tuple[Amenity, ...] = (
    Amenity("central-ac", "Central AC", "تكييف مركزي", "Climate Control"),
    Amenity("built-in-wardrobes", "Built-in Wardrobes", "خزائن مدمجة", "Storage"),
    Amenity("kitchen-appliances", "Kitchen Appliances", "أجهزة المطبخ", "Kitchen"),
    Amenity("security", "Security", "الأمن", "Safety"),
    Amenity("concierge", "Concierge", "موظف الاستقبال", "Services"),
    Amenity("maid-service", "Maid Service", "خدمة التنظيف", "Services"),
    Amenity("balcony", "Balcony", "شرفة", "Outdoor"),
    Amenity("private-gym", "Private Gym", "صالة ألعاب خاصة", "Recreation"),
    Amenity("shared-gym", "Shared Gym", "صالة ألعاب مشتركة", "Recreation"),
    Amenity("private-jacuzzi", "Private Jacuzzi", "حوض استحمام خاص", "Recreation"),
    Amenity("shared-spa", "Shared Spa", "منتجع صحي مشترك", "Recreation"),
    Amenity("covered-parking", "Covered Parking", "موقف سيارات مغطى", "Parking"),
    Amenity("maids-room", "Maids Room", "غرفة الخادمة", "Rooms"),
    Amenity("study", "Study", "دراسة", "Rooms"),
    Amenity("childrens-play-area", "Children's Play Area", "منطقة لعب الأطفال", "Recreation"),
    Amenity("pets-allowed", "Pets Allowed", "الحيوانات الأليفة مسموح بها", "Policies"),
    Amenity("barbecue-area", "Barbecue Area", "منطقة الشواء", "Outdoor"),
    Amenity("shared-pool", "Shared Pool", "حمام سباحة مشترك", "Recreation"),
    Amenity("childrens-pool", "Children's Pool", "حمام السباحة للأطفال", "Recreation"),
    Amenity("private-garden", "Private Garden", "حديقة خاصة", "Outdoor"),
    Amenity("private-pool", "Private Pool", "حمام سباحة خاص", "Recreation"),
    Amenity("view-of-water", "View of Water", "إطلالة على الماء", "Views"),
    Amenity("view-of-landmark", "View of Landmark", "إطلالة على معالم سياحية", "Views"),
    Amenity("walk-in-closet", "Walk-in Closet", "خزانة مدمجة", "Storage"),
    Amenity("lobby-in-building", "Lobby in Building", "بهو في المبنى", "Common Areas"),
    Amenity("vastu-compliant", "Vastu Compliant", "متوافق مع فاستو", "Special"),
    Amenity("networked", "Networked", "متصل بالشبكة", "Technology"),
    Amenity("dining-in-building", "Dining in Building", "تناول الطعام في المبنى", "Services"),
    Amenity("conference-room", "Conference Room", "غرفة المؤتمرات", "Business"),
)

AMENITY_CODES: frozenset[str] = frozenset(a.code for a in AMENITIES)


def supported_portals() -> tuple[str, ...]:
    """Portals enabled by `settings.portals`, restricted to the known vocabulary, in catalog order."""
    enabled = set(settings.portals or ())
    return tuple(p for p in PORTALS if p in enabled)


def is_known_portal(name: str) -> bool:
    return name in supported_portals()
