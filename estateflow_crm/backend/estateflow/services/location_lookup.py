# backend/estateflow/services/location_lookup.py
from __future__ import annotations

import csv
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from ..clients.property_finder import PortalLocation, PropertyFinderClient
from ..config import settings
from ..domain.catalog import is_known_portal
from ..domain.errors import ValidationError

log = logging.getLogger(__name__)

DEFAULT_CSV = Path(__file__).resolve().parent.parent / "data" / "portal_locations.csv"


class CsvLocationCatalog:
    """
    Location ids for portals without a search API (bayut, dubizzle).

    CSV columns: id, name, name_ar (optional).
    """

    def __init__(self, path: Optional[Path | str] = None) -> None:
        self.path = Path(path or settings.portal_locations_csv or DEFAULT_CSV)
        self._rows: Optional[list[tuple[str, str, Optional[str]]]] = None

    def _load(self) -> list[tuple[str, str, Optional[str]]]:
        if self._rows is None:
            rows: list[tuple[str, str, Optional[str]]] = []
            with self.path.open(newline="", encoding="utf-8") as f:
                for rec in csv.DictReader(f):
                    loc_id = (rec.get("id") or "").strip()
                    name = (rec.get("name") or "").strip()
                    if not loc_id or not name:
                        continue
                    rows.append((loc_id, name, (rec.get("name_ar") or "").strip() or None))
            self._rows = rows
            log.info("loaded %d portal locations from %s", len(rows), self.path)
        return self._rows

    def search(self, query: str, portal: str, *, limit: int = 20) -> list[PortalLocation]:
        q = (query or "").strip().lower()
        if not q:
            return []
        out: list[PortalLocation] = []
        for loc_id, name, name_ar in self._load():
            if q in name.lower() or (name_ar and q in name_ar.lower()):
                out.append(PortalLocation(id=loc_id, name=name, name_ar=name_ar, portal=portal))
                if len(out) >= limit:
                    break
        return out


@lru_cache(maxsize=1)
def default_catalog() -> CsvLocationCatalog:
    return CsvLocationCatalog()


def search_locations(
    query: str,
    portal: str,
    *,
    catalog: Optional[CsvLocationCatalog] = None,
    client: Optional[PropertyFinderClient] = None,
    limit: Optional[int] = None,
) -> list[PortalLocation]:
    if not is_known_portal(portal):
        raise ValidationError(f"Unknown portal: {portal}", field="portal")

    n = int(limit or settings.location_search_limit)
    catalog = catalog or default_catalog()

    if portal == "property_finder":
        client = client or PropertyFinderClient()
        if client.enabled():
            return client.search_locations(query, limit=n)
        log.warning("property_finder_api_key not set; searching the local catalog", extra={"portal": portal})

    return catalog.search(query, portal, limit=n)
