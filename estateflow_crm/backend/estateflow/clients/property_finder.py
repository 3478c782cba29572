# backend/estateflow/clients/property_finder.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..config import settings


@dataclass(frozen=True)
class PortalLocation:
    id: str
    name: str
    name_ar: Optional[str]
    portal: str

    def as_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "name_ar": self.name_ar, "portal": self.portal}


class PropertyFinderError(RuntimeError):
    pass


class PropertyFinderClient:
    """Location search against the Property Finder listings API."""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base = (base_url or settings.property_finder_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.property_finder_api_key
        self.timeout = timeout if timeout is not None else settings.property_finder_timeout_seconds
        self._transport = transport

    def enabled(self) -> bool:
        return bool(self.api_key)

    def search_locations(self, query: str, *, limit: int = 20) -> list[PortalLocation]:
        q = (query or "").strip()
        if not q:
            return []
        if not self.api_key:
            raise PropertyFinderError("property_finder_api_key not set")

        url = f"{self.base}/locations"
        headers = {"Authorization": f"Bearer {self.api_key}", "Accept": "application/json"}
        params = {"search": q, "perPage": limit}

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                r = client.get(url, params=params, headers=headers)
                r.raise_for_status()
                data = r.json()
        except httpx.HTTPError as e:
            raise PropertyFinderError(f"location search failed: {e}") from e

        rows = data.get("data") if isinstance(data, dict) else data
        out: list[PortalLocation] = []
        for row in rows or []:
            if not isinstance(row, dict) or row.get("id") is None:
                continue
            name = row.get("name") or row.get("fullName") or row.get("path_name")
            if isinstance(name, dict):
                name_en, name_ar = name.get("en"), name.get("ar")
            else:
                name_en, name_ar = name, row.get("name_ar")
            if not name_en:
                continue
            out.append(PortalLocation(id=str(row["id"]), name=str(name_en), name_ar=name_ar, portal="property_finder"))
        return out[:limit]
