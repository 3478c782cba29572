# backend/tests/conftest.py
from __future__ import annotations

import os
import tempfile

# Settings are read at import time: point the app at a throwaway SQLite file first.
_DB_DIR = tempfile.mkdtemp(prefix="estateflow-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["APP_ENV"] = "test"
os.environ["AUTH_MODE"] = "dev"
os.environ.pop("PROPERTY_FINDER_API_KEY", None)

from typing import Any, Callable, Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from estateflow.db import Base, SessionLocal, engine  # noqa: E402
from estateflow.models import Property  # noqa: E402
from estateflow.services.property_store import upsert_portal_config  # noqa: E402

ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}
AGENT = {"X-User-Id": "agent-7", "X-User-Role": "agent"}


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client():
    from estateflow.main import create_app

    return TestClient(create_app())


def listing(**overrides: Any) -> dict[str, Any]:
    """A complete, publishable-apart-from-location listing."""
    data: dict[str, Any] = {
        "title": "Marina Heights Penthouse",
        "category": "luxury",
        "status": "available",
        "price": 12_500_000.0,
        "price_type": "sale",
        "location": "Dubai Marina",
        "bedrooms": 5,
        "bathrooms": 6.0,
        "area": 8500.0,
        "size": 8500.0,
        "agent": "Sarah Al-Farsi",
        "description": "Full-floor penthouse with marina views.",
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_property(db) -> Callable[..., Property]:
    def _make(*, locations: Optional[dict[str, str]] = None, enhanced: bool = False, **overrides: Any) -> Property:
        prop = Property(**listing(**overrides))
        db.add(prop)
        db.flush()
        for portal, location_id in (locations or {}).items():
            upsert_portal_config(db, prop, portal, location_id=location_id, location_full_name=f"loc {location_id}")
        prop.is_portal_enhanced = enhanced
        db.commit()
        db.refresh(prop)
        return prop

    return _make
