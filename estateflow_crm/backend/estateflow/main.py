# backend/estateflow/main.py
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .logging_config import configure_logging

from .middleware.request_id import RequestIDMiddleware
from .middleware.structured_logging import StructuredLoggingMiddleware

from .routers.health import router as health_router
from .routers.dashboard import router as dashboard_router
from .routers.properties import router as properties_router
from .routers.agents import router as agents_router
from .routers.workflow import router as workflow_router
from .routers.audit import router as audit_router

API_PREFIX = "/api"


def _cors_origins() -> list[str]:
    val = getattr(settings, "cors_allow_origins", ["*"])
    if isinstance(val, str):
        v = val.strip()
        return ["*"] if v == "*" else [x.strip() for x in v.split(",") if x.strip()]
    if isinstance(val, list) and val:
        return val
    return ["*"]


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title=settings.app_name, version=settings.app_version)

    # last added runs first: request id must be set before the access log line
    app.add_middleware(StructuredLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Core
    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(dashboard_router, prefix=API_PREFIX)

    # Listings + approval / portal workflow
    app.include_router(properties_router, prefix=API_PREFIX)
    app.include_router(agents_router, prefix=API_PREFIX)

    # Audit / workflow log
    app.include_router(workflow_router, prefix=API_PREFIX)
    app.include_router(audit_router, prefix=API_PREFIX)

    return app


app = create_app()
