# backend/estateflow/auth.py
from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request

from .config import settings


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str  # user | agent | admin


ROLE_ORDER = {"user": 1, "agent": 2, "admin": 3}


def _require_role(principal: Principal, min_role: str) -> None:
    if ROLE_ORDER.get(principal.role, 0) < ROLE_ORDER.get(min_role, 999):
        raise HTTPException(status_code=403, detail=f"Requires role >= {min_role}")


def get_principal(request: Request) -> Principal:
    """
    Auth modes:
      - dev: identity comes from the X-User-Id / X-User-Role headers
      - off: every caller is a local admin (tests, scripts)
    """
    mode = (settings.auth_mode or "dev").strip().lower()
    if mode == "off":
        return Principal(user_id="local", role="admin")

    if mode != "dev":
        raise HTTPException(status_code=401, detail=f"Unsupported auth_mode {settings.auth_mode!r}")

    user_id = (request.headers.get(settings.dev_header_user_id) or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail=f"Missing {settings.dev_header_user_id} for dev auth")

    role = (request.headers.get(settings.dev_header_user_role) or settings.default_role).strip().lower()
    if role not in ROLE_ORDER:
        raise HTTPException(status_code=401, detail=f"Unknown role {role!r}")

    return Principal(user_id=user_id, role=role)


def require_agent(p: Principal = Depends(get_principal)) -> Principal:
    _require_role(p, "agent")
    return p


def require_admin(p: Principal = Depends(get_principal)) -> Principal:
    _require_role(p, "admin")
    return p
