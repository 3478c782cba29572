# backend/estateflow/middleware/request_id.py
from __future__ import annotations

import re
import uuid
from contextvars import ContextVar
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LEN = 128
_SAFE_ID = re.compile(r"^[A-Za-z0-9._:\-]+$")

request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    return request_id_ctx.get()


def accept_request_id(raw: Optional[str]) -> str:
    """Caller-supplied id if it is short and log-safe, else a fresh uuid4 hex."""
    rid = (raw or "").strip()
    if rid and len(rid) <= MAX_REQUEST_ID_LEN and _SAFE_ID.match(rid):
        return rid
    return uuid.uuid4().hex


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tags every request with an id, visible to log lines and echoed on the response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # starlette headers are case-insensitive, so X-Request-Id matches too
        rid = accept_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = rid

        token = request_id_ctx.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
