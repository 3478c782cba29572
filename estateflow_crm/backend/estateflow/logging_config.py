# backend/estateflow/logging_config.py
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from .config import settings
from .middleware.request_id import get_request_id

# Workflow fields a log call may pass via `extra=`; only those present are emitted.
EXTRA_KEYS = ("property_id", "actor_id", "portal", "approval_status", "event_type")


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, message, request_id and workflow extras."""

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        rid = get_request_id()
        if rid:
            line["request_id"] = rid

        line.update({k: getattr(record, k) for k in EXTRA_KEYS if hasattr(record, k)})

        if record.exc_info:
            line["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(line, ensure_ascii=False, default=str)


def configure_logging(level: Optional[str] = None) -> None:
    level = (level or settings.log_level or "INFO").upper()

    root = logging.getLogger()
    root.setLevel(level)
    # uvicorn --reload calls this again; drop the previous handler instead of stacking
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(level)
    logging.getLogger("sqlalchemy.engine").setLevel((settings.sql_log_level or "WARNING").upper())
