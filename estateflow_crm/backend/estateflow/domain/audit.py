# backend/estateflow/domain/audit.py
from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..models import AuditEvent


def _snapshot_json(v: Optional[dict[str, Any]]) -> Optional[str]:
    return None if v is None else json.dumps(v, sort_keys=True, default=str, ensure_ascii=False)


def audit_write(
    db: Session,
    *,
    actor_id: Optional[str],
    action: str,
    entity_type: str,
    entity_id: Any,
    before: Optional[dict[str, Any]] = None,
    after: Optional[dict[str, Any]] = None,
) -> AuditEvent:
    """
    Stage an audit row in the caller's session.

    The row is committed with the change it describes; callers own the commit.
    """
    event = AuditEvent(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        before_json=_snapshot_json(before),
        after_json=_snapshot_json(after),
        created_at=datetime.utcnow(),
    )
    db.add(event)
    return event
