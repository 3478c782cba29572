# events.py - workflow event emission for property approval / portal transitions.
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..models import WorkflowEvent

log = logging.getLogger(__name__)

DRAFT_SAVED = "draft_saved"
APPROVAL_SUBMITTED = "approval_submitted"
APPROVED = "approved"
REJECTED = "rejected"
ENHANCED = "enhanced"
PUBLISHED = "published"


def emit_workflow_event(
    db: Session,
    *,
    event_type: str,
    property_id: Optional[int] = None,
    actor_id: Optional[str] = None,
    payload: Optional[dict[str, Any]] = None,
) -> WorkflowEvent:
    """
    Append a workflow event.

    NOTE:
    - Does NOT commit. Adds + flushes only.
    - Callers decide when to commit, so the event lands in the same
      transaction as the transition it describes.
    """
    if not event_type:
        raise ValueError("event_type required")

    ev = WorkflowEvent(
        property_id=int(property_id) if property_id is not None else None,
        actor_id=actor_id,
        event_type=str(event_type),
        payload_json=json.dumps(payload or {}, ensure_ascii=False, default=str),
        created_at=datetime.utcnow(),
    )
    db.add(ev)
    db.flush()

    log.info(
        "workflow event %s",
        event_type,
        extra={"property_id": property_id, "actor_id": actor_id, "event_type": event_type},
    )
    return ev
