# backend/estateflow/domain/errors.py
from __future__ import annotations

from typing import Any, Optional


class WorkflowError(Exception):
    """Base for every error raised by the property workflow services."""

    status_code = 400
    kind = "workflow_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def as_dict(self) -> dict[str, Any]:
        return {"error": self.kind, "message": self.message}


class NotFoundError(WorkflowError):
    status_code = 404
    kind = "not_found"

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id

    def as_dict(self) -> dict[str, Any]:
        out = super().as_dict()
        out.update({"entity": self.entity, "entity_id": self.entity_id})
        return out


class ValidationError(WorkflowError):
    """Malformed or empty input, raised before anything is written."""

    status_code = 400
    kind = "validation_error"

    def __init__(self, message: str, *, field: Optional[str] = None, errors: Optional[list[dict]] = None) -> None:
        super().__init__(message)
        self.field = field
        self.errors = list(errors or [])

    def as_dict(self) -> dict[str, Any]:
        out = super().as_dict()
        if self.field:
            out["field"] = self.field
        if self.errors:
            out["errors"] = self.errors
        return out


class InvalidStateError(WorkflowError):
    status_code = 409
    kind = "invalid_state"

    def __init__(self, message: str, *, current_state: dict[str, Any]) -> None:
        super().__init__(message)
        self.current_state = dict(current_state)

    def as_dict(self) -> dict[str, Any]:
        out = super().as_dict()
        out["current_state"] = self.current_state
        return out


class NoPendingChangesError(InvalidStateError, ValidationError):
    """
    Submitting with nothing staged: the request is empty and the property is
    in no state to move to pending. Catchable as either parent.
    """

    status_code = 400
    kind = "no_pending_changes"

    def __init__(self, message: str, *, current_state: dict[str, Any]) -> None:
        InvalidStateError.__init__(self, message, current_state=current_state)
        self.field = "pending_changes"
        self.errors = []

    def as_dict(self) -> dict[str, Any]:
        return {
            "error": self.kind,
            "message": self.message,
            "field": self.field,
            "current_state": self.current_state,
        }


class PortalReadinessError(WorkflowError):
    """Publish blocked; carries every failing portal with its missing fields."""

    status_code = 422
    kind = "portal_not_ready"

    def __init__(self, failures: list[dict[str, Any]]) -> None:
        names = ", ".join(f["portal"] for f in failures)
        super().__init__(f"property is not ready for: {names}")
        self.failures = failures

    @property
    def portals(self) -> list[str]:
        return [f["portal"] for f in self.failures]

    def as_dict(self) -> dict[str, Any]:
        out = super().as_dict()
        out["portals"] = self.failures
        return out
