# backend/healthcheck/errors.py
from __future__ import annotations

from typing import Any, Optional


class HealthCheckError(Exception):
    """Base class for every error raised by this package."""

    code = "healthcheck_error"

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "message": str(self)}


# -----------------------------
# Scoring engine
# -----------------------------
class InvalidTemplateError(HealthCheckError):
    """Structurally malformed template. Fatal, never retried."""

    code = "invalid_template"

    def __init__(self, message: str, *, template_id: Optional[str] = None, item_id: Optional[str] = None):
        super().__init__(message)
        self.template_id = template_id
        self.item_id = item_id

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["template_id"] = self.template_id
        out["item_id"] = self.item_id
        return out


class InvalidResponseError(HealthCheckError):
    """An answered item carries a value incompatible with its declared type."""

    code = "invalid_response"

    def __init__(self, *, item_id: str, item_type: str, value: Any, reason: str):
        super().__init__(f"Invalid response for item {item_id!r} ({item_type}): {reason}")
        self.item_id = item_id
        self.item_type = item_type
        self.value = value
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["item_id"] = self.item_id
        out["item_type"] = self.item_type
        out["value"] = repr(self.value)
        return out


class InvalidTransitionError(HealthCheckError):
    code = "invalid_transition"

    def __init__(self, current: str, target: str, message: Optional[str] = None):
        super().__init__(message or f"Checklist cannot move from {current!r} to {target!r}")
        self.current = current
        self.target = target

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["current"] = self.current
        out["target"] = self.target
        return out


# -----------------------------
# Persistence callers
# -----------------------------
class NotFoundError(HealthCheckError):
    code = "not_found"

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(f"{entity_type} {entity_id!r} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class TemplateMismatchError(HealthCheckError):
    code = "template_mismatch"

    def __init__(self, *, template_type: str, equipment_category: str):
        super().__init__(
            f"Template type ({template_type}) does not match equipment category ({equipment_category})"
        )
        self.template_type = template_type
        self.equipment_category = equipment_category


class AlertStateError(HealthCheckError):
    code = "alert_state"
