"""
Error hierarchy for the authorization and hierarchy engine.

Every failure an operation can report is a PlannerError carrying a stable
code and an HTTP status; the global handlers in api.error_handlers turn them
into the ``{"error": {...}}`` envelope. Store failures never leak their
driver message to the caller.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ForbiddenReason(str, Enum):
    NOT_A_MEMBER = "NOT_A_MEMBER"
    INSUFFICIENT_ROLE = "INSUFFICIENT_ROLE"


class PlannerError(Exception):
    """Base exception for all Exercise Planner errors."""

    code = "INTERNAL_ERROR"
    http_status = 500

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_response(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "status": self.http_status,
            }
        }


# ---------------------------------------------------------------------------
# Identity / authorization
# ---------------------------------------------------------------------------

class UnauthenticatedError(PlannerError):
    code = "UNAUTHENTICATED"
    http_status = 401

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class ForbiddenError(PlannerError):
    http_status = 403

    def __init__(self, message: str, reason: ForbiddenReason):
        super().__init__(message, code=reason.value)
        self.reason = reason

    def to_response(self) -> dict[str, Any]:
        body = super().to_response()
        body["error"]["reason"] = self.reason.value
        return body


class NotAMemberError(ForbiddenError):
    def __init__(self, message: str = "You are not a member of this organization"):
        super().__init__(message, ForbiddenReason.NOT_A_MEMBER)


class InsufficientRoleError(ForbiddenError):
    def __init__(self, message: str = "Administrator access required"):
        super().__init__(message, ForbiddenReason.INSUFFICIENT_ROLE)


# ---------------------------------------------------------------------------
# Domain
# ---------------------------------------------------------------------------

class NotFoundError(PlannerError):
    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(f"{resource_type} not found")
        self.resource_type = resource_type
        self.resource_id = resource_id


class ValidationError(PlannerError):
    code = "VALIDATION_ERROR"
    http_status = 400


class InvalidParentError(ValidationError):
    code = "INVALID_PARENT"


class ConflictError(PlannerError):
    code = "CONFLICT"
    http_status = 409


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------

class StoreError(PlannerError):
    code = "STORE_ERROR"
    http_status = 500

    def __init__(self, operation: str):
        super().__init__("An internal error occurred")
        self.operation = operation
