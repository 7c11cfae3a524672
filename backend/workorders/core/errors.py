"""Domain error taxonomy surfaced as structured HTTP errors.

Each error is an `HTTPException` so services can raise it directly (the same
way routes raise `HTTPException`) and the error-handling middleware renders
it with a request id. The `detail` is always `{"code": ..., "message": ...}`
plus any extra context passed by the caller.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status


class WorkOrderError(HTTPException):
    """Base class for recoverable, caller-actionable engine errors."""

    code = "error"
    status_code_default = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(
            status_code=self.status_code_default,
            detail={"code": self.code, "message": message, **context},
        )


class ValidationError(WorkOrderError):
    """Missing or malformed input, rejected before any write."""

    code = "validation_error"
    # Literal: the named constant was renamed in current Starlette.
    status_code_default = 422


class NotFound(WorkOrderError):
    code = "not_found"
    status_code_default = status.HTTP_404_NOT_FOUND


class Expired(WorkOrderError):
    """Confirmation token used after its expiry instant."""

    code = "expired"
    status_code_default = status.HTTP_410_GONE


class Forbidden(WorkOrderError):
    """Task id is outside the set bound to a confirmation token."""

    code = "forbidden"
    status_code_default = status.HTTP_403_FORBIDDEN


class InvalidTransition(WorkOrderError):
    code = "invalid_transition"
    status_code_default = status.HTTP_409_CONFLICT


class Conflict(WorkOrderError):
    code = "conflict"
    status_code_default = status.HTTP_409_CONFLICT
