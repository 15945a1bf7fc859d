# ---------------------------------
# TYPED EXCEPTIONS
# ---------------------------------
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"


class TravelRequestError(Exception):
    """Base exception for all travel request errors."""

    code: ErrorCode = ErrorCode.VALIDATION_ERROR
    status_code: int = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(TravelRequestError):
    """Malformed input. Carries field-level detail; nothing was mutated."""

    code = ErrorCode.VALIDATION_ERROR
    status_code = 422

    def __init__(self, message: str, errors: dict[str, list[str]] | None = None) -> None:
        self.errors = errors or {}
        super().__init__(message)

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors={field: [message]})


class ForbiddenError(TravelRequestError):
    """Raised when an authorization rule denies an action."""

    code = ErrorCode.FORBIDDEN
    status_code = 403


class NotFoundError(TravelRequestError):
    code = ErrorCode.NOT_FOUND
    status_code = 404

    def __init__(self, request_id: int) -> None:
        self.request_id = request_id
        super().__init__(f"Travel request {request_id} not found")


class ConflictError(TravelRequestError):
    """Raised when a concurrent transition committed first."""

    code = ErrorCode.CONFLICT
    status_code = 409
