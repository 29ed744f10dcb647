"""Domain errors raised by the criteria, score and comparison stores."""

from enum import Enum
from typing import Any


class ErrorType(str, Enum):
    """Kind of failure, independent of the entity involved."""
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


class ErrorCode(str, Enum):
    """Specific failure code surfaced to callers."""
    CRITERIA_NOT_FOUND = "criteria_not_found"
    SCORE_NOT_FOUND = "score_not_found"
    IDEA_NOT_FOUND = "idea_not_found"
    COMPARISON_NOT_FOUND = "comparison_not_found"
    ACCESS_DENIED = "access_denied"
    INVALID_WEIGHT = "invalid_weight"
    INVALID_SCORE = "invalid_score"
    INVALID_INPUT = "invalid_input"
    DUPLICATE_ENTRY = "duplicate_entry"


class ScoringError(Exception):
    """Base class for every domain error of the scoring engine."""

    error_type: ErrorType
    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "detail": self.message,
            "type": self.error_type.value,
            "code": self.code.value,
        }


class NotFoundError(ScoringError):
    """A referenced criterion, score, idea or comparison does not exist."""

    error_type = ErrorType.NOT_FOUND
    status_code = 404


class AuthorizationError(ScoringError):
    """The acting user does not own the resource being mutated."""

    error_type = ErrorType.AUTHORIZATION
    status_code = 403

    def __init__(self, message: str = "Access denied", details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.ACCESS_DENIED, details)


class ValidationError(ScoringError):
    """A weight, score or other input is outside its allowed domain."""

    error_type = ErrorType.VALIDATION
    status_code = 422


class ConflictError(ScoringError):
    """The write would duplicate an entry that must stay unique."""

    error_type = ErrorType.CONFLICT
    status_code = 409

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.DUPLICATE_ENTRY, details)


def require_owner(
    resource: dict[str, Any],
    acting_user_id: Any,
    resource_name: str,
) -> None:
    """
    Check that the acting user owns a resource row.

    Args:
        resource: Row dict with a ``user_id`` column
        acting_user_id: Already-resolved principal
        resource_name: Used in the error message (e.g. "criteria")

    Raises:
        AuthorizationError: If ``user_id`` differs from the acting user
    """
    if str(resource.get("user_id")) != str(acting_user_id):
        raise AuthorizationError(
            f"Access denied to {resource_name} {resource.get('id')}",
            details={"resource_id": str(resource.get("id")), "acting_user_id": str(acting_user_id)},
        )
