"""Input checks shared by every criteria and score write path."""

from typing import Any

from idea_engine.core.errors import ErrorCode, ValidationError

WEIGHT_MIN = 1
WEIGHT_MAX = 10
SCORE_MIN = 1
SCORE_MAX = 10


def _is_int(value: Any) -> bool:
    # bool is an int subclass but never a valid weight or score
    return isinstance(value, int) and not isinstance(value, bool)


def validate_weight(weight: Any) -> int:
    """Return ``weight`` if it is an integer in 1..10, else raise ValidationError."""
    if not _is_int(weight) or not WEIGHT_MIN <= weight <= WEIGHT_MAX:
        raise ValidationError(
            f"Weight must be an integer between {WEIGHT_MIN} and {WEIGHT_MAX}",
            ErrorCode.INVALID_WEIGHT,
            details={"weight": weight},
        )
    return weight


def validate_score(score: Any) -> int:
    """Return ``score`` if it is an integer in 1..10, else raise ValidationError."""
    if not _is_int(score) or not SCORE_MIN <= score <= SCORE_MAX:
        raise ValidationError(
            f"Score must be an integer between {SCORE_MIN} and {SCORE_MAX}",
            ErrorCode.INVALID_SCORE,
            details={"score": score},
        )
    return score


def validate_order(order: Any) -> int:
    if not _is_int(order):
        raise ValidationError(
            "Order must be an integer",
            ErrorCode.INVALID_INPUT,
            details={"order": order},
        )
    return order


def validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(
            "Name must be a non-empty string",
            ErrorCode.INVALID_INPUT,
            details={"name": name},
        )
    return name


def validate_limit(limit: Any) -> int:
    """Return ``limit`` if it is a positive integer, else raise ValidationError."""
    if not _is_int(limit) or limit < 1:
        raise ValidationError(
            "Limit must be a positive integer",
            ErrorCode.INVALID_INPUT,
            details={"limit": limit},
        )
    return limit
