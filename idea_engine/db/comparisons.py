"""CRUD operations for idea comparison groupings."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from idea_engine.core.errors import ConflictError, ErrorCode, NotFoundError, ScoringError, require_owner
from idea_engine.core.logging import get_logger, log_with_context
from idea_engine.db.activities import record_activity
from idea_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "idea_comparisons"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _first_idea(idea_ids: list[Any]) -> str | None:
    return str(idea_ids[0]) if idea_ids else None


def create_comparison(
    user_id: UUID,
    idea_ids: list[UUID],
    name: str | None = None,
    description: str | None = None,
) -> dict[str, Any]:
    """
    Store a named grouping of ideas verbatim.

    The referenced ideas are not checked for existence or ownership.

    Args:
        user_id: Owning user
        idea_ids: Ideas in caller order, typically best to worst
        name: Comparison name; defaults to "Comparison YYYY-MM-DD"
        description: Optional description

    Returns:
        Created comparison dict
    """
    now = datetime.now(timezone.utc)
    row = {
        "name": name or f"Comparison {now.date().isoformat()}",
        "description": description,
        "user_id": str(user_id),
        "idea_ids": [str(iid) for iid in idea_ids],
        "created_at": now.isoformat(),
        "updated_at": now.isoformat(),
    }

    try:
        response = get_supabase().table(TABLE).insert(row).execute()
    except Exception as e:
        logger.error(f"Failed to create comparison: {e}", extra={"user_id": str(user_id)})
        raise

    comparison = response.data[0]
    logger.info(
        f"Created comparison {comparison['id']} with {len(idea_ids)} ideas",
        extra={"user_id": str(user_id)},
    )

    record_activity(
        entity_type="comparison",
        entity_id=comparison["id"],
        action_type="comparison.created",
        description=f'Created comparison "{row["name"]}" with {len(idea_ids)} ideas',
        user_id=user_id,
        metadata={"idea_id": _first_idea(row["idea_ids"])},
    )
    return comparison


def get_comparison(comparison_id: UUID) -> dict[str, Any] | None:
    """Get a comparison by ID, or None."""
    response = (
        get_supabase()
        .table(TABLE)
        .select("*")
        .eq("id", str(comparison_id))
        .limit(1)
        .execute()
    )
    if not response.data:
        return None
    return response.data[0]


def require_comparison(comparison_id: UUID) -> dict[str, Any]:
    comparison = get_comparison(comparison_id)
    if not comparison:
        raise NotFoundError(
            f"Comparison {comparison_id} not found",
            ErrorCode.COMPARISON_NOT_FOUND,
            details={"comparison_id": str(comparison_id)},
        )
    return comparison


def list_comparisons_by_user(user_id: UUID) -> list[dict[str, Any]]:
    """List a user's comparisons, newest first."""
    response = (
        get_supabase()
        .table(TABLE)
        .select("*")
        .eq("user_id", str(user_id))
        .order("created_at", desc=True)
        .execute()
    )
    return response.data or []


def _patch(comparison_id: UUID, patch: dict[str, Any]) -> dict[str, Any]:
    patch["updated_at"] = _now()
    response = (
        get_supabase()
        .table(TABLE)
        .update(patch)
        .eq("id", str(comparison_id))
        .execute()
    )
    if not response.data:
        raise NotFoundError(
            f"Comparison {comparison_id} not found",
            ErrorCode.COMPARISON_NOT_FOUND,
            details={"comparison_id": str(comparison_id)},
        )
    return response.data[0]


def _log_failed(
    operation: str,
    comparison_id: UUID | str,
    acting_user_id: UUID | str,
    error: Exception,
) -> None:
    """Log an access-controlled failure with operation, acting user and arguments."""
    if isinstance(error, ScoringError):
        level, message, code = logging.WARNING, error.message, error.code.value
    else:
        level, message, code = logging.ERROR, str(error), type(error).__name__

    log_with_context(
        logger,
        level,
        f"{operation} failed: {message}",
        operation=operation,
        acting_user_id=str(acting_user_id),
        comparison_id=str(comparison_id),
        error_code=code,
    )


def _check_owner(operation: str, comparison: dict[str, Any], acting_user_id: UUID) -> None:
    try:
        require_owner(comparison, acting_user_id, "comparison")
    except ScoringError as e:
        _log_failed(operation, comparison.get("id"), acting_user_id, e)
        raise


def update_comparison(
    comparison_id: UUID,
    updates: dict[str, Any],
    acting_user_id: UUID | None = None,
) -> dict[str, Any]:
    """
    Patch name, description and/or idea_ids of a comparison.

    Raises:
        NotFoundError: If the comparison does not exist
        AuthorizationError: If acting_user_id does not own it
    """
    comparison = require_comparison(comparison_id)
    if acting_user_id is not None:
        _check_owner("update_comparison", comparison, acting_user_id)

    patch = {
        k: v for k, v in updates.items() if k in ("name", "description", "idea_ids") and v is not None
    }
    if "idea_ids" in patch:
        patch["idea_ids"] = [str(iid) for iid in patch["idea_ids"]]

    try:
        updated = _patch(comparison_id, patch)
    except Exception as e:
        if acting_user_id is not None:
            _log_failed("update_comparison", comparison_id, acting_user_id, e)
        raise
    logger.info(f"Updated comparison {comparison_id}")

    if acting_user_id is not None:
        record_activity(
            entity_type="comparison",
            entity_id=comparison_id,
            action_type="comparison.updated",
            description=f'Updated comparison "{comparison["name"]}"',
            user_id=acting_user_id,
            metadata={"idea_id": _first_idea(comparison.get("idea_ids") or [])},
        )
    return updated


def delete_comparison(comparison_id: UUID, acting_user_id: UUID | None = None) -> dict[str, Any]:
    """
    Delete a comparison. Ideas are untouched.

    Raises:
        NotFoundError: If the comparison does not exist
        AuthorizationError: If acting_user_id does not own it
    """
    comparison = require_comparison(comparison_id)
    if acting_user_id is not None:
        _check_owner("delete_comparison", comparison, acting_user_id)

    try:
        get_supabase().table(TABLE).delete().eq("id", str(comparison_id)).execute()
    except Exception as e:
        if acting_user_id is not None:
            _log_failed("delete_comparison", comparison_id, acting_user_id, e)
        else:
            logger.error(f"Failed to delete comparison {comparison_id}: {e}")
        raise
    logger.info(f"Deleted comparison {comparison_id}")

    if acting_user_id is not None:
        record_activity(
            entity_type="comparison",
            entity_id=comparison_id,
            action_type="comparison.deleted",
            description=f'Deleted comparison "{comparison["name"]}"',
            user_id=acting_user_id,
            metadata={"idea_id": _first_idea(comparison.get("idea_ids") or [])},
        )
    return comparison


def add_idea_to_comparison(comparison_id: UUID, idea_id: UUID) -> dict[str, Any]:
    """
    Append an idea to a comparison.

    Raises:
        NotFoundError: If the comparison does not exist
        ConflictError: If the idea is already part of it
    """
    comparison = require_comparison(comparison_id)
    idea_ids = [str(iid) for iid in comparison.get("idea_ids") or []]

    if str(idea_id) in idea_ids:
        raise ConflictError(
            "Idea already in comparison",
            details={"comparison_id": str(comparison_id), "idea_id": str(idea_id)},
        )

    return _patch(comparison_id, {"idea_ids": [*idea_ids, str(idea_id)]})


def remove_idea_from_comparison(comparison_id: UUID, idea_id: UUID) -> dict[str, Any]:
    """Remove an idea from a comparison; absent ideas are ignored."""
    comparison = require_comparison(comparison_id)
    idea_ids = [str(iid) for iid in comparison.get("idea_ids") or [] if str(iid) != str(idea_id)]
    return _patch(comparison_id, {"idea_ids": idea_ids})
