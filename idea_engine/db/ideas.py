"""Reads and score snapshots on the ideas table.

Ideas are owned by the idea-management flow; this module only touches the
columns the scoring engine needs.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from idea_engine.core.errors import ErrorCode, NotFoundError
from idea_engine.core.logging import get_logger
from idea_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "ideas"


def get_idea(idea_id: UUID | str) -> dict[str, Any] | None:
    """Get a single idea by ID, or None."""
    response = (
        get_supabase()
        .table(TABLE)
        .select("*")
        .eq("id", str(idea_id))
        .limit(1)
        .execute()
    )
    if not response.data:
        return None
    return response.data[0]


def require_idea(idea_id: UUID | str) -> dict[str, Any]:
    idea = get_idea(idea_id)
    if not idea:
        raise NotFoundError(
            f"Idea {idea_id} not found",
            ErrorCode.IDEA_NOT_FOUND,
            details={"idea_id": str(idea_id)},
        )
    return idea


def list_ideas_by_user(user_id: UUID, status: str | None = None) -> list[dict[str, Any]]:
    """
    List a user's ideas in creation order.

    Args:
        user_id: Owning user
        status: Optional status filter (e.g. "evaluated")
    """
    query = get_supabase().table(TABLE).select("*").eq("user_id", str(user_id))
    if status:
        query = query.eq("status", status)

    response = query.order("created_at").execute()
    return response.data or []


def get_ideas_by_ids(idea_ids: list[UUID | str]) -> dict[str, dict[str, Any]]:
    """Resolve many ideas in one query; missing ids are absent from the result."""
    unique_ids = list(dict.fromkeys(str(iid) for iid in idea_ids))
    if not unique_ids:
        return {}

    response = get_supabase().table(TABLE).select("*").in_("id", unique_ids).execute()
    return {str(row["id"]): row for row in response.data or []}


def set_idea_score_snapshot(
    idea_id: UUID | str,
    total_score: float,
    status: str = "evaluated",
) -> dict[str, Any]:
    """
    Persist an informational total_score and status on an idea.

    Raises:
        NotFoundError: If the idea does not exist
    """
    response = (
        get_supabase()
        .table(TABLE)
        .update(
            {
                "total_score": total_score,
                "status": status,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
        )
        .eq("id", str(idea_id))
        .execute()
    )
    if not response.data:
        raise NotFoundError(
            f"Idea {idea_id} not found",
            ErrorCode.IDEA_NOT_FOUND,
            details={"idea_id": str(idea_id)},
        )

    logger.info(f"Stored total_score={total_score:.3f} status={status} on idea {idea_id}")
    return response.data[0]
