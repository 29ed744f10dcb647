"""CRUD operations for idea scores.

At most one score exists per (idea_id, criteria_id, user_id). The table carries
a unique constraint on that triple and every write goes through an upsert on
it, so concurrent submissions for the same triple collapse into one row.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from idea_engine.core.errors import ErrorCode, NotFoundError
from idea_engine.core.logging import get_logger
from idea_engine.core.validation import validate_score
from idea_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "idea_scores"
SCORE_KEY = "idea_id,criteria_id,user_id"

COPIED_PREFIX = "Copied: "
COPIED_MARKER = "Copied"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _score_row(
    idea_id: UUID | str,
    criteria_id: UUID | str,
    user_id: UUID | str,
    score: int,
    notes: str | None,
) -> dict[str, Any]:
    # created_at is left to the column default so an update keeps the original
    return {
        "idea_id": str(idea_id),
        "criteria_id": str(criteria_id),
        "user_id": str(user_id),
        "score": score,
        "notes": notes,
        "updated_at": _now(),
    }


def upsert_score(
    idea_id: UUID,
    criteria_id: UUID,
    user_id: UUID,
    score: int,
    notes: str | None = None,
) -> dict[str, Any]:
    """
    Create or update the score for (idea, criterion, user).

    Args:
        idea_id: Idea UUID
        criteria_id: Criterion UUID
        user_id: Scoring user
        score: Rating, 1-10
        notes: Optional notes (replaces any previous notes)

    Returns:
        The stored score dict

    Raises:
        ValidationError: If score is outside 1-10
    """
    validate_score(score)
    row = _score_row(idea_id, criteria_id, user_id, score, notes)

    try:
        response = (
            get_supabase()
            .table(TABLE)
            .upsert(row, on_conflict=SCORE_KEY)
            .execute()
        )
    except Exception as e:
        logger.error(
            f"Failed to upsert score: {e}",
            extra={"idea_id": str(idea_id), "criteria_id": str(criteria_id)},
        )
        raise

    if not response.data:
        raise ValueError("No data returned from upsert_score")

    stored = response.data[0]
    logger.info(
        f"Upserted score {stored['id']} idea={idea_id} criteria={criteria_id} score={score}",
        extra={"idea_id": str(idea_id), "user_id": str(user_id)},
    )
    return stored


def bulk_upsert_scores(
    idea_id: UUID,
    user_id: UUID,
    entries: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """
    Score an idea against several criteria in one write.

    Every entry is validated before anything is written. Entries repeating a
    criteria_id collapse to the last one.

    Args:
        idea_id: Idea UUID
        user_id: Scoring user
        entries: List of {"criteria_id", "score", "notes"?}

    Returns:
        Stored score dicts

    Raises:
        ValidationError: If any score is outside 1-10
    """
    for entry in entries:
        validate_score(entry["score"])

    rows_by_criteria: dict[str, dict[str, Any]] = {}
    for entry in entries:
        row = _score_row(idea_id, entry["criteria_id"], user_id, entry["score"], entry.get("notes"))
        rows_by_criteria[row["criteria_id"]] = row

    rows = list(rows_by_criteria.values())
    if not rows:
        return []

    try:
        response = (
            get_supabase()
            .table(TABLE)
            .upsert(rows, on_conflict=SCORE_KEY)
            .execute()
        )
    except Exception as e:
        logger.error(
            f"Failed to bulk upsert {len(rows)} scores: {e}",
            extra={"idea_id": str(idea_id), "user_id": str(user_id)},
        )
        raise

    stored = response.data or []
    logger.info(
        f"Bulk upserted {len(stored)} scores for idea {idea_id}",
        extra={"idea_id": str(idea_id), "user_id": str(user_id)},
    )
    return stored


def get_score(score_id: UUID) -> dict[str, Any] | None:
    """Get a single score by ID, or None."""
    response = (
        get_supabase()
        .table(TABLE)
        .select("*")
        .eq("id", str(score_id))
        .limit(1)
        .execute()
    )
    if not response.data:
        return None
    return response.data[0]


def _list_by(column: str, value: UUID | str) -> list[dict[str, Any]]:
    response = get_supabase().table(TABLE).select("*").eq(column, str(value)).execute()
    return response.data or []


def list_scores_by_idea(idea_id: UUID) -> list[dict[str, Any]]:
    return _list_by("idea_id", idea_id)


def list_scores_by_criteria(criteria_id: UUID) -> list[dict[str, Any]]:
    return _list_by("criteria_id", criteria_id)


def list_scores_by_user(user_id: UUID) -> list[dict[str, Any]]:
    return _list_by("user_id", user_id)


def delete_score(score_id: UUID) -> dict[str, Any]:
    """
    Delete one score.

    Returns:
        The deleted score dict

    Raises:
        NotFoundError: If no score has this ID
    """
    response = get_supabase().table(TABLE).delete().eq("id", str(score_id)).execute()
    if not response.data:
        raise NotFoundError(
            f"Score {score_id} not found",
            ErrorCode.SCORE_NOT_FOUND,
            details={"score_id": str(score_id)},
        )

    logger.info(f"Deleted score {score_id}")
    return response.data[0]


def _delete_by(column: str, value: UUID | str) -> list[str]:
    try:
        response = get_supabase().table(TABLE).delete().eq(column, str(value)).execute()
    except Exception as e:
        logger.error(f"Failed to delete scores where {column}={value}: {e}")
        raise

    deleted_ids = [str(row["id"]) for row in response.data or []]
    logger.info(f"Deleted {len(deleted_ids)} scores where {column}={value}")
    return deleted_ids


def delete_scores_for_idea(idea_id: UUID) -> list[str]:
    """Delete every score on an idea. Returns the deleted score IDs."""
    return _delete_by("idea_id", idea_id)


def delete_scores_for_criteria(criteria_id: UUID) -> list[str]:
    """Delete every score against a criterion. Returns the deleted score IDs."""
    return _delete_by("criteria_id", criteria_id)


def _copied_notes(notes: str | None) -> str:
    return f"{COPIED_PREFIX}{notes}" if notes else COPIED_MARKER


def copy_scores(
    source_idea_id: UUID,
    target_idea_id: UUID,
    user_id: UUID,
) -> list[dict[str, Any]]:
    """
    Copy one user's scores from an idea onto another idea.

    Scores on the source idea owned by other users are skipped. A target score
    for the same (criterion, user) is overwritten rather than duplicated.

    Args:
        source_idea_id: Idea to copy from
        target_idea_id: Idea to copy to
        user_id: Only this user's scores are copied

    Returns:
        Stored score dicts on the target idea
    """
    source_scores = list_scores_by_idea(source_idea_id)
    rows = [
        _score_row(
            target_idea_id,
            score["criteria_id"],
            user_id,
            score["score"],
            _copied_notes(score.get("notes")),
        )
        for score in source_scores
        if str(score["user_id"]) == str(user_id)
    ]

    if not rows:
        logger.info(f"No scores by user {user_id} to copy from idea {source_idea_id}")
        return []

    try:
        response = (
            get_supabase()
            .table(TABLE)
            .upsert(rows, on_conflict=SCORE_KEY)
            .execute()
        )
    except Exception as e:
        logger.error(
            f"Failed to copy scores from {source_idea_id} to {target_idea_id}: {e}",
            extra={"user_id": str(user_id)},
        )
        raise

    copied = response.data or []
    logger.info(
        f"Copied {len(copied)} scores from idea {source_idea_id} to {target_idea_id}",
        extra={"user_id": str(user_id)},
    )
    return copied
