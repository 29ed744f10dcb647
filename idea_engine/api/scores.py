"""API endpoints for idea scores and score statistics."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, Query

from idea_engine.core.errors import ErrorCode, ScoringError, ValidationError
from idea_engine.core.logging import get_logger
from idea_engine.core.schemas_scoring import ScoreOut, ScoreStats, ScoreUpsert
from idea_engine.core.scoring_engine import score_stats_by_user
from idea_engine.db import scores as scores_db

logger = get_logger(__name__)

router = APIRouter()


@router.put("/scores", response_model=ScoreOut)
async def upsert_score(request: ScoreUpsert) -> ScoreOut:
    """Create or replace the score for (idea, criterion, user)."""
    try:
        row = scores_db.upsert_score(
            idea_id=request.idea_id,
            criteria_id=request.criteria_id,
            user_id=request.user_id,
            score=request.score,
            notes=request.notes,
        )
        return ScoreOut(**row)
    except ScoringError:
        raise
    except Exception as e:
        error_msg = f"Failed to upsert score: {str(e)}"
        logger.error(error_msg, extra={"idea_id": str(request.idea_id)})
        raise HTTPException(status_code=500, detail=error_msg) from e


@router.get("/scores", response_model=list[ScoreOut])
async def list_scores(
    idea_id: UUID | None = Query(None, description="Filter by idea"),
    criteria_id: UUID | None = Query(None, description="Filter by criterion"),
    user_id: UUID | None = Query(None, description="Filter by scoring user"),
) -> list[ScoreOut]:
    """
    List scores by exactly one of idea_id, criteria_id or user_id.

    Raises:
        ValidationError: If zero or several filters are given
    """
    filters = [f for f in (idea_id, criteria_id, user_id) if f is not None]
    if len(filters) != 1:
        raise ValidationError(
            "Provide exactly one of idea_id, criteria_id or user_id",
            ErrorCode.INVALID_INPUT,
        )

    try:
        if idea_id is not None:
            rows = scores_db.list_scores_by_idea(idea_id)
        elif criteria_id is not None:
            rows = scores_db.list_scores_by_criteria(criteria_id)
        else:
            rows = scores_db.list_scores_by_user(user_id)
        return [ScoreOut(**row) for row in rows]
    except Exception as e:
        error_msg = f"Failed to list scores: {str(e)}"
        logger.error(error_msg)
        raise HTTPException(status_code=500, detail=error_msg) from e


@router.get("/scores/stats", response_model=ScoreStats)
async def get_score_stats(
    user_id: UUID = Query(..., description="Scoring user UUID"),
) -> ScoreStats:
    """Count, average, min, max and 1-10 distribution of a user's raw scores."""
    try:
        return score_stats_by_user(user_id)
    except Exception as e:
        error_msg = f"Failed to compute score stats: {str(e)}"
        logger.error(error_msg, extra={"user_id": str(user_id)})
        raise HTTPException(status_code=500, detail=error_msg) from e


@router.delete("/scores/{score_id}", response_model=ScoreOut)
async def delete_score(
    score_id: UUID = Path(..., description="Score UUID"),
) -> ScoreOut:
    try:
        return ScoreOut(**scores_db.delete_score(score_id))
    except ScoringError:
        raise
    except Exception as e:
        error_msg = f"Failed to delete score: {str(e)}"
        logger.error(error_msg, extra={"score_id": str(score_id)})
        raise HTTPException(status_code=500, detail=error_msg) from e
