"""API endpoints for scoring, evaluating and ranking ideas."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, Query

from idea_engine.core.errors import ScoringError
from idea_engine.core.logging import get_logger
from idea_engine.core.schemas_scoring import (
    BulkScoreRequest,
    CopyScoresRequest,
    DeletedScoresResult,
    IdeaScoreResult,
    RankedIdea,
    ScoreOut,
)
from idea_engine.core.scoring_engine import (
    calculate_idea_score,
    mark_idea_evaluated,
    rank_ideas_by_user,
)
from idea_engine.db import scores as scores_db

logger = get_logger(__name__)

router = APIRouter()


@router.put("/ideas/{idea_id}/scores", response_model=list[ScoreOut])
async def bulk_score_idea(
    request: BulkScoreRequest,
    idea_id: UUID = Path(..., description="Idea UUID"),
) -> list[ScoreOut]:
    """Score an idea against several criteria at once."""
    try:
        rows = scores_db.bulk_upsert_scores(
            idea_id,
            request.user_id,
            [entry.model_dump() for entry in request.scores],
        )
        return [ScoreOut(**row) for row in rows]
    except ScoringError:
        raise
    except Exception as e:
        error_msg = f"Failed to score idea: {str(e)}"
        logger.error(error_msg, extra={"idea_id": str(idea_id)})
        raise HTTPException(status_code=500, detail=error_msg) from e


@router.delete("/ideas/{idea_id}/scores", response_model=DeletedScoresResult)
async def delete_idea_scores(
    idea_id: UUID = Path(..., description="Idea UUID"),
) -> DeletedScoresResult:
    try:
        deleted_ids = scores_db.delete_scores_for_idea(idea_id)
        return DeletedScoresResult(deleted_ids=deleted_ids, total=len(deleted_ids))
    except Exception as e:
        error_msg = f"Failed to delete idea scores: {str(e)}"
        logger.error(error_msg, extra={"idea_id": str(idea_id)})
        raise HTTPException(status_code=500, detail=error_msg) from e


@router.post("/ideas/{idea_id}/scores/copy", response_model=list[ScoreOut])
async def copy_idea_scores(
    request: CopyScoresRequest,
    idea_id: UUID = Path(..., description="Source idea UUID"),
) -> list[ScoreOut]:
    """Copy one user's scores from this idea onto another idea."""
    try:
        rows = scores_db.copy_scores(idea_id, request.target_idea_id, request.user_id)
        return [ScoreOut(**row) for row in rows]
    except Exception as e:
        error_msg = f"Failed to copy scores: {str(e)}"
        logger.error(error_msg, extra={"idea_id": str(idea_id)})
        raise HTTPException(status_code=500, detail=error_msg) from e


@router.get("/ideas/{idea_id}/score", response_model=IdeaScoreResult)
async def get_idea_score(
    idea_id: UUID = Path(..., description="Idea UUID"),
) -> IdeaScoreResult:
    """Weighted score of an idea, computed from the current weights."""
    try:
        return calculate_idea_score(idea_id)
    except Exception as e:
        error_msg = f"Failed to calculate idea score: {str(e)}"
        logger.error(error_msg, extra={"idea_id": str(idea_id)})
        raise HTTPException(status_code=500, detail=error_msg) from e


@router.post("/ideas/{idea_id}/evaluate")
async def evaluate_idea(
    idea_id: UUID = Path(..., description="Idea UUID"),
) -> dict[str, Any]:
    """Store the current weighted score on the idea and mark it evaluated."""
    try:
        return mark_idea_evaluated(idea_id)
    except ScoringError:
        raise
    except Exception as e:
        error_msg = f"Failed to evaluate idea: {str(e)}"
        logger.error(error_msg, extra={"idea_id": str(idea_id)})
        raise HTTPException(status_code=500, detail=error_msg) from e


@router.get("/rankings", response_model=list[RankedIdea])
async def get_rankings(
    user_id: UUID = Query(..., description="Owning user UUID"),
    limit: int | None = Query(None, ge=1, description="Maximum ideas to return"),
) -> list[RankedIdea]:
    """A user's ideas ranked by weighted score, best first."""
    try:
        return rank_ideas_by_user(user_id, limit)
    except ScoringError:
        raise
    except Exception as e:
        error_msg = f"Failed to rank ideas: {str(e)}"
        logger.error(error_msg, extra={"user_id": str(user_id)})
        raise HTTPException(status_code=500, detail=error_msg) from e
