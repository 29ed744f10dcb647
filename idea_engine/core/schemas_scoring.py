"""Pydantic schemas for idea criteria, scores and weighted score results."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


# ============================================================================
# Stored rows
# ============================================================================


class CriterionOut(BaseModel):
    """A named, weighted evaluation dimension owned by one user."""

    id: UUID = Field(..., description="Criterion UUID")
    name: str = Field(..., description="Display name (not unique)")
    description: str | None = Field(default=None, description="What the criterion measures")
    user_id: UUID = Field(..., description="Owning user")
    weight: int = Field(..., description="Linear multiplier used in the weighted average")
    is_default: bool = Field(default=False, description="Part of the global default catalog")
    order: int = Field(default=0, description="Display and tie-break order")
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ScoreOut(BaseModel):
    """One user's rating of one idea against one criterion."""

    id: UUID = Field(..., description="Score UUID")
    idea_id: UUID = Field(..., description="Scored idea")
    criteria_id: UUID = Field(..., description="Criterion scored against")
    user_id: UUID = Field(..., description="User who scored")
    score: int = Field(..., description="Rating, nominally 1-10")
    notes: str | None = Field(default=None, description="Optional free-text notes")
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ============================================================================
# Requests
# ============================================================================


class CriterionCreate(BaseModel):
    name: str = Field(..., description="Criterion name")
    description: str | None = Field(default=None, description="Optional description")
    user_id: UUID = Field(..., description="Owning user")
    weight: int = Field(..., description="Weight, 1-10")
    is_default: bool = Field(default=False)
    order: int = Field(default=0)


class CriterionUpdate(BaseModel):
    """Partial update; only supplied fields change."""

    name: str | None = None
    description: str | None = None
    weight: int | None = None
    is_default: bool | None = None
    order: int | None = None


class CriteriaOrderUpdate(BaseModel):
    criteria_id: UUID
    order: int


class ReorderCriteriaRequest(BaseModel):
    updates: list[CriteriaOrderUpdate] = Field(..., description="New order per criterion")


class SeedCriteriaRequest(BaseModel):
    user_id: UUID = Field(..., description="User receiving the default catalog")


class DuplicateCriterionRequest(BaseModel):
    target_user_id: UUID = Field(..., description="User who will own the copy")


class ScoreUpsert(BaseModel):
    idea_id: UUID
    criteria_id: UUID
    user_id: UUID
    score: int = Field(..., description="Rating, 1-10")
    notes: str | None = None


class BulkScoreEntry(BaseModel):
    criteria_id: UUID
    score: int = Field(..., description="Rating, 1-10")
    notes: str | None = None


class BulkScoreRequest(BaseModel):
    user_id: UUID = Field(..., description="User scoring the idea")
    scores: list[BulkScoreEntry] = Field(..., description="One entry per criterion")


class CopyScoresRequest(BaseModel):
    target_idea_id: UUID = Field(..., description="Idea receiving the copied scores")
    user_id: UUID = Field(..., description="Only this user's scores are copied")


# ============================================================================
# Computed results
# ============================================================================


class CriterionScore(BaseModel):
    """A score joined to its criterion with its weighted contribution."""

    score: ScoreOut
    criterion: CriterionOut
    weighted_score: float = Field(..., description="score * weight")


class IdeaScoreResult(BaseModel):
    """Weighted average of an idea's scores, recomputed on every read."""

    idea_id: UUID
    final_score: float = Field(..., description="weighted_score / total_weight, 0 when no weight")
    total_weight: float
    weighted_score: float
    criteria_scores: list[CriterionScore] = Field(default_factory=list)
    scores_count: int = Field(..., description="Raw score rows, orphans included")


class RankedIdea(BaseModel):
    idea: dict[str, Any]
    calculated_score: float
    scores_count: int


class ScoreStats(BaseModel):
    total: int
    avg_score: float
    max_score: int
    min_score: int
    score_distribution: dict[int, int] = Field(
        default_factory=dict, description="Count per integer score 1-10"
    )


class CriterionWithStats(CriterionOut):
    usage_count: int = 0
    avg_score: float = 0.0


class CriteriaStats(BaseModel):
    total: int
    avg_weight: float
    max_weight: int
    min_weight: int


class DeleteCriterionResult(BaseModel):
    criteria_id: UUID
    deleted_scores: int


class DeletedScoresResult(BaseModel):
    deleted_ids: list[UUID]
    total: int
