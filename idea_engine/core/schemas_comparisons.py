"""Pydantic schemas for idea comparison groupings."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from idea_engine.core.schemas_scoring import CriterionOut, CriterionScore


class ComparisonOut(BaseModel):
    """A named, ordered grouping of ideas."""

    id: UUID = Field(..., description="Comparison UUID")
    name: str = Field(..., description="Comparison name")
    description: str | None = None
    user_id: UUID = Field(..., description="Owning user")
    idea_ids: list[UUID] = Field(default_factory=list, description="Caller-ordered idea ids")
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ComparisonCreate(BaseModel):
    user_id: UUID
    idea_ids: list[UUID] = Field(..., description="Ideas, typically best to worst")
    name: str | None = None
    description: str | None = None


class ComparisonUpdate(BaseModel):
    name: str | None = None
    description: str | None = None
    idea_ids: list[UUID] | None = None


class QuickComparisonRequest(BaseModel):
    user_id: UUID
    top_n: int | None = Field(default=None, ge=1, description="How many top ideas to include")
    name: str | None = None


class ComparedIdea(BaseModel):
    idea: dict[str, Any]
    scores: list[CriterionScore] = Field(default_factory=list)
    calculated_score: float
    scores_count: int


class ComparisonDetails(BaseModel):
    comparison: ComparisonOut
    ideas: list[ComparedIdea]
    ideas_count: int


class MatrixCell(BaseModel):
    criterion: CriterionOut
    score: int | None = None
    notes: str | None = None


class MatrixRow(BaseModel):
    idea: dict[str, Any]
    calculated_score: float
    scores: list[MatrixCell]


class ComparisonMatrix(BaseModel):
    """Ideas x criteria grid for a comparison, best idea first."""

    comparison: ComparisonOut
    criteria: list[CriterionOut]
    matrix: list[MatrixRow]
    ideas_count: int
    criteria_count: int


class ComparisonStats(BaseModel):
    ideas_count: int
    avg_score: float = 0.0
    max_score: float = 0.0
    min_score: float = 0.0
    score_range: float = 0.0
