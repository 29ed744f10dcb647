"""Comparison views built on the scoring engine."""

from typing import Any
from uuid import UUID

from idea_engine.core.config import get_settings
from idea_engine.core.errors import ErrorCode, NotFoundError
from idea_engine.core.logging import get_logger
from idea_engine.core.schemas_comparisons import (
    ComparedIdea,
    ComparisonDetails,
    ComparisonMatrix,
    ComparisonOut,
    ComparisonStats,
    MatrixCell,
    MatrixRow,
)
from idea_engine.core.schemas_scoring import CriterionOut
from idea_engine.core.scoring_engine import calculate_idea_score, rank_ideas
from idea_engine.core.validation import validate_limit
from idea_engine.db.comparisons import create_comparison, require_comparison
from idea_engine.db.ideas import get_ideas_by_ids, list_ideas_by_user

logger = get_logger(__name__)


def _existing_ideas(comparison: dict[str, Any]) -> list[dict[str, Any]]:
    """The comparison's ideas in stored order, skipping deleted ones."""
    idea_ids = [str(iid) for iid in comparison.get("idea_ids") or []]
    ideas = get_ideas_by_ids(idea_ids)
    return [ideas[iid] for iid in idea_ids if iid in ideas]


def comparison_details(comparison_id: UUID) -> ComparisonDetails:
    """
    A comparison with each idea's scores and weighted score, best first.

    Raises:
        NotFoundError: If the comparison does not exist
    """
    comparison = require_comparison(comparison_id)

    compared = []
    for idea in _existing_ideas(comparison):
        result = calculate_idea_score(idea["id"])
        compared.append(
            ComparedIdea(
                idea=idea,
                scores=result.criteria_scores,
                calculated_score=result.final_score,
                scores_count=result.scores_count,
            )
        )

    compared.sort(key=lambda c: c.calculated_score, reverse=True)
    return ComparisonDetails(
        comparison=ComparisonOut(**comparison),
        ideas=compared,
        ideas_count=len(compared),
    )


def comparison_matrix(comparison_id: UUID) -> ComparisonMatrix:
    """
    Ideas x criteria grid over every criterion used to score the compared ideas.

    Criteria are ordered by their order field; a cell is empty where the idea
    has no score for that criterion. Rows are sorted best first.

    Raises:
        NotFoundError: If the comparison does not exist
    """
    comparison = require_comparison(comparison_id)

    all_criteria: dict[str, CriterionOut] = {}
    rows_data = []
    for idea in _existing_ideas(comparison):
        result = calculate_idea_score(idea["id"])
        by_criterion = {}
        for cs in result.criteria_scores:
            all_criteria[str(cs.criterion.id)] = cs.criterion
            by_criterion[str(cs.criterion.id)] = cs.score
        rows_data.append((idea, result.final_score, by_criterion))

    criteria = sorted(all_criteria.values(), key=lambda c: c.order)

    matrix = []
    for idea, calculated_score, by_criterion in rows_data:
        cells = []
        for criterion in criteria:
            score = by_criterion.get(str(criterion.id))
            cells.append(
                MatrixCell(
                    criterion=criterion,
                    score=score.score if score else None,
                    notes=score.notes if score else None,
                )
            )
        matrix.append(MatrixRow(idea=idea, calculated_score=calculated_score, scores=cells))

    matrix.sort(key=lambda row: row.calculated_score, reverse=True)

    return ComparisonMatrix(
        comparison=ComparisonOut(**comparison),
        criteria=criteria,
        matrix=matrix,
        ideas_count=len(matrix),
        criteria_count=len(criteria),
    )


def comparison_stats(comparison_id: UUID) -> ComparisonStats:
    """
    Spread of weighted scores across a comparison's ideas.

    Every listed idea id is scored, deleted ideas included (they score 0).

    Raises:
        NotFoundError: If the comparison does not exist
    """
    comparison = require_comparison(comparison_id)
    idea_ids = comparison.get("idea_ids") or []

    if not idea_ids:
        return ComparisonStats(ideas_count=0)

    scores = [calculate_idea_score(iid).final_score for iid in idea_ids]
    max_score = max(scores)
    min_score = min(scores)
    return ComparisonStats(
        ideas_count=len(idea_ids),
        avg_score=sum(scores) / len(scores),
        max_score=max_score,
        min_score=min_score,
        score_range=max_score - min_score,
    )


def create_quick_comparison(
    user_id: UUID,
    top_n: int | None = None,
    name: str | None = None,
) -> dict[str, Any]:
    """
    Create a comparison of a user's top evaluated ideas.

    Args:
        user_id: Owning user
        top_n: How many ideas to include (defaults to QUICK_COMPARISON_DEFAULT_SIZE)
        name: Comparison name; defaults to "Top N Ideas Comparison"

    Returns:
        Created comparison dict

    Raises:
        NotFoundError: If the user has no evaluated ideas
        ValidationError: If top_n is not a positive integer
    """
    if top_n is None:
        top_n = get_settings().QUICK_COMPARISON_DEFAULT_SIZE
    validate_limit(top_n)

    evaluated = list_ideas_by_user(user_id, status="evaluated")
    top = rank_ideas(evaluated, top_n)

    if not top:
        raise NotFoundError(
            "No evaluated ideas found",
            ErrorCode.IDEA_NOT_FOUND,
            details={"user_id": str(user_id)},
        )

    idea_ids = [r.idea["id"] for r in top]
    logger.info(f"Creating quick comparison of {len(idea_ids)} ideas for user {user_id}")
    return create_comparison(
        user_id=user_id,
        idea_ids=idea_ids,
        name=name or f"Top {len(idea_ids)} Ideas Comparison",
        description=f"Automatically generated comparison of top {len(idea_ids)} ideas by score",
    )
