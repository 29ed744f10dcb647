"""Weighted multi-criteria scoring for ideas.

An idea's score is the weighted average of its score rows:

    final_score = sum(score * weight) / sum(weight)    (0 when sum(weight) == 0)

Weights are read from the criteria at call time, so a changed weight is
reflected on the next read. Nothing here is cached. Scores whose criterion no
longer exists are skipped.
"""

from collections.abc import Iterable
from typing import Any
from uuid import UUID

from idea_engine.core.config import get_settings
from idea_engine.core.logging import get_logger
from idea_engine.core.schemas_scoring import (
    CriteriaStats,
    CriterionOut,
    CriterionScore,
    CriterionWithStats,
    IdeaScoreResult,
    RankedIdea,
    ScoreOut,
    ScoreStats,
)
from idea_engine.core.validation import SCORE_MAX, SCORE_MIN, validate_limit
from idea_engine.db.criteria import get_criteria_by_ids, list_criteria_by_user
from idea_engine.db.ideas import list_ideas_by_user, require_idea, set_idea_score_snapshot
from idea_engine.db.scores import list_scores_by_criteria, list_scores_by_idea, list_scores_by_user

logger = get_logger(__name__)


def weighted_average(pairs: Iterable[tuple[float, float]]) -> tuple[float, float, float]:
    """
    Aggregate (score, weight) pairs.

    Args:
        pairs: (score, weight) tuples

    Returns:
        (final_score, total_weight, weighted_score)
    """
    weighted_score = 0.0
    total_weight = 0.0
    for score, weight in pairs:
        weighted_score += score * weight
        total_weight += weight

    final_score = weighted_score / total_weight if total_weight > 0 else 0.0
    return final_score, total_weight, weighted_score


def _join_scores(scores: list[dict[str, Any]]) -> list[tuple[dict[str, Any], dict[str, Any]]]:
    """Pair each score with its criterion, dropping orphans."""
    criteria = get_criteria_by_ids([s["criteria_id"] for s in scores])

    joined = []
    for score in scores:
        criterion = criteria.get(str(score["criteria_id"]))
        if criterion is None:
            logger.debug(f"Skipping orphan score {score['id']} (criteria {score['criteria_id']})")
            continue
        joined.append((score, criterion))
    return joined


def _score_from_rows(scores: list[dict[str, Any]]) -> tuple[float, list[tuple[dict, dict]]]:
    joined = _join_scores(scores)
    final_score, _, _ = weighted_average((s["score"], c["weight"]) for s, c in joined)
    return final_score, joined


def calculate_idea_score(idea_id: UUID) -> IdeaScoreResult:
    """
    Compute the weighted score of one idea from its current scores and weights.

    Args:
        idea_id: Idea UUID

    Returns:
        IdeaScoreResult with final_score, total_weight, weighted_score, the
        per-criterion breakdown (ordered by criterion order) and the raw
        score count (orphans included)
    """
    scores = list_scores_by_idea(idea_id)
    joined = _join_scores(scores)

    final_score, total_weight, weighted_score = weighted_average(
        (s["score"], c["weight"]) for s, c in joined
    )

    criteria_scores = [
        CriterionScore(
            score=ScoreOut(**score),
            criterion=CriterionOut(**criterion),
            weighted_score=score["score"] * criterion["weight"],
        )
        for score, criterion in joined
    ]
    criteria_scores.sort(key=lambda cs: cs.criterion.order)

    return IdeaScoreResult(
        idea_id=idea_id,
        final_score=final_score,
        total_weight=total_weight,
        weighted_score=weighted_score,
        criteria_scores=criteria_scores,
        scores_count=len(scores),
    )


def scores_with_criteria(idea_id: UUID) -> list[CriterionScore]:
    """An idea's scores joined to their criteria, ordered by criterion order."""
    return calculate_idea_score(idea_id).criteria_scores


def score_ideas(ideas: list[dict[str, Any]]) -> list[RankedIdea]:
    """
    Compute the weighted score of each idea, preserving input order.

    Each idea is scored from a fresh read; nothing is shared between ideas.
    """
    results = []
    for idea in ideas:
        scores = list_scores_by_idea(idea["id"])
        final_score, _ = _score_from_rows(scores)
        results.append(
            RankedIdea(idea=idea, calculated_score=final_score, scores_count=len(scores))
        )
    return results


def rank_ideas(ideas: list[dict[str, Any]], limit: int | None = None) -> list[RankedIdea]:
    """
    Score ideas and sort them best first.

    Ties keep the input order (stable sort); no other tie-break is applied.

    Raises:
        ValidationError: If limit is given and is not a positive integer
    """
    if limit is not None:
        validate_limit(limit)

    ranked = sorted(score_ideas(ideas), key=lambda r: r.calculated_score, reverse=True)
    return ranked if limit is None else ranked[:limit]


def rank_ideas_by_user(user_id: UUID, limit: int | None = None) -> list[RankedIdea]:
    """
    Rank every idea a user owns by its weighted score.

    Args:
        user_id: Owning user
        limit: Maximum number of ideas (defaults to RANKING_DEFAULT_LIMIT)

    Returns:
        Top ideas, highest calculated_score first

    Raises:
        ValidationError: If limit is not a positive integer
    """
    if limit is None:
        limit = get_settings().RANKING_DEFAULT_LIMIT
    validate_limit(limit)

    ideas = list_ideas_by_user(user_id)
    ranked = rank_ideas(ideas, limit)
    logger.info(f"Ranked {len(ideas)} ideas for user {user_id}, returning {len(ranked)}")
    return ranked


def score_stats_by_user(user_id: UUID) -> ScoreStats:
    """
    Statistics over a user's raw (unweighted) scores.

    The distribution has one bucket per integer score 1..10; values outside
    that range are counted in total/avg/min/max but have no bucket.
    """
    values = [s["score"] for s in list_scores_by_user(user_id)]

    if not values:
        return ScoreStats(total=0, avg_score=0.0, max_score=0, min_score=0, score_distribution={})

    distribution = {bucket: 0 for bucket in range(SCORE_MIN, SCORE_MAX + 1)}
    for value in values:
        if value in distribution:
            distribution[value] += 1

    return ScoreStats(
        total=len(values),
        avg_score=sum(values) / len(values),
        max_score=max(values),
        min_score=min(values),
        score_distribution=distribution,
    )


def criteria_with_stats(user_id: UUID) -> list[CriterionWithStats]:
    """A user's criteria with how often each was scored and the average score."""
    results = []
    for criterion in list_criteria_by_user(user_id):
        values = [s["score"] for s in list_scores_by_criteria(criterion["id"])]
        results.append(
            CriterionWithStats(
                **criterion,
                usage_count=len(values),
                avg_score=sum(values) / len(values) if values else 0.0,
            )
        )
    return results


def criteria_stats(user_id: UUID) -> CriteriaStats:
    """Count and weight spread of a user's criteria."""
    weights = [c["weight"] for c in list_criteria_by_user(user_id)]
    if not weights:
        return CriteriaStats(total=0, avg_weight=0.0, max_weight=0, min_weight=0)

    return CriteriaStats(
        total=len(weights),
        avg_weight=sum(weights) / len(weights),
        max_weight=max(weights),
        min_weight=min(weights),
    )


def mark_idea_evaluated(idea_id: UUID) -> dict[str, Any]:
    """
    Recompute an idea's score and store it as the idea's total_score snapshot.

    The snapshot is informational; it goes stale when weights or scores change.

    Raises:
        NotFoundError: If the idea does not exist
    """
    require_idea(idea_id)
    result = calculate_idea_score(idea_id)
    return set_idea_score_snapshot(idea_id, result.final_score, status="evaluated")
