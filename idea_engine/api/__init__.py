"""API router for v1 endpoints."""

from fastapi import APIRouter

from idea_engine.api import comparisons, criteria, ideas, scores

router = APIRouter()

# Criteria management (weights, ordering, seeding, duplication)
router.include_router(criteria.router, tags=["criteria"])

# Score records and raw score statistics
router.include_router(scores.router, tags=["scores"])

# Weighted scoring, evaluation snapshots and rankings
router.include_router(ideas.router, tags=["ideas"])

# Comparison groupings, matrix and stats
router.include_router(comparisons.router, tags=["comparisons"])
