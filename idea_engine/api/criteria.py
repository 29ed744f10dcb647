"""API endpoints for idea criteria management."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from idea_engine.api.deps import get_acting_user_id
from idea_engine.core.errors import ScoringError
from idea_engine.core.logging import get_logger
from idea_engine.core.schemas_scoring import (
    CriteriaStats,
    CriterionCreate,
    CriterionOut,
    CriterionUpdate,
    CriterionWithStats,
    DeleteCriterionResult,
    DuplicateCriterionRequest,
    ReorderCriteriaRequest,
    SeedCriteriaRequest,
)
from idea_engine.core.scoring_engine import criteria_stats, criteria_with_stats
from idea_engine.db import criteria as criteria_db

logger = get_logger(__name__)

router = APIRouter()


def _internal_error(action: str, e: Exception, **context: str) -> HTTPException:
    error_msg = f"Failed to {action}: {str(e)}"
    logger.error(error_msg, extra=context)
    return HTTPException(status_code=500, detail=error_msg)


@router.post("/criteria", response_model=CriterionOut, status_code=status.HTTP_201_CREATED)
async def create_criterion(
    request: CriterionCreate,
    acting_user_id: UUID = Depends(get_acting_user_id),
) -> CriterionOut:
    """Create a criterion for the acting user."""
    try:
        row = criteria_db.create_criterion(
            name=request.name,
            user_id=request.user_id,
            weight=request.weight,
            description=request.description,
            is_default=request.is_default,
            order=request.order,
            acting_user_id=acting_user_id,
        )
        return CriterionOut(**row)
    except ScoringError:
        raise
    except Exception as e:
        raise _internal_error("create criterion", e, user_id=str(request.user_id)) from e


@router.get("/criteria", response_model=list[CriterionOut])
async def list_criteria(
    user_id: UUID = Query(..., description="Owning user UUID"),
) -> list[CriterionOut]:
    """List a user's criteria in display order."""
    try:
        return [CriterionOut(**row) for row in criteria_db.list_criteria_by_user(user_id)]
    except Exception as e:
        raise _internal_error("list criteria", e, user_id=str(user_id)) from e


@router.get("/criteria/defaults", response_model=list[CriterionOut])
async def list_default_criteria() -> list[CriterionOut]:
    """List the global default criteria."""
    try:
        return [CriterionOut(**row) for row in criteria_db.list_default_criteria()]
    except Exception as e:
        raise _internal_error("list default criteria", e) from e


@router.get("/criteria/stats", response_model=CriteriaStats)
async def get_criteria_stats(
    user_id: UUID = Query(..., description="Owning user UUID"),
) -> CriteriaStats:
    try:
        return criteria_stats(user_id)
    except Exception as e:
        raise _internal_error("compute criteria stats", e, user_id=str(user_id)) from e


@router.get("/criteria/usage", response_model=list[CriterionWithStats])
async def get_criteria_usage(
    user_id: UUID = Query(..., description="Owning user UUID"),
) -> list[CriterionWithStats]:
    """Each criterion with its usage count and average score."""
    try:
        return criteria_with_stats(user_id)
    except Exception as e:
        raise _internal_error("compute criteria usage", e, user_id=str(user_id)) from e


@router.post("/criteria/reorder", response_model=list[CriterionOut])
async def reorder_criteria(request: ReorderCriteriaRequest) -> list[CriterionOut]:
    """Apply new display order values (not atomic across the batch)."""
    try:
        rows = criteria_db.reorder_criteria([u.model_dump() for u in request.updates])
        return [CriterionOut(**row) for row in rows]
    except ScoringError:
        raise
    except Exception as e:
        raise _internal_error("reorder criteria", e) from e


@router.post(
    "/criteria/seed",
    response_model=list[CriterionOut],
    status_code=status.HTTP_201_CREATED,
)
async def seed_default_criteria(request: SeedCriteriaRequest) -> list[CriterionOut]:
    """Give a user the eight starter criteria."""
    try:
        rows = criteria_db.seed_default_criteria(request.user_id)
        return [CriterionOut(**row) for row in rows]
    except Exception as e:
        raise _internal_error("seed criteria", e, user_id=str(request.user_id)) from e


@router.get("/criteria/{criteria_id}", response_model=CriterionOut)
async def get_criterion(
    criteria_id: UUID = Path(..., description="Criterion UUID"),
) -> CriterionOut:
    try:
        return CriterionOut(**criteria_db.require_criterion(criteria_id))
    except ScoringError:
        raise
    except Exception as e:
        raise _internal_error("get criterion", e, criteria_id=str(criteria_id)) from e


@router.patch("/criteria/{criteria_id}", response_model=CriterionOut)
async def update_criterion(
    request: CriterionUpdate,
    criteria_id: UUID = Path(..., description="Criterion UUID"),
    acting_user_id: UUID = Depends(get_acting_user_id),
) -> CriterionOut:
    """Patch the supplied fields of a criterion the acting user owns."""
    try:
        row = criteria_db.update_criterion(
            criteria_id,
            request.model_dump(exclude_unset=True),
            acting_user_id=acting_user_id,
        )
        return CriterionOut(**row)
    except ScoringError:
        raise
    except Exception as e:
        raise _internal_error("update criterion", e, criteria_id=str(criteria_id)) from e


@router.delete("/criteria/{criteria_id}", response_model=DeleteCriterionResult)
async def delete_criterion(
    criteria_id: UUID = Path(..., description="Criterion UUID"),
    acting_user_id: UUID = Depends(get_acting_user_id),
) -> DeleteCriterionResult:
    """Delete a criterion and all scores against it."""
    try:
        result = criteria_db.delete_criterion(criteria_id, acting_user_id=acting_user_id)
        return DeleteCriterionResult(**result)
    except ScoringError:
        raise
    except Exception as e:
        raise _internal_error("delete criterion", e, criteria_id=str(criteria_id)) from e


@router.post(
    "/criteria/{criteria_id}/duplicate",
    response_model=CriterionOut,
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_criterion(
    request: DuplicateCriterionRequest,
    criteria_id: UUID = Path(..., description="Source criterion UUID"),
) -> CriterionOut:
    try:
        row = criteria_db.duplicate_criterion(criteria_id, request.target_user_id)
        return CriterionOut(**row)
    except ScoringError:
        raise
    except Exception as e:
        raise _internal_error("duplicate criterion", e, criteria_id=str(criteria_id)) from e
