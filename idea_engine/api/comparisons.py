"""API endpoints for idea comparisons."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from idea_engine.api.deps import get_acting_user_id
from idea_engine.core.comparison_service import (
    comparison_details,
    comparison_matrix,
    comparison_stats,
    create_quick_comparison,
)
from idea_engine.core.errors import ScoringError
from idea_engine.core.logging import get_logger
from idea_engine.core.schemas_comparisons import (
    ComparisonCreate,
    ComparisonDetails,
    ComparisonMatrix,
    ComparisonOut,
    ComparisonStats,
    ComparisonUpdate,
    QuickComparisonRequest,
)
from idea_engine.db import comparisons as comparisons_db

logger = get_logger(__name__)

router = APIRouter()


def _failed(action: str, e: Exception, comparison_id: UUID | None = None) -> HTTPException:
    error_msg = f"Failed to {action}: {str(e)}"
    logger.error(error_msg, extra={"comparison_id": str(comparison_id)})
    return HTTPException(status_code=500, detail=error_msg)


@router.post("/comparisons", response_model=ComparisonOut, status_code=status.HTTP_201_CREATED)
async def create_comparison(request: ComparisonCreate) -> ComparisonOut:
    """Store an ordered grouping of ideas as given."""
    try:
        row = comparisons_db.create_comparison(
            user_id=request.user_id,
            idea_ids=request.idea_ids,
            name=request.name,
            description=request.description,
        )
        return ComparisonOut(**row)
    except Exception as e:
        raise _failed("create comparison", e) from e


@router.post(
    "/comparisons/quick",
    response_model=ComparisonOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_quick(request: QuickComparisonRequest) -> ComparisonOut:
    """Compare a user's top evaluated ideas."""
    try:
        row = create_quick_comparison(request.user_id, top_n=request.top_n, name=request.name)
        return ComparisonOut(**row)
    except ScoringError:
        raise
    except Exception as e:
        raise _failed("create quick comparison", e) from e


@router.get("/comparisons", response_model=list[ComparisonOut])
async def list_comparisons(
    user_id: UUID = Query(..., description="Owning user UUID"),
) -> list[ComparisonOut]:
    try:
        return [ComparisonOut(**row) for row in comparisons_db.list_comparisons_by_user(user_id)]
    except Exception as e:
        raise _failed("list comparisons", e) from e


@router.get("/comparisons/{comparison_id}", response_model=ComparisonDetails)
async def get_comparison(
    comparison_id: UUID = Path(..., description="Comparison UUID"),
) -> ComparisonDetails:
    """Comparison with each idea's scores, best idea first."""
    try:
        return comparison_details(comparison_id)
    except ScoringError:
        raise
    except Exception as e:
        raise _failed("get comparison", e, comparison_id) from e


@router.get("/comparisons/{comparison_id}/matrix", response_model=ComparisonMatrix)
async def get_matrix(
    comparison_id: UUID = Path(..., description="Comparison UUID"),
) -> ComparisonMatrix:
    try:
        return comparison_matrix(comparison_id)
    except ScoringError:
        raise
    except Exception as e:
        raise _failed("build comparison matrix", e, comparison_id) from e


@router.get("/comparisons/{comparison_id}/stats", response_model=ComparisonStats)
async def get_stats(
    comparison_id: UUID = Path(..., description="Comparison UUID"),
) -> ComparisonStats:
    try:
        return comparison_stats(comparison_id)
    except ScoringError:
        raise
    except Exception as e:
        raise _failed("compute comparison stats", e, comparison_id) from e


@router.patch("/comparisons/{comparison_id}", response_model=ComparisonOut)
async def update_comparison(
    request: ComparisonUpdate,
    comparison_id: UUID = Path(..., description="Comparison UUID"),
    acting_user_id: UUID = Depends(get_acting_user_id),
) -> ComparisonOut:
    try:
        row = comparisons_db.update_comparison(
            comparison_id,
            request.model_dump(exclude_unset=True),
            acting_user_id=acting_user_id,
        )
        return ComparisonOut(**row)
    except ScoringError:
        raise
    except Exception as e:
        raise _failed("update comparison", e, comparison_id) from e


@router.delete("/comparisons/{comparison_id}", response_model=ComparisonOut)
async def delete_comparison(
    comparison_id: UUID = Path(..., description="Comparison UUID"),
    acting_user_id: UUID = Depends(get_acting_user_id),
) -> ComparisonOut:
    try:
        row = comparisons_db.delete_comparison(comparison_id, acting_user_id=acting_user_id)
        return ComparisonOut(**row)
    except ScoringError:
        raise
    except Exception as e:
        raise _failed("delete comparison", e, comparison_id) from e


@router.post("/comparisons/{comparison_id}/ideas/{idea_id}", response_model=ComparisonOut)
async def add_idea(
    comparison_id: UUID = Path(..., description="Comparison UUID"),
    idea_id: UUID = Path(..., description="Idea UUID"),
) -> ComparisonOut:
    try:
        return ComparisonOut(**comparisons_db.add_idea_to_comparison(comparison_id, idea_id))
    except ScoringError:
        raise
    except Exception as e:
        raise _failed("add idea to comparison", e, comparison_id) from e


@router.delete("/comparisons/{comparison_id}/ideas/{idea_id}", response_model=ComparisonOut)
async def remove_idea(
    comparison_id: UUID = Path(..., description="Comparison UUID"),
    idea_id: UUID = Path(..., description="Idea UUID"),
) -> ComparisonOut:
    try:
        return ComparisonOut(**comparisons_db.remove_idea_from_comparison(comparison_id, idea_id))
    except ScoringError:
        raise
    except Exception as e:
        raise _failed("remove idea from comparison", e, comparison_id) from e
