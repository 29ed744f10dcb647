"""CRUD operations for idea criteria (weighted evaluation dimensions)."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from idea_engine.core.errors import (
    AuthorizationError,
    ErrorCode,
    NotFoundError,
    ScoringError,
    require_owner,
)
from idea_engine.core.logging import get_logger, log_with_context
from idea_engine.core.validation import validate_name, validate_order, validate_weight
from idea_engine.db.activities import record_activity
from idea_engine.db.scores import delete_scores_for_criteria
from idea_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "idea_criteria"

# Catalog inserted by seed_default_criteria, in display order
DEFAULT_CRITERIA_CATALOG: list[dict[str, Any]] = [
    {
        "name": "Market Size",
        "description": "How large is the potential market for this idea?",
        "weight": 8,
    },
    {
        "name": "Technical Feasibility",
        "description": "How technically feasible is this idea to implement?",
        "weight": 7,
    },
    {
        "name": "Competitive Advantage",
        "description": "How unique is this idea compared to existing solutions?",
        "weight": 6,
    },
    {
        "name": "Revenue Potential",
        "description": "What is the potential revenue opportunity?",
        "weight": 9,
    },
    {
        "name": "Time to Market",
        "description": "How quickly can this idea be brought to market?",
        "weight": 5,
    },
    {
        "name": "Resource Requirements",
        "description": "What resources are needed to execute this idea?",
        "weight": 6,
    },
    {
        "name": "Customer Demand",
        "description": "How strong is the customer demand for this solution?",
        "weight": 8,
    },
    {
        "name": "Strategic Fit",
        "description": "How well does this idea align with business strategy?",
        "weight": 7,
    },
]

UPDATABLE_FIELDS = ("name", "description", "weight", "is_default", "order")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _log_failed(operation: str, acting_user_id: UUID | str, error: Exception, **args: Any) -> None:
    """Log an access-controlled failure with operation, acting user and arguments."""
    if isinstance(error, ScoringError):
        level, message, code = logging.WARNING, error.message, error.code.value
    else:
        level, message, code = logging.ERROR, str(error), type(error).__name__

    log_with_context(
        logger,
        level,
        f"{operation} failed: {message}",
        operation=operation,
        acting_user_id=str(acting_user_id),
        error_code=code,
        **{k: str(v) for k, v in args.items()},
    )


def create_criterion(
    name: str,
    user_id: UUID,
    weight: int,
    description: str | None = None,
    is_default: bool = False,
    order: int = 0,
    acting_user_id: UUID | None = None,
) -> dict[str, Any]:
    """
    Create a new criterion. Duplicate names are permitted.

    Args:
        name: Criterion name
        user_id: Owning user
        weight: Weight, 1-10
        description: Optional description
        is_default: Whether the criterion belongs to the global default catalog
        order: Display order
        acting_user_id: When given, must equal user_id; an activity is recorded

    Returns:
        Created criterion dict

    Raises:
        ValidationError: If name, weight or order is invalid
        AuthorizationError: If acting_user_id differs from user_id
    """
    try:
        validate_name(name)
        validate_weight(weight)
        validate_order(order)
        if acting_user_id is not None:
            if str(acting_user_id) != str(user_id):
                raise AuthorizationError(
                    "Cannot create criteria for another user",
                    details={"user_id": str(user_id), "acting_user_id": str(acting_user_id)},
                )
    except ScoringError as e:
        if acting_user_id is not None:
            _log_failed("create_criterion", acting_user_id, e, user_id=user_id, weight=weight)
        raise

    now = _now()
    row = {
        "name": name,
        "description": description,
        "user_id": str(user_id),
        "weight": weight,
        "is_default": is_default,
        "order": order,
        "created_at": now,
        "updated_at": now,
    }

    try:
        response = get_supabase().table(TABLE).insert(row).execute()
    except Exception as e:
        if acting_user_id is not None:
            _log_failed("create_criterion", acting_user_id, e, user_id=user_id, weight=weight)
        else:
            logger.error(
                f"Failed to create criterion '{name}': {e}", extra={"user_id": str(user_id)}
            )
        raise

    criterion = response.data[0]
    logger.info(
        f"Created criterion {criterion['id']} '{name}' with weight {weight}",
        extra={"user_id": str(user_id)},
    )

    if acting_user_id is not None:
        record_activity(
            entity_type="criteria",
            entity_id=criterion["id"],
            action_type="criteria.created",
            description=f'Created criteria "{name}" with weight {weight}',
            user_id=acting_user_id,
        )

    return criterion


def get_criterion(criteria_id: UUID) -> dict[str, Any] | None:
    """
    Get a single criterion by ID.

    Returns:
        Criterion dict or None if not found
    """
    response = (
        get_supabase()
        .table(TABLE)
        .select("*")
        .eq("id", str(criteria_id))
        .limit(1)
        .execute()
    )
    if not response.data:
        return None
    return response.data[0]


def require_criterion(criteria_id: UUID) -> dict[str, Any]:
    """Get a criterion or raise NotFoundError."""
    criterion = get_criterion(criteria_id)
    if not criterion:
        raise NotFoundError(
            f"Criteria {criteria_id} not found",
            ErrorCode.CRITERIA_NOT_FOUND,
            details={"criteria_id": str(criteria_id)},
        )
    return criterion


def get_criteria_by_ids(criteria_ids: list[UUID | str]) -> dict[str, dict[str, Any]]:
    """
    Resolve many criteria in one query.

    Args:
        criteria_ids: Criterion UUIDs (duplicates allowed)

    Returns:
        Mapping of criterion id (str) to row, for the ids that still exist
    """
    unique_ids = list(dict.fromkeys(str(cid) for cid in criteria_ids))
    if not unique_ids:
        return {}

    response = get_supabase().table(TABLE).select("*").in_("id", unique_ids).execute()
    return {str(row["id"]): row for row in response.data or []}


def update_criterion(
    criteria_id: UUID,
    updates: dict[str, Any],
    acting_user_id: UUID | None = None,
) -> dict[str, Any]:
    """
    Patch the supplied fields of a criterion and refresh updated_at.

    Args:
        criteria_id: Criterion UUID
        updates: Any of name, description, weight, is_default, order; None values are ignored
        acting_user_id: When given, must own the criterion; an activity is recorded

    Returns:
        Updated criterion dict

    Raises:
        NotFoundError: If the criterion does not exist
        AuthorizationError: If acting_user_id does not own it
        ValidationError: If a supplied field is invalid
    """
    patch = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS and v is not None}

    try:
        criterion = require_criterion(criteria_id)
        if acting_user_id is not None:
            require_owner(criterion, acting_user_id, "criteria")
        if "name" in patch:
            validate_name(patch["name"])
        if "weight" in patch:
            validate_weight(patch["weight"])
        if "order" in patch:
            validate_order(patch["order"])
    except ScoringError as e:
        if acting_user_id is not None:
            _log_failed("update_criterion", acting_user_id, e, criteria_id=criteria_id)
        raise

    patch["updated_at"] = _now()

    try:
        response = (
            get_supabase()
            .table(TABLE)
            .update(patch)
            .eq("id", str(criteria_id))
            .execute()
        )
    except Exception as e:
        if acting_user_id is not None:
            _log_failed("update_criterion", acting_user_id, e, criteria_id=criteria_id)
        else:
            logger.error(
                f"Failed to update criterion {criteria_id}: {e}",
                extra={"criteria_id": str(criteria_id)},
            )
        raise

    if not response.data:
        raise NotFoundError(
            f"Criteria {criteria_id} not found",
            ErrorCode.CRITERIA_NOT_FOUND,
            details={"criteria_id": str(criteria_id)},
        )

    updated = response.data[0]
    logger.info(
        f"Updated criterion {criteria_id} fields={sorted(k for k in patch if k != 'updated_at')}",
        extra={"criteria_id": str(criteria_id)},
    )

    if acting_user_id is not None:
        record_activity(
            entity_type="criteria",
            entity_id=criteria_id,
            action_type="criteria.updated",
            description=f'Updated criteria "{criterion["name"]}"',
            user_id=acting_user_id,
        )

    return updated


def delete_criterion(criteria_id: UUID, acting_user_id: UUID | None = None) -> dict[str, Any]:
    """
    Delete a criterion and every score that references it.

    Scores go first, then the criterion. The two steps are independent writes:
    a failure in between leaves the criterion with some or all of its scores
    removed, and calling again completes the cascade.

    Args:
        criteria_id: Criterion UUID
        acting_user_id: When given, must own the criterion; an activity is recorded

    Returns:
        Dict with criteria_id and deleted_scores count

    Raises:
        NotFoundError: If the criterion does not exist
        AuthorizationError: If acting_user_id does not own it
    """
    try:
        criterion = require_criterion(criteria_id)
        if acting_user_id is not None:
            require_owner(criterion, acting_user_id, "criteria")
    except ScoringError as e:
        if acting_user_id is not None:
            _log_failed("delete_criterion", acting_user_id, e, criteria_id=criteria_id)
        raise

    deleted_score_ids: list[str] = []
    try:
        deleted_score_ids = delete_scores_for_criteria(criteria_id)
        get_supabase().table(TABLE).delete().eq("id", str(criteria_id)).execute()
    except Exception as e:
        if acting_user_id is not None:
            _log_failed(
                "delete_criterion",
                acting_user_id,
                e,
                criteria_id=criteria_id,
                deleted_scores=len(deleted_score_ids),
            )
        else:
            logger.error(
                f"Failed to delete criterion {criteria_id} after removing "
                f"{len(deleted_score_ids)} scores: {e}",
                extra={"criteria_id": str(criteria_id)},
            )
        raise

    logger.info(
        f"Deleted criterion {criteria_id} and {len(deleted_score_ids)} scores",
        extra={"criteria_id": str(criteria_id)},
    )

    if acting_user_id is not None:
        record_activity(
            entity_type="criteria",
            entity_id=criteria_id,
            action_type="criteria.deleted",
            description=f'Deleted criteria "{criterion["name"]}"',
            user_id=acting_user_id,
            metadata={"deleted_scores": len(deleted_score_ids)},
        )

    return {"criteria_id": str(criteria_id), "deleted_scores": len(deleted_score_ids)}


def list_criteria_by_user(user_id: UUID) -> list[dict[str, Any]]:
    """List a user's criteria ordered ascending by order."""
    response = (
        get_supabase()
        .table(TABLE)
        .select("*")
        .eq("user_id", str(user_id))
        .order("order")
        .execute()
    )
    return response.data or []


def list_default_criteria() -> list[dict[str, Any]]:
    """List criteria flagged is_default, ordered ascending by order."""
    response = (
        get_supabase()
        .table(TABLE)
        .select("*")
        .eq("is_default", True)
        .order("order")
        .execute()
    )
    return response.data or []


def reorder_criteria(updates: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Apply new order values, one criterion at a time.

    Every order value is checked before any write. The writes themselves are
    independent: if a criterion is missing, the rows before it keep their new
    order and NotFoundError is raised.

    Args:
        updates: List of {"criteria_id": UUID, "order": int}

    Returns:
        Updated criterion dicts, in input order
    """
    for update in updates:
        validate_order(update["order"])

    supabase = get_supabase()
    results = []
    for update in updates:
        criteria_id = update["criteria_id"]
        response = (
            supabase.table(TABLE)
            .update({"order": update["order"], "updated_at": _now()})
            .eq("id", str(criteria_id))
            .execute()
        )
        if not response.data:
            logger.error(
                f"Reorder stopped at missing criterion {criteria_id} "
                f"after {len(results)} of {len(updates)} updates",
                extra={"criteria_id": str(criteria_id)},
            )
            raise NotFoundError(
                f"Criteria {criteria_id} not found",
                ErrorCode.CRITERIA_NOT_FOUND,
                details={"criteria_id": str(criteria_id), "applied": len(results)},
            )
        results.append(response.data[0])

    logger.info(f"Reordered {len(results)} criteria")
    return results


def seed_default_criteria(user_id: UUID) -> list[dict[str, Any]]:
    """
    Give a user the eight-entry starter catalog.

    Seeded rows are flagged is_default=False: they are the user's own copies,
    not members of the global default listing.

    Returns:
        Created criterion dicts in catalog order (order 1..8)
    """
    now = _now()
    rows = [
        {
            **entry,
            "user_id": str(user_id),
            "is_default": False,
            "order": position,
            "created_at": now,
            "updated_at": now,
        }
        for position, entry in enumerate(DEFAULT_CRITERIA_CATALOG, start=1)
    ]

    try:
        response = get_supabase().table(TABLE).insert(rows).execute()
    except Exception as e:
        logger.error(f"Failed to seed default criteria: {e}", extra={"user_id": str(user_id)})
        raise

    created = sorted(response.data or [], key=lambda row: row["order"])
    logger.info(f"Seeded {len(created)} default criteria for user {user_id}")
    return created


def duplicate_criterion(source_criteria_id: UUID, target_user_id: UUID) -> dict[str, Any]:
    """
    Copy a criterion into another user's set. The copy is never a default.

    Raises:
        NotFoundError: If the source criterion does not exist
    """
    source = get_criterion(source_criteria_id)
    if not source:
        raise NotFoundError(
            "Source criteria not found",
            ErrorCode.CRITERIA_NOT_FOUND,
            details={"criteria_id": str(source_criteria_id)},
        )

    now = _now()
    row = {
        "name": source["name"],
        "description": source.get("description"),
        "user_id": str(target_user_id),
        "weight": source["weight"],
        "is_default": False,
        "order": source.get("order", 0),
        "created_at": now,
        "updated_at": now,
    }

    response = get_supabase().table(TABLE).insert(row).execute()
    copy = response.data[0]
    logger.info(
        f"Duplicated criterion {source_criteria_id} as {copy['id']} for user {target_user_id}"
    )
    return copy
