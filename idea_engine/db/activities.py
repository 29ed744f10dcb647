"""Activity log sink for criteria and comparison changes."""

from typing import Any
from uuid import UUID

from idea_engine.core.config import get_settings
from idea_engine.core.logging import get_logger
from idea_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)


def record_activity(
    entity_type: str,
    entity_id: UUID | str,
    action_type: str,
    description: str,
    user_id: UUID | str,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any] | None:
    """
    Record an activity row. Fire-and-forget: a failed insert is logged, not raised.

    Args:
        entity_type: "criteria", "comparison", ...
        entity_id: Affected entity UUID
        action_type: Dotted action name (e.g. "criteria.created")
        description: Human-readable summary
        user_id: Acting user
        metadata: Optional extra context

    Returns:
        Inserted activity dict, or None when disabled or the insert failed
    """
    if not get_settings().ACTIVITY_LOGGING_ENABLED:
        return None

    row = {
        "entity_type": entity_type,
        "entity_id": str(entity_id),
        "action_type": action_type,
        "description": description,
        "user_id": str(user_id),
        "metadata": metadata or {},
    }

    try:
        response = get_supabase().table("activities").insert(row).execute()
    except Exception as e:
        logger.warning(
            f"Failed to record activity {action_type} for {entity_type} {entity_id}: {e}",
            extra={"entity_id": str(entity_id), "action_type": action_type},
        )
        return None

    return response.data[0] if response.data else None


def list_activities_for_entity(entity_id: UUID | str, limit: int = 50) -> list[dict[str, Any]]:
    """List recorded activities for one entity, newest first."""
    response = (
        get_supabase()
        .table("activities")
        .select("*")
        .eq("entity_id", str(entity_id))
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return response.data or []
