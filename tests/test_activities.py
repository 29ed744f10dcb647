"""Tests for the activity log sink."""

from unittest.mock import patch
from uuid import uuid4

from idea_engine.db.activities import list_activities_for_entity, record_activity


class TestRecordActivity:
    def test_inserts_row(self, fake_db, user_id):
        entity_id = uuid4()

        row = record_activity(
            entity_type="criteria",
            entity_id=entity_id,
            action_type="criteria.created",
            description="Created criteria",
            user_id=user_id,
        )

        assert row["entity_id"] == str(entity_id)
        assert row["user_id"] == str(user_id)
        assert row["metadata"] == {}

    def test_failure_is_swallowed(self, fake_db, user_id):
        fake_db.fail_next("activities", "insert")

        result = record_activity("criteria", uuid4(), "criteria.deleted", "Deleted", user_id)

        assert result is None

    def test_disabled(self, fake_db, user_id):
        with patch("idea_engine.db.activities.get_settings") as mock_settings:
            mock_settings.return_value.ACTIVITY_LOGGING_ENABLED = False

            result = record_activity("criteria", uuid4(), "criteria.created", "x", user_id)

        assert result is None
        assert fake_db.calls == []


class TestListActivities:
    def test_newest_first_with_limit(self, fake_db, user_id):
        entity_id = uuid4()
        for action in ("criteria.created", "criteria.updated", "criteria.deleted"):
            record_activity("criteria", entity_id, action, action, user_id)
        record_activity("criteria", uuid4(), "criteria.created", "other", user_id)

        rows = list_activities_for_entity(entity_id, limit=2)

        assert [r["action_type"] for r in rows] == ["criteria.deleted", "criteria.updated"]
