"""Tests for comparison storage and the comparison views."""

import logging
import re
from uuid import uuid4

import pytest

from idea_engine.core.comparison_service import (
    comparison_details,
    comparison_matrix,
    comparison_stats,
    create_quick_comparison,
)
from idea_engine.core.errors import (
    AuthorizationError,
    ConflictError,
    ErrorCode,
    NotFoundError,
    ValidationError,
)
from idea_engine.db.comparisons import (
    add_idea_to_comparison,
    create_comparison,
    delete_comparison,
    get_comparison,
    list_comparisons_by_user,
    remove_idea_from_comparison,
    update_comparison,
)
from idea_engine.db.criteria import create_criterion
from idea_engine.db.scores import upsert_score


def _failure_record(caplog, operation):
    records = [r for r in caplog.records if getattr(r, "operation", None) == operation]
    assert records, f"no log record for {operation}"
    return records[-1]


# ============================================================================
# Storage
# ============================================================================


class TestCreateComparison:
    def test_stores_ids_verbatim(self, fake_db, user_id):
        ids = [uuid4(), uuid4(), uuid4()]

        row = create_comparison(user_id, ids, name="Shortlist", description="d")

        assert row["name"] == "Shortlist"
        assert row["idea_ids"] == [str(i) for i in ids]
        assert row["user_id"] == str(user_id)

    def test_default_name_uses_date(self, fake_db, user_id):
        row = create_comparison(user_id, [])

        assert re.fullmatch(r"Comparison \d{4}-\d{2}-\d{2}", row["name"])

    def test_default_name_used_in_activity(self, fake_db, user_id):
        row = create_comparison(user_id, [uuid4()])

        activity = fake_db.rows("activities")[0]
        assert activity["description"] == f'Created comparison "{row["name"]}" with 1 ideas'

    def test_records_activity(self, fake_db, user_id):
        first = uuid4()

        row = create_comparison(user_id, [first, uuid4()], name="Shortlist")

        activity = fake_db.rows("activities")[0]
        assert activity["action_type"] == "comparison.created"
        assert activity["entity_id"] == row["id"]
        assert activity["metadata"] == {"idea_id": str(first)}
        assert activity["description"] == 'Created comparison "Shortlist" with 2 ideas'

    def test_activity_failure_does_not_fail_create(self, fake_db, user_id):
        fake_db.fail_next("activities", "insert")

        row = create_comparison(user_id, [uuid4()])

        assert get_comparison(row["id"]) is not None
        assert fake_db.rows("activities") == []


class TestListComparisons:
    def test_newest_first_and_scoped_to_user(self, fake_db, user_id, other_user_id):
        older = fake_db.new_row(
            "idea_comparisons", {"name": "older", "user_id": str(user_id), "idea_ids": []}
        )
        newer = fake_db.new_row(
            "idea_comparisons", {"name": "newer", "user_id": str(user_id), "idea_ids": []}
        )
        fake_db.new_row(
            "idea_comparisons", {"name": "foreign", "user_id": str(other_user_id), "idea_ids": []}
        )

        rows = list_comparisons_by_user(user_id)

        assert [r["id"] for r in rows] == [newer["id"], older["id"]]


class TestUpdateAndDelete:
    def test_owner_updates(self, fake_db, user_id):
        row = create_comparison(user_id, [uuid4()], name="Old")
        new_ids = [uuid4()]

        updated = update_comparison(row["id"], {"name": "New", "idea_ids": new_ids}, user_id)

        assert updated["name"] == "New"
        assert updated["idea_ids"] == [str(new_ids[0])]
        assert "comparison.updated" in [a["action_type"] for a in fake_db.rows("activities")]

    def test_non_owner_cannot_update(self, fake_db, user_id, other_user_id):
        row = create_comparison(user_id, [], name="Mine")

        with pytest.raises(AuthorizationError):
            update_comparison(row["id"], {"name": "Theirs"}, other_user_id)

        assert get_comparison(row["id"])["name"] == "Mine"

    def test_update_missing(self, fake_db, user_id):
        with pytest.raises(NotFoundError) as exc:
            update_comparison(uuid4(), {"name": "x"}, user_id)

        assert exc.value.code == ErrorCode.COMPARISON_NOT_FOUND

    def test_owner_deletes(self, fake_db, user_id):
        row = create_comparison(user_id, [])

        delete_comparison(row["id"], acting_user_id=user_id)

        assert get_comparison(row["id"]) is None

    def test_non_owner_cannot_delete(self, fake_db, user_id, other_user_id):
        row = create_comparison(user_id, [])

        with pytest.raises(AuthorizationError):
            delete_comparison(row["id"], acting_user_id=other_user_id)

        assert get_comparison(row["id"]) is not None

    @pytest.mark.parametrize(
        "operation,failing_op",
        [("update_comparison", "update"), ("delete_comparison", "delete")],
    )
    def test_storage_failure_logged_with_context(
        self, fake_db, user_id, caplog, operation, failing_op
    ):
        row = create_comparison(user_id, [uuid4()], name="Mine")
        fake_db.fail_next("idea_comparisons", failing_op)

        with pytest.raises(RuntimeError):
            if operation == "update_comparison":
                update_comparison(row["id"], {"name": "New"}, user_id)
            else:
                delete_comparison(row["id"], acting_user_id=user_id)

        record = _failure_record(caplog, operation)
        assert record.levelno == logging.ERROR
        assert record.extra_data["acting_user_id"] == str(user_id)
        assert record.extra_data["comparison_id"] == row["id"]
        assert record.extra_data["error_code"] == "RuntimeError"
        assert get_comparison(row["id"])["name"] == "Mine"


class TestIdeaMembership:
    def test_add_appends(self, fake_db, user_id):
        first, second = uuid4(), uuid4()
        row = create_comparison(user_id, [first])

        updated = add_idea_to_comparison(row["id"], second)

        assert updated["idea_ids"] == [str(first), str(second)]

    def test_add_existing_conflicts(self, fake_db, user_id):
        idea_id = uuid4()
        row = create_comparison(user_id, [idea_id])

        with pytest.raises(ConflictError) as exc:
            add_idea_to_comparison(row["id"], idea_id)

        assert exc.value.status_code == 409
        assert get_comparison(row["id"])["idea_ids"] == [str(idea_id)]

    def test_remove(self, fake_db, user_id):
        keep, drop = uuid4(), uuid4()
        row = create_comparison(user_id, [keep, drop])

        updated = remove_idea_from_comparison(row["id"], drop)

        assert updated["idea_ids"] == [str(keep)]

    def test_remove_absent_idea_is_noop(self, fake_db, user_id):
        keep = uuid4()
        row = create_comparison(user_id, [keep])

        updated = remove_idea_from_comparison(row["id"], uuid4())

        assert updated["idea_ids"] == [str(keep)]


# ============================================================================
# Views
# ============================================================================


@pytest.fixture
def scored_comparison(fake_db, user_id):
    """A comparison of two ideas: "partial" scores 4.0 on one criterion, "full" scores higher."""
    first = create_criterion("First", user_id, 2, order=1)
    second = create_criterion("Second", user_id, 6, order=2)

    partial = fake_db.add_idea(user_id, "partial")
    full = fake_db.add_idea(user_id, "full")

    upsert_score(partial["id"], first["id"], user_id, 4, notes="meh")
    upsert_score(full["id"], first["id"], user_id, 6)
    upsert_score(full["id"], second["id"], user_id, 10)

    comparison = create_comparison(user_id, [partial["id"], full["id"]], name="Pair")
    return comparison, partial, full, first, second


class TestComparisonDetails:
    def test_ideas_sorted_best_first(self, fake_db, scored_comparison):
        comparison, partial, full, _, _ = scored_comparison

        details = comparison_details(comparison["id"])

        assert details.ideas_count == 2
        assert [c.idea["name"] for c in details.ideas] == ["full", "partial"]
        # (6*2 + 10*6) / 8
        assert details.ideas[0].calculated_score == pytest.approx(9.0)
        assert details.ideas[1].calculated_score == pytest.approx(4.0)
        assert len(details.ideas[0].scores) == 2

    def test_deleted_ideas_skipped(self, fake_db, scored_comparison):
        comparison, _, _, _, _ = scored_comparison
        add_idea_to_comparison(comparison["id"], uuid4())

        assert comparison_details(comparison["id"]).ideas_count == 2

    def test_missing_comparison(self, fake_db):
        with pytest.raises(NotFoundError):
            comparison_details(uuid4())


class TestComparisonMatrix:
    def test_grid(self, fake_db, scored_comparison):
        comparison, _, _, first, second = scored_comparison

        matrix = comparison_matrix(comparison["id"])

        assert matrix.criteria_count == 2
        assert [str(c.id) for c in matrix.criteria] == [first["id"], second["id"]]
        assert [row.idea["name"] for row in matrix.matrix] == ["full", "partial"]

        full_row, partial_row = matrix.matrix
        assert [cell.score for cell in full_row.scores] == [6, 10]
        assert [cell.score for cell in partial_row.scores] == [4, None]
        assert partial_row.scores[0].notes == "meh"

    def test_empty_comparison(self, fake_db, user_id):
        comparison = create_comparison(user_id, [])

        matrix = comparison_matrix(comparison["id"])

        assert (matrix.ideas_count, matrix.criteria_count) == (0, 0)


class TestComparisonStats:
    def test_spread(self, fake_db, scored_comparison):
        comparison, _, _, _, _ = scored_comparison

        stats = comparison_stats(comparison["id"])

        assert stats.ideas_count == 2
        assert stats.avg_score == pytest.approx(6.5)
        assert (stats.min_score, stats.max_score) == pytest.approx((4.0, 9.0))
        assert stats.score_range == pytest.approx(5.0)

    def test_missing_idea_scores_zero(self, fake_db, scored_comparison):
        comparison, _, _, _, _ = scored_comparison
        add_idea_to_comparison(comparison["id"], uuid4())

        stats = comparison_stats(comparison["id"])

        assert stats.ideas_count == 3
        assert stats.min_score == 0
        assert stats.score_range == pytest.approx(9.0)

    def test_empty(self, fake_db, user_id):
        comparison = create_comparison(user_id, [])

        stats = comparison_stats(comparison["id"])

        assert stats.ideas_count == 0
        assert stats.avg_score == 0


class TestQuickComparison:
    def test_top_evaluated_ideas(self, fake_db, user_id):
        criterion = create_criterion("Cost", user_id, 5)
        for name, score in (("a", 3), ("b", 9), ("c", 6)):
            idea = fake_db.add_idea(user_id, name, status="evaluated")
            upsert_score(idea["id"], criterion["id"], user_id, score)
        draft = fake_db.add_idea(user_id, "draft")
        upsert_score(draft["id"], criterion["id"], user_id, 10)

        row = create_quick_comparison(user_id, top_n=2)

        names = {i["id"]: i["name"] for i in fake_db.rows("ideas")}
        assert [names[iid] for iid in row["idea_ids"]] == ["b", "c"]
        assert row["name"] == "Top 2 Ideas Comparison"
        assert row["description"] == "Automatically generated comparison of top 2 ideas by score"

    def test_fewer_ideas_than_requested(self, fake_db, user_id):
        fake_db.add_idea(user_id, "only", status="evaluated")

        row = create_quick_comparison(user_id, top_n=5, name="Mine")

        assert len(row["idea_ids"]) == 1
        assert row["name"] == "Mine"

    def test_no_evaluated_ideas(self, fake_db, user_id):
        fake_db.add_idea(user_id, "draft")

        with pytest.raises(NotFoundError, match="No evaluated ideas found"):
            create_quick_comparison(user_id)

        assert fake_db.rows("idea_comparisons") == []

    @pytest.mark.parametrize("top_n", [0, -1, -3])
    def test_non_positive_top_n_rejected(self, fake_db, user_id, top_n):
        criterion = create_criterion("Cost", user_id, 5)
        for score in (3, 9, 6):
            idea = fake_db.add_idea(user_id, status="evaluated")
            upsert_score(idea["id"], criterion["id"], user_id, score)

        with pytest.raises(ValidationError) as exc:
            create_quick_comparison(user_id, top_n=top_n)

        assert exc.value.code == ErrorCode.INVALID_INPUT
        assert fake_db.rows("idea_comparisons") == []
