"""Tests for the v1 HTTP endpoints, backed by the in-memory Supabase fake."""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from idea_engine.main import app

client = TestClient(app)


def _headers(user_id) -> dict[str, str]:
    return {"X-User-Id": str(user_id)}


def _create_criterion(user_id, name="Market Size", weight=8, **extra):
    response = client.post(
        "/v1/criteria",
        json={"name": name, "user_id": str(user_id), "weight": weight, **extra},
        headers=_headers(user_id),
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_health_check():
    """Test that /health returns 200 with status ok."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


class TestCriteriaEndpoints:
    def test_create_and_get(self, fake_db, user_id):
        created = _create_criterion(user_id)

        response = client.get(f"/v1/criteria/{created['id']}")

        assert response.status_code == 200
        assert response.json()["name"] == "Market Size"

    def test_missing_acting_user(self, fake_db, user_id):
        response = client.post(
            "/v1/criteria", json={"name": "X", "user_id": str(user_id), "weight": 5}
        )

        assert response.status_code == 401

    def test_invalid_acting_user_header(self, fake_db, user_id):
        response = client.post(
            "/v1/criteria",
            json={"name": "X", "user_id": str(user_id), "weight": 5},
            headers={"X-User-Id": "not-a-uuid"},
        )

        assert response.status_code == 401

    def test_create_for_other_user_forbidden(self, fake_db, user_id, other_user_id):
        response = client.post(
            "/v1/criteria",
            json={"name": "X", "user_id": str(user_id), "weight": 5},
            headers=_headers(other_user_id),
        )

        assert response.status_code == 403
        assert response.json()["code"] == "access_denied"
        assert response.json()["type"] == "authorization"

    def test_out_of_range_weight(self, fake_db, user_id):
        response = client.post(
            "/v1/criteria",
            json={"name": "X", "user_id": str(user_id), "weight": 0},
            headers=_headers(user_id),
        )

        assert response.status_code == 422
        assert response.json()["code"] == "invalid_weight"

    def test_get_missing(self, fake_db):
        response = client.get(f"/v1/criteria/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "criteria_not_found"

    def test_update_by_non_owner(self, fake_db, user_id, other_user_id):
        created = _create_criterion(user_id)

        response = client.patch(
            f"/v1/criteria/{created['id']}",
            json={"weight": 2},
            headers=_headers(other_user_id),
        )

        assert response.status_code == 403

    def test_update_by_owner(self, fake_db, user_id):
        created = _create_criterion(user_id)

        response = client.patch(
            f"/v1/criteria/{created['id']}",
            json={"weight": 2},
            headers=_headers(user_id),
        )

        assert response.status_code == 200
        assert response.json()["weight"] == 2
        assert response.json()["name"] == "Market Size"

    def test_delete_cascades(self, fake_db, user_id):
        created = _create_criterion(user_id)
        client.put(
            "/v1/scores",
            json={
                "idea_id": str(uuid4()),
                "criteria_id": created["id"],
                "user_id": str(user_id),
                "score": 7,
            },
        )

        response = client.delete(f"/v1/criteria/{created['id']}", headers=_headers(user_id))

        assert response.status_code == 200
        assert response.json() == {"criteria_id": created["id"], "deleted_scores": 1}

    def test_seed_and_list(self, fake_db, user_id):
        seeded = client.post("/v1/criteria/seed", json={"user_id": str(user_id)})

        assert seeded.status_code == 201
        listed = client.get("/v1/criteria", params={"user_id": str(user_id)}).json()
        assert [c["order"] for c in listed] == list(range(1, 9))

    def test_stats_and_usage(self, fake_db, user_id):
        _create_criterion(user_id, weight=4)
        _create_criterion(user_id, name="Other", weight=8)

        stats = client.get("/v1/criteria/stats", params={"user_id": str(user_id)}).json()
        usage = client.get("/v1/criteria/usage", params={"user_id": str(user_id)}).json()

        assert stats["total"] == 2
        assert stats["avg_weight"] == pytest.approx(6.0)
        assert [c["usage_count"] for c in usage] == [0, 0]


class TestScoreEndpoints:
    def test_upsert_twice_keeps_one_row(self, fake_db, user_id):
        criterion = _create_criterion(user_id)
        body = {
            "idea_id": str(uuid4()),
            "criteria_id": criterion["id"],
            "user_id": str(user_id),
            "score": 6,
        }

        first = client.put("/v1/scores", json=body)
        second = client.put("/v1/scores", json={**body, "score": 9})

        assert second.json()["id"] == first.json()["id"]
        listed = client.get("/v1/scores", params={"idea_id": body["idea_id"]}).json()
        assert [s["score"] for s in listed] == [9]

    def test_out_of_range_score(self, fake_db, user_id):
        response = client.put(
            "/v1/scores",
            json={
                "idea_id": str(uuid4()),
                "criteria_id": str(uuid4()),
                "user_id": str(user_id),
                "score": 11,
            },
        )

        assert response.status_code == 422
        assert response.json()["code"] == "invalid_score"

    def test_list_requires_exactly_one_filter(self, fake_db, user_id):
        none = client.get("/v1/scores")
        both = client.get(
            "/v1/scores", params={"idea_id": str(uuid4()), "user_id": str(user_id)}
        )

        assert none.status_code == 422
        assert both.status_code == 422
        assert none.json()["code"] == "invalid_input"

    def test_stats(self, fake_db, user_id):
        for score in (3, 7):
            client.put(
                "/v1/scores",
                json={
                    "idea_id": str(uuid4()),
                    "criteria_id": str(uuid4()),
                    "user_id": str(user_id),
                    "score": score,
                },
            )

        stats = client.get("/v1/scores/stats", params={"user_id": str(user_id)}).json()

        assert stats["total"] == 2
        assert stats["avg_score"] == pytest.approx(5.0)
        assert stats["score_distribution"]["7"] == 1

    def test_delete_missing(self, fake_db):
        response = client.delete(f"/v1/scores/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["code"] == "score_not_found"


class TestIdeaEndpoints:
    def test_bulk_score_then_calculate(self, fake_db, user_id):
        idea = fake_db.add_idea(user_id)
        market = _create_criterion(user_id, "Market Size", 8)
        feasibility = _create_criterion(user_id, "Feasibility", 4)

        response = client.put(
            f"/v1/ideas/{idea['id']}/scores",
            json={
                "user_id": str(user_id),
                "scores": [
                    {"criteria_id": market["id"], "score": 9},
                    {"criteria_id": feasibility["id"], "score": 5},
                ],
            },
        )
        assert response.status_code == 200

        result = client.get(f"/v1/ideas/{idea['id']}/score").json()

        assert result["final_score"] == pytest.approx(92 / 12)
        assert result["total_weight"] == 12
        assert result["scores_count"] == 2

    def test_copy_scores(self, fake_db, user_id):
        source, target = fake_db.add_idea(user_id), fake_db.add_idea(user_id)
        criterion = _create_criterion(user_id)
        client.put(
            "/v1/scores",
            json={
                "idea_id": source["id"],
                "criteria_id": criterion["id"],
                "user_id": str(user_id),
                "score": 8,
                "notes": "good",
            },
        )

        response = client.post(
            f"/v1/ideas/{source['id']}/scores/copy",
            json={"target_idea_id": target["id"], "user_id": str(user_id)},
        )

        assert response.status_code == 200
        assert [s["notes"] for s in response.json()] == ["Copied: good"]

    def test_delete_idea_scores(self, fake_db, user_id):
        idea_id = str(uuid4())
        client.put(
            "/v1/scores",
            json={
                "idea_id": idea_id,
                "criteria_id": str(uuid4()),
                "user_id": str(user_id),
                "score": 2,
            },
        )

        response = client.delete(f"/v1/ideas/{idea_id}/scores")

        assert response.json()["total"] == 1

    def test_evaluate_missing_idea(self, fake_db):
        response = client.post(f"/v1/ideas/{uuid4()}/evaluate")

        assert response.status_code == 404
        assert response.json()["code"] == "idea_not_found"

    def test_rankings(self, fake_db, user_id):
        criterion = _create_criterion(user_id, weight=5)
        for name, score in (("low", 2), ("high", 9), ("mid", 5)):
            idea = fake_db.add_idea(user_id, name)
            client.put(
                "/v1/scores",
                json={
                    "idea_id": idea["id"],
                    "criteria_id": criterion["id"],
                    "user_id": str(user_id),
                    "score": score,
                },
            )

        response = client.get("/v1/rankings", params={"user_id": str(user_id), "limit": 2})

        assert [r["idea"]["name"] for r in response.json()] == ["high", "mid"]

    def test_storage_failure_is_500(self, fake_db):
        fake_db.fail_next("idea_scores", "select")

        response = client.get(f"/v1/ideas/{uuid4()}/score")

        assert response.status_code == 500
        assert response.json()["detail"].startswith("Failed to calculate idea score")

    @pytest.mark.parametrize("limit", [0, -3])
    def test_rankings_rejects_non_positive_limit(self, fake_db, user_id, limit):
        response = client.get("/v1/rankings", params={"user_id": str(user_id), "limit": limit})

        assert response.status_code == 422


class TestComparisonEndpoints:
    def test_create_add_conflict(self, fake_db, user_id):
        idea_id = str(uuid4())
        created = client.post(
            "/v1/comparisons",
            json={"user_id": str(user_id), "idea_ids": [idea_id], "name": "Pair"},
        )
        assert created.status_code == 201

        response = client.post(f"/v1/comparisons/{created.json()['id']}/ideas/{idea_id}")

        assert response.status_code == 409
        assert response.json()["code"] == "duplicate_entry"

    def test_delete_by_non_owner(self, fake_db, user_id, other_user_id):
        created = client.post(
            "/v1/comparisons", json={"user_id": str(user_id), "idea_ids": []}
        ).json()

        response = client.delete(
            f"/v1/comparisons/{created['id']}", headers=_headers(other_user_id)
        )

        assert response.status_code == 403

    def test_quick_without_evaluated_ideas(self, fake_db, user_id):
        response = client.post("/v1/comparisons/quick", json={"user_id": str(user_id)})

        assert response.status_code == 404

    @pytest.mark.parametrize("top_n", [0, -2])
    def test_quick_rejects_non_positive_top_n(self, fake_db, user_id, top_n):
        fake_db.add_idea(user_id, "ready", status="evaluated")

        response = client.post(
            "/v1/comparisons/quick", json={"user_id": str(user_id), "top_n": top_n}
        )

        assert response.status_code == 422
        assert fake_db.rows("idea_comparisons") == []

    def test_matrix_and_stats(self, fake_db, user_id):
        criterion = _create_criterion(user_id, weight=3)
        idea = fake_db.add_idea(user_id, "solo")
        client.put(
            "/v1/scores",
            json={
                "idea_id": idea["id"],
                "criteria_id": criterion["id"],
                "user_id": str(user_id),
                "score": 6,
            },
        )
        comparison = client.post(
            "/v1/comparisons", json={"user_id": str(user_id), "idea_ids": [idea["id"]]}
        ).json()

        matrix = client.get(f"/v1/comparisons/{comparison['id']}/matrix").json()
        stats = client.get(f"/v1/comparisons/{comparison['id']}/stats").json()
        details = client.get(f"/v1/comparisons/{comparison['id']}").json()

        assert matrix["matrix"][0]["scores"][0]["score"] == 6
        assert stats["avg_score"] == pytest.approx(6.0)
        assert details["ideas"][0]["calculated_score"] == pytest.approx(6.0)

    def test_missing_comparison(self, fake_db):
        response = client.get(f"/v1/comparisons/{uuid4()}/stats")

        assert response.status_code == 404
        assert response.json()["code"] == "comparison_not_found"
