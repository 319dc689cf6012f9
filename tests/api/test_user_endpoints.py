"""
API tests for user endpoints.
Covers registration, per-user stats and settings, validation and not-found handling.
"""

from typing import Any, Dict

import pytest
from flask.testing import FlaskClient


@pytest.fixture
def user(client: FlaskClient) -> Dict[str, Any]:
    """
    Registers a user through the API.

    Returns:
        Dict: The created user as returned by the API
    """
    resp = client.post("/api/users", json={"name": "Ada", "email": "ada@example.com"})
    assert resp.status_code == 201
    return resp.get_json()["user"]


def post_result(client: FlaskClient, user_id: str, **fields: Any):
    payload = {"userId": user_id, "wpm": 50, "accuracy": 95, "errors": 2, "timeElapsed": 30.0, "textSource": "quotes"}
    payload.update(fields)
    return client.post("/api/test-results", json=payload)


class TestCreateUser:
    def test_create_returns_user_with_defaults(self, user: Dict[str, Any]) -> None:
        assert user["id"].startswith("user_")
        assert user["name"] == "Ada"
        assert user["email"] == "ada@example.com"
        assert user["settings"] == {
            "theme": "light",
            "soundEnabled": True,
            "showCursor": True,
            "fontSize": "medium",
            "autoStart": False,
        }

    def test_each_user_gets_a_new_id(self, client: FlaskClient, user: Dict[str, Any]) -> None:
        resp = client.post("/api/users", json={"name": "Ada", "email": "ada@example.com"})
        assert resp.status_code == 201
        assert resp.get_json()["user"]["id"] != user["id"]

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"name": "Ada"},
            {"email": "ada@example.com"},
            {"name": "", "email": "ada@example.com"},
            {"name": "Ada", "email": "not-an-email"},
        ],
    )
    def test_invalid_payload_is_rejected(self, client: FlaskClient, payload: Dict[str, Any]) -> None:
        resp = client.post("/api/users", json=payload)
        assert resp.status_code == 400
        assert "error" in resp.get_json()

    def test_non_json_body_is_rejected(self, client: FlaskClient) -> None:
        resp = client.post("/api/users", data="name=Ada", content_type="text/plain")
        assert resp.status_code == 400


class TestUserStats:
    def test_stats_of_user_without_results(self, client: FlaskClient, user: Dict[str, Any]) -> None:
        resp = client.get(f"/api/users/{user['id']}/stats")
        assert resp.status_code == 200
        assert resp.get_json() == {
            "totalTests": 0,
            "averageWpm": 0,
            "bestWpm": 0,
            "averageAccuracy": 0,
            "totalTime": 0,
            "recentResults": [],
        }

    def test_stats_aggregate_results(self, client: FlaskClient, user: Dict[str, Any]) -> None:
        post_result(client, user["id"], wpm=40, accuracy=90, timeElapsed=20.0)
        post_result(client, user["id"], wpm=61, accuracy=97, timeElapsed=25.5)
        stats = client.get(f"/api/users/{user['id']}/stats").get_json()
        assert stats["totalTests"] == 2
        assert stats["bestWpm"] == 61
        assert stats["averageWpm"] == round((40 + 61) / 2)
        assert stats["averageAccuracy"] == round((90 + 97) / 2)
        assert stats["totalTime"] == pytest.approx(45.5)
        assert [r["wpm"] for r in stats["recentResults"]] == [61, 40]

    def test_recent_results_are_capped_at_ten(self, client: FlaskClient, user: Dict[str, Any]) -> None:
        for wpm in range(12):
            post_result(client, user["id"], wpm=wpm)
        stats = client.get(f"/api/users/{user['id']}/stats").get_json()
        assert stats["totalTests"] == 12
        assert [r["wpm"] for r in stats["recentResults"]] == list(range(11, 1, -1))

    def test_unknown_user(self, client: FlaskClient) -> None:
        resp = client.get("/api/users/user_missing/stats")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "User not found"}


class TestUserSettings:
    def test_get_settings(self, client: FlaskClient, user: Dict[str, Any]) -> None:
        resp = client.get(f"/api/users/{user['id']}/settings")
        assert resp.status_code == 200
        assert resp.get_json()["settings"]["theme"] == "light"

    def test_update_merges_shallowly(self, client: FlaskClient, user: Dict[str, Any]) -> None:
        resp = client.put(
            f"/api/users/{user['id']}/settings",
            json={"theme": "dark", "keyboard": {"layout": "dvorak"}},
        )
        assert resp.status_code == 200
        settings = resp.get_json()["settings"]
        assert settings["theme"] == "dark"
        assert settings["soundEnabled"] is True
        assert settings["keyboard"] == {"layout": "dvorak"}

        again = client.put(f"/api/users/{user['id']}/settings", json={"keyboard": {"repeat": True}})
        # Nested objects are replaced, not merged.
        assert again.get_json()["settings"]["keyboard"] == {"repeat": True}
        assert client.get(f"/api/users/{user['id']}/settings").get_json()["settings"]["theme"] == "dark"

    def test_update_requires_an_object(self, client: FlaskClient, user: Dict[str, Any]) -> None:
        resp = client.put(f"/api/users/{user['id']}/settings", json=["theme", "dark"])
        assert resp.status_code == 400

    @pytest.mark.parametrize("method", ["get", "put"])
    def test_unknown_user(self, client: FlaskClient, method: str) -> None:
        resp = getattr(client, method)("/api/users/user_missing/settings", json={"theme": "dark"})
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "User not found"}
