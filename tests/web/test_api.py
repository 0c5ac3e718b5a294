"""Tests for the HTTP API against the in-process store."""

import pytest
from fastapi.testclient import TestClient

from agora.app import App
from agora.core.modules.store.memory import MemorySessionStore
from agora.web.server import create_fastapi_app


@pytest.fixture
def client(config):
    app = App(config, MemorySessionStore())
    with TestClient(create_fastapi_app(app, config)) as client:
        yield client


@pytest.fixture
def session_code(client):
    response = client.post("/api/v1/sessions", json={"title": "Test Session", "mode": "normal"})
    return response.json()["code"]


def post_action(client, code, action_id=1, action_type="question", content="What is the answer?"):
    return client.post(
        f"/api/v1/sessions/{code}/actions", json={"type": action_type, "content": content, "action_id": action_id}
    )


class TestSessionEndpoints:
    """Tests for session routes."""

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_create_session(self, client):
        """Test that creating a session returns 201 with the stored record."""
        response = client.post(
            "/api/v1/sessions", json={"title": "  Test Session ", "description": "Test Description", "mode": "colorShift"}
        )

        assert response.status_code == 201
        body = response.json()
        assert len(body["code"]) == 6
        assert body["id"]
        assert body["title"] == "Test Session"
        assert body["description"] == "Test Description"
        assert body["mode"] == "colorShift"
        assert body["actions"] == []
        assert body["host_start_time"]
        assert body["ended_at"] is None

    def test_create_session_validation(self, client):
        """Test that invalid input returns 400 with a validation_error type."""
        response = client.post("/api/v1/sessions", json={"title": "AB", "mode": "normal"})
        assert response.status_code == 400
        assert response.json()["type"] == "validation_error"

        response = client.post("/api/v1/sessions", json={"title": "Valid Title", "mode": "bogus"})
        assert response.status_code == 400
        assert "Mode must be one of:" in response.json()["message"]

    def test_get_session(self, client, session_code):
        """Test that a session is retrievable by code."""
        response = client.get(f"/api/v1/sessions/{session_code}")
        assert response.status_code == 200
        assert response.json()["code"] == session_code

    def test_get_missing_session(self, client):
        """Test that an unknown code returns 404."""
        response = client.get("/api/v1/sessions/ZZZZZZ")
        assert response.status_code == 404
        assert response.json()["type"] == "not_found"

    def test_list_sessions(self, client, session_code):
        """Test that the listing includes elapsed host time."""
        body = client.get("/api/v1/sessions").json()
        assert [item["session"]["code"] for item in body] == [session_code]
        assert body[0]["host_time_passed"] >= 0

    def test_end_session(self, client, session_code):
        """Test that ending a session sets ended_at and blocks further actions."""
        response = client.post(f"/api/v1/sessions/{session_code}/end")
        assert response.status_code == 200
        assert response.json()["ended_at"] is not None

        assert client.post(f"/api/v1/sessions/{session_code}/end").status_code == 400
        assert post_action(client, session_code).status_code == 400


class TestActionEndpoints:
    """Tests for action routes."""

    def test_append_action(self, client, session_code):
        """Test that appending returns 201 and the action shows up on the session."""
        response = post_action(client, session_code)

        assert response.status_code == 201
        action = response.json()["action"]
        assert action["id"]
        assert action["action_id"] == 1
        assert action["type"] == "question"
        assert action["content"] == "What is the answer?"
        assert action["start_time"]

        actions = client.get(f"/api/v1/sessions/{session_code}").json()["actions"]
        assert [a["id"] for a in actions] == [action["id"]]

    def test_append_action_validation(self, client, session_code):
        """Test that a bad type returns 400 listing the allowed types."""
        response = post_action(client, session_code, action_type="answer")
        assert response.status_code == 400
        assert "question" in response.json()["message"]
        assert "comment" in response.json()["message"]

    def test_append_to_missing_session(self, client):
        assert post_action(client, "ZZZZZZ").status_code == 404

    def test_action_content(self, client, session_code):
        """Test that content is fetched by action_id and unknown ids give 404."""
        post_action(client, session_code, action_id=7, content="Seven")

        assert client.get(f"/api/v1/sessions/{session_code}/actions/7").json() == {"content": "Seven"}
        assert client.get(f"/api/v1/sessions/{session_code}/actions/8").status_code == 404

    def test_action_times(self, client, session_code):
        """Test that the times endpoint lists margins and presentation hints."""
        post_action(client, session_code, action_id=1)
        post_action(client, session_code, action_id=2, action_type="comment", content="Nice")

        body = client.get(f"/api/v1/sessions/{session_code}/actions/times").json()

        assert [item["action_id"] for item in body] == [1, 2]
        assert body[0]["time_margin"] == 0.0
        assert body[1]["type"] == "comment"
        assert body[1]["color"] == "#16a34a"

    def test_replace_actions(self, client, session_code):
        """Test that the client can delete an action by sending back the remaining list."""
        post_action(client, session_code, action_id=1)
        post_action(client, session_code, action_id=2)
        actions = client.get(f"/api/v1/sessions/{session_code}").json()["actions"]

        response = client.put(f"/api/v1/sessions/{session_code}/actions", json={"actions": actions[1:]})

        assert response.status_code == 200
        assert [a["action_id"] for a in response.json()] == [2]
        assert client.get(f"/api/v1/sessions/{session_code}/actions/1").status_code == 404

    def test_replace_actions_validation(self, client, session_code):
        """Test that an element missing required fields returns 400 naming it."""
        response = client.put(
            f"/api/v1/sessions/{session_code}/actions", json={"actions": [{"action_id": 1, "type": "question"}]}
        )
        assert response.status_code == 400
        assert "index 0" in response.json()["message"]
