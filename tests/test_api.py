"""End-to-end tests of the companion HTTP API."""

import json
from datetime import datetime

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import ENDPOINT, GITHUB_TOKEN
from quack_companion.main import create_app


def events(response) -> list[dict]:
    return [json.loads(line) for line in response.text.splitlines() if line]


@pytest.fixture
def api(settings, transport):
    app = create_app(settings, transport)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def logged_in_api(api):
    response = api.post("/api/v1/session/login", json={"github_token": GITHUB_TOKEN})
    assert response.status_code == 200
    return api


class TestSessionRoutes:
    def test_initial_status(self, api):
        response = api.get("/api/v1/session")

        assert response.status_code == 200
        assert response.json() == {
            "endpoint_url": ENDPOINT,
            "is_valid_endpoint": True,
            "is_valid_token": False,
            "has_token": False,
        }

    def test_login_logout(self, logged_in_api):
        assert logged_in_api.get("/api/v1/session").json()["is_valid_token"] is True

        response = logged_in_api.post("/api/v1/session/logout")

        assert response.json()["has_token"] is False

    def test_login_rejected(self, api):
        response = api.post("/api/v1/session/login", json={"github_token": "bad"})

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "QUACK_API_ERROR"

    def test_set_invalid_endpoint(self, api, fake_api):
        fake_api.validate_status = 500

        response = api.put("/api/v1/session/endpoint", json={"endpoint_url": "http://nowhere.test"})

        assert response.status_code == 400
        assert response.json()["code"] == 400

    def test_refresh(self, logged_in_api):
        response = logged_in_api.post("/api/v1/session/refresh")
        assert response.json()["is_valid_token"] is True


class TestGuidelineRoutes:
    def test_requires_login(self, api):
        response = api.post("/api/v1/guidelines/pull")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "QUACK_MISSING_CREDENTIALS"
        assert datetime.fromisoformat(response.json()["timestamp"]).tzinfo is not None

    def test_crud_flow(self, logged_in_api, fake_api):
        fake_api.add_guideline("one")

        pulled = logged_in_api.post("/api/v1/guidelines/pull").json()
        assert [g["content"] for g in pulled] == ["one"]

        created = logged_in_api.post("/api/v1/guidelines", json={"content": "two"})
        assert created.status_code == 200
        assert created.json()["id"] == 2

        edited = logged_in_api.patch("/api/v1/guidelines/1", json={"content": "deux"})
        assert edited.json()["content"] == "deux"

        deleted = logged_in_api.delete("/api/v1/guidelines/0")
        assert deleted.json()["id"] == 1

        listed = logged_in_api.get("/api/v1/guidelines").json()
        assert [g["content"] for g in listed] == ["deux"]

    def test_unknown_index(self, logged_in_api):
        response = logged_in_api.delete("/api/v1/guidelines/5")
        assert response.status_code == 404

    def test_upstream_error_status(self, logged_in_api, fake_api):
        fake_api.fail_status = 503

        response = logged_in_api.post("/api/v1/guidelines/pull")

        assert response.status_code == 503
        assert response.json()["error"]["details"]["status_code"] == 503


class TestChatRoutes:
    def test_streams_answer(self, logged_in_api):
        response = logged_in_api.post("/api/v1/chat/messages", json={"content": "Say hello"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/x-ndjson")
        assert events(response) == [{"content": "Hel"}, {"content": "lo"}, {"done": True}]

        history = logged_in_api.get("/api/v1/chat/messages").json()
        assert history == [
            {"role": "user", "content": "Say hello"},
            {"role": "assistant", "content": "Hello"},
        ]

    def test_mid_stream_failure_ends_with_error_event(self, logged_in_api, fake_api):
        fake_api.chat_chunks = fake_api.chat_chunks[:1]
        fake_api.chat_error = httpx.ReadError("connection reset")

        response = logged_in_api.post("/api/v1/chat/messages", json={"content": "Say hello"})

        assert response.status_code == 200
        received = events(response)
        assert received[0] == {"content": "Hel"}
        assert received[-1]["done"] is False
        assert received[-1]["error"]["code"] == "QUACK_TRANSPORT_ERROR"
        assert {"done": True} not in received

        history = logged_in_api.get("/api/v1/chat/messages").json()
        assert history == [{"role": "user", "content": "Say hello"}]

    def test_upstream_failure(self, logged_in_api, fake_api):
        fake_api.chat_status = 500

        response = logged_in_api.post("/api/v1/chat/messages", json={"content": "Say hello"})

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "QUACK_API_ERROR"

    def test_clear_history(self, logged_in_api):
        logged_in_api.post("/api/v1/chat/messages", json={"content": "Say hello"})

        logged_in_api.delete("/api/v1/chat/messages")

        assert logged_in_api.get("/api/v1/chat/messages").json() == []

    def test_cancel_without_stream(self, logged_in_api):
        assert logged_in_api.post("/api/v1/chat/cancel").json() == {"cancelled": False}


class TestMiscRoutes:
    def test_notifications(self, api):
        api.post("/api/v1/guidelines/pull")

        messages = api.get("/api/v1/notifications", params={"clear": True}).json()

        assert messages[-1]["level"] == "error"
        assert messages[-1]["message"] == "Authenticate first"
        assert api.get("/api/v1/notifications").json() == []

    def test_env_info(self, api):
        info = api.get("/api/v1/diagnostics/env").json()

        assert info["version"] == "0.1.0"
        assert info["endpoint_url"] == ENDPOINT
        assert info["session_id"]
