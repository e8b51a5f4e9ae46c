"""API tests through FastAPI's TestClient with an in-memory database."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from lumi.db.session import get_db
from lumi.main import app
from lumi.models.notification import ScheduledNotification
from lumi.services.agent import agent_service


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestTaskRoutes:

    def test_parse_does_not_persist(self, client, db):
        response = client.post("/tasks/parse", json={"text": "call mom tomorrow"})

        assert response.status_code == 200
        body = response.json()
        assert body["title"] == "call mom"
        assert body["due_date"] == body["reminder_date"]
        assert body["due_date"].endswith("21:00:00+05:30")
        assert client.get("/tasks").json()["total"] == 0

    def test_parse_empty(self, client):
        assert client.post("/tasks/parse", json={"text": "  "}).status_code == 400

    def test_create_and_list(self, client, db):
        created = client.post("/tasks", json={"text": "submit report", "due_date": "2099-01-05T18:00:00"})
        client.post("/tasks", json={"text": "pay rent", "due_date": "2099-01-04T18:00:00"})

        assert created.status_code == 201
        assert created.json()["due_label"] == "Jan 5, 6:00 PM"
        assert db.query(ScheduledNotification).count() == 2

        listed = client.get("/tasks").json()
        assert [t["title"] for t in listed["tasks"]] == ["pay rent", "submit report"]

    def test_create_rejects_bad_priority(self, client):
        response = client.post("/tasks", json={"text": "x", "priority": "urgent"})

        assert response.status_code == 400

    def test_insights(self, client):
        response = client.get("/tasks/insights")

        assert response.status_code == 200
        assert response.json()["day_names"][0] == "Mon"


class TestReflectionRoutes:

    def test_post_cancels_reflection_reminder(self, client, db, at):
        db.add(ScheduledNotification(
            kind="reflection", title="🌙 Reflect", body="b", trigger_at=at(2099, 1, 1, 21)
        ))
        db.commit()

        response = client.post("/reflections", json={"text": "A good day"})

        assert response.status_code == 201
        assert db.query(ScheduledNotification).one().status == "cancelled"
        assert client.get("/reflections").json()["reflections"][0]["text"] == "A good day"

    def test_bad_date(self, client):
        assert client.post("/reflections", json={"text": "x", "date": "yesterday"}).status_code == 400


class TestHabitRoutes:

    def test_heatmap(self, client):
        response = client.get("/habits/heatmap", params={"period": "7d"})

        assert response.status_code == 200
        assert response.json()["total_days"] == 7

    def test_heatmap_unknown_period(self, client):
        assert client.get("/habits/heatmap", params={"period": "2y"}).status_code == 400


class TestChatRoute:

    def test_chat_turn(self, client, monkeypatch):
        llm = AsyncMock()
        llm.chat_completion.return_value = {
            "choices": [{"message": {"role": "assistant", "content": "Hello! What's on your list today?"}}]
        }
        monkeypatch.setattr(agent_service, "llm", llm)

        response = client.post("/chat", json={"message": "hi", "history": []})

        assert response.status_code == 200
        body = response.json()
        assert body["response"] == "Hello! What's on your list today?"
        assert body["completed"] is True
        assert body["messages"][0] == {"role": "user", "content": "hi"}

    def test_chat_llm_failure(self, client, monkeypatch):
        llm = AsyncMock()
        llm.chat_completion.side_effect = RuntimeError("no upstream")
        monkeypatch.setattr(agent_service, "llm", llm)

        body = client.post("/chat", json={"message": "hi"}).json()

        assert body["response"] == "An error occurred while talking to the agent."
        assert body["error"] == "no upstream"
