"""End-to-end tests for the HTTP API."""

from datetime import date, timedelta
from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from borderwatch.config import Config
from borderwatch.main import create_app
from borderwatch.scenarios import SCENARIOS


@pytest.fixture
def settings(tmp_path):
    return Config(
        DATABASE_URL=f"sqlite:///{tmp_path / 'api.db'}",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        PUBLIC_DIR=str(tmp_path / "public"),
        LOG_DIR=str(tmp_path / "logs"),
        OPENAI_API_KEY="",
    )


@pytest.fixture
def llm_client():
    mock = Mock()
    mock.chat.completions.create.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content="**1 tampered ID** reported today."))]
    )
    return mock


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings=settings)) as test_client:
        yield test_client


def _submit(client, scenario="tempered-id", filename="gate 4.jpg"):
    return client.post(
        "/api/submit",
        data={"scenario": scenario},
        files={"photo": (filename, b"\xff\xd8fake-jpeg", "image/jpeg")},
    )


def _kpis(client, scenario):
    response = client.get("/api/kpis", params={"scenario": scenario})
    assert response.status_code == 200
    return response.json()["kpis"]


class TestScenarios:
    def test_list(self, client):
        response = client.get("/api/scenarios")

        assert response.status_code == 200
        assert response.json() == {
            "scenarios": [
                {"value": "tempered-id", "label": "Tampered ID"},
                {"value": "immigration-queue", "label": "Immigration Queue Photo"},
                {"value": "tempered-passport", "label": "Tampered Passport"},
            ]
        }

    def test_health(self, client):
        assert client.get("/api/health").json() == {"status": "running"}


class TestSubmit:
    def test_submit_response_and_stored_photo(self, client):
        response = _submit(client)

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["scenario"] == "tempered-id"
        assert body["chatbotMessage"] == SCENARIOS["tempered-id"].fixed_message
        assert body["filePath"].startswith("/uploads/")
        assert body["filePath"].endswith("_gate_4.jpg")
        assert body["kpis"]["totalReports"] == 1
        assert body["kpis"]["reportsToday"] == 1
        assert body["kpis"]["lastReportTime"].endswith("Z")

        photo = client.get(body["filePath"])
        assert photo.status_code == 200
        assert photo.content == b"\xff\xd8fake-jpeg"

    def test_missing_photo(self, client):
        response = client.post("/api/submit", data={"scenario": "tempered-id"})

        assert response.status_code == 400
        assert response.json() == {"error": "Photo is required"}
        assert _kpis(client, "tempered-id")["totalReports"] == 0

    def test_unknown_scenario(self, client):
        response = _submit(client, scenario="lost-luggage")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid scenario"}
        assert client.get("/api/notifications").json() == {"items": []}


class TestKpisAndClear:
    def test_end_to_end_counts(self, client):
        _submit(client)
        assert _kpis(client, "tempered-id")["totalReports"] == 1

        _submit(client)
        _submit(client)
        kpis = _kpis(client, "tempered-id")
        assert kpis["totalReports"] == 3
        assert kpis["reportsToday"] <= kpis["totalReports"]

        response = client.post("/api/clear", json={"scenario": "tempered-id"})
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["kpis"] == {"totalReports": 0, "reportsToday": 0, "lastReportTime": None}
        assert body["chatbotMessage"].startswith("Data cleared.")
        assert _kpis(client, "tempered-id")["totalReports"] == 0
        assert client.get("/api/notifications", params={"scenario": "tempered-id"}).json() == {"items": []}

    def test_clear_keeps_notifications_when_asked(self, client):
        _submit(client, scenario="immigration-queue")

        client.post("/api/clear", json={"scenario": "immigration-queue", "clearNotifications": False})

        items = client.get("/api/notifications").json()["items"]
        assert [i["scenario"] for i in items] == ["immigration-queue"]

    def test_kpis_requires_known_scenario(self, client):
        response = client.get("/api/kpis")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid scenario"}


class TestNotifications:
    def test_feed_newest_first(self, client):
        _submit(client, scenario="tempered-id")
        _submit(client, scenario="tempered-passport")

        items = client.get("/api/notifications").json()["items"]

        assert [i["scenario"] for i in items] == ["tempered-passport", "tempered-id"]
        assert set(items[0]) == {"createdAt", "scenario", "message"}

    def test_filters(self, client):
        _submit(client, scenario="tempered-id")
        _submit(client, scenario="tempered-passport")
        today = date.today()

        by_scenario = client.get("/api/notifications", params={"scenario": "tempered-id"}).json()["items"]
        in_range = client.get(
            "/api/notifications",
            params={"start": today.isoformat(), "end": today.isoformat()},
        ).json()["items"]
        future = client.get(
            "/api/notifications",
            params={"start": (today + timedelta(days=1)).isoformat()},
        ).json()["items"]
        limited = client.get("/api/notifications", params={"limit": 1}).json()["items"]

        assert [i["scenario"] for i in by_scenario] == ["tempered-id"]
        assert len(in_range) == 2
        assert future == []
        assert len(limited) == 1

    def test_invalid_limit(self, client):
        response = client.get("/api/notifications", params={"limit": 0})

        assert response.status_code == 422
        assert response.json()["error"] == "Invalid request"


class TestChat:
    def test_chat_without_key(self, client):
        response = client.post("/api/llm-chat", json={"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 400
        assert response.json() == {"error": "OPENAI_API_KEY missing on server."}

    def test_chat_grounded_in_snapshot(self, settings, llm_client):
        with TestClient(create_app(settings=settings, llm_client=llm_client)) as client:
            _submit(client, scenario="tempered-id")

            response = client.post(
                "/api/llm-chat",
                json={"messages": [{"role": "user", "content": "How many tampered ID alerts?"}]},
            )

        assert response.status_code == 200
        assert response.json() == {"reply": "**1 tampered ID** reported today.", "scenario": "tempered-id"}
        system_prompt = llm_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        assert "Totals: ID=1, Queue=0, Passport=0" in system_prompt
        assert SCENARIOS["tempered-id"].fixed_message in system_prompt

    def test_chat_upstream_failure(self, settings, llm_client):
        llm_client.chat.completions.create.side_effect = RuntimeError("boom")

        with TestClient(create_app(settings=settings, llm_client=llm_client)) as client:
            response = client.post("/api/llm-chat", json={"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 500
        assert response.json() == {"error": "Chat failed."}

    def test_chat_accepts_null_assistant_content(self, settings, llm_client):
        with TestClient(create_app(settings=settings, llm_client=llm_client)) as client:
            response = client.post(
                "/api/llm-chat",
                json={
                    "messages": [
                        {"role": "assistant", "content": None},
                        {"role": "user", "content": "How many tampered ID alerts?"},
                    ]
                },
            )

        assert response.status_code == 200
        assert response.json()["scenario"] == "tempered-id"
