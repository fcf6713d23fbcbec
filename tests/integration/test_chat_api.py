"""
Integration tests for the chat HTTP API.
"""
import os
import pytest
from unittest.mock import patch


def start_session(test_client):
    response = test_client.post("/chat/sessions")
    assert response.status_code == 201
    return response.json()["session_id"]


@pytest.mark.integration
class TestChatAPI:
    """Full request/response cycle through FastAPI with fake spa repositories."""

    def test_create_session_returns_welcome(self, test_client):
        response = test_client.post("/chat/sessions")

        data = response.json()
        assert response.status_code == 201
        assert data["messages"][0]["role"] == "bot"
        assert data["messages"][0]["text"].startswith("Hi! I'm your spa assistant.")

    def test_cancel_flow_over_http(self, test_client, appointment_repo):
        session_id = start_session(test_client)

        first = test_client.post(
            f"/chat/sessions/{session_id}/messages",
            json={"text": "cancel appointment for John at 2:00 PM on August 19th"},
        ).json()
        assert first["workflow"] == "cancel"
        assert first["messages"][-1]["text"] == (
            "I found an appointment for John at 2:00 PM on August 19th. Type 'yes' to cancel it."
        )

        second = test_client.post(f"/chat/sessions/{session_id}/messages", json={"text": "yes"}).json()
        assert second["workflow"] is None
        assert second["navigation"] == [{"url": "/appointments?date=2025-08-19", "delay_seconds": 2.5}]
        assert appointment_repo.deleted == [1]

    def test_transcript_keeps_order(self, test_client):
        session_id = start_session(test_client)
        test_client.post(f"/chat/sessions/{session_id}/messages", json={"text": "help"})

        response = test_client.get(f"/chat/sessions/{session_id}/transcript")

        messages = response.json()["messages"]
        assert [m["id"] for m in messages] == [1, 2, 3]
        assert [m["role"] for m in messages] == ["bot", "user", "bot"]

    def test_unknown_session_is_404(self, test_client):
        response = test_client.post("/chat/sessions/nope/messages", json={"text": "help"})

        assert response.status_code == 404

    def test_blank_text_is_rejected(self, test_client):
        session_id = start_session(test_client)

        response = test_client.post(f"/chat/sessions/{session_id}/messages", json={"text": "   "})

        assert response.status_code == 422

    def test_end_session(self, test_client):
        session_id = start_session(test_client)

        assert test_client.delete(f"/chat/sessions/{session_id}").status_code == 204
        assert test_client.get(f"/chat/sessions/{session_id}/transcript").status_code == 404


@pytest.mark.integration
class TestAdminAndHealth:

    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_classifier_report_open_without_key_outside_production(self, test_client):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("ADMIN_API_KEY", None)
            response = test_client.get("/admin/classifier/report")

        assert response.status_code == 200
        assert response.json()["total_examples"] > 0

    def test_classifier_report_requires_configured_key(self, test_client):
        with patch.dict(os.environ, {"ADMIN_API_KEY": "secret"}):
            denied = test_client.get("/admin/classifier/report")
            allowed = test_client.get("/admin/classifier/report", headers={"X-API-Key": "secret"})

        assert denied.status_code == 401
        assert allowed.status_code == 200

    def test_classify_endpoint(self, test_client):
        os.environ.pop("ADMIN_API_KEY", None)
        response = test_client.get("/admin/classifier/classify", params={"text": "delete expense for towels"})

        data = response.json()
        assert data["type"] == "delete_expense"
        assert data["source"] == "regex"
        assert data["captured_groups"] == {"description": "towels"}
