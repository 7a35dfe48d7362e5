"""
HTTP tests for the session and screen routers, using FastAPI's TestClient.

Run with: pytest tests/test_api.py -v
"""
import asyncio
import httpx
import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

from agripulse.core.config import settings
from agripulse.main import app
from agripulse.services.gemini_client import AdvisorUnavailableError
from agripulse.services.screens import AdvisorScreen, DiagnosticsScreen

ADVISOR_CALL = "agripulse.services.gemini_client.get_advisor_response"
IMAGE_CALL = "agripulse.services.gemini_client.analyze_diagnostic_image"


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def session_id(client):
    response = client.post("/api/v1/sessions")
    assert response.status_code == 201
    return response.json()["session_id"]


def _open(client, session_id, tab):
    response = client.post(f"/api/v1/sessions/{session_id}/navigate", json={"tab": tab})
    assert response.status_code == 200
    return response.json()


class TestSessions:
    def test_new_session_shows_dashboard(self, client):
        body = client.post("/api/v1/sessions").json()
        assert body["active_tab"] == "dashboard"
        assert body["header"] == {"title": "Dashboard", "market_ticker": "Live Market: Wheat +2.4%"}
        assert body["screen"]["greeting"] == "Welcome back, Farmer."

    def test_dashboard_content(self, client, session_id):
        body = client.get(f"/api/v1/sessions/{session_id}/dashboard").json()
        assert [s["title"] for s in body["stats"]] == ["Active Projects", "Market Outlook", "Health Alerts"]
        assert [a["target"] for a in body["quick_actions"]] == ["diagnostics", "advisor", "hybrid"]
        assert body["seasonal_tip"]["target"] == "advisor"

    def test_unknown_session_returns_404(self, client):
        assert client.get("/api/v1/sessions/does-not-exist").status_code == 404
        assert client.get("/api/v1/sessions/does-not-exist/advisor").status_code == 404

    def test_inactive_screen_returns_409(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/advisor/messages", json={"content": "hi"})
        assert response.status_code == 409

    def test_invalid_tab_is_rejected(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/navigate", json={"tab": "settings"})
        assert response.status_code == 422

    def test_close_session(self, client, session_id):
        assert client.delete(f"/api/v1/sessions/{session_id}").status_code == 204
        assert client.get(f"/api/v1/sessions/{session_id}").status_code == 404
        assert client.delete(f"/api/v1/sessions/{session_id}").status_code == 404

    def test_navigating_away_discards_transcript(self, client, session_id):
        _open(client, session_id, "advisor")
        with patch(ADVISOR_CALL, new=AsyncMock(return_value="Rotate crops.")):
            client.post(f"/api/v1/sessions/{session_id}/advisor/messages", json={"content": "Tips?"})
        _open(client, session_id, "dashboard")
        body = _open(client, session_id, "advisor")
        assert body["screen"]["messages"] == []


class TestAdvisorEndpoints:
    def test_marketing_scenario(self, client, session_id):
        _open(client, session_id, "advisor")
        response = client.put(f"/api/v1/sessions/{session_id}/advisor/context", json={"context": "marketing"})
        assert response.json()["context"] == "marketing"

        with patch(ADVISOR_CALL, new=AsyncMock(return_value="Sell **forward contracts**.")) as call:
            response = client.post(
                f"/api/v1/sessions/{session_id}/advisor/messages",
                json={"content": "How do I price my wheat?"},
            )

        assert response.status_code == 200
        call.assert_awaited_once()
        assert call.await_args.args == ("How do I price my wheat?", "marketing")
        body = response.json()
        assert body["status"] == "succeeded"
        assert body["messages"] == [
            {"role": "user", "content": "How do I price my wheat?"},
            {"role": "ai", "content": "Sell **forward contracts**."},
        ]

    def test_blank_message_makes_no_request(self, client, session_id):
        _open(client, session_id, "advisor")
        with patch(ADVISOR_CALL, new=AsyncMock()) as call:
            response = client.post(f"/api/v1/sessions/{session_id}/advisor/messages", json={"content": "   "})
        call.assert_not_awaited()
        assert response.json()["messages"] == []
        assert response.json()["status"] == "idle"

    def test_failure_is_rendered_in_transcript(self, client, session_id):
        _open(client, session_id, "advisor")
        with patch(ADVISOR_CALL, new=AsyncMock(side_effect=AdvisorUnavailableError("503"))):
            response = client.post(f"/api/v1/sessions/{session_id}/advisor/messages", json={"content": "hi"})
        assert response.status_code == 200
        assert response.json()["messages"][-1]["content"] == AdvisorScreen.ERROR_MESSAGE
        assert response.json()["status"] == "failed"

    def test_concurrent_message_is_rejected_while_pending(self):
        prompts = []

        async def scenario():
            release = asyncio.Event()
            started = asyncio.Event()

            async def slow_reply(prompt, context):
                prompts.append(prompt)
                started.set()
                await release.wait()
                return "Irrigate at dawn."

            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
                session_id = (await ac.post("/api/v1/sessions")).json()["session_id"]
                await ac.post(f"/api/v1/sessions/{session_id}/navigate", json={"tab": "advisor"})
                url = f"/api/v1/sessions/{session_id}/advisor/messages"
                with patch(ADVISOR_CALL, new=slow_reply):
                    first = asyncio.create_task(ac.post(url, json={"content": "first"}))
                    await started.wait()
                    pending = (await ac.get(f"/api/v1/sessions/{session_id}/advisor")).json()
                    second = await ac.post(url, json={"content": "second"})
                    release.set()
                    first_response = await first
            return pending, second, first_response

        pending, second, first_response = asyncio.run(scenario())
        assert pending["status"] == "pending"
        assert second.status_code == 409
        assert prompts == ["first"]
        assert first_response.status_code == 200
        assert [m["content"] for m in first_response.json()["messages"]] == ["first", "Irrigate at dawn."]


class TestDiagnosticsEndpoints:
    def test_upload_then_analyze(self, client, session_id):
        _open(client, session_id, "diagnostics")
        response = client.post(
            f"/api/v1/sessions/{session_id}/diagnostics/image",
            files={"file": ("leaf.png", b"\x89PNG leaf", "image/png")},
        )
        assert response.status_code == 200
        uploaded = response.json()
        assert uploaded["mime_type"] == "image/png"
        assert uploaded["image_data_url"].startswith("data:image/png;base64,")

        with patch(IMAGE_CALL, new=AsyncMock(return_value="Powdery mildew.")) as call:
            response = client.post(f"/api/v1/sessions/{session_id}/diagnostics/analyze")
        assert call.await_args.args == (uploaded["image_data_url"], "image/png")
        assert response.json()["analysis"] == "Powdery mildew."

    def test_analyze_without_image_is_a_no_op(self, client, session_id):
        _open(client, session_id, "diagnostics")
        with patch(IMAGE_CALL, new=AsyncMock()) as call:
            response = client.post(f"/api/v1/sessions/{session_id}/diagnostics/analyze")
        call.assert_not_awaited()
        assert response.json()["analysis"] is None

    def test_failure_shows_fixed_message(self, client, session_id):
        _open(client, session_id, "diagnostics")
        client.post(
            f"/api/v1/sessions/{session_id}/diagnostics/image",
            files={"file": ("cow.jpg", b"jpeg", "image/jpeg")},
        )
        with patch(IMAGE_CALL, new=AsyncMock(side_effect=AdvisorUnavailableError("down"))):
            response = client.post(f"/api/v1/sessions/{session_id}/diagnostics/analyze")
        assert response.json()["analysis"] == DiagnosticsScreen.ERROR_MESSAGE

    def test_content_type_parameters_are_dropped(self, client, session_id):
        _open(client, session_id, "diagnostics")
        response = client.post(
            f"/api/v1/sessions/{session_id}/diagnostics/image",
            files={"file": ("leaf.png", b"png bytes", "image/png; name=leaf.png")},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["mime_type"] == "image/png"
        assert body["image_data_url"].startswith("data:image/png;base64,")

        with patch(IMAGE_CALL, new=AsyncMock(return_value="Healthy.")) as call:
            client.post(f"/api/v1/sessions/{session_id}/diagnostics/analyze")
        assert call.await_args.args[1] == "image/png"

    def test_rejects_non_image(self, client, session_id):
        _open(client, session_id, "diagnostics")
        response = client.post(
            f"/api/v1/sessions/{session_id}/diagnostics/image",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400

    def test_rejects_oversized_image(self, client, session_id):
        _open(client, session_id, "diagnostics")
        with patch.object(settings, "MAX_UPLOAD_BYTES", 4):
            response = client.post(
                f"/api/v1/sessions/{session_id}/diagnostics/image",
                files={"file": ("big.png", b"0123456789", "image/png")},
            )
        assert response.status_code == 413


class TestHybridEndpoints:
    def test_simulate(self, client, session_id):
        _open(client, session_id, "hybrid")
        with patch(ADVISOR_CALL, new=AsyncMock(return_value="## Hybrid report")) as call:
            response = client.post(
                f"/api/v1/sessions/{session_id}/hybrid/simulate",
                json={"parent_a": "Heirloom Corn", "parent_b": "Drought Resistant Corn"},
            )
        prompt, context = call.await_args.args
        assert context == "hybrid"
        assert "Heirloom Corn and Drought Resistant Corn" in prompt
        body = response.json()
        assert body["result"] == "## Hybrid report"
        assert body["status"] == "succeeded"

    def test_missing_parent_is_a_no_op(self, client, session_id):
        _open(client, session_id, "hybrid")
        with patch(ADVISOR_CALL, new=AsyncMock()) as call:
            response = client.post(
                f"/api/v1/sessions/{session_id}/hybrid/simulate",
                json={"parent_a": "Heirloom Corn", "parent_b": ""},
            )
        call.assert_not_awaited()
        assert response.json()["result"] is None


class TestServiceEndpoints:
    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert "gemini_configured" in body

    def test_root(self, client):
        assert "AgriPulse" in client.get("/").json()["message"]
