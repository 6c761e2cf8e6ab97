"""
End-to-end test through the real application lifespan.

The composition root builds a SQLite-backed database and runs without
a trace sink.
"""

import pytest
from fastapi.testclient import TestClient

from chat_tracking.api.main import create_app
from chat_tracking.configs import get_settings


@pytest.fixture
def live_client(tmp_path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DB_URL", f"sqlite+aiosqlite:///{tmp_path / 'app.db'}")
    monkeypatch.setenv("LANGFUSE_ENABLE_TRACING", "false")
    get_settings.cache_clear()

    with TestClient(create_app()) as client:
        yield client

    get_settings.cache_clear()


def test_session_round_trip(live_client: TestClient) -> None:
    created = live_client.post(
        "/api/v1/sessions", json={"store_id": "store_test", "user_id": "user_test"}
    )
    session_id = created.json()["session_id"]

    active = live_client.get(
        "/api/v1/sessions/active", params={"store_id": "store_test", "user_id": "user_test"}
    )
    logged = live_client.post(
        f"/api/v1/sessions/{session_id}/interactions",
        json={"user_message": "안녕하세요 배송 문의드려요", "assistant_response": "네"},
    )
    detail = live_client.get(f"/api/v1/sessions/{session_id}", params={"message_limit": 10})

    assert created.status_code == 201
    assert active.json() == {"session_id": session_id}
    assert logged.status_code == 201
    body = detail.json()
    assert [m["role"] for m in body["recent_messages"]] == ["user", "assistant"]
    assert [m["sequence_number"] for m in body["recent_messages"]] == [1, 2]
    assert body["stats"]["message_count"] == 2
    assert body["stats"]["total_tokens"] == 4


def test_health_reports_live_database(live_client: TestClient) -> None:
    response = live_client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["database"] == "connected"
    assert response.json()["trace"] == "disconnected"
    assert response.json()["services"]["monitoring"] == "degraded"


def test_unknown_session_is_404(live_client: TestClient) -> None:
    response = live_client.get("/api/v1/sessions/00000000-0000-0000-0000-000000000000")

    assert response.status_code == 404
