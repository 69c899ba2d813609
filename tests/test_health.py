"""Health 엔드포인트 테스트."""

from unittest.mock import AsyncMock, patch


def test_live_returns_alive(client):
    """GET /health/live → 200 + status alive, ISO timestamp(Z)."""
    response = client.get("/health/live")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "alive"
    assert data["timestamp"].endswith("Z")


def test_live_ignores_database(client):
    """DB가 죽어 있어도 liveness는 200. DB 확인 자체를 하지 않음."""
    ping = AsyncMock(side_effect=ConnectionRefusedError("db down"))
    with patch("app.api.health.ping_db", ping):
        assert client.get("/health/live").status_code == 200
        assert client.head("/health/live").status_code == 200
    ping.assert_not_awaited()


def test_live_head_empty_body(client):
    response = client.head("/health/live")
    assert response.status_code == 200
    assert response.content == b""


def test_ready_without_database_returns_503(client):
    """테스트 환경은 DATABASE_URL 미설정 → not_ready + error 메시지."""
    response = client.get("/health/ready")
    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "not_ready"
    assert data["database"] == "disconnected"
    assert data["error"] == "Database not initialized"
    assert data["timestamp"].endswith("Z")


def test_ready_connected(client):
    with patch("app.api.health.ping_db", AsyncMock(return_value=None)) as ping:
        response = client.get("/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["database"] == "connected"
    assert "error" not in data
    ping.assert_awaited_once()


def test_ready_error_without_message_falls_back(client):
    with patch("app.api.health.ping_db", AsyncMock(side_effect=OSError())):
        response = client.get("/health/ready")
    assert response.status_code == 503
    assert response.json()["error"] == "Unknown error"


def test_ready_head_mirrors_status(client):
    with patch("app.api.health.ping_db", AsyncMock(return_value=None)):
        ok = client.head("/health/ready")
    with patch("app.api.health.ping_db", AsyncMock(side_effect=TimeoutError("timeout"))):
        down = client.head("/health/ready")
    assert ok.status_code == 200
    assert ok.content == b""
    assert down.status_code == 503
    assert down.content == b""


def test_ready_is_not_cached(client):
    """매 요청 새로 판정. 실패 후 복구되면 바로 200."""
    ping = AsyncMock(side_effect=[RuntimeError("down"), None])
    with patch("app.api.health.ping_db", ping):
        assert client.get("/health/ready").status_code == 503
        assert client.get("/health/ready").status_code == 200
    assert ping.await_count == 2
