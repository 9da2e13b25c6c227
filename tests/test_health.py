"""
Tests for the health check, metrics and static asset endpoints.
"""

import time

from fastapi.testclient import TestClient

from game_relay import application
from game_relay.settings import app_settings


class TestHealthEndpoint:
    """Tests for /health."""

    def test_health_with_running_hub(self):
        with TestClient(application()) as client:
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "active_connections": 0,
            "registered_clients": 0,
            "host_connected": False,
        }

    def test_health_without_running_hub(self):
        """Test the relay reports unhealthy before startup has run."""
        client = TestClient(application())

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"

    def test_health_reports_host(self):
        with TestClient(application()) as client:
            with client.websocket_connect("/") as host_ws:
                host_ws.send_json({"type": "register", "role": "host"})
                # The frame is applied by the hub asynchronously
                for _ in range(200):
                    data = client.get("/health").json()
                    if data["host_connected"]:
                        break
                    time.sleep(0.01)

                assert data["host_connected"] is True
                assert data["active_connections"] == 1
                assert data["registered_clients"] == 0


class TestMetricsEndpoint:
    """Tests for /metrics."""

    def test_metrics_exposition(self):
        with TestClient(application()) as client:
            response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "ws_connections_active" in response.text
        assert "ws_messages_received_total" in response.text

    def test_metrics_count_connections(self):
        with TestClient(application()) as client:
            with client.websocket_connect("/") as ws:
                ws.send_json({"type": "message", "message": "hi"})
            response = client.get("/metrics")

        assert 'ws_connections_total{status="accepted"}' in response.text


class TestStaticFiles:
    """Tests for serving the game UI."""

    def test_static_dir_served(self, tmp_path, monkeypatch):
        (tmp_path / "index.html").write_text("<h1>Lobby</h1>")
        monkeypatch.setattr(app_settings, "STATIC_DIR", str(tmp_path))

        with TestClient(application()) as client:
            index = client.get("/")
            health = client.get("/health")

            with client.websocket_connect("/") as sender:
                with client.websocket_connect("/") as receiver:
                    sender.send_json({"type": "message", "message": "hi"})
                    relayed = receiver.receive_text()

        assert index.status_code == 200
        assert "<h1>Lobby</h1>" in index.text
        assert health.json()["status"] == "healthy"
        assert relayed == "hi"

    def test_missing_static_dir_not_mounted(self, tmp_path, monkeypatch):
        monkeypatch.setattr(
            app_settings, "STATIC_DIR", str(tmp_path / "missing")
        )

        with TestClient(application()) as client:
            response = client.get("/index.html")

        assert response.status_code == 404
