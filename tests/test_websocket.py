"""
WebSocket endpoint tests.

This module tests the endpoint lifecycle against a mocked hub, and runs
complete host/player sessions through the application with TestClient.
"""

import time
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from game_relay import application
from game_relay.api.ws.consumers.web import Web
from game_relay.schemas.connection import Connection
from tests.mocks.websocket_mocks import create_mock_websocket


@pytest.fixture
def mock_hub():
    """
    Provides a mocked RelayHub.

    Returns:
        MagicMock: Hub whose connect returns a fixed connection
    """
    hub = MagicMock()
    hub.connect = AsyncMock(
        side_effect=lambda websocket: Connection(
            client_id="client-1", websocket=websocket
        )
    )
    hub.receive = AsyncMock()
    hub.disconnect = AsyncMock()
    return hub


@pytest.fixture
def consumer(mock_hub):
    """
    Provides a Web consumer whose application state holds the mocked hub.
    """
    app = MagicMock()
    app.state.relay_hub = mock_hub
    return Web(scope={"type": "websocket", "app": app}, receive=None, send=None)


class TestWebConsumer:
    """Test the endpoint lifecycle callbacks."""

    @pytest.mark.asyncio
    async def test_connect_registers_before_accept(self, consumer, mock_hub):
        """Test the connection is tracked before the handshake completes."""
        websocket = create_mock_websocket()
        accepted_at_connect = []

        async def connect(ws):
            accepted_at_connect.append(ws.accept.await_count)
            return Connection(client_id="client-1", websocket=ws)

        mock_hub.connect.side_effect = connect

        await consumer.on_connect(websocket)

        assert accepted_at_connect == [0]
        websocket.accept.assert_awaited_once()
        assert consumer.connection.client_id == "client-1"

    @pytest.mark.asyncio
    async def test_receive_forwards_frame(self, consumer, mock_hub):
        websocket = create_mock_websocket()
        await consumer.on_connect(websocket)

        await consumer.on_receive(websocket, '{"type": "ready"}')

        mock_hub.receive.assert_awaited_once_with(
            consumer.connection, '{"type": "ready"}'
        )

    @pytest.mark.asyncio
    async def test_disconnect_reports_to_hub(self, consumer, mock_hub):
        websocket = create_mock_websocket()
        await consumer.on_connect(websocket)

        await consumer.on_disconnect(websocket, 1000)

        mock_hub.disconnect.assert_awaited_once_with(consumer.connection)

    @pytest.mark.asyncio
    async def test_disconnect_before_connect(self, consumer, mock_hub):
        """Test a socket that never got a connection is not reported."""
        await consumer.on_disconnect(create_mock_websocket(), 1006)

        mock_hub.disconnect.assert_not_called()

    @pytest.mark.asyncio
    async def test_decode_text(self, consumer):
        data = await consumer.decode(
            create_mock_websocket(),
            {"type": "websocket.receive", "text": '{"type": "message"}'},
        )

        assert data == '{"type": "message"}'

    @pytest.mark.asyncio
    async def test_decode_bytes(self, consumer):
        data = await consumer.decode(
            create_mock_websocket(),
            {"type": "websocket.receive", "bytes": b'{"type": "ready"}'},
        )

        assert data == '{"type": "ready"}'


def wait_until(predicate, timeout: float = 2.0) -> None:
    """Polls a predicate until it holds or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return
        time.sleep(0.01)
    raise AssertionError("Condition not met in time")


@pytest.fixture
def test_client():
    """
    Provides a TestClient with the application's lifespan running.

    Yields:
        TestClient: Client sharing one event loop across websocket sessions
    """
    with TestClient(application()) as client:
        yield client


def health(client) -> dict:
    return client.get("/health").json()


class TestRelaySessions:
    """Complete sessions through the real endpoint."""

    def test_player_session(self, test_client):
        """Test registration, readiness and disconnect reach the host."""
        with test_client.websocket_connect("/") as host_ws:
            host_ws.send_json({"type": "register", "role": "host"})
            wait_until(lambda: health(test_client)["host_connected"])

            with test_client.websocket_connect("/") as alice:
                alice.send_json(
                    {
                        "type": "register",
                        "role": "client",
                        "value": {"playerName": "Alice"},
                    }
                )
                new_client = host_ws.receive_json()

                alice.send_json(
                    {"type": "ready", "value": {"playerName": "Alice"}}
                )
                player_ready = host_ws.receive_json()

                alice.send_json(
                    {"type": "controls", "value": {"jump": True}}
                )
                player_controls = host_ws.receive_json()

            disconnected = host_ws.receive_json()

        client_id = new_client["data"]["clientId"]
        assert new_client["type"] == "new_client"
        assert new_client["data"]["playerName"] == "Alice"
        assert new_client["data"]["ready"] is False

        assert player_ready["type"] == "player_ready"
        assert player_ready["data"] == {
            "clientId": client_id,
            "playerName": "Alice",
            "ready": True,
        }

        assert player_controls["type"] == "player_controls"
        assert player_controls["data"] == {"jump": True, "clientId": client_id}

        assert disconnected == {
            "type": "client_disconnected",
            "message": f"Client with ID {client_id} has disconnected",
            "data": {"clientId": client_id},
        }

    def test_message_relayed_to_other_connections(self, test_client):
        """Test a message frame reaches the other connection as raw text."""
        with test_client.websocket_connect("/") as sender:
            with test_client.websocket_connect("/") as receiver:
                sender.send_json({"type": "message", "message": "hello"})

                assert receiver.receive_text() == "hello"

    def test_bad_frames_keep_connection_open(self, test_client):
        """Test dropped frames neither close the sender nor reach others."""
        with test_client.websocket_connect("/") as sender:
            with test_client.websocket_connect("/") as receiver:
                sender.send_text("not json")
                sender.send_json({"type": "teleport"})
                sender.send_json({"type": "ready", "value": {"playerName": "X"}})
                sender.send_json({"type": "message", "message": "still here"})

                assert receiver.receive_text() == "still here"

    def test_controls_without_host(self, test_client):
        """Test controls with no host registered does not break the relay."""
        with test_client.websocket_connect("/") as player:
            player.send_json({"type": "register", "role": "client"})
            player.send_json({"type": "controls", "value": {"left": True}})
            wait_until(lambda: health(test_client)["registered_clients"] == 1)

        wait_until(lambda: health(test_client)["active_connections"] == 0)
        assert health(test_client)["status"] == "healthy"

    def test_registry_pruned_on_close(self, test_client):
        with test_client.websocket_connect("/") as player:
            player.send_json({"type": "register", "role": "client"})
            wait_until(lambda: health(test_client)["registered_clients"] == 1)
            assert health(test_client)["active_connections"] == 1

        wait_until(lambda: health(test_client)["registered_clients"] == 0)
        assert health(test_client)["active_connections"] == 0
