from typing import Any

from starlette import status
from starlette.endpoints import WebSocketEndpoint
from starlette.websockets import WebSocket

from game_relay.logging import clear_log_context, logger, set_log_context
from game_relay.managers.relay_hub import RelayHub
from game_relay.schemas.connection import Connection


class RelayWebSocketEndpoint(WebSocketEndpoint):  # type: ignore[misc]
    """
    WebSocket endpoint backed by the application's relay hub.

    Registers every accepted socket with the hub, and reports its close
    event back so the registry is pruned and the host notified. Subclasses
    implement `on_receive`.
    """

    encoding = None  # Text frames are routed, binary frames are decoded as UTF-8

    connection: Connection | None = None

    @property
    def hub(self) -> RelayHub:
        return self.scope["app"].state.relay_hub

    async def decode(self, websocket: WebSocket, message: dict[str, Any]) -> str:
        """
        Extract the text of an inbound frame.

        Binary frames are decoded as UTF-8 text; undecodable bytes are
        replaced, so the router reports the frame as malformed.

        Args:
            websocket: WebSocket connection instance
            message: Raw message dict from WebSocket

        Returns:
            The frame text.
        """
        if message.get("text") is not None:
            return message["text"]

        data = message.get("bytes") or b""
        return data.decode("utf-8", errors="replace")

    async def on_connect(self, websocket):  # type: ignore[no-untyped-def]
        """
        Tracks the connection before accepting it.

        The connection is registered first so it is a broadcast target as
        soon as the handshake completes.
        """
        self.connection = await self.hub.connect(websocket)
        set_log_context(client_id=self.connection.client_id)

        await super().on_connect(websocket)
        logger.debug(
            f"Client connected to websocket (client_id: {self.connection.client_id})"
        )

    async def on_disconnect(self, websocket, close_code):  # type: ignore[no-untyped-def]
        """
        Removes the connection from the registry and notifies the host.
        """
        await super().on_disconnect(websocket, close_code)

        if self.connection is not None:
            await self.hub.disconnect(self.connection)

        close_reason = (
            "normal closure"
            if close_code == status.WS_1000_NORMAL_CLOSURE
            else f"code {close_code}"
        )
        logger.debug(f"Client disconnected with {close_reason}")
        clear_log_context()
