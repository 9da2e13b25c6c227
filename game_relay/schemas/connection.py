from dataclasses import dataclass, field

from starlette.websockets import WebSocket, WebSocketState


@dataclass(eq=False)
class Connection:
    """
    A live transport endpoint tracked by the relay.

    Instances compare and hash by identity, so they can key the reverse
    side of the client map.

    Attributes:
        client_id: Identifier minted by the registry at connect time.
        websocket: Transport handle used to send frames.
    """

    client_id: str
    websocket: WebSocket = field(repr=False)

    @property
    def is_open(self) -> bool:
        """
        Whether frames can currently be sent to this connection.

        Both sides of the handshake must be connected: the peer has not
        sent a close frame and the server has not closed the socket.
        """
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_text(self, text: str) -> None:
        await self.websocket.send_text(text)
