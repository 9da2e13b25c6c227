from fastapi import APIRouter

from game_relay.api.ws.websocket import RelayWebSocketEndpoint
from game_relay.logging import logger
from game_relay.settings import app_settings

router = APIRouter()


@router.websocket_route(app_settings.WS_PATH)
class Web(RelayWebSocketEndpoint):
    """
    WebSocket endpoint for the host and the players.

    Every text frame is handed to the relay hub, which decodes and routes
    it. Nothing is sent back for frames that are dropped.
    """

    async def on_receive(self, websocket, data: str):
        """
        Forwards an inbound frame to the relay hub.

        Args:
            websocket: The WebSocket connection instance
            data (str): The frame text
        """
        logger.debug(f"Received frame: {data}")
        await self.hub.receive(self.connection, data)
