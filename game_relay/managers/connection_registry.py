import asyncio
import uuid

from starlette.websockets import WebSocket, WebSocketDisconnect

from game_relay.api.ws.constants import DropReason
from game_relay.logging import logger
from game_relay.schemas.connection import Connection
from game_relay.schemas.response import NotificationModel
from game_relay.utils.metrics import (
    ws_host_connected,
    ws_messages_dropped_total,
    ws_messages_sent_total,
    ws_registered_clients,
)

# Errors a send to a closing or closed websocket can raise
SEND_ERRORS = (WebSocketDisconnect, ConnectionError, RuntimeError)


class ConnectionRegistry:
    """
    Registry of live relay connections, registered clients and the host.

    Holds three independent views:
    - every live transport connection, keyed by identifier (broadcast targets)
    - connections registered as clients, mapped in both directions
    - the single optional host connection

    Identifiers are minted here (uuid4) and never reused. The registry is
    not thread-safe; it is owned by the relay hub, which applies all
    mutations one event at a time.
    """

    def __init__(self) -> None:
        self.connections: dict[str, Connection] = {}
        self.clients: dict[str, Connection] = {}
        self._client_ids: dict[Connection, str] = {}
        self._host: Connection | None = None

    def connect(self, websocket: WebSocket) -> Connection:
        """
        Mints an identifier for a new transport connection and tracks it.

        Args:
            websocket: The transport handle of the new connection.

        Returns:
            The tracked connection.
        """
        client_id = str(uuid.uuid4())
        while client_id in self.connections:  # pragma: no cover
            client_id = str(uuid.uuid4())

        connection = Connection(client_id=client_id, websocket=websocket)
        self.connections[client_id] = connection
        logger.debug(
            f"websocket object ({id(websocket)}) added to live connections "
            f"with id {client_id}"
        )
        return connection

    def register(self, client_id: str, connection: Connection) -> None:
        """
        Adds a connection to the client map.

        Args:
            client_id: Identifier minted for the connection.
            connection: The connection to register as a client.
        """
        self.clients[client_id] = connection
        self._client_ids[connection] = client_id
        ws_registered_clients.set(len(self.clients))

    def lookup_identifier(self, connection: Connection) -> str | None:
        """
        Reverse lookup of a registered client.

        Returns:
            The client identifier, or None if the connection never registered
            as a client, is the host, or was already removed.
        """
        return self._client_ids.get(connection)

    def unregister(self, connection: Connection) -> None:
        """Drops a connection from the client map, keeping it live."""
        client_id = self._client_ids.pop(connection, None)
        if client_id is not None:
            self.clients.pop(client_id, None)
            ws_registered_clients.set(len(self.clients))

    def remove(self, client_id: str) -> None:
        """
        Forgets a connection entirely. Idempotent.

        Args:
            client_id: Identifier of the connection to remove.
        """
        connection = self.connections.pop(client_id, None)
        client = self.clients.pop(client_id, None)
        if client is not None:
            self._client_ids.pop(client, None)
            ws_registered_clients.set(len(self.clients))

        if connection is not None:
            logger.debug(
                f"websocket object ({id(connection.websocket)}) removed from "
                f"live connections for id {client_id}"
            )

    def set_host(self, connection: Connection) -> None:
        """
        Makes a connection the host. The last registration wins.
        """
        if self._host is not None and self._host is not connection:
            logger.info(
                f"Host {self._host.client_id} replaced by {connection.client_id}"
            )
        self._host = connection
        ws_host_connected.set(1)

    def get_host(self) -> Connection | None:
        return self._host

    def clear_host(self, connection: Connection) -> bool:
        """
        Clears the host reference if it points at the given connection.

        Returns:
            True if the connection was the host.
        """
        if self._host is not connection:
            return False

        self._host = None
        ws_host_connected.set(0)
        return True

    def is_host(self, connection: Connection) -> bool:
        return self._host is connection

    def peers(self, exclude: Connection | None = None) -> list[Connection]:
        """
        Snapshot of every live connection except one.

        Args:
            exclude: Connection to leave out, usually the sender.
        """
        return [
            connection
            for connection in self.connections.values()
            if connection is not exclude
        ]

    async def send_to_host(self, notification: NotificationModel) -> bool:
        """
        Sends a notification to the host if one is registered and open.

        Args:
            notification: The envelope to send.

        Returns:
            True if the frame was handed to the transport.
        """
        host = self._host
        if host is None or not host.is_open:
            logger.debug(
                f"No open host, skipping {notification.type} notification"
            )
            ws_messages_dropped_total.labels(
                reason=DropReason.HOST_UNAVAILABLE.value
            ).inc()
            return False

        try:
            await host.send_text(notification.to_text())
        except SEND_ERRORS as e:
            logger.warning(
                f"Failed to send {notification.type} to host "
                f"{host.client_id}: {e}"
            )
            ws_messages_dropped_total.labels(
                reason=DropReason.SEND_FAILED.value
            ).inc()
            return False

        ws_messages_sent_total.labels(target="host").inc()
        return True

    async def broadcast_text(
        self, text: str, exclude: Connection | None = None
    ) -> int:
        """
        Sends raw text to every other open live connection concurrently.

        Closed connections are skipped and a failed send to one recipient
        does not affect the others.

        Args:
            text: Frame to send, unmodified.
            exclude: Connection that must not receive the frame.

        Returns:
            Number of connections the frame was delivered to.
        """
        recipients = [
            connection
            for connection in self.peers(exclude)
            if connection.is_open
        ]
        if not recipients:
            return 0

        async def safe_send(connection: Connection) -> bool:
            try:
                await connection.send_text(text)
            except SEND_ERRORS as e:
                logger.warning(
                    f"Failed to send to connection {connection.client_id}: {e}"
                )
                ws_messages_dropped_total.labels(
                    reason=DropReason.SEND_FAILED.value
                ).inc()
                return False
            return True

        results = await asyncio.gather(
            *[safe_send(connection) for connection in recipients]
        )
        delivered = sum(1 for ok in results if ok)
        ws_messages_sent_total.labels(target="peer").inc(delivered)
        return delivered
