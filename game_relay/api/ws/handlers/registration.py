"""
Role assignment handler.

A connection becomes the host or a client by sending a register frame.
Roles persist until the connection closes; registering again switches
roles. Host registration follows a last-writer-wins policy: a new host
silently replaces the previous one.
"""

from game_relay.api.ws.constants import MessageType, Role
from game_relay.logging import logger
from game_relay.routing import RelayContext, message_router
from game_relay.schemas.request import RegisterMessage
from game_relay.schemas.response import NotificationModel


@message_router.register(MessageType.REGISTER)
async def register_handler(ctx: RelayContext, message: RegisterMessage) -> None:
    """
    Assigns the declared role to the sending connection.

    Request Data:
        {
            "type": "register",
            "role": "host" | "client",
            "value": {"playerName": str (optional), ...}
        }

    A client registration notifies the host with a new_client envelope
    carrying the client's details, its identifier and ready = false.
    """
    connection = ctx.connection
    registry = ctx.registry

    if message.role == Role.HOST:
        # A host is never tracked as a client
        registry.unregister(connection)
        registry.set_host(connection)
        logger.info(f"Host registered: {connection.client_id}")
        return

    registry.clear_host(connection)
    registry.register(connection.client_id, connection)
    logger.info(
        f"Client registered: {connection.client_id} "
        f"(playerName={message.value.playerName!r})"
    )

    await registry.send_to_host(
        NotificationModel.new_client(
            connection.client_id,
            message.value.model_dump(exclude_none=True),
        )
    )
