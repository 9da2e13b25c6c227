"""
Handlers for frames only registered clients may send.

Both handlers resolve the sender through the client map first. Frames from
connections that never registered as a client (including the host) are
dropped without any outbound frame.
"""

from game_relay.api.ws.constants import DropReason, MessageType
from game_relay.logging import logger
from game_relay.routing import RelayContext, message_router
from game_relay.schemas.request import ControlsMessage, ReadyMessage
from game_relay.schemas.response import NotificationModel
from game_relay.utils.metrics import ws_messages_dropped_total


@message_router.register(MessageType.READY)
async def ready_handler(ctx: RelayContext, message: ReadyMessage) -> None:
    """
    Notifies the host that a player is ready.

    Request Data:
        {"type": "ready", "value": {"playerName": str}}

    Sent to host:
        {"type": "player_ready", "message": ..., "data":
            {"playerName": str, ..., "clientId": str, "ready": true}}
    """
    client_id = ctx.registry.lookup_identifier(ctx.connection)
    if client_id is None:
        logger.warning(
            f"Ready from unregistered connection {ctx.connection.client_id}, "
            "dropping"
        )
        ws_messages_dropped_total.labels(
            reason=DropReason.UNREGISTERED_SENDER.value
        ).inc()
        return

    logger.info(f"Player ready: {message.value.playerName}")
    await ctx.registry.send_to_host(
        NotificationModel.player_ready(client_id, message.value.model_dump())
    )


@message_router.register(MessageType.CONTROLS)
async def controls_handler(ctx: RelayContext, message: ControlsMessage) -> None:
    """
    Forwards a player's control state to the host.

    Every control field is echoed as-is, together with the client
    identifier. Without an open host the frame is skipped, like every
    other host notification.
    """
    client_id = ctx.registry.lookup_identifier(ctx.connection)
    if client_id is None:
        logger.debug(
            f"Controls from unregistered connection "
            f"{ctx.connection.client_id}, dropping"
        )
        ws_messages_dropped_total.labels(
            reason=DropReason.UNREGISTERED_SENDER.value
        ).inc()
        return

    await ctx.registry.send_to_host(
        NotificationModel.player_controls(client_id, message.value)
    )
