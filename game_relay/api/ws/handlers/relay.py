from game_relay.api.ws.constants import MessageType
from game_relay.logging import logger
from game_relay.routing import RelayContext, message_router
from game_relay.schemas.request import BroadcastMessage


@message_router.register(MessageType.MESSAGE)
async def message_handler(ctx: RelayContext, message: BroadcastMessage) -> None:
    """
    Relays the message text verbatim to every other open connection.

    Unlike host notifications the text is not wrapped in an envelope.
    Registration is not required, and the host receives the text like any
    other live connection.
    """
    logger.debug(f"Received: {message.message}")
    delivered = await ctx.registry.broadcast_text(
        message.message, exclude=ctx.connection
    )
    logger.debug(f"Message relayed to {delivered} connection(s)")
