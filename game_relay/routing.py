import os
import pkgutil
from collections.abc import Awaitable
from dataclasses import dataclass
from importlib import import_module
from typing import Any, Callable

from fastapi import APIRouter

from game_relay.api.ws.constants import DropReason, MessageType
from game_relay.exceptions import MessageDecodeError
from game_relay.logging import logger
from game_relay.managers.connection_registry import ConnectionRegistry
from game_relay.schemas.connection import Connection
from game_relay.schemas.request import InboundMessage, decode_message
from game_relay.utils.metrics import (
    ws_messages_dropped_total,
    ws_messages_received_total,
)


@dataclass
class RelayContext:
    """
    Everything a message handler needs besides the message itself.

    Attributes:
        connection: The connection the frame arrived on.
        registry: Registry of live connections, clients and the host.
    """

    connection: Connection
    registry: ConnectionRegistry


HandlerCallableType = Callable[[RelayContext, Any], Awaitable[None]]


class MessageRouter:
    """
    Router for inbound relay frames.

    Decodes each frame into a typed message and dispatches it to the handler
    registered for its discriminator. Frames that cannot be decoded are
    logged and dropped; nothing is ever sent back to the sender.
    """

    def __init__(self):
        """
        Initializes the `MessageRouter` with an empty handler registry.

        The `handlers_registry` dictionary maps message types to the
        coroutine functions that handle them.
        """
        self.handlers_registry: dict[MessageType, HandlerCallableType] = {}

    def register(self, *message_types: MessageType):
        """
        Decorator function to register a handler for one or more message types.

        Args:
            *message_types (MessageType): Discriminators handled by the function.

        Returns:
            A decorator function that can be used to register a handler function.
        """

        def decorator(func: HandlerCallableType):
            for message_type in message_types:
                # Check if handler is already registered (idempotent for reload)
                if message_type in self.handlers_registry:
                    if self.handlers_registry[message_type] != func:
                        raise ValueError(
                            f"Different handler already registered for "
                            f"message type {message_type}"
                        )
                    continue

                self.handlers_registry[message_type] = func
                logger.debug(
                    f"Register {func.__module__}.{func.__name__} for "
                    f"message type: {message_type}"
                )

            return func

        return decorator

    def get_handler(self, message_type: MessageType) -> HandlerCallableType | None:
        return self.handlers_registry.get(message_type)

    def decode(self, text: str) -> InboundMessage | None:
        """
        Decodes a frame, logging and counting it when it has to be dropped.

        Returns:
            The decoded message, or None if the frame is dropped.
        """
        try:
            return decode_message(text)
        except MessageDecodeError as ex:
            logger.warning(f"Dropping frame: {ex}")
            ws_messages_dropped_total.labels(reason=ex.reason).inc()
            return None

    async def dispatch(self, ctx: RelayContext, text: str) -> None:
        """
        Routes one inbound frame to its handler.

        Args:
            ctx: The sender and the registry.
            text: Raw text frame.
        """
        message = self.decode(text)
        if message is None:
            return

        message_type = MessageType(message.type)
        ws_messages_received_total.labels(type=message_type.value).inc()

        handler = self.get_handler(message_type)
        if handler is None:
            logger.warning(f"No handler found for message type {message_type}")
            ws_messages_dropped_total.labels(
                reason=DropReason.UNKNOWN_TYPE.value
            ).inc()
            return

        await handler(ctx, message)


message_router = MessageRouter()


# Track registered modules to prevent duplicate logging
_registered_http_modules: set[str] = set()
_registered_ws_modules: set[str] = set()


def collect_subrouters() -> APIRouter:
    """
    Collects and registers all HTTP and WebSocket routers of the application.

    Iterates through the `api/http` and `api/ws/consumers` directories,
    imports the corresponding modules, and adds their routers to the main
    `APIRouter` instance.
    """
    main_router: APIRouter = APIRouter()

    app_dir = os.path.dirname(__file__)
    app_name = os.path.basename(app_dir)

    for _, module, _ in pkgutil.iter_modules([f"{app_dir}/api/http"]):
        api = import_module(f".{module}", package=f"{app_name}.api.http")
        main_router.include_router(api.router)

        if module not in _registered_http_modules:
            logger.info(f'Register "{module}" api')
            _registered_http_modules.add(module)

    for _, module, _ in pkgutil.iter_modules([f"{app_dir}/api/ws/consumers"]):
        ws_consumer = import_module(
            f".{module}", package=f"{app_name}.api.ws.consumers"
        )
        main_router.include_router(ws_consumer.router)

        if module not in _registered_ws_modules:
            logger.info(f'Register "{module}" websocket consumer')
            _registered_ws_modules.add(module)

    return main_router
