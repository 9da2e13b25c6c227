"""
Single owner of the relay state.

Every connect, frame and disconnect event goes through one asyncio queue
and is applied by one worker task, one event at a time. Handlers therefore
never observe the registry half-updated: a client registration and the
new_client notification it triggers cannot interleave with the host
disconnecting.
"""

import asyncio
import contextvars
from collections.abc import Awaitable
from typing import Any, Callable

from starlette.websockets import WebSocket

# Importing the package registers the message handlers
import game_relay.api.ws.handlers  # noqa: F401
from game_relay.logging import logger, set_log_context
from game_relay.managers.connection_registry import ConnectionRegistry
from game_relay.routing import MessageRouter, RelayContext, message_router
from game_relay.schemas.connection import Connection
from game_relay.schemas.response import NotificationModel
from game_relay.utils.metrics import (
    ws_connections_active,
    ws_connections_total,
)

EventType = tuple[
    Callable[[], Awaitable[Any]], asyncio.Future, contextvars.Context
]


class RelayHub:
    """
    Actor that serializes all access to a `ConnectionRegistry`.

    Connection handlers call `connect`, `receive` and `disconnect`; each
    call enqueues an event and waits until the worker task has applied it.
    """

    def __init__(
        self,
        registry: ConnectionRegistry | None = None,
        router: MessageRouter | None = None,
    ) -> None:
        self.registry = registry or ConnectionRegistry()
        self.router = router or message_router
        self._queue: asyncio.Queue[EventType] | None = None
        self._worker: asyncio.Task | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self) -> None:
        """
        Starts the worker task on the running event loop.

        Calling it again while the worker runs on the same loop is a no-op.
        """
        loop = asyncio.get_running_loop()
        if self.running and self._loop is loop:
            return

        self._loop = loop
        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._run(self._queue))
        logger.info("Relay hub started")

    async def stop(self) -> None:
        """Cancels the worker task and waits for it to finish."""
        if self._worker is None:
            return

        worker, self._worker = self._worker, None
        worker.cancel()
        await asyncio.gather(worker, return_exceptions=True)

        # Release callers whose events never ran
        while self._queue is not None and not self._queue.empty():
            _, future, _ = self._queue.get_nowait()
            if not future.done():
                future.cancel()

        logger.info("Relay hub stopped")

    async def _run(self, queue: asyncio.Queue) -> None:
        """
        Worker loop applying queued events in arrival order.

        Each event runs in the context of the caller that submitted it, so
        its log lines carry that connection's identifier. A failing event is
        logged and its caller released; the loop keeps running so one
        misbehaving connection never stalls the others.
        """
        while True:
            event, future, context = await queue.get()
            try:
                result = await asyncio.create_task(event(), context=context)
            except asyncio.CancelledError:
                if not future.done():
                    future.cancel()
                raise
            except Exception as ex:
                logger.exception(f"Relay hub event failed: {ex}")
                result = None
            finally:
                queue.task_done()

            if not future.done():
                future.set_result(result)

    async def submit(self, event: Callable[[], Awaitable[Any]]) -> Any:
        """
        Runs an event inside the worker and waits for its result.

        Args:
            event: Coroutine function applied with exclusive registry access.

        Returns:
            Whatever the event returned, or None if it failed.
        """
        if not self.running or self._loop is not asyncio.get_running_loop():
            self.start()

        future = asyncio.get_running_loop().create_future()
        await self._queue.put((event, future, contextvars.copy_context()))
        return await future

    async def connect(self, websocket: WebSocket) -> Connection:
        """
        Tracks a new transport connection and returns it with its identifier.
        """

        async def event() -> Connection:
            connection = self.registry.connect(websocket)
            set_log_context(client_id=connection.client_id)
            ws_connections_total.labels(status="accepted").inc()
            ws_connections_active.inc()
            logger.info(f"New client connected with ID: {connection.client_id}")
            return connection

        return await self.submit(event)

    async def receive(self, connection: Connection, text: str) -> None:
        """Routes one inbound frame of a connection."""
        ctx = RelayContext(connection=connection, registry=self.registry)
        await self.submit(lambda: self.router.dispatch(ctx, text))

    async def disconnect(self, connection: Connection) -> None:
        """
        Forgets a closed connection.

        A registered client's departure is announced to the host with a
        client_disconnected envelope. When the host itself closes, the host
        reference is cleared.
        """

        async def event() -> None:
            registry = self.registry
            if connection.client_id not in registry.connections:
                return

            was_client = registry.lookup_identifier(connection) is not None
            registry.remove(connection.client_id)
            ws_connections_total.labels(status="closed").inc()
            ws_connections_active.dec()
            logger.info(f"Client disconnected with ID: {connection.client_id}")

            if registry.is_host(connection):
                registry.clear_host(connection)
                logger.info(f"Host {connection.client_id} disconnected")
                return

            if was_client:
                await registry.send_to_host(
                    NotificationModel.client_disconnected(connection.client_id)
                )

        await self.submit(event)
