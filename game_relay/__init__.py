# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
import logging as stdlib_logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.staticfiles import StaticFiles

from game_relay.logging import logger
from game_relay.managers.relay_hub import RelayHub
from game_relay.routing import collect_subrouters
from game_relay.settings import app_settings
from game_relay.uvicorn_filters import ExcludeMetricsFilter


def startup(app: FastAPI):
    """
    Application startup handler
    """

    async def wrapper():
        """
        Asynchronous initialization wrapper that:
        - Starts the relay hub worker on the serving event loop
        - Filters monitoring endpoints out of the uvicorn access log
        """
        logger.info("Application startup initiated")

        app.state.relay_hub.start()

        access_logger = stdlib_logging.getLogger("uvicorn.access")
        if not any(
            isinstance(f, ExcludeMetricsFilter) for f in access_logger.filters
        ):
            access_logger.addFilter(ExcludeMetricsFilter())

        logger.info(
            f"Server is listening on {app_settings.HOST}:{app_settings.PORT}"
        )

    return wrapper


def shutdown(app: FastAPI):
    """
    Application shutdown handler
    """

    async def wrapper():
        """
        Asynchronous shutdown wrapper that stops the relay hub worker.
        """
        logger.info("Application shutdown initiated")
        await app.state.relay_hub.stop()
        logger.info("Application shutdown complete")

    return wrapper


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup(app)()
    try:
        yield
    finally:
        await shutdown(app)()


def application() -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    Each application owns one `RelayHub`, stored on `app.state.relay_hub`,
    which in turn owns the connection registry.

    The routers collected by `game_relay.routing.collect_subrouters()` are
    included first: the health and metrics endpoints and the WebSocket
    consumer. The static game UI, when `STATIC_DIR` exists, is mounted at
    "/" last so it never shadows them.
    """
    app = FastAPI(
        title="Game relay",
        description="Real-time relay between a game host and its players",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.relay_hub = RelayHub()

    # Collect routers
    app.include_router(collect_subrouters())

    if os.path.isdir(app_settings.STATIC_DIR):
        app.mount(
            "/",
            StaticFiles(directory=app_settings.STATIC_DIR, html=True),
            name="static",
        )
        logger.info(f'Serving static files from "{app_settings.STATIC_DIR}"')

    return app


app = application()  # Need for fastapi cli
