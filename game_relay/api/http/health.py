"""Health check endpoint for monitoring service status."""

from fastapi import APIRouter, Request, Response, status
from pydantic import BaseModel

from game_relay.managers.relay_hub import RelayHub

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    active_connections: int
    registered_clients: int
    host_connected: bool


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    """
    Check health status of the relay.

    The relay is healthy while its hub worker is running. The counts are a
    read-only snapshot of the registry.

    Returns:
        HealthResponse: Health status and registry counts.
        Returns 503 Service Unavailable if the hub is not running.
    """
    hub: RelayHub = request.app.state.relay_hub
    host = hub.registry.get_host()

    healthy = hub.running
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if healthy else "unhealthy",
        active_connections=len(hub.registry.connections),
        registered_clients=len(hub.registry.clients),
        host_connected=host is not None and host.is_open,
    )
