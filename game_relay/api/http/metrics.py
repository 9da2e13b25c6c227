"""Prometheus scrape endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get(
    "/metrics",
    response_class=Response,
    summary="Relay metrics in Prometheus text format",
    tags=["metrics"],
)
async def metrics() -> Response:
    """
    Connection counts, host presence and per-type frame counters of the
    relay, e.g. `ws_messages_dropped_total{reason="malformed"} 2.0`.
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
