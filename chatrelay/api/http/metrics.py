"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get(
    "/metrics",
    response_class=Response,
    summary="Prometheus metrics endpoint",
    tags=["metrics"],
)
async def metrics() -> Response:
    """
    Expose relay metrics in the Prometheus text format.

    Example:
        ```
        # HELP chat_events_forwarded_total Total events queued for delivery to recipients
        # TYPE chat_events_forwarded_total counter
        chat_events_forwarded_total{event="chat message"} 42.0
        ```
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
