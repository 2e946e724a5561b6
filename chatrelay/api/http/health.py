"""Health check endpoint for monitoring service status."""

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

router = APIRouter()


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    message: str
    participants: int


@router.get(
    "/",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check endpoint",
    tags=["health"],
)
async def health_check(request: Request) -> HealthResponse:
    """
    Report that the relay is running.

    The relay has no external dependencies, so the check only reports the
    number of currently connected participants.

    Returns:
        HealthResponse: Service status and participant count.
    """
    registry = request.app.state.session_registry
    return HealthResponse(
        status="ok",
        message="Chat relay running",
        participants=len(registry),
    )
