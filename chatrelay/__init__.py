# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatrelay.logging import logger
from chatrelay.managers.session_registry import SessionRegistry
from chatrelay.routing import EventRouter, collect_subrouters
from chatrelay.settings import app_settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager for startup and shutdown.

    Shutdown closes the channel of every participant still connected and
    empties the registry.
    """
    logger.info(
        f"Chat relay started (websocket path {app_settings.WS_PATH}, "
        f"env {app_settings.ENV.value})"
    )

    yield  # Application runs here

    registry: SessionRegistry = app.state.session_registry
    event_router: EventRouter = app.state.event_router
    members = registry.members()
    if members:
        logger.info(f"Closing {len(members)} participant channels")
    for participant_id in members:
        channel = registry.channel(participant_id)
        event_router.on_disconnect(participant_id)
        if channel is not None:
            await channel.close()

    logger.info("Chat relay shutdown complete")


def application() -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    Every call builds a new application with its own `SessionRegistry` and
    `EventRouter`, stored on ``app.state``. Routers are collected from
    `api/http` and `api/ws/consumers`, and `CORSMiddleware` allows the
    origins from ``ALLOWED_ORIGINS``.
    """
    app = FastAPI(
        title="Chat relay",
        description="Real-time chat and typing presence relay",
        version="1.0.0",
        lifespan=lifespan,
    )

    registry = SessionRegistry()
    app.state.session_registry = registry
    app.state.event_router = EventRouter(
        registry,
        clear_typing_on_disconnect=app_settings.CLEAR_TYPING_ON_DISCONNECT,
    )

    app.include_router(collect_subrouters())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    return app


app = application()  # Need for fastapi cli
