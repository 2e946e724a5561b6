"""
Pytest configuration and fixtures for testing.

This module provides isolated registries, routers and applications so that
tests never share participant state.
"""

import pytest
from fastapi.testclient import TestClient

from chatrelay import application
from chatrelay.managers.session_registry import SessionRegistry
from chatrelay.routing import EventRouter
from tests.mocks.channel_mocks import RecordingChannel
from tests.mocks.timer_mocks import FakeScheduler


@pytest.fixture
def registry():
    """Provides an empty SessionRegistry."""
    return SessionRegistry()


@pytest.fixture
def event_router(registry):
    """Provides an EventRouter bound to the registry fixture."""
    return EventRouter(registry)


@pytest.fixture
def connect(event_router):
    """
    Connects a new RecordingChannel through the router.

    Returns:
        Callable returning ``(participant_id, channel)``.
    """

    def _connect():
        channel = RecordingChannel()
        return event_router.connect(channel), channel

    return _connect


@pytest.fixture
def scheduler():
    """Provides a manual timer source starting at t=0."""
    return FakeScheduler()


@pytest.fixture
def relay_app():
    """Provides a fresh application with its own registry."""
    return application()


@pytest.fixture
def client(relay_app):
    """
    Provides a TestClient running the application lifespan.

    All WebSocket sessions opened from this client share one event loop.
    """
    with TestClient(relay_app) as test_client:
        yield test_client
