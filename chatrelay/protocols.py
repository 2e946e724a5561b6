"""
Protocol classes for structural subtyping (duck typing with type safety).

The relay core never touches a WebSocket directly: it talks to anything
that satisfies ``Channel``. The transport adapter in
``chatrelay.api.ws.channel`` is the production implementation; tests use
plain recording objects.
"""

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

# Opaque participant identifier assigned by the session registry
ParticipantId = str

# Handler bound to one participant for one event kind
EventHandler = Callable[[Any], None]


@runtime_checkable
class Channel(Protocol):
    """
    Protocol for a participant's outbound message channel.

    ``send`` must return without waiting on the network and must be a
    silent no-op once the channel is closed.
    """

    @property
    def closed(self) -> bool:
        """Whether the underlying connection is gone."""
        ...

    def send(self, event: str, payload: Any) -> None:
        """
        Queue one event for delivery.

        Args:
            event: Event name.
            payload: JSON-serializable event data.
        """
        ...

    async def close(self) -> None:
        """Stop delivery and release the connection."""
        ...


@runtime_checkable
class TimerHandle(Protocol):
    """Protocol for a cancellable single-shot timer."""

    def cancel(self) -> None:
        """Cancel the timer; a no-op if it already fired."""
        ...


# Schedules ``callback`` after ``delay`` seconds and returns its handle
TimerScheduler = Callable[[float, Callable[[], None]], TimerHandle]
