"""
Custom exception classes for the chat relay.

Delivery failures and duplicate disconnects are expected races and are
never raised; these exceptions cover frames the relay cannot interpret.
"""


class ChatRelayError(Exception):
    """Base class for chat relay errors."""

    pass


class InvalidEventError(ChatRelayError):
    """
    Inbound frame could not be turned into an event.

    Raised by the frame decoder for undecodable JSON, a missing event name,
    or a payload of the wrong type for its event. ``reason`` is a short
    machine-readable label used for metrics.
    """

    def __init__(self, message: str, reason: str = "invalid") -> None:
        super().__init__(message)
        self.reason = reason


class UnknownEventError(InvalidEventError):
    """Inbound frame names an event the relay does not route."""

    def __init__(self, event: str) -> None:
        super().__init__(f"Unknown event {event!r}", reason="unknown_event")
        self.event = event
