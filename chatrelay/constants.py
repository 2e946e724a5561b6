"""
Protocol constants for the chat relay.

These values define the wire protocol and the typing debounce behaviour
shared by the server and its clients. They are not configurable through
environment variables; see chatrelay/settings.py for deployment options.
"""

from enum import Enum


class ChatEvent(str, Enum):
    """
    Event names carried in the ``event`` field of every WebSocket frame.

    Attributes:
        CONNECT: Server hello sent to a participant right after registration.
        CHAT_MESSAGE: Raw chat text, forwarded to everyone but the sender.
        TYPING: Typing transition; a bool inbound, a notice outbound.
    """

    CONNECT = "connect"
    CHAT_MESSAGE = "chat message"
    TYPING = "typing"

    def __str__(self) -> str:
        return self.value


# ============================================================================
# Typing Debounce
# ============================================================================

# Idle window (seconds) after the last keystroke before the sending side
# emits "typing: false"
TYPING_DEBOUNCE_SECONDS = 1.0


# ============================================================================
# WebSocket Protocol Constants
# ============================================================================

# Timeout (seconds) a client waits for the relay's connect hello
WS_CONNECT_TIMEOUT_SECONDS = 5

# Timeout (seconds) for flushing queued frames when a client closes
WS_CLOSE_TIMEOUT_SECONDS = 5


# ============================================================================
# Typing Indicator Text
# ============================================================================

TYPING_SINGLE_TEXT = "Someone is typing..."
TYPING_MULTIPLE_TEXT = "{count} people are typing..."
