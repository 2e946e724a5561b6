"""
Async chat client for the relay.

Mirrors what a chat page does on top of the WebSocket protocol: it keeps the
message log, debounces its own typing state and tracks who else is typing.

Example:
    ```python
    client = ChatClient("ws://localhost:8080/ws")
    await client.connect()
    receiver = asyncio.create_task(client.run())
    await client.wait_connected()

    client.keystroke()
    client.send_message("hi")
    await client.close()
    ```
"""

import asyncio
import contextlib
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

import websockets
from pydantic import ValidationError
from websockets.exceptions import ConnectionClosed

from chatrelay.constants import (
    WS_CLOSE_TIMEOUT_SECONDS,
    WS_CONNECT_TIMEOUT_SECONDS,
    ChatEvent,
)
from chatrelay.logging import logger
from chatrelay.presence.debounce import TypingDebouncer
from chatrelay.presence.tracker import TypingPresenceTracker
from chatrelay.protocols import TimerScheduler
from chatrelay.schemas.events import (
    ConnectNotice,
    EventFrame,
    TypingNotice,
    encode_event,
)

EntryKind = Literal["sent", "received", "system"]


@dataclass
class ChatLogEntry:
    """One line of the local chat log."""

    text: str
    kind: EntryKind
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


class ChatClient:
    """
    Client side of the chat relay protocol.

    Outgoing frames go through a queue drained by a writer task, so the
    ``typing: false`` emitted on send always reaches the relay before the
    message itself.

    Args:
        url: WebSocket URL of the relay, e.g. ``ws://localhost:8080/ws``.
        schedule: Timer source for the typing debouncer.
        on_entry: Called for every new chat log entry.
        on_typing_change: Called with the typing indicator text whenever the
            set of typing participants changes.
    """

    def __init__(
        self,
        url: str,
        *,
        schedule: TimerScheduler | None = None,
        on_entry: Callable[[ChatLogEntry], None] | None = None,
        on_typing_change: Callable[[str], None] | None = None,
    ) -> None:
        self.url = url
        self.participant_id: str | None = None
        self.messages: list[ChatLogEntry] = []
        self.tracker = TypingPresenceTracker()
        self.debouncer = TypingDebouncer(self._emit_typing, schedule=schedule)
        self.connection: Any = None
        self.connected = asyncio.Event()
        self._on_entry = on_entry
        self._on_typing_change = on_typing_change
        self._outbox: asyncio.Queue[str] = asyncio.Queue()
        self._writer: asyncio.Task[None] | None = None

    async def connect(self) -> None:
        """Opens the WebSocket connection and starts the writer task."""
        self.attach(await websockets.connect(self.url))
        logger.debug(f"Connected to {self.url}")

    def attach(self, connection: Any) -> None:
        """
        Uses an already open connection.

        Args:
            connection: Object with async ``send``, ``close`` and async
                iteration over received frames.
        """
        self.connection = connection
        self._writer = asyncio.create_task(self._run_writer())

    async def wait_connected(
        self, timeout: float = WS_CONNECT_TIMEOUT_SECONDS
    ) -> str:
        """Waits for the relay's ``connect`` hello and returns the own id."""
        await asyncio.wait_for(self.connected.wait(), timeout)
        return self.participant_id  # type: ignore[return-value]

    def keystroke(self) -> None:
        """Registers a keystroke in the message input."""
        self.debouncer.keystroke()

    def send_message(self, text: str) -> bool:
        """
        Sends a chat message.

        Empty or whitespace-only text is not sent. Otherwise the typing
        indicator is cleared on recipients first, then the message follows.

        Returns:
            True if the message was queued, False for blank text or after
            the connection was lost.
        """
        if not text.strip():
            return False

        self.debouncer.message_sent()
        if not self._enqueue(ChatEvent.CHAT_MESSAGE, text):
            return False
        self._log(text, "sent")
        return True

    def handle_frame(self, raw: str | bytes) -> None:
        """Decodes one frame from the relay and applies it."""
        frame = EventFrame.model_validate_json(raw)
        self.handle_event(frame.event, frame.data)

    def handle_event(self, event: str, data: Any) -> None:
        """
        Applies one event received from the relay.

        Args:
            event: Event name.
            data: Event payload.

        Raises:
            ValidationError: If the payload does not match the event.
        """
        if event == ChatEvent.CONNECT:
            hello = ConnectNotice.model_validate(data)
            self.participant_id = hello.participant_id
            self.tracker.reset()
            self.connected.set()
            self._log(f"Connected ({hello.participant_id})", "system")
        elif event == ChatEvent.CHAT_MESSAGE:
            self._log(str(data), "received")
        elif event == ChatEvent.TYPING:
            notice = TypingNotice.model_validate(data)
            if self.tracker.apply_notice(notice) and self._on_typing_change:
                self._on_typing_change(self.tracker.describe())
        else:
            logger.debug(f"Ignoring unknown event {event!r}")

    async def run(self) -> None:
        """Receives frames until the connection closes."""
        try:
            async for raw in self.connection:
                try:
                    self.handle_frame(raw)
                except ValidationError as ex:
                    logger.warning(f"Ignoring malformed frame {raw!r}: {ex}")
        except ConnectionClosed as ex:
            logger.debug(f"Connection closed: {ex}")
        finally:
            self._disconnected()

    async def close(self) -> None:
        """Flushes queued frames and closes the connection."""
        self.debouncer.cancel()

        if self._writer is not None:
            if not self._writer.done():
                with contextlib.suppress(TimeoutError):
                    await asyncio.wait_for(
                        self._outbox.join(), WS_CLOSE_TIMEOUT_SECONDS
                    )
            self._writer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._writer
            self._writer = None

        if self.connection is not None:
            await self.connection.close()

    def _emit_typing(self, is_typing: bool) -> None:
        self._enqueue(ChatEvent.TYPING, is_typing)

    def _enqueue(self, event: ChatEvent, payload: Any) -> bool:
        if self._writer is not None and self._writer.done():
            logger.debug(f"Dropping {event.value!r} frame, connection is gone")
            return False
        self._outbox.put_nowait(encode_event(event.value, payload))
        return True

    async def _run_writer(self) -> None:
        while True:
            text = await self._outbox.get()
            try:
                await self.connection.send(text)
            except ConnectionClosed as ex:
                logger.debug(f"Dropping outgoing frames: {ex}")
                while not self._outbox.empty():
                    self._outbox.get_nowait()
                    self._outbox.task_done()
                return
            finally:
                self._outbox.task_done()

    def _disconnected(self) -> None:
        self.debouncer.cancel()
        if self.tracker.typing:
            self.tracker.reset()
            if self._on_typing_change:
                self._on_typing_change(self.tracker.describe())
        if self.connected.is_set():
            self.connected.clear()
            self._log("Disconnected", "system")

    def _log(self, text: str, kind: EntryKind) -> None:
        entry = ChatLogEntry(text=text, kind=kind)
        self.messages.append(entry)
        if self._on_entry:
            self._on_entry(entry)
