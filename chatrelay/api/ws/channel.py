import asyncio
import contextlib
from typing import Any

from starlette.websockets import WebSocket, WebSocketDisconnect

from chatrelay.logging import logger
from chatrelay.schemas.events import encode_event
from chatrelay.utils.metrics import chat_deliveries_dropped_total


class WebSocketChannel:
    """
    Outbound channel of one participant over a Starlette WebSocket.

    ``send`` only queues the frame; a writer task started with ``start``
    writes queued frames to the socket in order. A failed write closes the
    channel and drops whatever is still queued, without raising to the code
    that queued the frame.
    """

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._writer: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def backlog(self) -> int:
        """Number of frames queued but not yet written."""
        return self._queue.qsize()

    def start(self) -> None:
        """Starts the writer task on the running event loop."""
        if self._writer is None:
            self._writer = asyncio.create_task(self._run())

    def send(self, event: str, payload: Any) -> None:
        """
        Queues one frame for the participant.

        Args:
            event: Event name.
            payload: JSON-serializable event data.
        """
        if self._closed:
            chat_deliveries_dropped_total.inc()
            return
        self._queue.put_nowait(encode_event(event, payload))

    async def close(self) -> None:
        """Stops the writer task and drops pending frames."""
        self._mark_closed()
        if self._writer is not None:
            self._writer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._writer
            self._writer = None

    async def _run(self) -> None:
        while not self._closed:
            text = await self._queue.get()
            try:
                await self.websocket.send_text(text)
            except (WebSocketDisconnect, OSError, RuntimeError) as e:
                # WebSocketDisconnect: Client disconnected
                # OSError: Network errors
                # RuntimeError: WebSocket already closed
                logger.debug(f"Send failed on websocket {id(self.websocket)}: {e}")
                chat_deliveries_dropped_total.inc()
                self._mark_closed()
            except Exception as e:
                logger.warning(
                    f"Unexpected error sending on websocket {id(self.websocket)}: {e}"
                )
                chat_deliveries_dropped_total.inc()
                self._mark_closed()

    def _mark_closed(self) -> None:
        if self._closed:
            return
        self._closed = True
        dropped = self._queue.qsize()
        while not self._queue.empty():
            self._queue.get_nowait()
        if dropped:
            chat_deliveries_dropped_total.inc(dropped)
