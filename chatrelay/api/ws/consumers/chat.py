from typing import Any

from fastapi import APIRouter
from starlette.endpoints import WebSocketEndpoint
from starlette.websockets import WebSocket

from chatrelay.api.ws.channel import WebSocketChannel
from chatrelay.constants import ChatEvent
from chatrelay.exceptions import InvalidEventError
from chatrelay.logging import clear_log_context, logger, set_log_context
from chatrelay.routing import EventRouter
from chatrelay.schemas.events import ConnectNotice, decode_event
from chatrelay.settings import app_settings
from chatrelay.utils.metrics import (
    chat_events_received_total,
    chat_events_rejected_total,
    ws_connections_active,
    ws_connections_total,
)

router = APIRouter()


@router.websocket_route(app_settings.WS_PATH)
class ChatConsumer(WebSocketEndpoint):  # type: ignore[misc]
    """
    WebSocket endpoint that turns each connection into a chat participant.

    Connection lifecycle maps onto the relay core:
    - `on_connect`: registers the participant and sends it the ``connect``
      hello carrying its id
    - `on_receive`: decodes one frame and dispatches it through the
      application's `EventRouter`
    - `on_disconnect`: unregisters the participant and stops its channel

    Frames that cannot be decoded are logged and dropped; the connection
    stays open.
    """

    encoding = None  # Accept text and UTF-8 binary frames

    participant_id: str | None = None
    channel: WebSocketChannel | None = None

    async def decode(self, websocket: WebSocket, message: dict[str, Any]) -> str | bytes:
        if message.get("text") is not None:
            return message["text"]
        return message.get("bytes") or b""

    async def on_connect(self, websocket: WebSocket) -> None:
        """
        Accepts the connection and registers the participant.

        The registry and router are taken from ``app.state`` so that each
        application instance has its own participant set.
        """
        await websocket.accept()

        self.event_router: EventRouter = websocket.app.state.event_router

        self.channel = WebSocketChannel(websocket)
        self.channel.start()
        self.participant_id = self.event_router.connect(self.channel)
        set_log_context(participant_id=self.participant_id)

        notice = ConnectNotice(participant_id=self.participant_id)
        self.channel.send(ChatEvent.CONNECT.value, notice.model_dump(by_alias=True))

        ws_connections_total.labels(status="accepted").inc()
        ws_connections_active.inc()
        logger.info(f"User connected: {self.participant_id}")

    async def on_receive(self, websocket: WebSocket, data: str | bytes) -> None:
        """
        Handles one inbound frame.

        Args:
            websocket: The WebSocket connection instance.
            data: Raw frame content.
        """
        try:
            frame = decode_event(data)
        except InvalidEventError as ex:
            logger.warning(f"Dropping frame from {self.participant_id}: {ex}")
            chat_events_rejected_total.labels(reason=ex.reason).inc()
            return

        chat_events_received_total.labels(event=frame.event).inc()
        self.event_router.dispatch(self.participant_id, frame.event, frame.data)

    async def on_disconnect(self, websocket: WebSocket, close_code: int) -> None:
        """Unregisters the participant and releases its channel."""
        if self.participant_id is not None:
            self.event_router.on_disconnect(self.participant_id)
            ws_connections_total.labels(status="closed").inc()
            ws_connections_active.dec()

        if self.channel is not None:
            await self.channel.close()

        logger.info(
            f"User disconnected: {self.participant_id} (code {close_code})"
        )
        clear_log_context()
