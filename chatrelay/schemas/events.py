"""Wire models for WebSocket frames."""

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
)

from chatrelay.constants import ChatEvent
from chatrelay.exceptions import InvalidEventError, UnknownEventError


class EventFrame(BaseModel):
    """
    One WebSocket frame in either direction.

    Attributes:
        event: Event name, see ``ChatEvent``.
        data: Event payload; its shape depends on the event.
    """

    event: str
    data: Any = None


class ConnectNotice(BaseModel):
    """Payload of the ``connect`` hello sent to a new participant."""

    model_config = ConfigDict(populate_by_name=True)

    participant_id: str = Field(alias="participantId")


class TypingNotice(BaseModel):
    """Payload of an outbound ``typing`` event."""

    model_config = ConfigDict(populate_by_name=True)

    participant_id: str = Field(alias="participantId")
    is_typing: StrictBool = Field(alias="isTyping")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class _ChatMessagePayload(BaseModel):
    data: StrictStr


class _TypingPayload(BaseModel):
    data: StrictBool


_INBOUND_PAYLOADS: dict[str, type[BaseModel]] = {
    ChatEvent.CHAT_MESSAGE.value: _ChatMessagePayload,
    ChatEvent.TYPING.value: _TypingPayload,
}


def decode_event(raw: str | bytes) -> EventFrame:
    """
    Decode an inbound frame sent by a participant.

    Only ``chat message`` (string payload) and ``typing`` (boolean payload)
    are accepted from participants. Chat text is passed through verbatim,
    including empty strings.

    Args:
        raw: Frame text (or UTF-8 bytes) as received from the socket.

    Returns:
        The validated frame.

    Raises:
        InvalidEventError: If the frame is not valid JSON, has no event name,
            or its payload has the wrong type.
        UnknownEventError: If the event name is not routed by the relay.
    """
    try:
        frame = EventFrame.model_validate_json(raw)
    except ValidationError as exc:
        raise InvalidEventError(
            f"Malformed frame: {exc.errors()[0]['msg']}", reason="malformed"
        ) from exc

    payload_model = _INBOUND_PAYLOADS.get(frame.event)
    if payload_model is None:
        raise UnknownEventError(frame.event)

    try:
        payload_model(data=frame.data)
    except ValidationError as exc:
        raise InvalidEventError(
            f"Invalid payload for {frame.event!r}: {exc.errors()[0]['msg']}",
            reason="invalid_payload",
        ) from exc

    return frame


def encode_event(event: str, payload: Any) -> str:
    """Encode an outbound frame as JSON text."""
    return EventFrame(event=str(event), data=payload).model_dump_json()
