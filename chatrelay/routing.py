import os
import pkgutil
from functools import partial
from importlib import import_module
from typing import Any

from fastapi import APIRouter

from chatrelay.constants import ChatEvent
from chatrelay.logging import logger
from chatrelay.managers.session_registry import SessionRegistry
from chatrelay.protocols import Channel, EventHandler, ParticipantId
from chatrelay.schemas.events import TypingNotice
from chatrelay.utils.metrics import (
    chat_deliveries_dropped_total,
    chat_events_forwarded_total,
)


class EventRouter:
    """
    Router for inbound participant events.

    Decides, per event kind, which channels receive a forwarded event. Chat
    messages and typing transitions both use sender-exclusion: every
    connected participant except the sender receives them.

    Handlers only queue frames on recipient channels and never wait on the
    network, so one slow recipient cannot hold up other participants.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        *,
        clear_typing_on_disconnect: bool = True,
    ) -> None:
        """
        Initializes the router on top of a session registry.

        Args:
            registry: Registry providing the current participant set.
            clear_typing_on_disconnect: When True, a participant whose last
                forwarded typing signal was ``true`` gets a ``false`` sent on
                its behalf when it disconnects.
        """
        self.registry = registry
        self.clear_typing_on_disconnect = clear_typing_on_disconnect
        self._typing: set[ParticipantId] = set()

    @property
    def typing(self) -> frozenset[ParticipantId]:
        """Participants whose last forwarded typing signal was ``true``."""
        return frozenset(self._typing)

    def connect(self, channel: Channel) -> ParticipantId:
        """
        Registers a newly established channel and installs its handlers.

        Args:
            channel: The participant's outbound channel.

        Returns:
            The participant id assigned by the registry.
        """
        participant_id = self.registry.register(channel)
        self.registry.bind(participant_id, self.handlers_for(participant_id))
        return participant_id

    def handlers_for(
        self, participant_id: ParticipantId
    ) -> dict[str, EventHandler]:
        """Builds the inbound handler record of one participant."""
        return {
            ChatEvent.CHAT_MESSAGE.value: partial(
                self.on_chat_message, participant_id
            ),
            ChatEvent.TYPING.value: partial(self.on_typing, participant_id),
        }

    def dispatch(
        self, sender_id: ParticipantId, event: str, data: Any
    ) -> bool:
        """
        Routes one inbound event to the sender's handler for its kind.

        Events from unknown senders and events without a handler are
        ignored. A failing handler is logged and does not propagate, so one
        bad event never ends the sender's receive loop.

        Args:
            sender_id: Participant the event came from.
            event: Event name.
            data: Event payload.

        Returns:
            True if a handler ran to completion.
        """
        entry = self.registry.get(sender_id)
        if entry is None:
            logger.debug(f"Dropping {event!r} from unregistered {sender_id}")
            return False

        handler = entry.handlers.get(str(event))
        if handler is None:
            logger.debug(f"No handler for {event!r} from {sender_id}")
            return False

        try:
            handler(data)
        except Exception as ex:
            logger.error(f"Handler for {event!r} from {sender_id} failed: {ex}")
            return False
        return True

    def on_chat_message(self, sender_id: ParticipantId, text: str) -> int:
        """
        Forwards chat text verbatim to everyone except the sender.

        Args:
            sender_id: Participant that sent the message.
            text: Raw message text; forwarded even when empty.

        Returns:
            Number of recipients the message was queued for.
        """
        logger.debug(f"Message received: {text!r}")
        return self.broadcast(sender_id, ChatEvent.CHAT_MESSAGE, text)

    def on_typing(self, sender_id: ParticipantId, is_typing: bool) -> int:
        """
        Forwards a typing transition to everyone except the sender.

        Args:
            sender_id: Participant whose typing state changed.
            is_typing: True when the participant started typing.

        Returns:
            Number of recipients the notice was queued for.
        """
        notice = TypingNotice(participant_id=sender_id, is_typing=is_typing)
        if notice.is_typing:
            self._typing.add(sender_id)
        else:
            self._typing.discard(sender_id)

        return self.broadcast(sender_id, ChatEvent.TYPING, notice.to_payload())

    def on_disconnect(self, participant_id: ParticipantId) -> None:
        """
        Removes a participant after its channel is lost.

        No "user left" event is broadcast. If the participant was last seen
        typing and ``clear_typing_on_disconnect`` is set, remaining
        participants receive one ``typing: false`` for it.

        Safe to call more than once for the same id.
        """
        was_typing = participant_id in self._typing
        self._typing.discard(participant_id)

        if not self.registry.unregister(participant_id):
            return

        if was_typing and self.clear_typing_on_disconnect:
            notice = TypingNotice(participant_id=participant_id, is_typing=False)
            self.broadcast(participant_id, ChatEvent.TYPING, notice.to_payload())

    def broadcast(
        self, sender_id: ParticipantId, event: ChatEvent | str, payload: Any
    ) -> int:
        """
        Queues an event on every connected channel except the sender's.

        Membership is read once; a participant that disconnects after the
        snapshot is skipped, and delivery to a closed channel is a no-op.

        Args:
            sender_id: Participant excluded from delivery.
            event: Event name.
            payload: JSON-serializable event data.

        Returns:
            Number of channels the event was queued on.
        """
        event_name = str(event)
        delivered = 0

        for participant_id in self.registry.members() - {sender_id}:
            channel = self.registry.channel(participant_id)
            if channel is None or channel.closed:
                chat_deliveries_dropped_total.inc()
                continue

            try:
                channel.send(event_name, payload)
            except Exception as ex:
                # Delivery failures are never reported to the sender
                logger.warning(
                    f"Failed to queue {event_name!r} for {participant_id}: {ex}"
                )
                chat_deliveries_dropped_total.inc()
                continue
            delivered += 1

        if delivered:
            chat_events_forwarded_total.labels(event=event_name).inc(delivered)
        return delivered


# Track registered modules to prevent duplicate logging
_registered_http_modules: set[str] = set()
_registered_ws_modules: set[str] = set()


def collect_subrouters() -> APIRouter:
    """
    Collects all HTTP and WebSocket routers of the application.

    Every module in `api/http` and `api/ws/consumers` must expose a
    module-level `router`; each one is included in the returned router.
    """
    main_router: APIRouter = APIRouter()

    app_dir = os.path.dirname(__file__)
    app_name = os.path.basename(app_dir)

    for _, module, _ in pkgutil.iter_modules([f"{app_dir}/api/http"]):
        api = import_module(f".{module}", package=f"{app_name}.api.http")
        main_router.include_router(api.router)

        if module not in _registered_http_modules:
            logger.info(f'Register "{module}" api')
            _registered_http_modules.add(module)

    for _, module, _ in pkgutil.iter_modules([f"{app_dir}/api/ws/consumers"]):
        ws_consumer = import_module(
            f".{module}", package=f"{app_name}.api.ws.consumers"
        )
        main_router.include_router(ws_consumer.router)

        if module not in _registered_ws_modules:
            logger.info(f'Register "{module}" websocket consumer')
            _registered_ws_modules.add(module)

    return main_router
