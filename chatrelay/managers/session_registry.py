import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from chatrelay.logging import logger
from chatrelay.protocols import Channel, EventHandler, ParticipantId


@dataclass
class ParticipantEntry:
    """
    Registry record for one connected participant.

    Attributes:
        participant_id: Identifier assigned at registration.
        channel: Outbound channel of the participant.
        handlers: Event name to handler mapping for inbound events of this
            participant. Cleared when the participant is unregistered.
        connected_at: Registration time (UTC).
    """

    participant_id: ParticipantId
    channel: Channel
    handlers: dict[str, EventHandler] = field(default_factory=dict)
    connected_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class SessionRegistry:
    """
    Registry of currently connected chat participants.

    A participant id is present if and only if its channel is open: entries
    are added by ``register`` when a channel is established and removed by
    ``unregister`` when it is lost. Nothing else mutates the registry.

    The registry is owned by the event loop that serves the WebSocket
    endpoint and is not thread-safe.
    """

    def __init__(self) -> None:
        """
        Initializes an empty registry.

        The `entries` attribute maps participant ids to their
        `ParticipantEntry` records.
        """
        self.entries: dict[ParticipantId, ParticipantEntry] = {}

    def register(self, channel: Channel) -> ParticipantId:
        """
        Allocates a new participant id for an established channel.

        Must be called exactly once per channel, before any event involving
        the participant is forwarded.

        Args:
            channel: The participant's outbound channel.

        Returns:
            The new participant id. Ids are random UUIDs and are never reused.
        """
        participant_id = str(uuid.uuid4())
        self.entries[participant_id] = ParticipantEntry(
            participant_id=participant_id, channel=channel
        )
        logger.debug(
            f"Participant {participant_id} registered "
            f"({len(self.entries)} connected)"
        )
        return participant_id

    def bind(
        self, participant_id: ParticipantId, handlers: dict[str, EventHandler]
    ) -> None:
        """
        Installs inbound event handlers for a registered participant.

        Args:
            participant_id: Registered participant id.
            handlers: Event name to handler mapping.

        Raises:
            KeyError: If the participant is not registered.
        """
        self.entries[participant_id].handlers.update(handlers)

    def unregister(self, participant_id: ParticipantId) -> bool:
        """
        Removes a participant and drops its handler record.

        Calling it for an id that is already gone is a no-op, so duplicate
        disconnect notifications are harmless.

        Args:
            participant_id: The participant to remove.

        Returns:
            True if an entry was removed.
        """
        entry = self.entries.pop(participant_id, None)
        if entry is None:
            return False

        entry.handlers.clear()
        logger.debug(
            f"Participant {participant_id} unregistered "
            f"({len(self.entries)} connected)"
        )
        return True

    def members(self) -> frozenset[ParticipantId]:
        """
        Snapshot of the connected participant ids.

        The snapshot is not kept in sync with later registrations or
        removals.
        """
        return frozenset(self.entries)

    def get(self, participant_id: ParticipantId) -> ParticipantEntry | None:
        """Get the registry entry of a participant, or None if not connected."""
        return self.entries.get(participant_id)

    def channel(self, participant_id: ParticipantId) -> Channel | None:
        """Get the channel of a participant, or None if not connected."""
        entry = self.entries.get(participant_id)
        return entry.channel if entry is not None else None

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self.entries

    def __len__(self) -> int:
        return len(self.entries)
