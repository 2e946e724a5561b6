from chatrelay.constants import TYPING_MULTIPLE_TEXT, TYPING_SINGLE_TEXT
from chatrelay.protocols import ParticipantId
from chatrelay.schemas.events import TypingNotice


class TypingPresenceTracker:
    """
    Set of participants an observer currently believes to be typing.

    Driven only by typing transitions received from the relay: ``true``
    adds the participant, ``false`` removes it. Both are idempotent. The
    tracker does no timing of its own; the sending side decides when a
    participant stops typing.

    One tracker belongs to one connection lifetime of the observer and
    starts empty.
    """

    def __init__(self) -> None:
        self._typing: set[ParticipantId] = set()

    def apply(self, participant_id: ParticipantId, is_typing: bool) -> bool:
        """
        Applies one typing transition.

        Args:
            participant_id: Participant the transition belongs to.
            is_typing: New typing state.

        Returns:
            True if the set changed.
        """
        if is_typing:
            if participant_id in self._typing:
                return False
            self._typing.add(participant_id)
            return True
        return self.clear(participant_id)

    def apply_notice(self, notice: TypingNotice) -> bool:
        """Applies a decoded ``typing`` notice from the relay."""
        return self.apply(notice.participant_id, notice.is_typing)

    def clear(self, participant_id: ParticipantId) -> bool:
        """Forgets a participant; returns True if it was marked typing."""
        if participant_id not in self._typing:
            return False
        self._typing.discard(participant_id)
        return True

    def reset(self) -> None:
        """Drops all entries, e.g. when the observer's own connection ends."""
        self._typing.clear()

    @property
    def typing(self) -> frozenset[ParticipantId]:
        """Snapshot of the participants currently typing."""
        return frozenset(self._typing)

    def is_typing(self, participant_id: ParticipantId) -> bool:
        return participant_id in self._typing

    def describe(self) -> str:
        """
        Typing indicator text.

        Returns:
            An empty string when nobody types, "Someone is typing..." for a
            single participant and "N people are typing..." otherwise.
        """
        count = len(self._typing)
        if count == 0:
            return ""
        if count == 1:
            return TYPING_SINGLE_TEXT
        return TYPING_MULTIPLE_TEXT.format(count=count)

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._typing

    def __len__(self) -> int:
        return len(self._typing)
