"""Tests for the typing presence tracker."""

import pytest

from chatrelay.presence.tracker import TypingPresenceTracker
from chatrelay.schemas.events import TypingNotice


class TestTypingPresenceTracker:
    """Tests for TypingPresenceTracker transitions."""

    def test_starts_empty(self):
        tracker = TypingPresenceTracker()
        assert len(tracker) == 0
        assert tracker.typing == frozenset()

    def test_true_adds_participant(self):
        tracker = TypingPresenceTracker()

        assert tracker.apply("b", True) is True
        assert "b" in tracker
        assert tracker.is_typing("b")

    def test_repeated_true_is_idempotent(self):
        """Test a second true before any false leaves the size unchanged."""
        tracker = TypingPresenceTracker()
        tracker.apply("b", True)

        assert tracker.apply("b", True) is False
        assert len(tracker) == 1

    def test_false_removes_participant(self):
        tracker = TypingPresenceTracker()
        tracker.apply("b", True)

        assert tracker.apply("b", False) is True
        assert "b" not in tracker

    def test_false_for_absent_participant_is_noop(self):
        tracker = TypingPresenceTracker()
        tracker.apply("b", True)

        assert tracker.apply("c", False) is False
        assert tracker.typing == {"b"}

    def test_apply_notice(self):
        tracker = TypingPresenceTracker()
        notice = TypingNotice.model_validate(
            {"participantId": "b", "isTyping": True}
        )

        tracker.apply_notice(notice)

        assert tracker.typing == {"b"}

    def test_clear_and_reset(self):
        tracker = TypingPresenceTracker()
        tracker.apply("b", True)
        tracker.apply("c", True)

        assert tracker.clear("b") is True
        assert tracker.clear("b") is False
        assert tracker.typing == {"c"}

        tracker.reset()
        assert len(tracker) == 0

    def test_typing_is_a_snapshot(self):
        tracker = TypingPresenceTracker()
        tracker.apply("b", True)
        snapshot = tracker.typing

        tracker.apply("c", True)

        assert snapshot == {"b"}

    @pytest.mark.parametrize(
        "typing_ids, expected",
        [
            ([], ""),
            (["b"], "Someone is typing..."),
            (["b", "c"], "2 people are typing..."),
            (["b", "c", "d"], "3 people are typing..."),
        ],
    )
    def test_describe(self, typing_ids, expected):
        tracker = TypingPresenceTracker()
        for participant_id in typing_ids:
            tracker.apply(participant_id, True)

        assert tracker.describe() == expected
