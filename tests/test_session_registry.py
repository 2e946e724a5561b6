"""
Tests for the session registry.

This module tests participant registration, idempotent removal, membership
snapshots and handler records.
"""

import pytest

from chatrelay.managers.session_registry import SessionRegistry
from tests.mocks.channel_mocks import RecordingChannel


class TestSessionRegistry:
    """Tests for SessionRegistry class."""

    def test_init(self):
        """Test SessionRegistry starts empty."""
        registry = SessionRegistry()
        assert registry.entries == {}
        assert len(registry) == 0
        assert registry.members() == frozenset()

    def test_register_returns_unique_ids(self, registry):
        """Test every registration gets a new id."""
        ids = {registry.register(RecordingChannel()) for _ in range(50)}

        assert len(ids) == 50
        assert registry.members() == ids

    def test_register_stores_channel(self, registry):
        """Test the channel is retrievable by participant id."""
        channel = RecordingChannel()
        participant_id = registry.register(channel)

        assert participant_id in registry
        assert registry.channel(participant_id) is channel
        assert registry.get(participant_id).participant_id == participant_id

    def test_unregister(self, registry):
        """Test removing a participant."""
        participant_id = registry.register(RecordingChannel())

        assert registry.unregister(participant_id) is True
        assert participant_id not in registry
        assert registry.channel(participant_id) is None
        assert registry.get(participant_id) is None

    def test_unregister_is_idempotent(self, registry):
        """Test duplicate disconnect notifications are no-ops."""
        participant_id = registry.register(RecordingChannel())
        other_id = registry.register(RecordingChannel())

        registry.unregister(participant_id)
        assert registry.unregister(participant_id) is False
        assert registry.unregister("never-registered") is False

        assert registry.members() == {other_id}

    def test_id_not_reused_after_unregister(self, registry):
        """Test a reconnecting channel becomes a new participant."""
        channel = RecordingChannel()
        first = registry.register(channel)
        registry.unregister(first)

        second = registry.register(channel)

        assert second != first

    def test_members_is_a_snapshot(self, registry):
        """Test later mutations do not change an earlier snapshot."""
        first = registry.register(RecordingChannel())
        snapshot = registry.members()

        second = registry.register(RecordingChannel())
        registry.unregister(first)

        assert snapshot == {first}
        assert registry.members() == {second}

    def test_bind_installs_handlers(self, registry):
        """Test handler records are stored on the entry."""
        participant_id = registry.register(RecordingChannel())
        handler = lambda data: None  # noqa: E731

        registry.bind(participant_id, {"chat message": handler})

        assert registry.get(participant_id).handlers == {
            "chat message": handler
        }

    def test_bind_unknown_participant_raises(self, registry):
        """Test binding handlers for an unregistered id fails loudly."""
        with pytest.raises(KeyError):
            registry.bind("ghost", {"typing": lambda data: None})

    def test_unregister_clears_handlers(self, registry):
        """Test handler records are dropped on unregister."""
        participant_id = registry.register(RecordingChannel())
        registry.bind(participant_id, {"typing": lambda data: None})
        entry = registry.get(participant_id)

        registry.unregister(participant_id)

        assert entry.handlers == {}
