"""
Integration tests for the chat WebSocket consumer.

Every test drives the application through TestClient WebSocket sessions,
so frames pass through decoding, the event router and the channel writers.
"""

import json

from prometheus_client import REGISTRY


def active_connections() -> float:
    return REGISTRY.get_sample_value("ws_connections_active")


def chat(text):
    return {"event": "chat message", "data": text}


def typing(participant_id, is_typing):
    return {
        "event": "typing",
        "data": {"participantId": participant_id, "isTyping": is_typing},
    }


def hello(session) -> str:
    """Reads the connect hello and returns the participant id."""
    frame = session.receive_json()
    assert frame["event"] == "connect"
    return frame["data"]["participantId"]


class TestConnect:
    """Tests for the connection handshake."""

    def test_hello_carries_distinct_ids(self, client):
        with (
            client.websocket_connect("/ws") as a,
            client.websocket_connect("/ws") as b,
        ):
            a_id, b_id = hello(a), hello(b)

        assert a_id != b_id

    def test_connection_is_counted(self, client):
        before = active_connections()

        with client.websocket_connect("/ws") as ws:
            hello(ws)
            assert active_connections() == before + 1

        assert active_connections() == before


class TestChatMessages:
    """Tests for forwarding chat messages between participants."""

    def test_message_reaches_others_but_not_sender(self, client):
        with (
            client.websocket_connect("/ws") as a,
            client.websocket_connect("/ws") as b,
            client.websocket_connect("/ws") as c,
        ):
            for ws in (a, b, c):
                hello(ws)

            a.send_json(chat("hi"))

            assert b.receive_json() == chat("hi")
            assert c.receive_json() == chat("hi")

            # The next frame A sees is B's reply, not its own message
            b.send_json(chat("yo"))

            assert a.receive_json() == chat("yo")
            assert c.receive_json() == chat("yo")

    def test_empty_message_is_forwarded(self, client):
        with (
            client.websocket_connect("/ws") as a,
            client.websocket_connect("/ws") as b,
        ):
            for ws in (a, b):
                hello(ws)

            a.send_json(chat(""))

            assert b.receive_json() == chat("")

    def test_binary_frames_are_accepted(self, client):
        with (
            client.websocket_connect("/ws") as a,
            client.websocket_connect("/ws") as b,
        ):
            for ws in (a, b):
                hello(ws)

            a.send_bytes(json.dumps(chat("bytes")).encode())

            assert b.receive_json() == chat("bytes")

    def test_malformed_frames_are_dropped(self, client):
        with (
            client.websocket_connect("/ws") as a,
            client.websocket_connect("/ws") as b,
        ):
            for ws in (a, b):
                hello(ws)

            a.send_text("not json")
            a.send_json({"data": "no event"})
            a.send_json({"event": "shout", "data": "HI"})
            a.send_json({"event": "chat message", "data": 42})
            a.send_json({"event": "typing", "data": "yes"})
            a.send_json(chat("still here"))

            assert b.receive_json() == chat("still here")


class TestTyping:
    """Tests for typing notices."""

    def test_typing_reaches_others(self, client):
        with (
            client.websocket_connect("/ws") as a,
            client.websocket_connect("/ws") as b,
        ):
            a_id = hello(a)
            hello(b)

            a.send_json({"event": "typing", "data": True})
            a.send_json({"event": "typing", "data": False})

            assert b.receive_json() == typing(a_id, True)
            assert b.receive_json() == typing(a_id, False)

    def test_disconnect_while_typing_clears_indicator(self, relay_app, client):
        with (
            client.websocket_connect("/ws") as a,
            client.websocket_connect("/ws") as c,
        ):
            for ws in (a, c):
                hello(ws)

            with client.websocket_connect("/ws") as b:
                b_id = hello(b)
                b.send_json({"event": "typing", "data": True})

                assert a.receive_json() == typing(b_id, True)
                assert c.receive_json() == typing(b_id, True)

            assert a.receive_json() == typing(b_id, False)
            assert c.receive_json() == typing(b_id, False)
            assert b_id not in relay_app.state.session_registry

            c.send_json(chat("after"))

            assert a.receive_json() == chat("after")
            assert client.get("/").json()["participants"] == 2
