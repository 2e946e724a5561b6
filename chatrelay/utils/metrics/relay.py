"""
Prometheus metrics for the chat relay.

Connection counts come from the WebSocket consumer; event counters come
from the frame decoder, the event router and the channel writers.
"""

from chatrelay.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_gauge,
)

ws_connections_active = _get_or_create_gauge(
    "ws_connections_active", "Number of connected chat participants"
)

ws_connections_total = _get_or_create_counter(
    "ws_connections_total",
    "Total WebSocket connections",
    ["status"],  # accepted, closed
)

chat_events_received_total = _get_or_create_counter(
    "chat_events_received_total",
    "Total inbound events accepted from participants",
    ["event"],
)

chat_events_forwarded_total = _get_or_create_counter(
    "chat_events_forwarded_total",
    "Total events queued for delivery to recipients",
    ["event"],
)

chat_events_rejected_total = _get_or_create_counter(
    "chat_events_rejected_total",
    "Total inbound frames dropped as malformed",
    ["reason"],  # malformed, unknown_event, invalid_payload
)

chat_deliveries_dropped_total = _get_or_create_counter(
    "chat_deliveries_dropped_total",
    "Total outbound frames dropped because the recipient channel was gone",
)

