"""
Prometheus metrics definitions.

All metrics are re-exported here:

    from chatrelay.utils.metrics import chat_events_forwarded_total
"""

from chatrelay.utils.metrics.relay import (
    chat_deliveries_dropped_total,
    chat_events_forwarded_total,
    chat_events_received_total,
    chat_events_rejected_total,
    ws_connections_active,
    ws_connections_total,
)

__all__ = [
    "chat_deliveries_dropped_total",
    "chat_events_forwarded_total",
    "chat_events_received_total",
    "chat_events_rejected_total",
    "ws_connections_active",
    "ws_connections_total",
]
