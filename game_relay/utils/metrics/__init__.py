"""
Prometheus metrics definitions.

All metrics are re-exported here:

    from game_relay.utils.metrics import ws_connections_active
"""

from game_relay.utils.metrics.websocket import (
    ws_connections_active,
    ws_connections_total,
    ws_host_connected,
    ws_messages_dropped_total,
    ws_messages_received_total,
    ws_messages_sent_total,
    ws_registered_clients,
)

__all__ = [
    "ws_connections_active",
    "ws_connections_total",
    "ws_host_connected",
    "ws_messages_dropped_total",
    "ws_messages_received_total",
    "ws_messages_sent_total",
    "ws_registered_clients",
]
