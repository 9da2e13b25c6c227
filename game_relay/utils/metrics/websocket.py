"""
Prometheus metrics for relay connections and message flow.
"""

from game_relay.utils.metrics._helpers import (
    _get_or_create_counter,
    _get_or_create_gauge,
)

# Connection Metrics
ws_connections_active = _get_or_create_gauge(
    "ws_connections_active", "Number of open relay connections"
)

ws_connections_total = _get_or_create_counter(
    "ws_connections_total",
    "Total relay connections",
    ["status"],  # accepted, closed
)

ws_registered_clients = _get_or_create_gauge(
    "ws_registered_clients", "Number of connections registered as clients"
)

ws_host_connected = _get_or_create_gauge(
    "ws_host_connected", "Whether a host is currently registered (0 or 1)"
)

# Message Metrics
ws_messages_received_total = _get_or_create_counter(
    "ws_messages_received_total",
    "Total inbound frames by message type",
    ["type"],
)

ws_messages_sent_total = _get_or_create_counter(
    "ws_messages_sent_total",
    "Total outbound frames by target",
    ["target"],  # host, peer
)

ws_messages_dropped_total = _get_or_create_counter(
    "ws_messages_dropped_total",
    "Total frames dropped without an outbound effect",
    ["reason"],
)


__all__ = [
    "ws_connections_active",
    "ws_connections_total",
    "ws_registered_clients",
    "ws_host_connected",
    "ws_messages_received_total",
    "ws_messages_sent_total",
    "ws_messages_dropped_total",
]
