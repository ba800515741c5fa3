"""Prometheus metrics for transport negotiation."""

from prometheus_client import Counter, Histogram

NEGOTIATIONS = Counter(
    "call_transport_negotiations_total",
    "Outbound call negotiations by outcome",
    labelnames=("decision",),  # legacy | modern | lookup_failed | invalid_identifier
)

CAPABILITY_LOOKUP_SECONDS = Histogram(
    "call_transport_capability_lookup_seconds",
    "Latency of remote capability lookups",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0),
)

LAUNCHES = Counter(
    "call_transport_launches_total",
    "Transport launcher invocations by result",
    labelnames=("transport", "result"),  # result: success | failure | error
)
