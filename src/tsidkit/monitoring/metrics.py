"""Prometheus metrics for TSID generators."""

from prometheus_client import Counter

# Counters
IDS_CREATED = Counter(
    "tsidkit_ids_created_total", "Number of TSIDs created", ["node_bits"]
)
COUNTER_OVERFLOWS = Counter(
    "tsidkit_counter_overflows_total",
    "Per-millisecond counter overflows",
    ["policy"],
)
CLOCK_REGRESSIONS = Counter(
    "tsidkit_clock_regressions_total",
    "Clock readings behind the highest reading since the last time reset",
    ["outcome"],
)

__all__ = ["IDS_CREATED", "COUNTER_OVERFLOWS", "CLOCK_REGRESSIONS"]
