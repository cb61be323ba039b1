"""Monitoring helpers (Prometheus metrics)."""

from .metrics import CLOCK_REGRESSIONS, COUNTER_OVERFLOWS, IDS_CREATED

__all__ = ["IDS_CREATED", "COUNTER_OVERFLOWS", "CLOCK_REGRESSIONS"]
