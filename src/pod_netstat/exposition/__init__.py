"""Exposition module - Prometheus metrics over HTTP."""

from __future__ import annotations

from pod_netstat.exposition.metrics import (
    PodStatsExposition,
    build_metric_families,
    render_metrics,
)
from pod_netstat.exposition.ratelimit import RateLimiter

__all__ = [
    "PodStatsExposition",
    "RateLimiter",
    "build_metric_families",
    "render_metrics",
]
