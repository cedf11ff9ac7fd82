"""pod-netstat - per-pod network statistics for Kubernetes nodes."""

from __future__ import annotations

from pod_netstat.core.errors import NetstatError, ParseError, ResolutionError
from pod_netstat.core.schemas import ExporterConfig, PodInfo
from pod_netstat.netstat import CgroupResolver, PodStats, PodStatsCollector

__version__ = "0.1.0"

__all__ = [
    "CgroupResolver",
    "ExporterConfig",
    "NetstatError",
    "ParseError",
    "PodInfo",
    "PodStats",
    "PodStatsCollector",
    "ResolutionError",
    "__version__",
]
