"""Netstat module - per-pod network statistics from the host filesystem.

- CgroupResolver: container id -> host PID via cgroup task-list files
- parsers: /proc/<pid>/net/{netstat,snmp,snmp6,sockstat,sockstat6} grammars
- PodStatsCollector: resolve, parse and merge for one pod or a batch
"""

from __future__ import annotations

from pod_netstat.netstat.base import CgroupProbeResult, NetworkStats, PodStats
from pod_netstat.netstat.collector import PodStatsCollector, merge_stats, read_net_stats
from pod_netstat.netstat.parsers import (
    COLLECTION_ORDER,
    ProcNetFormat,
    parse_netstat,
    parse_proc_net_file,
    parse_snmp,
    parse_snmp6,
    parse_sockstat,
    parse_sockstat6,
    read_proc_net_file,
)
from pod_netstat.netstat.resolver import (
    CGROUP_LAYOUTS,
    CgroupLayout,
    CgroupResolver,
    build_candidates,
    container_to_pid,
    find_cgroup_mountpoint,
    find_own_cgroup,
    read_task_pid,
    strip_runtime_prefix,
)

__all__ = [
    "CGROUP_LAYOUTS",
    "COLLECTION_ORDER",
    "CgroupLayout",
    "CgroupProbeResult",
    "CgroupResolver",
    "NetworkStats",
    "PodStats",
    "PodStatsCollector",
    "ProcNetFormat",
    "build_candidates",
    "container_to_pid",
    "find_cgroup_mountpoint",
    "find_own_cgroup",
    "merge_stats",
    "parse_netstat",
    "parse_proc_net_file",
    "parse_snmp",
    "parse_snmp6",
    "parse_sockstat",
    "parse_sockstat6",
    "read_net_stats",
    "read_proc_net_file",
    "read_task_pid",
    "strip_runtime_prefix",
]
