"""Per-pod network statistics collection.

All containers in a pod share one network namespace, so the statistics of a
pod are those of its first container's process: resolve that container to a
host PID, then read the five /proc/<pid>/net files of the PID and merge them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

from pod_netstat.core.errors import NetstatError
from pod_netstat.core.schemas import PodInfo
from pod_netstat.netstat.base import NetworkStats, PodStats
from pod_netstat.netstat.parsers import COLLECTION_ORDER, read_proc_net_file
from pod_netstat.netstat.resolver import CgroupResolver

logger = logging.getLogger(__name__)


def merge_stats(*results: Mapping[str, int]) -> NetworkStats:
    """Merge parser results into a new mapping.

    Keys from later results overwrite keys from earlier ones.
    """
    merged: NetworkStats = {}
    for result in results:
        merged.update(result)
    return merged


def read_net_stats(host_root: Path | str, pid: int) -> NetworkStats:
    """Read every network statistics file of ``pid`` and merge them.

    Files are read in COLLECTION_ORDER; the first failure aborts.

    Raises:
        ParseError: If any file is unreadable or malformed
    """
    return merge_stats(*(read_proc_net_file(host_root, pid, fmt) for fmt in COLLECTION_ORDER))


class PodStatsCollector:
    """Collect network statistics for pods on this node.

    Args:
        host_root: Where the host filesystem (/proc, /var/run, cgroups) is mounted
        resolver: Container id to PID resolver, a default CgroupResolver if None
    """

    def __init__(self, host_root: Path | str, resolver: CgroupResolver | None = None) -> None:
        self.host_root = Path(host_root)
        self._resolver = resolver or CgroupResolver()

    def collect(self, container_id: str, pod_name: str, pod_namespace: str) -> PodStats:
        """Collect the statistics of one pod.

        Raises:
            ResolutionError: If the container cannot be mapped to a PID
            ParseError: If any statistics file is unreadable or malformed
        """
        logger.debug(f"Getting stats for pod {pod_namespace}/{pod_name}")
        pid = self._resolver.resolve(self.host_root, container_id)
        logger.debug(f"Container {container_id} of pod {pod_name} has PID {pid}")
        stats = read_net_stats(self.host_root, pid)
        return PodStats(name=pod_name, namespace=pod_namespace, stats=stats)

    def collect_all(self, pods: Iterable[PodInfo]) -> list[PodStats]:
        """Collect statistics for every eligible pod, in input order.

        Host-network pods and pods without a started container are skipped.
        A pod whose collection fails is logged and left out; it does not
        affect the others.
        """
        results: list[PodStats] = []
        for pod in pods:
            if pod.host_network:
                logger.debug(
                    f"Pod {pod.name} has hostNetwork: true, "
                    "cannot fetch per-pod network metrics"
                )
                continue
            if not pod.container_id:
                logger.warning(f"Could not get stats for pod {pod.name}: no containers in pod")
                continue

            try:
                results.append(self.collect(pod.container_id, pod.name, pod.namespace))
            except NetstatError as e:
                logger.warning(f"Could not get stats for pod {pod.name}: {e}")

        return results
