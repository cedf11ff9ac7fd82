"""Prometheus exposition of per-pod network statistics.

Every statistic key becomes one gauge family ``pod_netstat_<key>`` with one
sample per pod, labelled by pod namespace and name.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator, Sequence

from prometheus_client.core import CollectorRegistry, GaugeMetricFamily, Metric
from prometheus_client.exposition import choose_encoder

from pod_netstat.core.constants import LABEL_NAMESPACE, LABEL_POD, METRIC_PREFIX
from pod_netstat.netstat.base import PodStats

logger = logging.getLogger(__name__)

HELP_TEMPLATE = (
    "The per-pod value of the {key} metric from "
    "/proc/net/(netstat|snmp|snmp6|sockstat|sockstat6)"
)


def build_metric_families(
    stats: Sequence[PodStats], timestamp: float | None = None
) -> list[GaugeMetricFamily]:
    """Build one gauge family per statistic key, sorted by metric name.

    Args:
        stats: Statistics of every pod collected this cycle
        timestamp: Sample timestamp in seconds, the current time if None
    """
    if timestamp is None:
        timestamp = time.time()

    families: dict[str, GaugeMetricFamily] = {}
    for pod in stats:
        for key, value in pod.stats.items():
            name = METRIC_PREFIX + key
            family = families.get(name)
            if family is None:
                family = GaugeMetricFamily(
                    name,
                    HELP_TEMPLATE.format(key=key),
                    labels=[LABEL_NAMESPACE, LABEL_POD],
                )
                families[name] = family
            family.add_metric([pod.namespace, pod.name], float(value), timestamp=timestamp)

    return [families[name] for name in sorted(families)]


class PodStatsExposition:
    """prometheus_client collector serving a fixed set of pod statistics."""

    def __init__(self, stats: Sequence[PodStats], timestamp: float | None = None) -> None:
        self._stats = stats
        self._timestamp = timestamp

    def collect(self) -> Iterator[Metric]:
        yield from build_metric_families(self._stats, self._timestamp)


def render_metrics(
    stats: Sequence[PodStats], accept_header: str | None = None
) -> tuple[bytes, str]:
    """Encode pod statistics in the format negotiated from ``accept_header``.

    Returns:
        Tuple of (body, content type)
    """
    logger.debug("Serving prometheus metrics")
    registry = CollectorRegistry(auto_describe=False)
    registry.register(PodStatsExposition(stats))
    encoder, content_type = choose_encoder(accept_header or "")
    return encoder(registry), content_type
