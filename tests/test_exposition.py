"""Tests for Prometheus exposition and the /metrics rate limiter."""

from __future__ import annotations

import pytest
from prometheus_client.parser import text_string_to_metric_families

from pod_netstat.exposition.metrics import build_metric_families, render_metrics
from pod_netstat.exposition.ratelimit import RateLimiter
from pod_netstat.netstat.base import PodStats

STATS = [
    PodStats(name="web-0", namespace="default", stats={"TCP_inuse": 10, "Ip6_InReceives": 42}),
    PodStats(name="db-0", namespace="data", stats={"TCP_inuse": 3}),
]


class TestBuildMetricFamilies:
    def test_one_family_per_key(self) -> None:
        families = build_metric_families(STATS, timestamp=1700000000.0)

        assert [f.name for f in families] == ["pod_netstat_Ip6_InReceives", "pod_netstat_TCP_inuse"]
        tcp = families[1]
        assert tcp.type == "gauge"
        assert "TCP_inuse metric" in tcp.documentation
        assert [(s.labels, s.value) for s in tcp.samples] == [
            ({"pod_namespace": "default", "pod_name": "web-0"}, 10.0),
            ({"pod_namespace": "data", "pod_name": "db-0"}, 3.0),
        ]
        assert all(s.timestamp == 1700000000.0 for s in tcp.samples)

    def test_no_pods(self) -> None:
        assert build_metric_families([]) == []


class TestRenderMetrics:
    def test_text_format(self) -> None:
        body, content_type = render_metrics(STATS)
        text = body.decode("utf-8")

        assert content_type.startswith("text/plain")
        families = {f.name: f for f in text_string_to_metric_families(text)}
        assert families["pod_netstat_TCP_inuse"].type == "gauge"
        assert [(s.labels, s.value) for s in families["pod_netstat_TCP_inuse"].samples] == [
            ({"pod_namespace": "default", "pod_name": "web-0"}, 10.0),
            ({"pod_namespace": "data", "pod_name": "db-0"}, 3.0),
        ]
        assert [(s.labels, s.value) for s in families["pod_netstat_Ip6_InReceives"].samples] == [
            ({"pod_namespace": "default", "pod_name": "web-0"}, 42.0),
        ]

    def test_openmetrics_negotiated(self) -> None:
        body, content_type = render_metrics(
            STATS, "application/openmetrics-text; version=1.0.0; charset=utf-8"
        )
        assert content_type.startswith("application/openmetrics-text")
        assert body.decode("utf-8").rstrip().endswith("# EOF")


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestRateLimiter:
    def test_burst_then_refill(self) -> None:
        clock = FakeClock()
        limiter = RateLimiter(rate=2.0, burst=5, clock=clock)

        assert [limiter.allow() for _ in range(6)] == [True] * 5 + [False]

        clock.now = 0.5  # one token at 2/s
        assert limiter.allow() is True
        assert limiter.allow() is False

    def test_bucket_capped_at_burst(self) -> None:
        clock = FakeClock()
        limiter = RateLimiter(rate=100.0, burst=2, clock=clock)
        clock.now = 60.0
        assert [limiter.allow() for _ in range(3)] == [True, True, False]

    @pytest.mark.parametrize(("rate", "burst"), [(0, 5), (-1, 5), (1, 0)])
    def test_invalid_parameters(self, rate: float, burst: int) -> None:
        with pytest.raises(ValueError):
            RateLimiter(rate=rate, burst=burst)
