"""Data types shared by the resolver, the parsers and the collector."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

# Metric key (``<protocol>_<counter>``) to value.
NetworkStats = dict[str, int]


@dataclass(frozen=True)
class PodStats:
    """Network statistics gathered for one pod in one collection cycle.

    The statistics mapping is frozen on construction; the collector that built
    it keeps no reference to a mutable copy.
    """

    name: str
    namespace: str
    stats: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "stats", MappingProxyType(dict(self.stats)))

    def to_dict(self) -> dict[str, str | dict[str, int]]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "namespace": self.namespace,
            "stats": dict(self.stats),
        }


@dataclass
class CgroupProbeResult:
    """Outcome of probing the cgroup layouts for one container.

    ``candidates`` lists the glob templates tried, in priority order, up to and
    including the one that matched.
    """

    candidates: list[str] = field(default_factory=list)
    matched: str | None = None
