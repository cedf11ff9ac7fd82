"""Pydantic schemas for pod-netstat.

This module defines the configuration contracts of the exporter and the pod
records handed to the collector by the pod source.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from pod_netstat.core.constants import (
    DEFAULT_BIND_ADDRESS,
    DEFAULT_HOST_MOUNT_PATH,
    DEFAULT_KUBELET_API,
    DEFAULT_RATE_LIMIT,
)

LOG_LEVELS = ("trace", "debug", "info", "warning", "error", "critical")


class KubeletConfig(BaseModel):
    """Connection options for the kubelet API.

    Attributes:
        api_endpoint: URL of the kubelet pod list
        insecure_skip_verify: Skip verification of the kubelet TLS certificate
        timeout_seconds: Request timeout for one pod list fetch
    """

    api_endpoint: str = Field(default=DEFAULT_KUBELET_API, min_length=1)
    insecure_skip_verify: bool = Field(default=False)
    timeout_seconds: float = Field(default=10.0, gt=0)


class ExporterConfig(BaseModel):
    """Complete exporter configuration.

    Attributes:
        log_level: Log level name (trace, debug, info, warning, error)
        rate_limit: Number of /metrics requests served per second
        bind_address: Listener address in ``host:port`` form (host optional)
        host_mount_path: Where the host filesystem is mounted
        kubelet: Kubelet connection options
    """

    log_level: str = Field(default="info")
    rate_limit: float = Field(default=DEFAULT_RATE_LIMIT, gt=0)
    bind_address: str = Field(default=DEFAULT_BIND_ADDRESS)
    host_mount_path: Path = Field(default=Path(DEFAULT_HOST_MOUNT_PATH))
    kubelet: KubeletConfig = Field(default_factory=KubeletConfig)

    model_config = {"extra": "forbid"}

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the log level and reject unknown names."""
        level = v.strip().lower()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {v!r}. Use one of: {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("bind_address")
    @classmethod
    def validate_bind_address(cls, v: str) -> str:
        """Ensure the bind address carries a usable port."""
        _, sep, port = v.rpartition(":")
        if not sep or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(f"Invalid bind address {v!r}, expected [host]:port")
        return v

    @property
    def listen_host(self) -> str:
        host = self.bind_address.rpartition(":")[0].strip("[]")
        return host or "0.0.0.0"

    @property
    def listen_port(self) -> int:
        return int(self.bind_address.rpartition(":")[2])


class PodInfo(BaseModel):
    """One pod as reported by the pod source.

    All containers of a pod share one network namespace, so only the first
    container's id is kept.
    """

    name: str
    namespace: str
    container_id: str | None = None
    host_network: bool = False

    model_config = {"frozen": True}

    @classmethod
    def from_manifest(cls, manifest: dict[str, Any]) -> PodInfo:
        """Build a PodInfo from one item of a Kubernetes PodList."""
        metadata = manifest.get("metadata") or {}
        spec = manifest.get("spec") or {}
        status = manifest.get("status") or {}

        container_id = None
        container_statuses = status.get("containerStatuses") or []
        if container_statuses:
            container_id = container_statuses[0].get("containerID") or None

        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace", ""),
            container_id=container_id,
            host_network=bool(spec.get("hostNetwork", False)),
        )
