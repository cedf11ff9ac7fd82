"""Core module - configuration, schemas and errors."""

from __future__ import annotations

from pod_netstat.core.config import apply_overrides, load_config
from pod_netstat.core.errors import (
    AmbiguousContainer,
    ContainerNotFound,
    FieldCountMismatch,
    InvalidPID,
    MalformedSockstatLine,
    MountpointNotFound,
    NetstatError,
    NoPIDFound,
    OwnCgroupNotFound,
    ParseError,
    PodSourceError,
    ProcFileUnreadable,
    ResolutionError,
)
from pod_netstat.core.schemas import ExporterConfig, KubeletConfig, PodInfo

__all__ = [
    "AmbiguousContainer",
    "apply_overrides",
    "ContainerNotFound",
    "ExporterConfig",
    "FieldCountMismatch",
    "InvalidPID",
    "KubeletConfig",
    "load_config",
    "MalformedSockstatLine",
    "MountpointNotFound",
    "NetstatError",
    "NoPIDFound",
    "OwnCgroupNotFound",
    "ParseError",
    "PodInfo",
    "PodSourceError",
    "ProcFileUnreadable",
    "ResolutionError",
]
