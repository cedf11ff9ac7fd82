"""Container id to host PID resolution through the cgroup v1 filesystem.

The container's task-list file is located by probing a fixed, ordered list of
cgroup layouts used by Docker, LXC, systemd and the kubelet over the years.
The first layout whose glob matches exactly one file wins; a layout matching
several files means the id prefix is ambiguous and resolution stops there.

Nothing is cached: the mount table and the runtime's own cgroup are read on
every call since both change when the runtime restarts.
"""

from __future__ import annotations

import glob
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import NamedTuple

from pod_netstat.core.constants import (
    DOCKER_PID_FILE,
    MOUNTS_FILE,
    PROBE_CONTROLLER,
    RUNTIME_PREFIXES,
)
from pod_netstat.core.errors import (
    AmbiguousContainer,
    ContainerNotFound,
    InvalidPID,
    MountpointNotFound,
    NoPIDFound,
    OwnCgroupNotFound,
)
from pod_netstat.netstat.base import CgroupProbeResult

logger = logging.getLogger(__name__)

GlobFunc = Callable[[str], list[str]]


class CgroupLayout(NamedTuple):
    """A named builder of task-list path segments.

    ``build(cgroup_root, own_cgroup, pattern)`` returns the path segments
    below the host root; ``pattern`` is the container id with a trailing
    wildcard.
    """

    name: str
    build: Callable[[str, str, str], tuple[str, ...]]


# Highest priority first.
CGROUP_LAYOUTS: tuple[CgroupLayout, ...] = (
    # Kubernetes with docker and CNI
    CgroupLayout(
        "kubepods-systemd",
        lambda root, own, pattern: (
            root, "..", "systemd", "kubepods", "*", "pod*", pattern, "tasks"
        ),
    ),
    # Kubernetes 1.11+ besteffort pods, relative to the runtime's own cgroup
    CgroupLayout(
        "kubepods-besteffort-own",
        lambda root, own, pattern: (
            root,
            own,
            "kubepods.slice",
            "kubepods-besteffort.slice",
            "*",
            f"docker-{pattern}.scope",
            "tasks",
        ),
    ),
    # Kubernetes 1.11+ besteffort pods when the runtime itself runs in a container
    CgroupLayout(
        "kubepods-besteffort",
        lambda root, own, pattern: (
            root,
            "kubepods.slice",
            "kubepods-besteffort.slice",
            "*",
            f"docker-{pattern}.scope",
            "tasks",
        ),
    ),
    CgroupLayout("flat", lambda root, own, pattern: (root, own, pattern, "tasks")),
    CgroupLayout("lxc", lambda root, own, pattern: (root, own, "lxc", pattern, "tasks")),
    CgroupLayout("docker", lambda root, own, pattern: (root, own, "docker", pattern, "tasks")),
    # Docker under systemd: system.slice/docker-<id>.scope
    CgroupLayout(
        "docker-systemd-scope",
        lambda root, own, pattern: (root, "system.slice", f"docker-{pattern}.scope", "tasks"),
    ),
    CgroupLayout(
        "docker-systemd",
        lambda root, own, pattern: (root, "..", "systemd", "docker", pattern, "tasks"),
    ),
)


def strip_runtime_prefix(container_id: str) -> str:
    """Remove a known runtime prefix such as ``docker://`` from a container id."""
    for prefix in RUNTIME_PREFIXES:
        if container_id.startswith(prefix):
            return container_id[len(prefix) :]
    return container_id


def host_path(host_root: Path | str, *segments: str) -> str:
    """Join ``segments`` lexically below ``host_root``.

    Absolute segments do not reset the join and ``..`` is collapsed, so
    ``host_path("/host", "/sys/fs/cgroup/memory", "..", "systemd")`` is
    ``/host/sys/fs/cgroup/systemd``.
    """
    relative = os.path.normpath(os.path.join("/", *(s.lstrip("/") for s in segments if s)))
    return os.path.normpath(os.path.join(str(host_root), relative.lstrip("/")))


def build_candidates(cgroup_root: str, own_cgroup: str, container_id: str) -> list[str]:
    """Return the task-list glob templates for ``container_id`` in priority order.

    The returned paths are relative to the host root.
    """
    pattern = container_id + "*"
    return [
        host_path("/", *layout.build(cgroup_root, own_cgroup, pattern))
        for layout in CGROUP_LAYOUTS
    ]


def _read_text(path: str) -> str:
    with open(path, encoding="utf-8", errors="replace") as f:
        return f.read()


def find_cgroup_mountpoint(host_root: Path | str, controller: str = PROBE_CONTROLLER) -> str:
    """Return the mount point of the cgroup hierarchy carrying ``controller``.

    /proc/mounts has 6 fields per line, one mount per line, e.g.
    ``cgroup /sys/fs/cgroup/memory cgroup rw,nosuid,memory 0 0``

    Raises:
        MountpointNotFound: If no such mount exists or the table is unreadable
    """
    path = host_path(host_root, MOUNTS_FILE)
    try:
        content = _read_text(path)
    except OSError as e:
        raise MountpointNotFound(path, controller) from e

    for line in content.splitlines():
        parts = line.split(" ")
        if len(parts) == 6 and parts[2] == "cgroup" and controller in parts[3].split(","):
            return parts[1]

    raise MountpointNotFound(path, controller)


def find_own_cgroup(host_root: Path | str, controller: str = PROBE_CONTROLLER) -> str:
    """Return the cgroup path of the container runtime for ``controller``.

    The runtime's PID is read from its pid file, then its /proc/<pid>/cgroup
    entries (``hierarchy-id:controller-list:path``) are searched.

    Raises:
        OwnCgroupNotFound: If the pid file or the cgroup entry is missing
    """
    pid_path = host_path(host_root, DOCKER_PID_FILE)
    try:
        first_line = _read_text(pid_path).split("\n", 1)[0].strip()
    except OSError as e:
        raise OwnCgroupNotFound(pid_path, e.strerror or str(e)) from e
    if not first_line:
        raise OwnCgroupNotFound(pid_path, "pid file is empty")
    if not (first_line.isascii() and first_line.isdigit()):
        raise OwnCgroupNotFound(pid_path, f"invalid pid {first_line!r}")

    cgroup_path = host_path(host_root, "proc", first_line, "cgroup")
    try:
        content = _read_text(cgroup_path)
    except OSError as e:
        raise OwnCgroupNotFound(cgroup_path, e.strerror or str(e)) from e

    for line in content.splitlines():
        parts = line.split(":", 2)
        if len(parts) == 3 and controller in parts[1].split(","):
            return parts[2]

    raise OwnCgroupNotFound(cgroup_path, f"cgroup {controller!r} not found")


def read_task_pid(path: str) -> int:
    """Return the first PID listed in a cgroup task-list file.

    Raises:
        NoPIDFound: If the file is empty or unreadable
        InvalidPID: If the first line is not a decimal PID
    """
    try:
        first_line = _read_text(path).split("\n", 1)[0]
    except OSError as e:
        raise NoPIDFound(path) from e
    if not first_line:
        raise NoPIDFound(path)
    if not (first_line.isascii() and first_line.isdigit()):
        raise InvalidPID(path, first_line)
    return int(first_line)


class CgroupResolver:
    """Resolve container ids to the PID of their first process.

    Args:
        glob_func: Glob expansion used to probe layouts, ``glob.glob`` by default
        controller: cgroup controller whose hierarchy is probed
    """

    def __init__(
        self, glob_func: GlobFunc | None = None, controller: str = PROBE_CONTROLLER
    ) -> None:
        self._glob = glob_func or glob.glob
        self._controller = controller

    def probe(self, host_root: Path | str, container_id: str) -> CgroupProbeResult:
        """Find the task-list file of ``container_id`` below ``host_root``.

        Raises:
            MountpointNotFound: If the cgroup hierarchy is not mounted
            OwnCgroupNotFound: If the runtime's own cgroup is unknown
            AmbiguousContainer: If one layout matches several task-list files
            ContainerNotFound: If no layout matches
        """
        container_id = strip_runtime_prefix(container_id)
        cgroup_root = find_cgroup_mountpoint(host_root, self._controller)
        own_cgroup = find_own_cgroup(host_root, self._controller)

        result = CgroupProbeResult()
        for candidate in build_candidates(cgroup_root, own_cgroup, container_id):
            template = host_path(host_root, candidate)
            result.candidates.append(template)
            matches = sorted(self._glob(template))
            if len(matches) > 1:
                raise AmbiguousContainer(container_id, matches)
            if len(matches) == 1:
                result.matched = matches[0]
                break

        if result.matched is None:
            raise ContainerNotFound(container_id, result.candidates)

        logger.debug(f"Looking for container {container_id} pid in {result.matched}")
        return result

    def resolve(self, host_root: Path | str, container_id: str) -> int:
        """Return the host PID of the first process in ``container_id``.

        Raises:
            ResolutionError: If the container cannot be resolved to a PID
        """
        result = self.probe(host_root, container_id)
        if result.matched is None:
            raise ContainerNotFound(container_id, result.candidates)
        return read_task_pid(result.matched)


def container_to_pid(host_root: Path | str, container_id: str) -> int:
    """Resolve ``container_id`` with the default resolver."""
    return CgroupResolver().resolve(host_root, container_id)
