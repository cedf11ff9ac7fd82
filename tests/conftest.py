"""Shared fixtures: a fake host filesystem below tmp_path."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

MOUNTS = (
    "sysfs /sys sysfs rw,nosuid,nodev,noexec,relatime 0 0\n"
    "tmpfs /sys/fs/cgroup tmpfs ro,nosuid,nodev,noexec,mode=755 0 0\n"
    "cgroup /sys/fs/cgroup/cpu,cpuacct cgroup rw,nosuid,nodev,noexec,relatime,cpu,cpuacct 0 0\n"
    "cgroup /sys/fs/cgroup/memory cgroup rw,nosuid,nodev,noexec,relatime,memory 0 0\n"
)

DOCKER_PID = 100

# Memory hierarchy mount point below the host root.
MEMORY_TASKS = "sys/fs/cgroup/memory"

NETSTAT = (
    "TcpExt: SyncookiesSent SyncookiesRecv ListenDrops\n"
    "TcpExt: 5 0 12\n"
    "IpExt: InNoRoutes InOctets\n"
    "IpExt: 0 123456\n"
)

SNMP = (
    "Ip: Forwarding DefaultTTL InReceives\n"
    "Ip: 1 64 9000\n"
    "Tcp: RtoAlgorithm RtoMin RtoMax MaxConn ActiveOpens\n"
    "Tcp: 1 200 120000 -1 42\n"
)

SNMP6 = (
    "Ip6InReceives                   \t42\n"
    "Icmp6InMsgs                     \t3\n"
    "UdpLite6InErrors 0\n"
)

SOCKSTAT = "sockets: used 290\nTCP: inuse 10 orphan 0 tw 3 alloc 12 mem 1\nUDP: inuse 2 mem 4\n"

SOCKSTAT6 = "TCP6: inuse 4\nUDP6: inuse 1\nRAW6: inuse 0\nFRAG6: inuse 0 memory 0\n"

PROC_NET_FILES = {
    "netstat": NETSTAT,
    "snmp": SNMP,
    "snmp6": SNMP6,
    "sockstat": SOCKSTAT,
    "sockstat6": SOCKSTAT6,
}


class HostFS:
    """Builder for a host filesystem tree mounted at ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def write(self, relative: str, content: str) -> Path:
        path = self.root / relative.lstrip("/")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def setup_runtime(
        self, mounts: str = MOUNTS, docker_pid: int = DOCKER_PID, own_cgroup: str = "/"
    ) -> None:
        """Write the mount table, docker pid file and docker's cgroup file."""
        self.write("proc/mounts", mounts)
        self.write("var/run/docker.pid", f"{docker_pid}\n")
        self.write(
            f"proc/{docker_pid}/cgroup",
            f"5:cpu,cpuacct:{own_cgroup}\n4:memory:{own_cgroup}\n1:name=systemd:/system.slice\n",
        )

    def add_tasks(self, relative_dir: str, *pids: int) -> Path:
        """Create a cgroup task-list file under ``relative_dir``."""
        content = "".join(f"{pid}\n" for pid in pids)
        return self.write(f"{relative_dir.strip('/')}/tasks", content)

    def add_proc_net(self, pid: int, files: dict[str, str] | None = None) -> None:
        for name, content in (files if files is not None else PROC_NET_FILES).items():
            self.write(f"proc/{pid}/net/{name}", content)


@pytest.fixture
def host(tmp_path: Path) -> HostFS:
    """An empty fake host filesystem."""
    return HostFS(tmp_path / "host")


@pytest.fixture
def docker_host(host: HostFS) -> HostFS:
    """A fake host with the memory cgroup mounted and docker running in /."""
    host.setup_runtime()
    return host


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handlers installed by setup_logging during a test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler, RichHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
