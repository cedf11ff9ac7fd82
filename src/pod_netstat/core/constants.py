"""Shared constants for pod-netstat.

Filesystem locations are relative to the host mount root unless noted.
"""

from __future__ import annotations

# Any cgroup v1 controller used by the container runtime works for locating
# task-list files. Memory is always mounted on the hosts we support.
PROBE_CONTROLLER = "memory"

# Container runtime prefixes stripped from kubelet container ids.
RUNTIME_PREFIXES = ("docker://",)

MOUNTS_FILE = "proc/mounts"
DOCKER_PID_FILE = "var/run/docker.pid"

# Proc files read for every pod, relative to /proc/<pid>/net/.
PROC_NET_DIR = "net"

DEFAULT_HOST_MOUNT_PATH = "/host"
DEFAULT_BIND_ADDRESS = ":9657"
DEFAULT_KUBELET_API = "http://localhost:10250/pods"
DEFAULT_RATE_LIMIT = 3.0

# Burst size of the /metrics token bucket.
RATE_LIMIT_BURST = 5

# Prometheus metric naming
METRIC_PREFIX = "pod_netstat_"
LABEL_NAMESPACE = "pod_namespace"
LABEL_POD = "pod_name"

# In-cluster service account credentials
SERVICE_ACCOUNT_DIR = "/var/run/secrets/kubernetes.io/serviceaccount"

# Largest and smallest values a metric can take (signed 64-bit).
INT64_MAX = 2**63 - 1
INT64_MIN = -(2**63)
