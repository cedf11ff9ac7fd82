"""Kubelet module - the pod source."""

from __future__ import annotations

from pod_netstat.kubelet.client import KubeletClient, in_cluster

__all__ = ["KubeletClient", "in_cluster"]
