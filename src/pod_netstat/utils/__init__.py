"""Utils module - Shared utilities."""

from __future__ import annotations

from pod_netstat.utils.logging import resolve_level, setup_logging

__all__ = ["setup_logging", "resolve_level"]
