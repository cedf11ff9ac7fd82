"""Error taxonomy for pod network statistics collection.

Every failure carries the container id or filesystem path it concerns so the
caller can log it without extra context. Resolution and parse failures abort
the current pod only; isolating pods from one another is the caller's job.
"""

from __future__ import annotations


class NetstatError(Exception):
    """Base class for all pod-netstat failures."""


# ---------------------------------------------------------------------------
# Container id -> PID resolution
# ---------------------------------------------------------------------------


class ResolutionError(NetstatError):
    """A container id could not be mapped to a host PID."""


class MountpointNotFound(ResolutionError):
    def __init__(self, path: str, controller: str) -> None:
        self.path = path
        self.controller = controller
        super().__init__(f"cgroup mountpoint not found for {controller} in {path}")


class OwnCgroupNotFound(ResolutionError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"own cgroup not found via {path}: {reason}")


class AmbiguousContainer(ResolutionError):
    """A single layout template matched more than one task-list file."""

    def __init__(self, container_id: str, matches: list[str]) -> None:
        self.container_id = container_id
        self.matches = matches
        super().__init__(f"ambiguous id supplied: {container_id} matches {matches}")


class ContainerNotFound(ResolutionError):
    def __init__(self, container_id: str, candidates: list[str] | None = None) -> None:
        self.container_id = container_id
        self.candidates = candidates or []
        super().__init__(f"unable to find container: {container_id}")


class NoPIDFound(ResolutionError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"no pid found for container in {path}")


class InvalidPID(ResolutionError):
    def __init__(self, path: str, value: str) -> None:
        self.path = path
        self.value = value
        super().__init__(f"invalid pid {value!r} in {path}")


# ---------------------------------------------------------------------------
# Proc file parsing
# ---------------------------------------------------------------------------


class ParseError(NetstatError):
    """A proc network statistics file could not be parsed."""


class FieldCountMismatch(ParseError):
    def __init__(
        self, protocol: str, header_fields: int, value_fields: int, path: str | None = None
    ) -> None:
        self.protocol = protocol
        self.header_fields = header_fields
        self.value_fields = value_fields
        self.path = path
        super().__init__(
            f"field count mismatch for {protocol} in {path or '<text>'}: "
            f"{header_fields} names, {value_fields} values"
        )


class MalformedSockstatLine(ParseError):
    def __init__(self, line: str, path: str | None = None) -> None:
        self.line = line
        self.path = path
        super().__init__(f"malformed sockstat line in {path or '<text>'}: {line!r}")


class ProcFileUnreadable(ParseError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"failure opening {path}: {reason}")


# ---------------------------------------------------------------------------
# Pod source
# ---------------------------------------------------------------------------


class PodSourceError(NetstatError):
    """The pod list could not be fetched from the kubelet."""

    def __init__(self, endpoint: str, reason: str) -> None:
        self.endpoint = endpoint
        self.reason = reason
        super().__init__(f"error getting pod list from {endpoint}: {reason}")
