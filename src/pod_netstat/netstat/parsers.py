"""Parsers for the kernel network statistics files under /proc/<pid>/net/.

Five grammars are supported, one per file:

- netstat, snmp: pairs of header and value lines, e.g.::

      Tcp: RtoAlgorithm RtoMin RtoMax
      Tcp: 1 200 120000

- snmp6: one counter per line, protocol and counter joined at the first "6"::

      Ip6InReceives 42

- sockstat, sockstat6: a metric name followed by name/value pairs::

      TCP: inuse 10 orphan 0 tw 3

Every parser is a pure function from text to a flat ``<protocol>_<counter>``
mapping. Non-numeric values are skipped rather than reported.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path

from pod_netstat.core.constants import INT64_MAX, INT64_MIN, PROC_NET_DIR
from pod_netstat.core.errors import FieldCountMismatch, MalformedSockstatLine, ProcFileUnreadable
from pod_netstat.netstat.base import NetworkStats

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"[+-]?[0-9]+")


class ProcNetFormat(str, Enum):
    """Proc network statistics files, named as they appear on disk."""

    NETSTAT = "netstat"
    SNMP = "snmp"
    SNMP6 = "snmp6"
    SOCKSTAT = "sockstat"
    SOCKSTAT6 = "sockstat6"


# Later files win on key collisions, so this order is part of the output.
COLLECTION_ORDER: tuple[ProcNetFormat, ...] = (
    ProcNetFormat.NETSTAT,
    ProcNetFormat.SNMP,
    ProcNetFormat.SNMP6,
    ProcNetFormat.SOCKSTAT,
    ProcNetFormat.SOCKSTAT6,
)


def parse_int(value: str) -> int | None:
    """Parse a signed decimal 64-bit integer, returning None if it is not one."""
    if not _INT_RE.fullmatch(value):
        return None
    number = int(value)
    if number < INT64_MIN or number > INT64_MAX:
        return None
    return number


def _content_lines(text: str) -> list[str]:
    return [line for line in text.splitlines() if line.strip()]


def parse_netstat(text: str, source: str | None = None) -> NetworkStats:
    """Parse /proc/net/netstat (or snmp) style header/value line pairs.

    Args:
        text: File contents
        source: Path the text was read from, used in error messages

    Returns:
        Mapping of ``<protocol>_<field>`` to value

    Raises:
        FieldCountMismatch: If a header and its value line differ in length
    """
    stats: NetworkStats = {}
    lines = _content_lines(text)

    for i in range(0, len(lines), 2):
        names = lines[i].split()
        if i + 1 >= len(lines):
            # Odd line count: keep what was parsed so far.
            logger.error(f"Odd number of lines in netstat file {source or '<text>'}")
            break
        values = lines[i + 1].split()

        protocol = names[0].removesuffix(":")
        if len(names) != len(values):
            raise FieldCountMismatch(protocol, len(names), len(values), path=source)

        for name, raw in zip(names[1:], values[1:]):
            value = parse_int(raw)
            if value is None:
                continue
            stats[f"{protocol}_{name}"] = value

    return stats


# /proc/net/snmp shares the netstat grammar.
parse_snmp = parse_netstat


def parse_snmp6(text: str, source: str | None = None) -> NetworkStats:
    """Parse /proc/net/snmp6.

    The protocol is everything up to and including the first "6" of the
    counter name, so ``Icmp6InMsgs`` becomes ``Icmp6_InMsgs``. Lines without
    a "6" or without a value are skipped.
    """
    stats: NetworkStats = {}
    for line in text.splitlines():
        fields = line.split()
        if len(fields) < 2:
            continue
        six = fields[0].find("6")
        if six == -1:
            continue
        value = parse_int(fields[1])
        if value is None:
            continue
        stats[f"{fields[0][: six + 1]}_{fields[0][six + 1 :]}"] = value
    return stats


def parse_sockstat(text: str, source: str | None = None) -> NetworkStats:
    """Parse /proc/net/sockstat (or sockstat6).

    Raises:
        MalformedSockstatLine: If a line is not ``<metric>: <name> <value> ...``
    """
    stats: NetworkStats = {}
    for line in _content_lines(text):
        fields = line.split()
        # After the metric name, fields must be complete name/value pairs.
        if len(fields) < 3 or len(fields) % 2 == 0:
            raise MalformedSockstatLine(line, path=source)
        metric = fields[0].removesuffix(":")
        for name, raw in zip(fields[1::2], fields[2::2]):
            value = parse_int(raw)
            if value is None:
                continue
            stats[f"{metric}_{name}"] = value
    return stats


parse_sockstat6 = parse_sockstat


_PARSERS = {
    ProcNetFormat.NETSTAT: parse_netstat,
    ProcNetFormat.SNMP: parse_snmp,
    ProcNetFormat.SNMP6: parse_snmp6,
    ProcNetFormat.SOCKSTAT: parse_sockstat,
    ProcNetFormat.SOCKSTAT6: parse_sockstat6,
}


def parse_proc_net_file(
    fmt: ProcNetFormat | str, text: str, source: str | None = None
) -> NetworkStats:
    """Parse the contents of one proc network file.

    Args:
        fmt: File format, a ProcNetFormat or its string value
        text: File contents
        source: Path the text was read from, used in error messages

    Raises:
        ValueError: If the format is not one of the supported files
        ParseError: If the contents do not match the format's grammar
    """
    return _PARSERS[ProcNetFormat(fmt)](text, source=source)


def proc_net_path(host_root: Path | str, pid: int, fmt: ProcNetFormat | str) -> Path:
    return Path(host_root) / "proc" / str(pid) / PROC_NET_DIR / ProcNetFormat(fmt).value


def read_proc_net_file(host_root: Path | str, pid: int, fmt: ProcNetFormat | str) -> NetworkStats:
    """Read and parse /proc/<pid>/net/<fmt> under ``host_root``.

    Raises:
        ProcFileUnreadable: If the file cannot be opened or read
        ParseError: If the contents do not match the format's grammar
    """
    path = proc_net_path(host_root, pid, fmt)
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ProcFileUnreadable(str(path), e.strerror or str(e)) from e
    return parse_proc_net_file(fmt, text, source=str(path))
