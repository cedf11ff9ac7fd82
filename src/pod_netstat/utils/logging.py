"""Logging configuration for pod-netstat."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from rich.logging import RichHandler

# Per-pod lookups are logged at DEBUG; "trace" is accepted for parity with
# deployments that still pass the old level name.
_LEVEL_ALIASES = {"trace": "DEBUG", "warn": "WARNING", "fatal": "CRITICAL"}

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per record, stamped with the record's creation time."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def resolve_level(level: str) -> int:
    """Map a level name to a logging level number.

    Raises:
        ValueError: If the level name is unknown
    """
    name = level.strip().lower()
    name = _LEVEL_ALIASES.get(name, name).upper()
    value = logging.getLevelName(name)
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level {level}")
    return value


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    rich_console: bool = True,
    json_format: bool = False,
) -> None:
    """Configure the root logger.

    Console output is JSON lines when ``json_format`` is set, otherwise rich
    or plain text. ``log_file`` additionally receives plain text.
    """
    numeric_level = resolve_level(level)

    if json_format:
        console: logging.Handler = logging.StreamHandler(sys.stdout)
        console.setFormatter(JsonFormatter())
    elif rich_console:
        console = RichHandler(rich_tracebacks=True, markup=False, show_path=False)
    else:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(logging.Formatter(_PLAIN_FORMAT))
    handlers = [console]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(_PLAIN_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)
