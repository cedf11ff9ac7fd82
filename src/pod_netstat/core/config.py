"""Configuration loading from YAML or JSON files, plus CLI overrides."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from pod_netstat.core.schemas import ExporterConfig

_LOADERS = {".yaml": yaml.safe_load, ".yml": yaml.safe_load, ".json": json.load}


def load_config(path: Path | str) -> ExporterConfig:
    """Load and validate an exporter configuration file.

    An empty file yields the default configuration.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the suffix is not .yaml, .yml or .json
        pydantic.ValidationError: If the content is invalid
    """
    path = Path(path)
    loader = _LOADERS.get(path.suffix.lower())
    if loader is None:
        raise ValueError(f"Unsupported config format {path.suffix!r} for {path}")
    with open(path, encoding="utf-8") as f:
        data = loader(f)
    return ExporterConfig.model_validate(data or {})


def apply_overrides(config: ExporterConfig, **overrides: Any) -> ExporterConfig:
    """Return a copy of ``config`` with non-None overrides applied.

    Keys prefixed with ``kubelet_`` are routed to the nested kubelet section.
    """
    top: dict[str, Any] = {}
    kubelet: dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        if key.startswith("kubelet_"):
            kubelet[key.removeprefix("kubelet_")] = value
        else:
            top[key] = value

    data = config.model_dump()
    data.update(top)
    data["kubelet"].update(kubelet)
    return ExporterConfig.model_validate(data)
