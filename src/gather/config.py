"""Configuration loader for gather."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_PATH = Path("~/.config/gather/config.yaml")


@dataclass
class Config:
    """Settings for watching an output directory."""

    refresh_interval: float = 0.1
    tail: bool = True
    prompt_detection: bool = True
    log_file: Path | None = None
    source_path: Path | None = None  # Path to the file these values came from


def load_config(config_path: str | Path | None = None) -> Config:
    """Load and validate configuration from a YAML file.

    With no path, the default location is used if it exists and built-in
    defaults otherwise. An explicit path that does not exist is an error.
    """
    if config_path is None:
        default = DEFAULT_CONFIG_PATH.expanduser()
        if not default.exists():
            return Config()
        config_path = default

    config_path = Path(config_path).expanduser().resolve()

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f)

    config = _parse_config(raw or {})
    config.source_path = config_path
    return config


def _parse_config(raw: Any) -> Config:
    """Parse raw YAML data into Config object."""
    if not isinstance(raw, dict):
        raise ValueError("Configuration must be a mapping")

    interval = raw.get("refresh_interval", 0.1)
    if isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0:
        raise ValueError(f"'refresh_interval' must be a positive number, got {interval!r}")

    log_file = raw.get("log_file")

    return Config(
        refresh_interval=float(interval),
        tail=_parse_bool(raw, "tail", True),
        prompt_detection=_parse_bool(raw, "prompt_detection", True),
        log_file=Path(log_file).expanduser() if log_file else None,
    )


def _parse_bool(raw: dict[str, Any], key: str, default: bool) -> bool:
    value = raw.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"'{key}' must be true or false, got {value!r}")
    return value
