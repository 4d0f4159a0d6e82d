"""
Collins client configuration.

Same YAML layout the other Collins tools read (host, username,
password). Without an explicit path we look in the usual places,
first match wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import yaml

log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS = (
    "~/.collins.yml",
    "/etc/collins.yml",
    "/var/db/collins.yml",
)

DEFAULT_TIMEOUT_SECONDS = 30.0


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class CollinsConfig:
    host: str
    username: str = ""
    password: str = ""
    timeout: float = DEFAULT_TIMEOUT_SECONDS


def _from_mapping(raw, source: str) -> CollinsConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f"{source}: expected a mapping at the top level")

    host = str(raw.get("host") or "").strip()
    if not host:
        raise ConfigError(f"{source}: 'host' is required")

    try:
        timeout = float(raw.get("timeout", DEFAULT_TIMEOUT_SECONDS))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{source}: 'timeout' must be a number") from e

    return CollinsConfig(
        host=host.rstrip("/"),
        username=str(raw.get("username") or ""),
        password=str(raw.get("password") or ""),
        timeout=timeout,
    )


def load_config_file(path: str) -> CollinsConfig:
    config_file = Path(path).expanduser()
    if not config_file.exists():
        raise ConfigError(f"Collins config not found: {path}")

    try:
        with open(config_file, "r") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: invalid YAML ({e})") from e

    return _from_mapping(raw, str(config_file))


def load_config(
    path: Optional[str] = None,
    search_paths: Sequence[str] = DEFAULT_CONFIG_PATHS,
) -> CollinsConfig:
    """Load the Collins config from `path`, or the first default location that exists."""
    if path:
        return load_config_file(path)

    for candidate in search_paths:
        if Path(candidate).expanduser().exists():
            log.debug("Using Collins config %s", candidate)
            return load_config_file(candidate)

    raise ConfigError(
        "No Collins config found, looked in: " + ", ".join(search_paths)
    )
