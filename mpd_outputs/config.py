# © Copyright 2025 Stuart Parmenter
# SPDX-License-Identifier: MIT

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, ClassVar

import tomllib
import yaml

from .utils.helpers import parse_mpd_host


DEFAULT_CONFIG: dict[str, Any] = {
    "mpd": {
        "host": "localhost",  # host name, IP, or /path/to/socket
        "port": 6600,
        "timeout": 30.0,  # seconds per blocking socket operation
        "password": None,
    },
    "api": {
        "host": "0.0.0.0",
        "port": 8789,
    },
    "log": {
        "level": "info",
    },
}


def load_config_file(path: str) -> dict[str, Any]:
    """Load configuration from a file (YAML, TOML, or JSON)."""
    logger = logging.getLogger("config")
    path_obj = Path(path)
    ext = path_obj.suffix.lower()

    if not path_obj.exists():
        logger.warning(f"Config file not found: {path}")
        return {}

    try:
        if ext in (".yaml", ".yml"):
            with path_obj.open(encoding="utf-8") as f:
                return yaml.safe_load(f) or {}

        elif ext == ".toml":
            with path_obj.open("rb") as f:
                return tomllib.load(f) or {}

        elif ext == ".json":
            with path_obj.open(encoding="utf-8") as f:
                return json.load(f) or {}

        else:
            logger.warning(f"Unknown config extension: {ext}")
            return {}

    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load {path}: {e}")
        return {}


def deep_update(dst: dict[str, Any], src: dict[str, Any]) -> dict[str, Any]:
    """Deep merge configuration dictionaries."""
    for k, v in src.items():
        if isinstance(v, dict) and isinstance(dst.get(k), dict):
            deep_update(dst[k], v)
        else:
            dst[k] = v
    return dst


def env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    """Read the standard ``MPD_HOST`` / ``MPD_PORT`` variables."""
    overrides: dict[str, Any] = {}
    host = environ.get("MPD_HOST")
    if host:
        password, host = parse_mpd_host(host)
        overrides["host"] = host
        if password:
            overrides["password"] = password

    port = environ.get("MPD_PORT")
    if port:
        try:
            overrides["port"] = int(port)
        except ValueError:
            logging.getLogger("config").warning(f"Ignoring invalid MPD_PORT: {port!r}")

    return {"mpd": overrides} if overrides else {}


def load_config(path: str | None = None, environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Load configuration: defaults, then the optional file, then the environment."""
    cfg = json.loads(json.dumps(DEFAULT_CONFIG))  # Deep copy

    if path:
        deep_update(cfg, load_config_file(path))

    deep_update(cfg, env_overrides(os.environ if environ is None else environ))

    return cfg


class Config:
    """Configuration singleton."""

    _instance: ClassVar["Config | None"] = None
    _config: ClassVar[dict[str, Any]] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @classmethod
    def load(cls, path: str | None = None, environ: Mapping[str, str] | None = None) -> None:
        """Load configuration from file and environment."""
        cls._config = load_config(path, environ)

    @classmethod
    def get(cls, key: str | None = None) -> Any:
        """Get configuration value by key path (e.g., 'mpd.port')."""
        if key is None:
            return cls._config

        keys = key.split(".")
        value = cls._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                raise KeyError(f"Configuration key not found: {key}")

        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value by key path."""
        keys = key.split(".")
        target = self._config

        for k in keys[:-1]:
            if k not in target:
                target[k] = {}
            target = target[k]

        target[keys[-1]] = value

    def update(self, updates: dict[str, Any]) -> None:
        """Update configuration with dictionary."""
        deep_update(self._config, updates)

    def connection_settings(self) -> dict[str, Any]:
        """Keyword arguments for ``MpdConnection.connect``."""
        return {
            "host": self.get("mpd.host"),
            "port": int(self.get("mpd.port")),
            "timeout": self.get("mpd.timeout"),
            "password": self.get("mpd.password"),
        }

    def __getitem__(self, key: str) -> Any:
        """Allow dict-like access."""
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        """Allow dict-like assignment."""
        self.set(key, value)
