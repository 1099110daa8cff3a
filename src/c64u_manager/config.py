"""Layered configuration for the c64u CLI.

Resolution order, highest first:

1. CLI flags (``--host``, ``--port``, ...)
2. Environment variables (``C64U_HOST``, ``C64U_PORT``, ...)
3. Config file (``~/.config/c64u/config.toml``, then ``./config.toml``)
4. Built-in defaults (``host=localhost``, ``port=80``)
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .const import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_TIMEOUT_SECONDS, ENV_PREFIX
from .exception import C64UError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.toml"

DEFAULT_CONFIG_TEMPLATE = """\
# c64u Configuration File
# C64 Ultimate CLI Tool

# C64 Ultimate hostname or IP address
host = "localhost"

# HTTP port (default: 80)
port = 80

# Example for a specific C64 Ultimate on network:
# host = "192.168.1.100"
# port = 80
"""

_ENV_FIELDS = {
    "host": "HOST",
    "port": "PORT",
    "verbose": "VERBOSE",
    "json_output": "JSON",
    "no_color": "NO_COLOR",
    "timeout": "TIMEOUT",
}
_FILE_ALIASES = {"json": "json_output", "no-color": "no_color"}


class ConfigError(C64UError):
    """Raised when the configuration file or environment is invalid."""


class Settings(BaseModel):
    """Resolved settings for one invocation."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    host: str = DEFAULT_HOST
    port: int = Field(DEFAULT_PORT, ge=1, le=65535)
    verbose: bool = False
    json_output: bool = False
    no_color: bool = False
    timeout: float = Field(DEFAULT_TIMEOUT_SECONDS, gt=0, le=600)
    config_file: Optional[Path] = None

    @field_validator("host", mode="before")
    def _normalize_host(cls, value: Any) -> Any:
        if isinstance(value, str):
            host = value.strip()
            for scheme in ("http://", "https://"):
                if host.startswith(scheme):
                    host = host[len(scheme) :]
            host = host.rstrip("/")
            if not host:
                raise ValueError("host must not be empty")
            return host
        return value

    def as_display_dict(self) -> Dict[str, Any]:
        """Return the fields shown by ``config show``."""
        data: Dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "verbose": self.verbose,
            "json": self.json_output,
            "no_color": self.no_color,
            "timeout": self.timeout,
        }
        if self.config_file is not None:
            data["config_file"] = str(self.config_file)
        return data


def default_config_path() -> Path:
    """Return ``~/.config/c64u/config.toml``."""
    return Path.home() / ".config" / "c64u" / CONFIG_FILE_NAME


def config_search_paths() -> list[Path]:
    return [default_config_path(), Path.cwd() / CONFIG_FILE_NAME]


def find_config_file(explicit: Optional[Path] = None) -> Optional[Path]:
    """Return the config file to read, or ``None`` when there is none.

    An explicit path must exist; the search path is optional.
    """
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigError("Config file not found", [str(explicit)])
        return explicit
    for candidate in config_search_paths():
        if candidate.is_file():
            return candidate
    return None


def read_config_file(path: Path) -> Dict[str, Any]:
    """Parse a TOML config file into a flat settings mapping."""
    try:
        with path.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        raise ConfigError(
            "Error reading config file", [f"{path}: {exc}"]
        ) from exc
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        name = _FILE_ALIASES.get(key, key)
        if name in _ENV_FIELDS:
            values[name] = value
        else:
            logger.debug("Ignoring unknown config key %r in %s", key, path)
    return values


def read_environment(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect ``C64U_*`` overrides; blank values are ignored."""
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}
    for name, suffix in _ENV_FIELDS.items():
        raw = env.get(f"{ENV_PREFIX}{suffix}")
        if raw is None or raw.strip() == "":
            continue
        values[name] = raw.strip()
    return values


def load_settings(
    overrides: Optional[Mapping[str, Any]] = None,
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Resolve settings from defaults, file, environment and CLI flags.

    Args:
        overrides: Values given explicitly on the command line; ``None``
            entries mean "not given"
        config_file: Explicit config file path (``--config``)
        environ: Environment mapping, defaults to ``os.environ``

    Raises:
        ConfigError: If the file cannot be parsed or a value is invalid
    """
    merged: Dict[str, Any] = {}
    path = find_config_file(config_file)
    if path is not None:
        merged.update(read_config_file(path))
        logger.debug("Loaded config file %s", path)
    merged.update(read_environment(environ))
    merged.update(
        {key: value for key, value in (overrides or {}).items() if value is not None}
    )
    try:
        return Settings(**merged, config_file=path)
    except ValidationError as exc:
        details = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
        raise ConfigError("Invalid configuration", details) from exc


def create_default_config(path: Optional[Path] = None) -> Path:
    """Write the default config file and return its path.

    Raises:
        ConfigError: If the file already exists or cannot be written
    """
    target = path or default_config_path()
    if target.exists():
        raise ConfigError(
            "Config file already exists", [f"config file already exists at: {target}"]
        )
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    except OSError as exc:
        raise ConfigError("Failed to write config file", [str(exc)]) from exc
    return target
