"""Frozen dataclasses for configuration and YAML loader with env-var interpolation."""

from __future__ import annotations

import os
import re
import typing
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .discovery.tag_filter import TagSpec, parse_tag_spec
from .exceptions import ConfigError

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")

STDOUT_DEST = "-"

LOG_LEVELS = ("CRITICAL", "FATAL", "ERROR", "WARNING", "WARN", "INFO", "DEBUG", "NOTSET")


def _interpolate_env(value: str) -> str:
    """Replace ${ENV_VAR} placeholders with environment variable values."""

    def _replace(match: re.Match) -> str:
        env_key = match.group(1)
        env_val = os.environ.get(env_key)
        if env_val is None:
            raise ConfigError(f"Environment variable '{env_key}' is not set")
        return env_val

    return _ENV_PATTERN.sub(_replace, value)


def _walk_and_interpolate(obj: Any) -> Any:
    """Recursively interpolate env vars in strings throughout a nested structure."""
    if isinstance(obj, str):
        return _interpolate_env(obj)
    if isinstance(obj, dict):
        return {k: _walk_and_interpolate(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_walk_and_interpolate(v) for v in obj]
    return obj


@dataclass(frozen=True)
class AWSConfig:
    region: str = "us-west-2"
    credential_profile: str = ""  # empty = use default boto3 credential chain


@dataclass(frozen=True)
class TargetsConfig:
    load_balancer: str = ""
    port: int = 80  # port exposing /metrics on every instance
    tags: str = "Name"  # e.g. "Environment,Application" or "Application,Environment=Production"
    dest: str = STDOUT_DEST  # "-" writes to stdout


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    format: str = "text"  # "json" or "text"


@dataclass(frozen=True)
class AppConfig:
    aws: AWSConfig = field(default_factory=AWSConfig)
    targets: TargetsConfig = field(default_factory=TargetsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def tag_spec(self) -> TagSpec:
        return parse_tag_spec(self.targets.tags)


def _get_dataclass_type(ft: Any) -> type | None:
    """Return ft if it is a dataclass type, otherwise None."""
    if isinstance(ft, type) and hasattr(ft, "__dataclass_fields__"):
        return ft
    return None


def _build_nested(cls: type, data: dict[str, Any]) -> Any:
    """Construct a frozen dataclass, recursively building nested dataclass fields."""
    if not isinstance(data, dict):
        return data
    field_types = typing.get_type_hints(cls)
    kwargs: dict[str, Any] = {}
    for key, value in data.items():
        if key not in field_types:
            continue
        dc_type = _get_dataclass_type(field_types[key])
        if dc_type is not None:
            if not isinstance(value, dict):
                raise ConfigError(f"Configuration section '{key}' must be a mapping")
            kwargs[key] = _build_nested(dc_type, value)
        else:
            kwargs[key] = value
    return cls(**kwargs)


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Overlay non-None override values onto a nested mapping."""
    merged = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict):
            section = merged.get(key)
            if section is None:
                section = {}
            # Non-mapping sections are left for _build_nested to reject
            merged[key] = _merge(section, value) if isinstance(section, dict) else section
        else:
            merged[key] = value
    return merged


def _read_yaml(path: str | Path) -> dict[str, Any]:
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")

    with open(path) as f:
        try:
            raw = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Configuration file is not valid YAML: {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError("Configuration file must be a YAML mapping")
    return raw


def load_config(path: str | Path) -> AppConfig:
    """Load and validate configuration from a YAML file."""
    return build_config(path)


def build_config(path: str | Path | None = None, overrides: dict[str, Any] | None = None) -> AppConfig:
    """Build the run configuration from an optional YAML file plus command-line overrides.

    Overrides are nested like the YAML file (``{"targets": {"port": 9100}}``);
    ``None`` values leave the file (or default) value in place.
    """
    raw = _read_yaml(path) if path is not None else {}
    raw = _walk_and_interpolate(raw)
    raw = _merge(raw, overrides or {})
    config = _build_nested(AppConfig, raw)
    _validate(config)
    return config


def _validate(config: AppConfig) -> None:
    """Validate configuration values."""
    if not config.targets.load_balancer:
        raise ConfigError("targets.load_balancer is required (use --elb or the config file)")

    if not config.aws.region:
        raise ConfigError("aws.region must not be empty")

    port = config.targets.port
    if isinstance(port, bool) or not isinstance(port, int):
        raise ConfigError(f"targets.port must be an integer, got {port!r}")
    if not 1 <= port <= 65535:
        raise ConfigError(f"targets.port must be between 1 and 65535, got {port}")

    if not isinstance(config.targets.tags, str):
        raise ConfigError("targets.tags must be a comma-separated string")

    if not config.targets.dest:
        raise ConfigError("targets.dest must not be empty (use '-' for stdout)")

    if config.logging.format not in ("json", "text"):
        raise ConfigError("logging.format must be 'json' or 'text'")

    level = config.logging.level
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ConfigError(f"logging.level must be one of {', '.join(LOG_LEVELS)}, got {level!r}")

    # Malformed tag specs must fail before any network call
    parse_tag_spec(config.targets.tags)
