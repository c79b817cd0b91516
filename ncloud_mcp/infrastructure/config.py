"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from an optional JSON file
- Provides typed access to API, server, telemetry and logging settings
- Falls back to sensible defaults when config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass for immutability after load
- Nested config sections map to sub-dataclasses
- Credentials are not part of the file config: they only come from
  NCP_ACCESS_KEY / NCP_SECRET_KEY and are loaded separately
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
import dataclasses
import json
import logging
import os

from ncloud_mcp.domain.errors import ConfigurationError
from ncloud_mcp.domain.value_objects.credentials import Credentials

logger = logging.getLogger(__name__)

ACCESS_KEY_ENV = "NCP_ACCESS_KEY"
SECRET_KEY_ENV = "NCP_SECRET_KEY"

DEFAULT_CONFIG_FILE = "ncloud-mcp.json"


@dataclass(frozen=True)
class ApiConfig:
    """NCP API gateway settings."""
    url: str = "https://ncloud.apigw.ntruss.com"
    insecure: bool = False  # skip TLS certificate verification
    timeout_seconds: Optional[float] = None


@dataclass(frozen=True)
class ServerConfig:
    """MCP server identity reported on initialize."""
    name: str = "ncp-compute-server"
    version: str = "2.0.0"


@dataclass(frozen=True)
class TelemetryConfig:
    """OpenTelemetry configuration."""
    endpoint: str = ""
    insecure: bool = False


@dataclass(frozen=True)
class NcloudMCPConfig:
    """Root configuration for the ncloud-mcp server."""
    api: ApiConfig = field(default_factory=ApiConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    log_level: str = "WARNING"
    log_json: bool = False


_TOP_LEVEL_KEYS = {"log_level", "log_json"}


def _env_override(data: dict, prefix: str = "NCLOUD_MCP") -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern NCLOUD_MCP_SECTION_KEY.
    For example: NCLOUD_MCP_API_URL=https://..., NCLOUD_MCP_API_TIMEOUT_SECONDS=30,
    NCLOUD_MCP_LOG_LEVEL=DEBUG
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        name = key[len(prefix) + 1:].lower()
        if name in _TOP_LEVEL_KEYS:
            data[name] = value
            continue
        parts = name.split("_", 1)
        if len(parts) == 2:
            section, field_name = parts
            if not isinstance(data.get(section), dict):
                data[section] = {}
            data[section][field_name] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s must contain a JSON object", path)
        return {}
    return data


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _to_optional_float(section: str, name: str, value) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"Invalid value for {section}.{name}: {value!r} is not a number"
        ) from None


def _build_sub_config(cls, data: dict, section: str = ""):
    """Build a sub-config dataclass from a dict, ignoring unknown keys.

    Raises:
        ConfigurationError: if a value cannot be converted to its field type.
    """
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}

    # Convert env strings to the declared field types
    for f in dataclasses.fields(cls):
        if f.name not in filtered:
            continue
        val = filtered[f.name]
        if f.type == "bool":
            filtered[f.name] = _to_bool(val)
        elif f.type == "Optional[float]":
            filtered[f.name] = _to_optional_float(section, f.name, val)

    return cls(**filtered)


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "NCLOUD_MCP",
) -> NcloudMCPConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (NCLOUD_MCP_SECTION_KEY)
    2. Config file values
    3. Defaults

    Args:
        path: Path to config file (JSON). Defaults to ncloud-mcp.json in CWD.
        env_prefix: Environment variable prefix. Defaults to NCLOUD_MCP.

    Raises:
        ConfigurationError: if a setting has a malformed value.
    """
    config_path = Path(path) if path else Path(DEFAULT_CONFIG_FILE)
    data = _parse_config_file(config_path)
    data = _env_override(data, env_prefix)

    return NcloudMCPConfig(
        api=_build_sub_config(ApiConfig, data.get("api", {}), "api"),
        server=_build_sub_config(ServerConfig, data.get("server", {}), "server"),
        telemetry=_build_sub_config(TelemetryConfig, data.get("telemetry", {}), "telemetry"),
        log_level=str(data.get("log_level", "WARNING")).upper(),
        log_json=_to_bool(data.get("log_json", False)),
    )


def load_credentials(environ: Optional[Mapping[str, str]] = None) -> Credentials:
    """Read the NCP key pair from the environment.

    Raises:
        ConfigurationError: if either key is missing or empty.
    """
    env = os.environ if environ is None else environ
    access_key = env.get(ACCESS_KEY_ENV, "")
    secret_key = env.get(SECRET_KEY_ENV, "")
    if not access_key or not secret_key:
        raise ConfigurationError(
            f"{ACCESS_KEY_ENV} and {SECRET_KEY_ENV} must be set"
        )
    return Credentials(access_key=access_key, secret_key=secret_key)
