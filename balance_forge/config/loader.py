from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError as SchemaValidationError

from ..contracts import CONFIG_SCHEMA, load_schema

"""Configuration loader.

Responsibilities:
- Resolve the config path (explicit argument > BALANCE_FORGE_CONFIG > default)
- Load YAML with ``yaml.safe_load``
- Validate against ``contracts/config_schema.json`` (unknown keys rejected)
- Apply defaults for optional keys
"""

__all__ = [
    "AppConfig",
    "ConfigError",
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "resolve_config_path",
]

DEFAULT_CONFIG_PATH = Path("config/balance_forge.yml")
CONFIG_ENV_VAR = "BALANCE_FORGE_CONFIG"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AppConfig:
    source_directory: str
    store_directory: str
    export_directory: str = "./export"
    logs_directory: str = "./logs"
    replace_on_mismatch: bool = False
    validate_on_import: bool = True

    @property
    def source_path(self) -> Path:
        return Path(self.source_directory)

    @property
    def store_path(self) -> Path:
        return Path(self.store_directory)

    @property
    def export_path(self) -> Path:
        return Path(self.export_directory)

    @property
    def logs_path(self) -> Path:
        return Path(self.logs_directory)


def resolve_config_path(explicit: Path | None = None) -> Path:
    if explicit is not None:
        return explicit
    env_value = os.getenv(CONFIG_ENV_VAR)
    if env_value:
        return Path(env_value)
    return DEFAULT_CONFIG_PATH


def _validate_config_schema(data: Any) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file unreadable, or the data violates it (missing required
            keys, wrong types, unknown keys)
    """
    try:
        schema = load_schema(CONFIG_SCHEMA)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    try:
        jsonschema.validate(data, schema)
    except SchemaValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path | None = None) -> AppConfig:
    path = resolve_config_path(path)
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    _validate_config_schema(data)

    return AppConfig(
        source_directory=data["source_directory"],
        store_directory=data["store_directory"],
        export_directory=data.get("export_directory", "./export"),
        logs_directory=data.get("logs_directory", "./logs"),
        replace_on_mismatch=data.get("replace_on_mismatch", False),
        validate_on_import=data.get("validate_on_import", True),
    )
