from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_LOCK_FILE,
    DEFAULT_TIMEOUT_SECONDS,
    ApiConfig,
    ImportConfig,
    ImportDefaults,
)

"""Config loader.

Responsibilities:
- Load YAML config/import.yml
- Validate it against config_schema.json (unknown keys are rejected)
- Apply defaults
- Apply environment overrides (API_BASE_URL, API_TIMEOUT_SECONDS), which win
  over the YAML values so a .env file can point the importer elsewhere
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/import.yml")

ENV_BASE_URL = "API_BASE_URL"
ENV_TIMEOUT = "API_TIMEOUT_SECONDS"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or data not matching it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _env_timeout(default: float) -> float:
    raw = os.getenv(ENV_TIMEOUT)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(f"{ENV_TIMEOUT} must be a number: {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"{ENV_TIMEOUT} must be positive: {raw!r}")
    return value


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    api_raw = data["api"]
    api = ApiConfig(
        base_url=os.getenv(ENV_BASE_URL) or api_raw["base_url"],
        timeout_seconds=_env_timeout(float(api_raw.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS))),
    )
    defaults_raw = data.get("defaults") or {}
    base = ImportDefaults()
    defaults = ImportDefaults(
        empresa=defaults_raw.get("empresa", base.empresa),
        ejecutivo=defaults_raw.get("ejecutivo", base.ejecutivo),
        modalidad=defaults_raw.get("modalidad", base.modalidad),
        reference_status=defaults_raw.get("reference_status", base.reference_status),
        status_alumnos=defaults_raw.get("status_alumnos", base.status_alumnos),
    )
    return ImportConfig(
        api=api,
        defaults=defaults,
        report_empty_ficha=bool(data.get("report_empty_ficha", False)),
        lock_file=data.get("lock_file", DEFAULT_LOCK_FILE),
    )
