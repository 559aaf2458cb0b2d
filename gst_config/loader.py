"""
Configuration Loader (``gst_config.loader``).

Loads the engine YAML file and parses it into an ``EngineConfig``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or invalid values  -> ``ConfigurationError``.
"""

from __future__ import annotations

import os
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from gst_config.schema import EngineConfig
from gst_kernel.exceptions import ConfigurationError
from gst_kernel.logging_config import get_logger

logger = get_logger("config.loader")

DATABASE_URL_ENV = "GST_DATABASE_URL"
DEFAULT_DATABASE_URL = "sqlite://"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(key: str, value: Any) -> Decimal:
    # Floats go through str() so 0.1 stays 0.1
    if isinstance(value, bool):
        raise ConfigurationError(key, f"cannot parse decimal from {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ConfigurationError(key, f"cannot parse decimal from {value!r}") from exc


def config_from_dict(data: dict[str, Any]) -> EngineConfig:
    """Parse an ``EngineConfig`` from a mapping, rejecting unknown keys."""
    if not isinstance(data, dict):
        raise ConfigurationError("<root>", "configuration must be a mapping")

    unknown = sorted(set(data) - EngineConfig.field_names())
    if unknown:
        raise ConfigurationError(unknown[0], "unknown configuration key")

    kwargs = dict(data)
    if "company_jurisdiction" in kwargs:
        # YAML reads an unquoted 27 as an int
        kwargs["company_jurisdiction"] = str(kwargs["company_jurisdiction"]).zfill(2)
    if "default_tax_rate_percent" in kwargs:
        kwargs["default_tax_rate_percent"] = parse_decimal(
            "default_tax_rate_percent", kwargs["default_tax_rate_percent"],
        )
    return EngineConfig(**kwargs)


def load_config(path: Path | str) -> EngineConfig:
    """
    Load an ``EngineConfig`` from a YAML file.

    The file may hold the settings at top level or under an ``engine`` key.
    """
    path = Path(path)
    data = load_yaml_file(path)
    if isinstance(data, dict) and set(data) == {"engine"}:
        data = data["engine"] or {}

    config = config_from_dict(data)
    logger.info("engine_config_loaded", extra={
        "path": str(path),
        "company_jurisdiction": config.company_jurisdiction,
        "force_inter_jurisdiction": config.force_inter_jurisdiction,
    })
    return config


def get_database_url() -> str:
    return os.environ.get(DATABASE_URL_ENV, DEFAULT_DATABASE_URL)
