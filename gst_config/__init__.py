"""
gst_config -- company/engine configuration.

Architecture position:
    Sits above ``gst_kernel`` and below ``gst_services``. The kernel and the
    engines never import from ``gst_config``.

Usage:
    from gst_config import EngineConfig, load_config
    config = load_config("engine.yaml")
"""

from gst_config.loader import (
    DATABASE_URL_ENV,
    DEFAULT_DATABASE_URL,
    config_from_dict,
    get_database_url,
    load_config,
)
from gst_config.schema import EngineConfig

__all__ = [
    "DATABASE_URL_ENV",
    "DEFAULT_DATABASE_URL",
    "EngineConfig",
    "config_from_dict",
    "get_database_url",
    "load_config",
]
