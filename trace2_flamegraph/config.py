"""Configuration loading from environment variables and an optional YAML file."""

import logging
import os
from dataclasses import dataclass

import yaml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    helper_marker: str = "gvfs-helper"  # long-lived helper processes are left out
    row_height: int = 50
    header_margin: int = 70
    min_visible_width: int = 10  # pixels; narrower bars are not drawn


DEFAULT_CONFIG = Config()

# field name -> (env var, cast)
_ENV_OVERRIDES = {
    "helper_marker": ("FLAMEGRAPH_HELPER_MARKER", str),
    "row_height": ("FLAMEGRAPH_ROW_HEIGHT", int),
    "header_margin": ("FLAMEGRAPH_HEADER_MARGIN", int),
    "min_visible_width": ("FLAMEGRAPH_MIN_WIDTH", int),
}


def load_yaml_config(path: str | None) -> dict:
    """Load overrides from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.info("Loaded YAML config from %s", path)
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}

    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, ignoring it", path)
        return {}
    return data


def load_config(yaml_data: dict | None = None) -> Config:
    """Build Config from env vars over YAML data over defaults."""
    yaml_data = yaml_data or {}
    values = {}
    for name, (env_var, cast) in _ENV_OVERRIDES.items():
        raw = os.environ.get(env_var)
        if raw is None:
            raw = yaml_data.get(name)
        if raw is not None:
            values[name] = cast(raw)

    unknown = set(yaml_data) - set(_ENV_OVERRIDES)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(sorted(unknown)))

    return Config(**values)
