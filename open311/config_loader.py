"""Config Loader - Loads client configuration from YAML.

Supports ${ENV_VAR} substitution so API keys can stay out of config files:

    city: baltimore
    endpoint: http://311test.baltimorecity.gov/open311/v2/
    api_key: ${BALTIMORE_311_KEY}

A ``city`` key hydrates the settings from the city table first; any other
key overrides the city preset.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from open311.cities import CityTable, default_city_table
from open311.errors import UnknownCity
from open311.models import ClientConfig

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


class ConfigError(Exception):
    """Raised when configuration loading fails."""


def load_client_config(config_path: Path, cities: CityTable | None = None) -> ClientConfig:
    """Load a ClientConfig from YAML with ${ENV_VAR} substitution."""
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError("Config file must be a YAML mapping")

    raw_config = _expand_env(raw_config)

    city_id = raw_config.pop("city", None)
    if city_id is not None:
        try:
            raw_config = {**city_settings(city_id, cities), **raw_config}
        except UnknownCity as e:
            raise ConfigError(str(e)) from e

    try:
        return ClientConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid config structure: {e}") from e


def city_settings(city_id: str, cities: CityTable | None = None) -> dict[str, Any]:
    """ClientConfig fields for a known city. Raises UnknownCity if absent."""
    city = (cities or default_city_table()).lookup(city_id)
    settings = {
        "endpoint": city.endpoint,
        "discovery_url": city.discovery,
        "jurisdiction": city.jurisdiction,
        "name": city.name,
    }
    return {key: value for key, value in settings.items() if value is not None}


def _expand_env(value: Any) -> Any:
    """Replace ${NAME} references in every string of a loaded YAML value.

    Raises:
        ConfigError: Naming every referenced variable that is not set.
    """
    missing: list[str] = []

    def lookup(match: re.Match) -> str:
        name = match.group(1)
        if name not in os.environ:
            missing.append(name)
            return match.group(0)
        return os.environ[name]

    def expand(node: Any) -> Any:
        if isinstance(node, str):
            return _ENV_PATTERN.sub(lookup, node)
        if isinstance(node, dict):
            return {key: expand(item) for key, item in node.items()}
        if isinstance(node, list):
            return [expand(item) for item in node]
        return node

    expanded = expand(value)
    if missing:
        names = ", ".join(f"'{name}'" for name in dict.fromkeys(missing))
        raise ConfigError(f"Environment variable(s) not set: {names}")
    return expanded
