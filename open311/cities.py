"""City table - Preset endpoint/discovery/jurisdiction values per city.

The default table ships with the package as cities.yaml.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from open311.errors import UnknownCity
from open311.models import City

DEFAULT_CITIES_PATH = Path(__file__).parent / "cities.yaml"


class CityTable:
    """Case-insensitive lookup of City presets by identifier."""

    def __init__(self, cities: Mapping[str, City | Mapping[str, Any]]) -> None:
        self._cities = {
            city_id.lower(): City.model_validate(city) for city_id, city in cities.items()
        }

    def __contains__(self, city_id: object) -> bool:
        return isinstance(city_id, str) and city_id.lower() in self._cities

    def __iter__(self):
        return iter(self._cities)

    def __len__(self) -> int:
        return len(self._cities)

    def lookup(self, city_id: str) -> City:
        """Return the preset for *city_id*. Raises UnknownCity if absent."""
        try:
            return self._cities[city_id.lower()]
        except KeyError:
            raise UnknownCity(city_id) from None

    @classmethod
    def from_yaml(cls, path: Path) -> "CityTable":
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        return cls(raw)


@lru_cache(maxsize=1)
def default_city_table() -> CityTable:
    """The packaged city table, loaded once."""
    return CityTable.from_yaml(DEFAULT_CITIES_PATH)
