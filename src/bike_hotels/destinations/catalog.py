"""Configured city bounding boxes."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Optional

from bike_hotels.errors import CityNotConfiguredError
from bike_hotels.geo.bbox import BoundingBox

logger = logging.getLogger(__name__)


def city_key(name: str) -> str:
    return "".join(name.lower().split())


@dataclass(frozen=True)
class City:
    """A named city with the bounding box searched for it."""

    key: str
    name: str
    bbox: BoundingBox

    @property
    def center(self) -> tuple[float, float]:
        return self.bbox.center


BUILTIN_CITIES: tuple[City, ...] = (
    City(
        key="chicago",
        name="Chicago",
        bbox=BoundingBox(
            sw=(41.644, -87.94),
            nw=(42.023, -87.94),
            ne=(42.023, -87.523),
            se=(41.644, -87.523),
            center=(41.878, -87.629),
        ),
    ),
    City(
        key="newyork",
        name="New York",
        bbox=BoundingBox(
            sw=(40.477399, -74.25909),
            nw=(40.917577, -74.25909),
            ne=(40.917577, -73.700272),
            se=(40.477399, -73.700272),
            center=(40.7128, -74.006),
        ),
    ),
)


class CityCatalog:
    """Looks up city bounding boxes by case- and space-insensitive name."""

    def __init__(self, cities: Mapping[str, City], *, source: Optional[Path] = None) -> None:
        self._cities = dict(cities)
        self._source = source

    @property
    def source(self) -> Optional[Path]:
        return self._source

    def keys(self) -> tuple[str, ...]:
        return tuple(sorted(self._cities))

    def values(self) -> Iterable[City]:
        return self._cities.values()

    def resolve(self, name: str) -> City:
        key = city_key(name or "")
        try:
            return self._cities[key]
        except KeyError as exc:
            raise CityNotConfiguredError(name, self.keys()) from exc

    @classmethod
    def builtin(cls) -> "CityCatalog":
        return cls({city.key: city for city in BUILTIN_CITIES})

    @classmethod
    def load(cls, path: Path) -> "CityCatalog":
        """Built-in cities overlaid with the entries of ``path``."""
        if not path.exists():
            raise FileNotFoundError(f"City catalog not found at {path}")
        data = json.loads(path.read_text())
        cities = {city.key: city for city in BUILTIN_CITIES}
        for entry in data.get("cities", []):
            name = entry.get("name") or entry["key"]
            key = city_key(entry.get("key") or name)
            cities[key] = City(key=key, name=name, bbox=BoundingBox.from_payload(entry["bbox"]))
        logger.info("Loaded %s cities from %s", len(cities), path)
        return cls(cities, source=path)
