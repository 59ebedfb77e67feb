"""Bounding boxes in the corner layout expected by the hotel map endpoint.

Corners are always stored as ``(lat, lng)`` pairs ordered SW, NW, NE, SE. The
canonical JSON rendering is both the upstream POST body and the cache key, so
it must stay byte-stable for equal boxes.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Sequence, Tuple

from bike_hotels.errors import InvalidQueryError

WIDE_OFFSET_DEG = 0.1
NARROW_OFFSET_DEG = 0.02

LatLng = Tuple[float, float]


@dataclass(frozen=True)
class BoundingBox:
    """Four corners (SW, NW, NE, SE) plus the point the search is centred on."""

    sw: LatLng
    nw: LatLng
    ne: LatLng
    se: LatLng
    center: LatLng

    @property
    def corners(self) -> tuple[LatLng, LatLng, LatLng, LatLng]:
        return (self.sw, self.nw, self.ne, self.se)

    @property
    def min_lat(self) -> float:
        return min(self.sw[0], self.se[0])

    @property
    def max_lat(self) -> float:
        return max(self.nw[0], self.ne[0])

    @property
    def min_lng(self) -> float:
        return min(self.sw[1], self.nw[1])

    @property
    def max_lng(self) -> float:
        return max(self.ne[1], self.se[1])

    def contains(self, lat: float, lng: float) -> bool:
        return self.min_lat <= lat <= self.max_lat and self.min_lng <= lng <= self.max_lng

    def to_payload(self) -> dict[str, Any]:
        return {
            "coords": [[lat, lng] for lat, lng in self.corners],
            "center": {"lat": self.center[0], "lng": self.center[1]},
        }

    def to_json(self) -> str:
        return json.dumps(self.to_payload(), separators=(",", ":"))

    @property
    def cache_key(self) -> str:
        return self.to_json()

    @classmethod
    def from_payload(cls, payload: Any) -> "BoundingBox":
        if not isinstance(payload, dict):
            raise InvalidQueryError("Bounding box must be a JSON object")
        coords = payload.get("coords")
        center = payload.get("center")
        if not isinstance(coords, list) or len(coords) != 4:
            raise InvalidQueryError("Bounding box requires exactly four corner coordinates")
        if not isinstance(center, dict):
            raise InvalidQueryError("Bounding box requires a center object")
        try:
            corners = [(float(corner[0]), float(corner[1])) for corner in coords]
            center_point = (float(center["lat"]), float(center["lng"]))
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise InvalidQueryError(f"Malformed bounding box coordinates: {exc}") from exc
        return cls(
            sw=corners[0],
            nw=corners[1],
            ne=corners[2],
            se=corners[3],
            center=center_point,
        )

    @classmethod
    def from_json(cls, value: str) -> "BoundingBox":
        try:
            payload = json.loads(value)
        except json.JSONDecodeError as exc:
            raise InvalidQueryError("Bounding box string is not valid JSON") from exc
        return cls.from_payload(payload)


def _symmetric_box(lat: float, lng: float, offset: float) -> BoundingBox:
    return BoundingBox(
        sw=(lat - offset, lng - offset),
        nw=(lat + offset, lng - offset),
        ne=(lat + offset, lng + offset),
        se=(lat - offset, lng + offset),
        center=(lat, lng),
    )


def wide_box(lat: float, lng: float) -> BoundingBox:
    """Roughly 10 km around the point; used for city-level searches."""
    return _symmetric_box(lat, lng, WIDE_OFFSET_DEG)


def narrow_box(lat: float, lng: float) -> BoundingBox:
    """Roughly 2 km around the point; used when the query names a venue."""
    return _symmetric_box(lat, lng, NARROW_OFFSET_DEG)


def convert_external_box(external: Sequence[float], center: LatLng) -> BoundingBox:
    """Convert a geocoder ``[minLng, minLat, maxLng, maxLat]`` box into corner order."""
    if len(external) != 4:
        raise InvalidQueryError("External bounding box must be [minLng, minLat, maxLng, maxLat]")
    try:
        min_lng, min_lat, max_lng, max_lat = (float(value) for value in external)
    except (TypeError, ValueError) as exc:
        raise InvalidQueryError(f"External bounding box values must be numeric: {exc}") from exc
    if min_lat > max_lat or min_lng > max_lng:
        raise InvalidQueryError("External bounding box minimums exceed maximums")
    return BoundingBox(
        sw=(min_lat, min_lng),
        nw=(max_lat, min_lng),
        ne=(max_lat, max_lng),
        se=(min_lat, max_lng),
        center=(float(center[0]), float(center[1])),
    )
