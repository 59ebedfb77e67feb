"""Utilities to transform raw hotel map payloads into normalised records."""
from __future__ import annotations

import logging
import math
from typing import Any, List, Optional

from .loyalty import loyalty_program_for
from .models import ClientHotel

logger = logging.getLogger(__name__)


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        converted = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(converted) or math.isinf(converted):
        return None
    return converted


def _to_int(value: Any, default: int = 0) -> int:
    converted = _to_float(value)
    if converted is None:
        return default
    return int(converted)


def _flag(value: Any) -> bool:
    # Upstream sends 0/1; tolerate "1" and true.
    if isinstance(value, bool):
        return value
    return _to_int(value) == 1


def _extract_bike_features(features: Any) -> tuple[str, ...]:
    if not isinstance(features, list):
        return ()
    names: list[str] = []
    for feature in features:
        if not isinstance(feature, dict):
            continue
        if feature.get("has") is True and feature.get("name"):
            names.append(str(feature["name"]))
    return tuple(names)


def build_client_hotel(hotel: dict[str, Any]) -> Optional[ClientHotel]:
    """Return the client record for ``hotel`` or ``None`` when it lacks an id or coordinates."""
    hotel_id = _to_float(hotel.get("id"))
    lat = _to_float(hotel.get("latitude"))
    lng = _to_float(hotel.get("longitude"))
    if hotel_id is None or lat is None or lng is None:
        logger.warning(
            "Skipping hotel record id=%r with unusable id/coordinates (%r, %r)",
            hotel.get("id"),
            hotel.get("latitude"),
            hotel.get("longitude"),
        )
        return None

    brand_name = hotel.get("brand_name")
    return ClientHotel(
        id=int(hotel_id),
        place_id=hotel.get("google_place_id"),
        name=hotel.get("name") or "",
        lat=lat,
        lng=lng,
        distance_m=_to_float(hotel.get("distance")),
        brand=brand_name or "",
        loyalty_program=loyalty_program_for(brand_name),
        total_bikes=_to_int(hotel.get("total_bikes")),
        in_gym=_flag(hotel.get("has_bikes_fitness_center")),
        in_room=_flag(hotel.get("has_bikes_rooms")),
        bike_features=_extract_bike_features(hotel.get("bike_features")),
        url=hotel.get("website"),
        tel=hotel.get("phone"),
    )


def transform_hotels(raw_hotels: Any) -> List[ClientHotel]:
    """Normalise an upstream hotel array; anything but a list yields an empty result."""
    if not isinstance(raw_hotels, list):
        logger.warning(
            "Hotel map payload is %s rather than a list; treating as empty",
            type(raw_hotels).__name__,
        )
        return []
    hotels: List[ClientHotel] = []
    for entry in raw_hotels:
        if not isinstance(entry, dict):
            logger.warning("Skipping non-object hotel entry of type %s", type(entry).__name__)
            continue
        record = build_client_hotel(entry)
        if record is not None:
            hotels.append(record)
    return hotels
