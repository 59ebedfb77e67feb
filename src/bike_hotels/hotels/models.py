"""Dataclasses for normalised hotel records and search requests/responses."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Iterable, List, Optional, Sequence, Union

from bike_hotels.errors import InvalidQueryError

FEATURE_TYPES = frozenset({"place", "poi"})


@dataclass(frozen=True, slots=True)
class ClientHotel:
    """Normalised hotel with bike availability, as returned to callers."""

    id: int
    place_id: Optional[str]
    name: str
    lat: float
    lng: float
    distance_m: Optional[float]
    brand: str
    loyalty_program: str
    total_bikes: int
    in_gym: bool
    in_room: bool
    bike_features: tuple[str, ...] = ()
    url: Optional[str] = None
    tel: Optional[str] = None

    @property
    def has_bikes(self) -> bool:
        return self.total_bikes > 0

    def with_distance(self, distance_m: Optional[float]) -> "ClientHotel":
        return replace(self, distance_m=distance_m)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "place_id": self.place_id,
            "name": self.name,
            "lat": self.lat,
            "lng": self.lng,
            "distance_m": self.distance_m,
            "brand": self.brand,
            "loyaltyProgram": self.loyalty_program,
            "total_bikes": self.total_bikes,
            "in_gym": self.in_gym,
            "in_room": self.in_room,
            "bike_features": list(self.bike_features),
            "url": self.url,
            "tel": self.tel,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientHotel":
        return cls(
            id=int(data["id"]),
            place_id=data.get("place_id"),
            name=data.get("name") or "",
            lat=float(data["lat"]),
            lng=float(data["lng"]),
            distance_m=data.get("distance_m"),
            brand=data.get("brand") or "",
            loyalty_program=data.get("loyaltyProgram") or "Other",
            total_bikes=int(data.get("total_bikes") or 0),
            in_gym=bool(data.get("in_gym")),
            in_room=bool(data.get("in_room")),
            bike_features=tuple(data.get("bike_features") or ()),
            url=data.get("url"),
            tel=data.get("tel"),
        )

    @staticmethod
    def to_dicts(records: Iterable["ClientHotel"]) -> List[dict[str, object]]:
        return [record.to_dict() for record in records]


@dataclass(frozen=True, slots=True)
class MatchResult:
    """Outcome of a venue lookup; ``hotel`` is ``None`` when nothing was confident enough."""

    hotel: Optional[ClientHotel]
    confidence: float

    @property
    def matched(self) -> bool:
        return self.hotel is not None

    @classmethod
    def no_match(cls) -> "MatchResult":
        return cls(hotel=None, confidence=0.0)


ExternalBbox = Union[str, Sequence[float]]


@dataclass(slots=True)
class HotelQuery:
    """A search request: a point, the term it was geocoded from, and optional venue text."""

    lat: float
    lng: float
    search_term: str
    feature_type: str = "place"
    free_text: Optional[str] = None
    external_bbox: Optional[ExternalBbox] = None

    def __post_init__(self) -> None:
        if self.feature_type not in FEATURE_TYPES:
            raise InvalidQueryError(
                f"featureType must be one of {sorted(FEATURE_TYPES)} (got '{self.feature_type}')"
            )
        try:
            self.lat = float(self.lat)
            self.lng = float(self.lng)
        except (TypeError, ValueError) as exc:
            raise InvalidQueryError("lat and lng must be numeric") from exc
        if not -90.0 <= self.lat <= 90.0 or not -180.0 <= self.lng <= 180.0:
            raise InvalidQueryError(f"Coordinates out of range: ({self.lat}, {self.lng})")
        if self.free_text is not None:
            self.free_text = self.free_text.strip() or None

    @property
    def is_venue_search(self) -> bool:
        return self.feature_type == "poi"


@dataclass(slots=True)
class HotelSearchResponse:
    hotels: List[ClientHotel]
    city_center: tuple[float, float]
    city_bbox: str
    matched_hotel: Optional[ClientHotel] = None
    match_confidence: Optional[float] = None

    def to_dict(self) -> dict[str, object]:
        return {
            "hotels": ClientHotel.to_dicts(self.hotels),
            "cityCenter": list(self.city_center),
            "cityBbox": self.city_bbox,
            "matchedHotel": self.matched_hotel.to_dict() if self.matched_hotel else None,
            "matchConfidence": self.match_confidence,
        }


@dataclass(slots=True)
class BookingCheck:
    """Answer to "does the hotel I booked in this city have bikes?"."""

    hotel: Optional[ClientHotel]
    match_confidence: Optional[float]
    has_bikes: bool
    message: Optional[str] = None
    candidates: int = field(default=0)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "matchConfidence": self.match_confidence,
            "hotel": self.hotel.to_dict() if self.hotel else None,
            "hasBikes": self.has_bikes,
        }
        if self.message:
            payload["message"] = self.message
        return payload
