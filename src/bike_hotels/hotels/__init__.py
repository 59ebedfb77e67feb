"""Hotel domain models, normalisation and venue matching."""

from .loyalty import loyalty_program_for
from .matcher import HotelMatcher, match_by_fuzzy_score, match_by_token_coverage
from .models import (
    BookingCheck,
    ClientHotel,
    HotelQuery,
    HotelSearchResponse,
    MatchResult,
)
from .normalizer import build_client_hotel, transform_hotels

__all__ = [
    "BookingCheck",
    "ClientHotel",
    "HotelMatcher",
    "HotelQuery",
    "HotelSearchResponse",
    "MatchResult",
    "build_client_hotel",
    "loyalty_program_for",
    "match_by_fuzzy_score",
    "match_by_token_coverage",
    "transform_hotels",
]
