"""Service clients for the hotel finder upstream."""

from .hotel_map_client import HotelMapClient
from .hotel_search import HotelSearchService

__all__ = [
    "HotelMapClient",
    "HotelSearchService",
]
