"""Public entry point: turn a search request into hotels and an optional venue match."""
from __future__ import annotations

import logging
from types import TracebackType
from typing import List, Optional, Type

from bike_hotels.config.settings import Settings
from bike_hotels.destinations.catalog import CityCatalog
from bike_hotels.errors import HotelDataError, InvalidQueryError
from bike_hotels.geo.bbox import BoundingBox, convert_external_box, narrow_box, wide_box
from bike_hotels.geo.distance import haversine_m
from bike_hotels.hotels.matcher import HotelMatcher
from bike_hotels.hotels.models import (
    BookingCheck,
    ClientHotel,
    HotelQuery,
    HotelSearchResponse,
)
from bike_hotels.storage.cache import GLOBAL_TAG, CacheStore, HotelCache
from bike_hotels.storage.memory_store import MemoryCacheStore
from bike_hotels.storage.sqlite_store import SqliteCacheStore

from .hotel_map_client import HotelMapClient

logger = logging.getLogger(__name__)


def resolve_bbox(query: HotelQuery) -> BoundingBox:
    """Prefer the caller's box (better cache reuse); otherwise size one to the query."""
    external = query.external_bbox
    if isinstance(external, str):
        return BoundingBox.from_json(external)
    if external is not None:
        return convert_external_box(external, (query.lat, query.lng))
    if query.is_venue_search:
        return narrow_box(query.lat, query.lng)
    return wide_box(query.lat, query.lng)


def annotate_distances(hotels: List[ClientHotel], lat: float, lng: float) -> List[ClientHotel]:
    """Copies of ``hotels`` with ``distance_m`` from the point, nearest first."""
    annotated = [
        hotel.with_distance(float(round(haversine_m(lat, lng, hotel.lat, hotel.lng))))
        for hotel in hotels
    ]
    annotated.sort(key=lambda hotel: float("inf") if hotel.distance_m is None else hotel.distance_m)
    return annotated


class HotelSearchService:
    """Drives cache → handshake/fetch → transform, then matching."""

    def __init__(
        self,
        settings: Settings,
        *,
        client: Optional[HotelMapClient] = None,
        cache: Optional[HotelCache] = None,
        matcher: Optional[HotelMatcher] = None,
        catalog: Optional[CityCatalog] = None,
    ) -> None:
        self.settings = settings
        self.client = client or HotelMapClient(settings)
        self.cache = cache or HotelCache(MemoryCacheStore(), ttl_s=settings.cache_ttl_s)
        self.matcher = matcher or HotelMatcher.from_settings(settings)
        if catalog is None:
            catalog = (
                CityCatalog.load(settings.city_catalog_path)
                if settings.city_catalog_path
                else CityCatalog.builtin()
            )
        self.catalog = catalog
        self._sqlite_store: Optional[SqliteCacheStore] = None

    @classmethod
    async def create(cls, settings: Settings) -> "HotelSearchService":
        """Build a service with the configured cache backend, initialising it if needed."""
        store: CacheStore
        sqlite_store: Optional[SqliteCacheStore] = None
        if settings.cache_backend == "sqlite":
            sqlite_store = SqliteCacheStore(
                settings.cache_sqlite_path,
                busy_timeout_ms=settings.cache_sqlite_busy_timeout_ms,
                journal_mode=settings.cache_sqlite_journal_mode,
                synchronous=settings.cache_sqlite_synchronous,
            )
            await sqlite_store.initialize()
            store = sqlite_store
        else:
            store = MemoryCacheStore()
        service = cls(settings, cache=HotelCache(store, ttl_s=settings.cache_ttl_s))
        service._sqlite_store = sqlite_store
        return service

    async def close(self) -> None:
        if self._sqlite_store is not None:
            await self._sqlite_store.close()
            self._sqlite_store = None

    async def __aenter__(self) -> "HotelSearchService":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def _hotels_in(self, bbox: BoundingBox, search_term: str) -> List[ClientHotel]:
        async def _fetch() -> List[ClientHotel]:
            return await self.client.fetch_hotels(search_term, bbox)

        try:
            return await self.cache.get_or_fetch(bbox, _fetch)
        except HotelDataError as exc:
            logger.error(
                "Could not retrieve hotel data for '%s' (%s): %s",
                search_term,
                type(exc).__name__,
                exc,
            )
            raise

    async def search(self, query: HotelQuery) -> HotelSearchResponse:
        bbox = resolve_bbox(query)
        logger.info(
            "Searching %s hotels for '%s' at (%.5f, %.5f)",
            "venue" if query.is_venue_search else "area",
            query.search_term,
            query.lat,
            query.lng,
        )
        hotels = await self._hotels_in(bbox, query.search_term)
        if query.is_venue_search:
            hotels = annotate_distances(hotels, query.lat, query.lng)

        response = HotelSearchResponse(
            hotels=hotels,
            city_center=(query.lng, query.lat),
            city_bbox=bbox.to_json(),
        )
        if query.free_text:
            if query.is_venue_search:
                result = self.matcher.match(hotels, query.free_text, query.lat, query.lng)
            else:
                result = self.matcher.match(hotels, query.free_text)
            response.matched_hotel = result.hotel
            response.match_confidence = result.confidence
            if not result.matched:
                logger.info("No confident venue match for '%s'; returning area results", query.free_text)
        return response

    async def search_city(self, city: str) -> HotelSearchResponse:
        entry = self.catalog.resolve(city)
        hotels = await self._hotels_in(entry.bbox, entry.name)
        lat, lng = entry.center
        return HotelSearchResponse(hotels=hotels, city_center=(lng, lat), city_bbox=entry.bbox.to_json())

    async def check_booking(self, city: str, free_text: str) -> BookingCheck:
        if not city or not free_text or not free_text.strip():
            raise InvalidQueryError("freeText and city are required")
        entry = self.catalog.resolve(city)
        hotels = await self._hotels_in(entry.bbox, entry.name)
        if not hotels:
            return BookingCheck(
                hotel=None,
                match_confidence=None,
                has_bikes=False,
                message=f"No hotel data found for city: {city}",
            )
        result = self.matcher.match(hotels, free_text)
        if not result.matched:
            return BookingCheck(
                hotel=None,
                match_confidence=None,
                has_bikes=False,
                message="No hotel match found for the provided text.",
                candidates=len(hotels),
            )
        return BookingCheck(
            hotel=result.hotel,
            match_confidence=result.confidence,
            has_bikes=result.hotel.has_bikes,
            candidates=len(hotels),
        )

    async def invalidate(self, *, bbox: Optional[BoundingBox] = None, tag: Optional[str] = None) -> int:
        """Drop cached entries for one box, an explicit tag, or everything."""
        if bbox is not None:
            return await self.cache.invalidate_bbox(bbox)
        return await self.cache.invalidate_tag(tag or GLOBAL_TAG)
