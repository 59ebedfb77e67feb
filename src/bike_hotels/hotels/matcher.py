"""Venue name matching against a list of nearby hotels.

Two strategies are available:

* ``token`` (default): drop candidates outside a small radius of the venue
  point, walk the rest nearest-first and accept the first whose normalised
  name covers enough of the query's tokens. Robust for chains with several
  branches in one city, since the nearer branch wins.
* ``fuzzy``: rapidfuzz ``WRatio`` over name and brand with no geographic
  filter. Tolerates typos better but can pick the wrong branch of a chain.

Matching never raises; an unmatched query is a :class:`MatchResult` with no
hotel and zero confidence.
"""
from __future__ import annotations

import logging
import re
from typing import Iterable, Optional, Sequence

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process

from bike_hotels.geo.distance import haversine_m

from .models import ClientHotel, MatchResult

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_M = 150.0
DEFAULT_COVERAGE_THRESHOLD = 0.6
DEFAULT_FUZZY_THRESHOLD = 0.4
NAME_WEIGHT = 0.7
BRAND_WEIGHT = 0.3

STOP_WORDS = frozenset(
    {
        "a",
        "an",
        "the",
        "hotel",
        "hotels",
        "inn",
        "suite",
        "suites",
        "resort",
        "spa",
    }
)

_PUNCTUATION = re.compile(r"[^\w\s]+")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(value: Optional[str]) -> str:
    if not value:
        return ""
    text = _PUNCTUATION.sub(" ", value.lower()).replace("_", " ")
    tokens = [token for token in _WHITESPACE.split(text) if token and token not in STOP_WORDS]
    return " ".join(tokens)


def name_tokens(value: Optional[str]) -> frozenset[str]:
    normalized = normalize_name(value)
    return frozenset(normalized.split()) if normalized else frozenset()


def token_coverage(query_tokens: Iterable[str], candidate_tokens: Iterable[str]) -> float:
    """Fraction of ``query_tokens`` also present in ``candidate_tokens``."""
    query = set(query_tokens)
    if not query:
        return 0.0
    return len(query & set(candidate_tokens)) / len(query)


def _within_radius(
    hotels: Sequence[ClientHotel],
    origin_lat: float,
    origin_lng: float,
    radius_m: float,
) -> list[ClientHotel]:
    ranked: list[tuple[float, int, ClientHotel]] = []
    for index, hotel in enumerate(hotels):
        distance = haversine_m(origin_lat, origin_lng, hotel.lat, hotel.lng)
        if distance <= radius_m:
            ranked.append((distance, index, hotel))
    ranked.sort(key=lambda item: (item[0], item[1]))
    return [hotel for _, _, hotel in ranked]


def match_by_token_coverage(
    hotels: Sequence[ClientHotel],
    free_text: Optional[str],
    origin_lat: Optional[float] = None,
    origin_lng: Optional[float] = None,
    *,
    radius_m: float = DEFAULT_RADIUS_M,
    threshold: float = DEFAULT_COVERAGE_THRESHOLD,
) -> MatchResult:
    query_tokens = name_tokens(free_text)
    if not query_tokens or not hotels:
        return MatchResult.no_match()

    candidates: Sequence[ClientHotel] = hotels
    if origin_lat is not None and origin_lng is not None:
        candidates = _within_radius(hotels, origin_lat, origin_lng, radius_m)
        if not candidates:
            logger.info("No hotels within %.0fm of venue point for '%s'", radius_m, free_text)
            return MatchResult.no_match()

    # Nearest first with an origin, upstream order without one.
    for hotel in candidates:
        coverage = token_coverage(query_tokens, name_tokens(hotel.name))
        if coverage >= threshold:
            logger.info("Matched '%s' to '%s' (coverage %.2f)", free_text, hotel.name, coverage)
            return MatchResult(hotel=hotel, confidence=coverage)
    return MatchResult.no_match()


def _fuzzy_score(query: str, hotel: ClientHotel) -> float:
    name_score = fuzz.WRatio(query, hotel.name, processor=default_process)
    if not hotel.brand:
        return name_score / 100.0
    brand_score = fuzz.WRatio(query, hotel.brand, processor=default_process)
    return (NAME_WEIGHT * name_score + BRAND_WEIGHT * brand_score) / 100.0


def match_by_fuzzy_score(
    hotels: Sequence[ClientHotel],
    free_text: Optional[str],
    *,
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> MatchResult:
    query = (free_text or "").strip().lower()
    if not query or not hotels:
        return MatchResult.no_match()
    best: Optional[ClientHotel] = None
    best_score = 0.0
    for hotel in hotels:
        score = _fuzzy_score(query, hotel)
        if score > best_score:
            best, best_score = hotel, score
    if best is None or best_score < threshold:
        return MatchResult.no_match()
    logger.info("Fuzzy matched '%s' to '%s' (score %.3f)", free_text, best.name, best_score)
    return MatchResult(hotel=best, confidence=best_score)


class HotelMatcher:
    """Applies the configured strategy with its thresholds."""

    def __init__(
        self,
        strategy: str = "token",
        *,
        radius_m: float = DEFAULT_RADIUS_M,
        threshold: float = DEFAULT_COVERAGE_THRESHOLD,
        fuzzy_threshold: float = DEFAULT_FUZZY_THRESHOLD,
    ) -> None:
        if strategy not in {"token", "fuzzy"}:
            raise ValueError(f"Unknown match strategy '{strategy}'")
        self.strategy = strategy
        self.radius_m = radius_m
        self.threshold = threshold
        self.fuzzy_threshold = fuzzy_threshold

    @classmethod
    def from_settings(cls, settings) -> "HotelMatcher":
        return cls(
            settings.match_strategy,
            radius_m=settings.match_radius_m,
            threshold=settings.match_threshold,
            fuzzy_threshold=settings.fuzzy_threshold,
        )

    def match(
        self,
        hotels: Sequence[ClientHotel],
        free_text: Optional[str],
        origin_lat: Optional[float] = None,
        origin_lng: Optional[float] = None,
    ) -> MatchResult:
        if self.strategy == "fuzzy":
            return match_by_fuzzy_score(hotels, free_text, threshold=self.fuzzy_threshold)
        return match_by_token_coverage(
            hotels,
            free_text,
            origin_lat,
            origin_lng,
            radius_m=self.radius_m,
            threshold=self.threshold,
        )
