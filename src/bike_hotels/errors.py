"""Failure kinds surfaced by the hotel data pipeline."""
from __future__ import annotations

from typing import Optional


class HotelDataError(RuntimeError):
    """Base class for upstream failures; maps to "could not retrieve hotel data"."""

    http_status = 502

    def __init__(self, message: str, *, url: str, status: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.url = url
        self.status = status
        self.body = body


class SessionAcquisitionFailed(HotelDataError):
    """Raised when the search page cannot be fetched (network error or non-2xx)."""

    def __init__(self, url: str, *, status: Optional[int] = None, body: str = "", reason: str = "") -> None:
        if status is not None:
            message = f"Search page request failed ({status})"
        else:
            message = f"Search page request failed: {reason or 'network error'}"
        super().__init__(message, url=url, status=status, body=body)


class CsrfTokenNotFound(HotelDataError):
    """Raised when the search page no longer carries the inline CSRF assignment."""

    def __init__(self, url: str) -> None:
        super().__init__("CSRF token not found on search page", url=url)


class UpstreamFetchFailed(HotelDataError):
    """Raised when the hotel map data endpoint fails or answers with malformed JSON."""

    def __init__(self, url: str, *, status: Optional[int] = None, body: str = "", reason: str = "") -> None:
        if status is not None:
            message = f"Hotel map data request failed ({status})"
        else:
            message = f"Hotel map data request failed: {reason or 'network error'}"
        super().__init__(message, url=url, status=status, body=body)


class InvalidQueryError(ValueError):
    """Raised for caller mistakes (bad feature type, malformed bounding box...)."""

    http_status = 400


class CityNotConfiguredError(InvalidQueryError):
    """Raised when a city has no configured bounding box."""

    http_status = 404

    def __init__(self, city: str, known: tuple[str, ...] = ()) -> None:
        message = f"Bounding box data not found for city: {city}"
        if known:
            message = f"{message} (known: {', '.join(known)})"
        super().__init__(message)
        self.city = city
