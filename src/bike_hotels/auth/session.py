"""Session handshake against the hotel finder search page.

The data endpoint only answers requests carrying the CSRF token rendered into
the search page plus the cookies set alongside it. Both are captured here as an
immutable :class:`Credentials` bundle that is handed to exactly one data request.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional

import httpx

from bike_hotels.config.settings import Settings
from bike_hotels.errors import CsrfTokenNotFound, SessionAcquisitionFailed

logger = logging.getLogger(__name__)

_CSRF_PATTERN = re.compile(r"window\._crsf\s*=\s*'([^']+)'")


@dataclass(frozen=True)
class Credentials:
    """Short-lived token and cookie header produced by one handshake."""

    csrf_token: str
    cookie_header: str
    referer: str

    @property
    def has_cookies(self) -> bool:
        return bool(self.cookie_header)


def extract_csrf_token(html: str) -> Optional[str]:
    match = _CSRF_PATTERN.search(html or "")
    return match.group(1) if match else None


def collect_session_cookies(set_cookie_headers: Iterable[str]) -> str:
    """Reduce raw ``Set-Cookie`` values to ``name=value`` pairs joined for a ``Cookie`` header."""
    pairs: list[str] = []
    for header in set_cookie_headers:
        pair = header.split(";", 1)[0].strip()
        if pair and "=" in pair:
            pairs.append(pair)
    return "; ".join(pairs)


class SessionAcquirer:
    """Performs the GET half of the handshake."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def acquire(
        self,
        client: httpx.AsyncClient,
        search_term: str,
        *,
        timeout: Optional[float] = None,
    ) -> Credentials:
        url = self.settings.upstream_search_url(search_term)
        headers = {"User-Agent": self.settings.user_agent}
        logger.info("Requesting search page for term '%s'", search_term)
        try:
            response = await client.get(
                url,
                headers=headers,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.HTTPError as exc:
            logger.error("Network error fetching search page %s: %s", url, exc)
            raise SessionAcquisitionFailed(url, reason=str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            body = response.text[:512]
            logger.error("Search page %s returned HTTP %s", url, response.status_code)
            raise SessionAcquisitionFailed(url, status=response.status_code, body=body)

        cookie_header = collect_session_cookies(response.headers.get_list("set-cookie"))
        if not cookie_header:
            logger.warning("Search page %s set no cookies; continuing with token only", url)

        token = extract_csrf_token(response.text)
        if not token:
            logger.error("CSRF token missing from search page %s; upstream markup may have changed", url)
            raise CsrfTokenNotFound(url)

        logger.debug("Acquired session credentials (cookies=%s)", bool(cookie_header))
        return Credentials(csrf_token=token, cookie_header=cookie_header, referer=url)
