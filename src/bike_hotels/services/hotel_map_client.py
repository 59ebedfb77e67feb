"""Client for the hotel finder map data endpoint."""
from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

import httpx

from bike_hotels.auth.session import Credentials, SessionAcquirer
from bike_hotels.config.settings import Settings
from bike_hotels.errors import UpstreamFetchFailed
from bike_hotels.geo.bbox import BoundingBox
from bike_hotels.hotels.models import ClientHotel
from bike_hotels.hotels.normalizer import transform_hotels

logger = logging.getLogger(__name__)


class HotelMapClient:
    """Runs the search-page handshake followed by the bounding-box POST.

    Every :meth:`fetch_hotels` call opens its own ``httpx.AsyncClient`` so that
    cookies from one handshake can never leak into a concurrent one.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        acquirer: Optional[SessionAcquirer] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.settings = settings
        self.acquirer = acquirer or SessionAcquirer(settings)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.request_timeout_s,
            transport=self._transport,
            follow_redirects=True,
        )

    async def fetch_raw(
        self,
        client: httpx.AsyncClient,
        bbox_json: str,
        credentials: Credentials,
        *,
        timeout: Optional[float] = None,
    ) -> Any:
        url = self.settings.upstream_data_url()
        headers = {
            "User-Agent": self.settings.user_agent,
            "Content-Type": "application/json;charset=UTF-8",
            "Accept": "application/json, text/plain, */*",
            "Referer": credentials.referer,
            "Origin": self.settings.base_url,
            "X-Requested-With": "XMLHttpRequest",
            "X-CSRF-TOKEN": credentials.csrf_token,
        }
        if credentials.cookie_header:
            headers["Cookie"] = credentials.cookie_header

        logger.info("Fetching hotel map data from %s", url)
        try:
            response = await client.post(
                url,
                content=bbox_json.encode("utf-8"),
                headers=headers,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except httpx.HTTPError as exc:
            logger.error("Network error fetching hotel map data from %s: %s", url, exc)
            raise UpstreamFetchFailed(url, reason=str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            body = response.text[:512]
            logger.error("Hotel map data %s returned HTTP %s", url, response.status_code)
            raise UpstreamFetchFailed(url, status=response.status_code, body=body)

        try:
            return json.loads(response.text)
        except json.JSONDecodeError as exc:
            logger.error("Hotel map data from %s is not JSON: %s", url, response.text[:128])
            raise UpstreamFetchFailed(url, body=response.text[:512], reason="malformed JSON") from exc

    async def fetch_hotels(
        self,
        search_term: str,
        bbox: BoundingBox,
        *,
        timeout: Optional[float] = None,
    ) -> List[ClientHotel]:
        """Handshake, fetch and normalise the hotels inside ``bbox``."""
        bbox_json = bbox.to_json()
        async with self._client() as client:
            credentials = await self.acquirer.acquire(client, search_term, timeout=timeout)
            raw = await self.fetch_raw(client, bbox_json, credentials, timeout=timeout)
        hotels = transform_hotels(raw)
        logger.info("Fetched %s hotels for term '%s'", len(hotels), search_term)
        return hotels
