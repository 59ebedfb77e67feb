from __future__ import annotations

import httpx
import pytest

from bike_hotels.auth.session import SessionAcquirer, collect_session_cookies, extract_csrf_token
from bike_hotels.config.settings import Settings
from bike_hotels.errors import CsrfTokenNotFound, SessionAcquisitionFailed

SEARCH_HTML = "<html><body><script>window._crsf = 'abc123xyz';</script></body></html>"


def test_extract_csrf_token_variants():
    assert extract_csrf_token(SEARCH_HTML) == "abc123xyz"
    assert extract_csrf_token("window._crsf=\'a-b_1=XyZ==\'") == "a-b_1=XyZ=="
    assert extract_csrf_token("window._crsf    =   '   spaced   '  ;") == "   spaced   "
    assert extract_csrf_token("<p>No token here.</p>") is None
    assert extract_csrf_token("") is None


def test_collect_session_cookies_keeps_name_value_pairs():
    headers = [
        "XSRF-TOKEN=tok; expires=Fri, 01 Jan 2100 00:00:00 GMT; path=/",
        "session=s3cr3t; path=/; httponly; samesite=lax",
        "",
    ]
    assert collect_session_cookies(headers) == "XSRF-TOKEN=tok; session=s3cr3t"
    assert collect_session_cookies([]) == ""


def _settings() -> Settings:
    return Settings(base_url="https://upstream.test", user_agent="test-agent/1.0")


@pytest.mark.asyncio
async def test_acquire_collects_token_and_every_cookie():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            headers=[
                ("set-cookie", "XSRF-TOKEN=tok; path=/"),
                ("set-cookie", "session=abc; path=/; httponly"),
            ],
            text=SEARCH_HTML,
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        credentials = await SessionAcquirer(_settings()).acquire(client, "chicago")

    assert credentials.csrf_token == "abc123xyz"
    assert credentials.cookie_header == "XSRF-TOKEN=tok; session=abc"
    assert credentials.referer == "https://upstream.test/en/search?q=chicago"
    assert seen[0].method == "GET"
    assert seen[0].headers["user-agent"] == "test-agent/1.0"


@pytest.mark.asyncio
async def test_acquire_tolerates_missing_cookies():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=SEARCH_HTML)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        credentials = await SessionAcquirer(_settings()).acquire(client, "chicago")

    assert credentials.csrf_token == "abc123xyz"
    assert not credentials.has_cookies


@pytest.mark.asyncio
async def test_acquire_missing_token_is_distinct_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, headers={"set-cookie": "session=abc"}, text="<html></html>")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(CsrfTokenNotFound) as excinfo:
            await SessionAcquirer(_settings()).acquire(client, "chicago")

    assert not isinstance(excinfo.value, SessionAcquisitionFailed)
    assert excinfo.value.url.endswith("q=chicago")


@pytest.mark.asyncio
async def test_acquire_non_2xx_fails():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="maintenance")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(SessionAcquisitionFailed) as excinfo:
            await SessionAcquirer(_settings()).acquire(client, "chicago")

    assert excinfo.value.status == 503
    assert excinfo.value.body == "maintenance"


@pytest.mark.asyncio
async def test_acquire_network_error_fails():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(SessionAcquisitionFailed) as excinfo:
            await SessionAcquirer(_settings()).acquire(client, "chicago")

    assert excinfo.value.status is None
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
