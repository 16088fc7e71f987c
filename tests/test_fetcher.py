"""Tests for page fetching and proxy fallback."""

import httpx
import pytest

from conftest import PLAIN_HTML, MockSite, fail, respond
from sitelens.core.exceptions import (
    FetchFailedError,
    ForbiddenTargetError,
    InsufficientContentError,
)
from sitelens.infrastructure import Fetcher, HTTPClient


async def fetch(settings, site: MockSite, url: str = "https://example.com"):
    async with HTTPClient(settings, transport=site.transport) as http:
        return await Fetcher(http, settings).fetch(url)


class TestFetcher:
    async def test_direct_fetch(self, settings):
        site = MockSite(
            {
                "/": respond(
                    200,
                    text=PLAIN_HTML,
                    headers={"Server": "nginx", "X-Frame-Options": "DENY"},
                )
            }
        )

        page = await fetch(settings, site)

        assert page.html == PLAIN_HTML
        assert page.status_code == 200
        assert not page.via_proxy
        assert page.headers["server"] == "nginx"
        assert page.header("X-Frame-Options") == "DENY"
        assert site.paths() == ["/"]

    async def test_falls_back_to_proxy_on_error_status(self, settings):
        site = MockSite(
            {
                "/": respond(503),
                "/get": respond(
                    200, json={"contents": PLAIN_HTML, "status": {"http_code": 200}}
                ),
            }
        )

        page = await fetch(settings, site)

        assert page.via_proxy
        assert page.html == PLAIN_HTML
        assert page.headers == {}
        assert page.status_code == 200

        proxy_request = site.requests[-1]
        assert proxy_request.url.host == "api.allorigins.win"
        assert proxy_request.url.params["url"] == "https://example.com"

    async def test_falls_back_to_proxy_on_connection_error(self, settings):
        def route(request: httpx.Request) -> httpx.Response:
            if request.url.host == "example.com":
                return fail(request)
            return httpx.Response(200, json={"contents": PLAIN_HTML})

        page = await fetch(settings, MockSite(default=route))

        assert page.via_proxy
        assert page.status_code is None

    async def test_both_paths_failing_raises(self, settings):
        site = MockSite({"/": respond(500), "/get": respond(500)})

        with pytest.raises(FetchFailedError) as exc_info:
            await fetch(settings, site)

        assert exc_info.value.code == "fetch_failed"
        assert str(exc_info.value) == "Unable to fetch website"

    async def test_malformed_proxy_payload_raises(self, settings):
        site = MockSite({"/": respond(500), "/get": respond(200, json={"contents": None})})

        with pytest.raises(FetchFailedError):
            await fetch(settings, site)

    async def test_short_page_is_insufficient(self, settings):
        site = MockSite({"/": respond(200, text="<html>   tiny   </html>")})

        with pytest.raises(InsufficientContentError) as exc_info:
            await fetch(settings, site)

        assert exc_info.value.code == "insufficient_content"

    async def test_short_proxy_page_is_insufficient(self, settings):
        site = MockSite({"/": respond(404), "/get": respond(200, json={"contents": "   "})})

        with pytest.raises(InsufficientContentError):
            await fetch(settings, site)

    @pytest.mark.parametrize(
        "location",
        [
            "http://127.0.0.1:8080/internal",
            "http://169.254.169.254/latest/meta-data/",
            "http://intranet.local/internal",
        ],
    )
    async def test_redirect_to_internal_host_is_refused(self, settings, location):
        site = MockSite(
            {
                "/": respond(302, headers={"Location": location}),
                "/internal": respond(200, text=PLAIN_HTML),
                "/get": respond(200, json={"contents": PLAIN_HTML}),
            }
        )

        with pytest.raises(ForbiddenTargetError):
            await fetch(settings, site)

        assert [r.url.host for r in site.requests] == ["example.com"]

    async def test_redirect_to_public_host_is_followed(self, settings):
        site = MockSite(
            {
                "/": respond(301, headers={"Location": "https://www.example.com/home"}),
                "/home": respond(200, text=PLAIN_HTML),
            }
        )

        page = await fetch(settings, site)

        assert page.html == PLAIN_HTML
        assert [r.url.host for r in site.requests] == ["example.com", "www.example.com"]
