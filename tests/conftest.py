"""Pytest configuration and fixtures."""

from collections.abc import Callable

import httpx
import pytest

from sitelens.core.config import Settings
from sitelens.models import FetchedPage

Handler = Callable[[httpx.Request], httpx.Response]

ASTRA_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
<title>Astra Demo Site</title>
<link rel="stylesheet" href="https://example.com/wp-content/themes/astra/style.css?ver=1.0">
<script src="https://example.com/wp-content/plugins/yoast-seo/yoast.js"></script>
<script src="https://example.com/wp-content/plugins/contact-form-7/cf7.js"></script>
</head>
<body><main><h1>Welcome to our site</h1><p>Hello world.</p></main></body>
</html>
"""

PLAIN_HTML = """<!DOCTYPE html>
<html lang="en">
<head><title>Plain Site</title></head>
<body><main><h1>Plain static page</h1><p>Nothing to see here, just some text content.</p></main></body>
</html>
"""


def respond(status: int = 200, **kwargs) -> Handler:
    """Build a handler returning a fresh response per request."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, **kwargs)

    return handler


def fail(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


class MockSite:
    """Routes requests by (method, path) or path, recording every request.

    Unrouted requests get a 404.
    """

    def __init__(
        self,
        routes: dict | None = None,
        default: Handler | None = None,
    ) -> None:
        self.routes = routes or {}
        self.default = default or respond(404)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        handler = self.routes.get((request.method, path)) or self.routes.get(path)
        return (handler or self.default)(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def paths(self, method: str | None = None) -> list[str]:
        return [
            r.url.path for r in self.requests if method is None or r.method == method
        ]


def make_settings(**overrides) -> Settings:
    values = {
        "_env_file": None,
        "builtwith_api_key": None,
        "pagespeed_api_key": None,
        "ssrf_resolve_dns": False,
        "pagespeed_request_delay": 0,
        "pagespeed_backoff_base": 0,
        "pagespeed_backoff_cap": 0,
        "log_format": "text",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment, with no delays."""
    return make_settings()


@pytest.fixture
def astra_page() -> FetchedPage:
    return FetchedPage(
        url="https://example.com",
        html=ASTRA_HTML,
        headers={"Cache-Control": "max-age=3600", "ETag": "abc"},
    )


@pytest.fixture
def plain_page() -> FetchedPage:
    return FetchedPage(url="https://example.com", html=PLAIN_HTML, headers={})


async def no_sleep(seconds: float) -> None:
    return None
