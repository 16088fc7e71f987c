"""Tests for technology detection and delivery signals."""

import pytest

from conftest import ASTRA_HTML, MockSite, make_settings, respond
from sitelens.core.interfaces import IScanner
from sitelens.infrastructure import HTTPClient
from sitelens.models import FetchedPage, Technology
from sitelens.scanners.webtech import (
    BuiltWithClient,
    TechnologyDetector,
    analyze_caching,
    analyze_image_optimization,
    detect_cdn,
    detect_technologies,
    extract_signals,
    merge_technologies,
)
from sitelens.scanners.webtech.builtwith import split_category

BUILTWITH_PAYLOAD = {
    "Results": [
        {
            "Result": {
                "WebServers": [{"Name": "Nginx", "Version": "1.25"}],
                "ContentManagementSystems": [{"Name": "WordPress", "Version": "6.5"}],
                "Analytics": [{"Tag": "Hotjar"}],
            }
        }
    ]
}


def tech(name: str, confidence: int = 80, source: str = "fingerprint") -> Technology:
    return Technology(name=name, confidence=confidence, source=source)


class TestMergeTechnologies:
    def test_primary_source_wins_on_name_collision(self):
        primary = [tech("WordPress", 85, "builtwith")]
        secondary = [tech("wordpress", 90)]

        merged = merge_technologies(primary, secondary)

        assert len(merged) == 1
        assert merged[0].source == "builtwith"
        assert merged[0].confidence == 85

    def test_sorted_by_confidence_descending(self):
        merged = merge_technologies([tech("A", 70), tech("B", 90)], [tech("C", 80)])
        assert [t.name for t in merged] == ["B", "C", "A"]

    def test_merge_is_idempotent(self):
        techs = [tech("React", 75), tech("jQuery", 85), tech("Bootstrap", 80)]
        assert merge_technologies(techs, techs) == merge_technologies(techs, [])

    def test_truncated_to_limit(self):
        many = [tech(f"Tech {i}", i) for i in range(30)]

        merged = merge_technologies(many, [])

        assert len(merged) == 20
        assert merged[0].name == "Tech 29"

    def test_equal_confidence_keeps_input_order(self):
        merged = merge_technologies([tech("First")], [tech("Second")])
        assert [t.name for t in merged] == ["First", "Second"]


class TestSignals:
    @pytest.mark.parametrize(
        "headers, expected",
        [
            ({}, "disabled"),
            ({"etag": "x"}, "partial"),
            ({"cache-control": "max-age=60", "etag": "x"}, "partial"),
            ({"cache-control": "max-age=60", "etag": "x", "expires": "0"}, "enabled"),
            ({"cache-control": "", "etag": ""}, "disabled"),
        ],
    )
    def test_caching_levels(self, headers, expected):
        assert analyze_caching(headers) == expected

    @pytest.mark.parametrize(
        "html, expected",
        [
            ("<p>no images</p>", "good"),
            ('<img src="a.webp"><img src="b.webp"><img src="c.webp"><img src="d.png">', "good"),
            ('<img src="a.webp"><img src="b.png">', "needs-improvement"),
            ('<img src="a.webp"><img src="b.png"><img src="c.jpg"><img src="d.gif">', "poor"),
            ('<IMG SRC="a.jpg">', "poor"),
        ],
    )
    def test_image_optimization(self, html, expected):
        assert analyze_image_optimization(html) == expected

    def test_cdn_detected_in_headers_or_html(self):
        assert detect_cdn("", {"server": "cloudflare"})
        assert detect_cdn('<script src="https://cdn.jsdelivr.net/x.js">', {})
        assert not detect_cdn("<p>plain</p>", {"server": "nginx"})

    def test_extract_signals(self, astra_page):
        signals = extract_signals(astra_page)

        assert signals.has_ssl
        assert not signals.has_cdn
        assert signals.caching == "partial"
        assert signals.image_optimization == "good"

    def test_http_page_has_no_ssl(self):
        page = FetchedPage(url="http://example.com", html="<p>x</p>")
        assert not extract_signals(page).has_ssl


class TestFingerprints:
    def test_wordpress_and_libraries(self):
        html = (
            ASTRA_HTML
            + '<meta name="generator" content="WordPress 6.4.2">'
            + '<script src="/js/jquery.min.js"></script>'
        )

        technologies = {t.name: t for t in detect_technologies(html, {})}

        assert technologies["WordPress"].version == "6.4.2"
        assert technologies["WordPress"].category == "CMS"
        assert technologies["jQuery"].confidence == 85
        assert "Content Delivery Network" not in technologies

    def test_cdn_is_reported_as_technology(self):
        technologies = detect_technologies("<p>hello</p>", {"via": "1.1 fastly"})
        assert [t.name for t in technologies] == ["Content Delivery Network"]

    def test_plain_page_has_no_technologies(self):
        assert detect_technologies("<p>hello</p>", {}) == []


class TestBuiltWith:
    def test_split_category(self):
        assert split_category("WebServers") == "Web Servers"
        assert split_category("Analytics") == "Analytics"

    def test_parse(self):
        technologies = BuiltWithClient.parse(BUILTWITH_PAYLOAD)

        assert [t.name for t in technologies] == ["Nginx", "WordPress", "Hotjar"]
        assert all(t.source == "builtwith" and t.confidence == 85 for t in technologies)
        assert technologies[0].category == "Web Servers"
        assert technologies[0].version == "1.25"
        assert technologies[2].version is None

    @pytest.mark.parametrize("payload", [{}, {"Results": []}, {"Results": [{"Result": None}]}, []])
    def test_parse_tolerates_unexpected_shapes(self, payload):
        assert BuiltWithClient.parse(payload) == []

    async def test_missing_key_makes_no_request(self, settings):
        site = MockSite()
        async with HTTPClient(settings, transport=site.transport) as http:
            assert await BuiltWithClient(http, settings).lookup("example.com") == []
        assert site.requests == []

    async def test_lookup_sends_key_and_domain(self):
        settings = make_settings(builtwith_api_key="secret")
        site = MockSite({"/free1/api.json": respond(200, json=BUILTWITH_PAYLOAD)})

        async with HTTPClient(settings, transport=site.transport) as http:
            technologies = await BuiltWithClient(http, settings).lookup("example.com")

        assert len(technologies) == 3
        params = site.requests[0].url.params
        assert params["KEY"] == "secret"
        assert params["LOOKUP"] == "example.com"

    async def test_lookup_failure_yields_empty_list(self):
        settings = make_settings(builtwith_api_key="secret")
        site = MockSite({"/free1/api.json": respond(500)})

        async with HTTPClient(settings, transport=site.transport) as http:
            assert await BuiltWithClient(http, settings).lookup("example.com") == []


class TestTechnologyDetector:
    async def test_builtwith_results_take_precedence(self, astra_page):
        settings = make_settings(builtwith_api_key="secret")
        site = MockSite({"/free1/api.json": respond(200, json=BUILTWITH_PAYLOAD)})

        async with HTTPClient(settings, transport=site.transport) as http:
            technologies = await TechnologyDetector(http, settings).detect(astra_page)

        wordpress = [t for t in technologies if t.name.lower() == "wordpress"]
        assert len(wordpress) == 1
        assert wordpress[0].source == "builtwith"
        assert wordpress[0].version == "6.5"

    async def test_fingerprints_only_without_key(self, settings, astra_page):
        site = MockSite()

        async with HTTPClient(settings, transport=site.transport) as http:
            technologies = await TechnologyDetector(http, settings).scan(astra_page)

        assert [t.name for t in technologies] == ["WordPress"]
        assert site.requests == []

    async def test_is_a_scanner_returning_technologies(self, settings, astra_page):
        async with HTTPClient(settings, transport=MockSite().transport) as http:
            detector = TechnologyDetector(http, settings)
            technologies = await detector.scan(astra_page)

        assert isinstance(detector, IScanner)
        assert detector.name == "webtech"
        assert isinstance(technologies, list)
        assert all(isinstance(t, Technology) for t in technologies)
