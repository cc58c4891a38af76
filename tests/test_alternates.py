"""Tests for parley.alternates — hreflang alternate links."""

from parley.alternates import AlternateLink, alternate_links, format_link_header
from parley.config import RoutingConfig, define_routing
from parley.routing.pathnames import TemplateMatch

ORIGIN = "https://example.com"


def _pairs(links: list[AlternateLink]) -> list[tuple[str, str]]:
    return [(link.hreflang, link.href) for link in links]


class TestAlternateLinks:
    def test_as_needed(self, as_needed: RoutingConfig) -> None:
        links = alternate_links(as_needed, "/about", origin=ORIGIN)
        assert _pairs(links) == [
            ("en", "https://example.com/about"),
            ("de", "https://example.com/de/about"),
            ("x-default", "https://example.com/about"),
        ]

    def test_localized_pathnames(self, localized: RoutingConfig) -> None:
        match = TemplateMatch(template="/news/[articleId]", params={"articleId": "7"})
        links = alternate_links(localized, "/news/7", origin=ORIGIN, match=match)
        assert _pairs(links) == [
            ("en", "https://example.com/news/7"),
            ("de", "https://example.com/de/neuigkeiten/7"),
            ("x-default", "https://example.com/news/7"),
        ]

    def test_always_has_x_default_only_on_root(self) -> None:
        config = define_routing(locales=["en", "de"], default_locale="en")

        links = alternate_links(config, "/about", origin=ORIGIN)
        assert [link.hreflang for link in links] == ["en", "de"]
        assert links[0].href == "https://example.com/en/about"

        root = alternate_links(config, "/", origin=ORIGIN)
        assert root[-1] == AlternateLink(href="https://example.com/", hreflang="x-default")

    def test_query_included(self, as_needed: RoutingConfig) -> None:
        links = alternate_links(as_needed, "/search", origin=ORIGIN, query="q=test")
        assert links[1].href == "https://example.com/de/search?q=test"

    def test_non_ascii_encoded(self) -> None:
        config = define_routing(
            locales=["en", "de"],
            default_locale="en",
            locale_prefix="as-needed",
            pathnames={"/about": {"de": "/über-uns"}},
        )
        match = TemplateMatch(template="/about", params={})
        links = alternate_links(config, "/about", origin=ORIGIN, match=match)
        assert links[1].href == "https://example.com/de/%C3%BCber-uns"

    def test_domains(self) -> None:
        config = define_routing(
            locales=["en", "fr", "de"],
            default_locale="en",
            locale_prefix="as-needed",
            domains=[
                {"host": "us.example.com", "default_locale": "en", "locales": ["en"]},
                {"host": "ca.example.com", "default_locale": "en", "locales": ["en", "fr"]},
                {"host": "example.de", "default_locale": "de", "locales": ["de", "en"]},
            ],
        )
        links = alternate_links(config, "/about", origin="https://us.example.com")
        assert _pairs(links) == [
            ("en", "https://us.example.com/about"),
            ("en", "https://ca.example.com/about"),
            ("en", "https://example.de/en/about"),
            ("fr", "https://ca.example.com/fr/about"),
            ("de", "https://example.de/about"),
            ("x-default", "https://us.example.com/about"),
        ]

    def test_disabled(self) -> None:
        config = define_routing(
            locales=["en", "de"], default_locale="en", alternate_links=False
        )
        assert alternate_links(config, "/", origin=ORIGIN) == []

    def test_never_mode(self) -> None:
        config = define_routing(locales=["en", "de"], default_locale="en", locale_prefix="never")
        assert alternate_links(config, "/", origin=ORIGIN) == []

    def test_unbounded(self) -> None:
        config = define_routing(default_locale="en")
        assert alternate_links(config, "/", origin=ORIGIN) == []


class TestFormatLinkHeader:
    def test_joined(self) -> None:
        header = format_link_header(
            [
                AlternateLink(href="https://example.com/", hreflang="en"),
                AlternateLink(href="https://example.com/de", hreflang="de"),
            ]
        )
        assert header == (
            '<https://example.com/>; rel="alternate"; hreflang="en", '
            '<https://example.com/de>; rel="alternate"; hreflang="de"'
        )

    def test_empty(self) -> None:
        assert format_link_header([]) == ""
