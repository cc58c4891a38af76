"""Tests for parley.routing.pathnames — localized pathname table and compiler."""

import pytest

from parley.config import RoutingConfig, define_routing
from parley.errors import ConfigurationError, InvalidHrefError, MissingParameterError
from parley.routing.pathnames import PathnameCompiler, TemplateMatch, serialize_query


class TestPathnameTable:
    def test_shared_string_applies_to_all_locales(self) -> None:
        config = define_routing(
            locales=["en", "de"], default_locale="en", pathnames={"/imprint": "/impressum"}
        )
        entry = config.pathnames["/imprint"]  # type: ignore[index]
        assert entry.for_locale("en").template == "/impressum"
        assert entry.for_locale("de").template == "/impressum"

    def test_missing_locale_uses_canonical(self, localized: RoutingConfig) -> None:
        entry = localized.pathnames["/docs/[...slug]"]  # type: ignore[index]
        assert entry.for_locale("en").template == "/docs/[...slug]"

    def test_unknown_locale(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown locale"):
            define_routing(
                locales=["en"], default_locale="en", pathnames={"/about": {"fr": "/a-propos"}}
            )

    def test_parameter_mismatch(self) -> None:
        with pytest.raises(ConfigurationError, match="same parameters"):
            define_routing(
                locales=["en", "de"],
                default_locale="en",
                pathnames={"/news/[id]": {"de": "/neuigkeiten/[slug]"}},
            )

    def test_parameter_kind_mismatch(self) -> None:
        with pytest.raises(ConfigurationError, match="same parameters"):
            define_routing(
                locales=["en", "de"],
                default_locale="en",
                pathnames={"/docs/[...slug]": {"de": "/dokumente/[slug]"}},
            )

    def test_localized_collision(self) -> None:
        with pytest.raises(ConfigurationError, match="both map"):
            define_routing(
                locales=["en", "de"],
                default_locale="en",
                pathnames={
                    "/about": {"de": "/info"},
                    "/contact": {"de": "/info"},
                },
            )


class TestCompile:
    def test_localized(self, localized: RoutingConfig) -> None:
        compiler = PathnameCompiler(localized)
        assert compiler.compile("/about", "de") == "/ueber-uns"
        assert compiler.compile("/about", "en") == "/about"

    def test_params(self, localized: RoutingConfig) -> None:
        compiler = PathnameCompiler(localized)
        assert compiler.compile("/news/[articleId]", "de", {"articleId": 3}) == "/neuigkeiten/3"

    def test_query_appended(self, localized: RoutingConfig) -> None:
        compiler = PathnameCompiler(localized)
        assert compiler.compile("/about", "de", query={"ref": "home"}) == "/ueber-uns?ref=home"

    def test_unknown_canonical_used_verbatim(self, localized: RoutingConfig) -> None:
        assert PathnameCompiler(localized).compile("/contact", "de") == "/contact"

    def test_missing_param(self, localized: RoutingConfig) -> None:
        with pytest.raises(MissingParameterError):
            PathnameCompiler(localized).compile("/news/[articleId]", "de")

    @pytest.mark.parametrize("href", ["/search/a[1]", "/x/[id", "/x/[1]", "/x/[...]"])
    def test_concrete_pathname_with_brackets_verbatim(
        self, localized: RoutingConfig, href: str
    ) -> None:
        assert PathnameCompiler(localized).compile(href, "de") == href

    def test_template_outside_table_compiled(self, localized: RoutingConfig) -> None:
        compiler = PathnameCompiler(localized)
        assert compiler.compile("/users/[id]", "de", {"id": 7}) == "/users/7"
        assert compiler.compile("/shop/[[...filters]]", "de") == "/shop"

    def test_malformed_template_outside_table(self, localized: RoutingConfig) -> None:
        with pytest.raises(InvalidHrefError) as excinfo:
            PathnameCompiler(localized).compile("/a/[id]/[id]", "de", {"id": 1})

        assert not isinstance(excinfo.value, ConfigurationError)
        assert isinstance(excinfo.value, ValueError)


class TestMatch:
    def test_match_template(self, localized: RoutingConfig) -> None:
        compiler = PathnameCompiler(localized)
        assert compiler.match_template("/ueber-uns", "de") == TemplateMatch("/about", {})
        assert compiler.match_template("/neuigkeiten/3", "de") == TemplateMatch(
            "/news/[articleId]", {"articleId": "3"}
        )

    def test_other_locales_variant_not_matched(self, localized: RoutingConfig) -> None:
        assert PathnameCompiler(localized).match_template("/ueber-uns", "en") is None

    def test_find_template_searches_other_locales(self, localized: RoutingConfig) -> None:
        found = PathnameCompiler(localized).find_template("/ueber-uns", "en")
        assert found == ("de", TemplateMatch("/about", {}))

    def test_internal_pathname(self, localized: RoutingConfig) -> None:
        compiler = PathnameCompiler(localized)
        assert compiler.internal_pathname("/neuigkeiten/3", "de") == "/news/3"
        assert compiler.internal_pathname("/dokumente/a/b", "de") == "/docs/a/b"
        assert compiler.internal_pathname("/unknown", "de") == "/unknown"

    def test_most_specific_entry_wins(self) -> None:
        config = define_routing(
            locales=["en"],
            default_locale="en",
            pathnames={"/[...rest]": "/[...rest]", "/news/latest": "/news/latest"},
        )
        match = PathnameCompiler(config).match_template("/news/latest", "en")
        assert match == TemplateMatch("/news/latest", {})

    def test_disabled_without_pathnames(self) -> None:
        config = define_routing(locales=["en"], default_locale="en")
        compiler = PathnameCompiler(config)
        assert not compiler.enabled
        assert compiler.match_template("/about", "en") is None


class TestSerializeQuery:
    def test_empty(self) -> None:
        assert serialize_query(None) == ""
        assert serialize_query({}) == ""
        assert serialize_query({"a": None}) == ""

    def test_order_and_repeats(self) -> None:
        assert serialize_query({"b": 1, "tag": ["x", "y"], "a": True}) == "?b=1&tag=x&tag=y&a=true"

    def test_encoding(self) -> None:
        assert serialize_query({"q": "grüße & co"}) == "?q=gr%C3%BC%C3%9Fe+%26+co"


ROUND_TRIP_TABLE = {
    "/": "/",
    "/about": {"en": "/about", "de": "/ueber-uns", "fr": "/a-propos"},
    "/news/[articleId]": {"de": "/neuigkeiten/[articleId]", "fr": "/actualites/[articleId]"},
    "/users/[userId]/posts/[postId]": {"de": "/benutzer/[userId]/beitraege/[postId]"},
    "/docs/[...slug]": {"de": "/dokumente/[...slug]", "fr": "/documents/[...slug]"},
    "/shop/[[...filters]]": {"de": "/laden/[[...filters]]"},
}

ROUND_TRIP_PARAMS: dict[str, list[dict[str, str | list[str]]]] = {
    "/": [{}],
    "/about": [{}],
    "/news/[articleId]": [{"articleId": "3"}, {"articleId": "a/b"}, {"articleId": "grüße & 50%"}],
    "/users/[userId]/posts/[postId]": [{"userId": "jane doe", "postId": "?#"}],
    "/docs/[...slug]": [{"slug": ["intro"]}, {"slug": ["guide", "a/b", "ü"]}],
    "/shop/[[...filters]]": [{}, {"filters": ["red"]}, {"filters": ["size", "x%2Fl"]}],
}


def _round_trip_cases() -> list[tuple[str, str, dict[str, str | list[str]]]]:
    return [
        (template, locale, params)
        for template, variants in ROUND_TRIP_PARAMS.items()
        for params in variants
        for locale in ("en", "de", "fr")
    ]


class TestRoundTrip:
    @pytest.fixture(scope="class")
    def compiler(self) -> PathnameCompiler:
        config = define_routing(
            locales=["en", "de", "fr"],
            default_locale="en",
            pathnames=ROUND_TRIP_TABLE,
        )
        return PathnameCompiler(config)

    @pytest.mark.parametrize(("template", "locale", "params"), _round_trip_cases())
    def test_match_inverts_compile(
        self,
        compiler: PathnameCompiler,
        template: str,
        locale: str,
        params: dict[str, str | list[str]],
    ) -> None:
        compiled = compiler.compile(template, locale, params)

        assert compiler.match_template(compiled, locale) == TemplateMatch(
            template=template, params=params
        )

    def test_every_table_entry_covered(self) -> None:
        assert set(ROUND_TRIP_PARAMS) == set(ROUND_TRIP_TABLE)
