"""Tests for parley.navigation — localized hrefs, links and redirects."""

import pytest

from parley.config import RoutingConfig, define_routing
from parley.context import LocaleContext
from parley.errors import MissingParameterError
from parley.navigation import Href, Navigation, is_localizable_href, normalize_href
from parley.negotiation import LocaleNegotiator

DOMAINS = define_routing(
    locales=["en", "de"],
    default_locale="en",
    locale_prefix="as-needed",
    domains=[
        {"host": "example.com", "default_locale": "en"},
        {"host": "example.de", "default_locale": "de"},
    ],
)


class TestNormalizeHref:
    def test_string(self) -> None:
        assert normalize_href("/about") == Href(pathname="/about")

    def test_mapping(self) -> None:
        href = normalize_href({"pathname": "/news/[id]", "params": {"id": 1}, "query": {"a": 1}})
        assert href == Href(pathname="/news/[id]", params={"id": 1}, query={"a": 1})

    def test_href_passes_through(self) -> None:
        href = Href(pathname="/")
        assert normalize_href(href) is href

    def test_unsupported(self) -> None:
        with pytest.raises(TypeError):
            normalize_href(42)  # type: ignore[arg-type]


class TestIsLocalizableHref:
    @pytest.mark.parametrize("href", ["/", "/about", "/a?b=1"])
    def test_internal(self, href: str) -> None:
        assert is_localizable_href(href)

    @pytest.mark.parametrize(
        "href", ["https://example.com", "//cdn.example.com/x.js", "mailto:a@b.c", "#top", "about"]
    )
    def test_external(self, href: str) -> None:
        assert not is_localizable_href(href)


class TestGetPathname:
    def test_localized_with_params(self, localized: RoutingConfig) -> None:
        nav = Navigation(localized)
        href = {"pathname": "/news/[articleId]", "params": {"articleId": 3}}

        assert nav.get_pathname(href, "de") == "/de/neuigkeiten/3"
        assert nav.get_pathname(href, "en") == "/news/3"

    def test_suffix_preserved(self, localized: RoutingConfig) -> None:
        assert Navigation(localized).get_pathname("/about?x=1#top", "de") == "/de/ueber-uns?x=1#top"

    def test_query_merged(self, localized: RoutingConfig) -> None:
        nav = Navigation(localized)
        assert nav.get_pathname(Href("/about", query={"a": 1}), "de") == "/de/ueber-uns?a=1"
        assert nav.get_pathname(Href("/about?x=1", query={"a": 1}), "en") == "/about?x=1&a=1"
        assert nav.get_pathname(Href("/about#top", query={"a": 1}), "en") == "/about?a=1#top"

    def test_external_untouched(self, localized: RoutingConfig) -> None:
        assert Navigation(localized).get_pathname("https://example.org/x", "de") == "https://example.org/x"

    def test_missing_param(self, localized: RoutingConfig) -> None:
        with pytest.raises(MissingParameterError):
            Navigation(localized).get_pathname("/news/[articleId]", "de")

    def test_concrete_bracket_href_used_verbatim(self, localized: RoutingConfig) -> None:
        assert Navigation(localized).build_href("/search/a[1]", "de") == "/de/search/a[1]"

    def test_force_prefix(self, as_needed: RoutingConfig) -> None:
        assert Navigation(as_needed).get_pathname("/", "en", force_prefix=True) == "/en"

    def test_domain_default(self) -> None:
        nav = Navigation(DOMAINS)
        assert nav.get_pathname("/about", "de", domain="example.de") == "/about"
        assert nav.get_pathname("/about", "de", domain="example.com") == "/de/about"


class TestBuildHref:
    def test_ambient_locale(self, localized: RoutingConfig) -> None:
        ctx = LocaleContext(locale="de", config=localized)
        assert Navigation(localized).build_href("/about", context=ctx) == "/de/ueber-uns"

    def test_explicit_locale_without_context(self, localized: RoutingConfig) -> None:
        nav = Navigation(localized)
        assert nav.build_href("/about", "de") == "/de/ueber-uns"
        assert nav.build_href("/about", "en") == "/en/about"

    def test_explicit_default_locale_overrides_cookie(self, localized: RoutingConfig) -> None:
        href = Navigation(localized).build_href("/about", "en")
        result = LocaleNegotiator(localized).negotiate(href, cookie_header="NEXT_LOCALE=de")

        assert result.locale == "en"
        assert result.target_path == "/about"
        assert result.set_cookie is not None
        assert result.set_cookie.value == "en"

    def test_explicit_locale_under_never_stays_unprefixed(self) -> None:
        config = define_routing(locales=["en", "de"], default_locale="en", locale_prefix="never")
        assert Navigation(config).build_href("/about", "de") == "/about"

    def test_switching_to_default_keeps_prefix(self, localized: RoutingConfig) -> None:
        ctx = LocaleContext(locale="de", config=localized)
        assert Navigation(localized).build_href("/about", "en", context=ctx) == "/en/about"

    def test_no_locale_at_all(self, localized: RoutingConfig) -> None:
        with pytest.raises(LookupError):
            Navigation(localized).build_href("/about")

    def test_domains_without_host_force_prefix(self) -> None:
        ctx = LocaleContext(locale="en", config=DOMAINS)
        assert Navigation(DOMAINS).build_href("/about", context=ctx) == "/en/about"

    def test_domains_with_host(self) -> None:
        domain = DOMAINS.domains[1]  # type: ignore[index]
        ctx = LocaleContext(locale="de", config=DOMAINS, domain=domain)
        assert Navigation(DOMAINS).build_href("/about", context=ctx) == "/about"


class TestBuildLink:
    def test_unprefixed_form_resolved_on_matching_domain(self) -> None:
        ctx = LocaleContext(locale="de", config=DOMAINS)
        link = Navigation(DOMAINS).build_link("/about", context=ctx)

        assert link.href == "/de/about"
        assert link.resolve(None) == "/de/about"
        assert link.resolve("example.de") == "/about"
        assert link.resolve("EXAMPLE.de:8080") == "/about"
        assert link.resolve("example.com") == "/de/about"

    def test_explicit_locale_carries_unprefixed_form(self) -> None:
        link = Navigation(DOMAINS).build_link({"pathname": "/about", "query": {"q": "x"}}, "de")

        assert link.href == "/de/about?q=x"
        assert link.switches_locale
        assert link.unprefixed is not None
        assert link.unprefixed.pathname == "/about?q=x"
        assert link.resolve("example.de") == "/about?q=x"
        assert link.resolve("example.com") == "/de/about?q=x"

    def test_unprefixed_form_with_known_host(self) -> None:
        domain = DOMAINS.domains[1]  # type: ignore[index]
        ctx = LocaleContext(locale="de", config=DOMAINS, domain=domain)
        link = Navigation(DOMAINS).build_link("/about", context=ctx)

        assert link.href == "/about"
        assert not link.switches_locale
        assert link.resolve("example.de") == "/about"

    def test_no_unprefixed_form_without_domains(self, as_needed: RoutingConfig) -> None:
        ctx = LocaleContext(locale="de", config=as_needed)
        link = Navigation(as_needed).build_link("/about", context=ctx)

        assert link.href == "/de/about"
        assert link.unprefixed is None
        assert link.resolve("example.com") == "/de/about"


class TestRedirect:
    def test_temporary(self, localized: RoutingConfig) -> None:
        redirect = Navigation(localized).redirect("/about", "de")
        assert redirect.url == "/de/ueber-uns"
        assert redirect.status == 307

    def test_permanent(self, localized: RoutingConfig) -> None:
        assert Navigation(localized).permanent_redirect("/about", "de").status == 308

    def test_location_is_encoded(self) -> None:
        config = define_routing(
            locales=["en", "de"],
            default_locale="en",
            locale_prefix="as-needed",
            pathnames={"/about": {"de": "/über-uns"}},
        )
        assert Navigation(config).redirect("/about", "de").url == "/de/%C3%BCber-uns"


class TestBasePathname:
    def test_prefixed_localized(self, localized: RoutingConfig) -> None:
        assert Navigation(localized).base_pathname("/de/neuigkeiten/3") == "/news/[articleId]"

    def test_unprefixed_with_locale(self, localized: RoutingConfig) -> None:
        assert Navigation(localized).base_pathname("/neuigkeiten/3", "de") == "/news/[articleId]"

    def test_unknown_returns_unprefixed(self, localized: RoutingConfig) -> None:
        assert Navigation(localized).base_pathname("/de/contact") == "/contact"


class TestSwitchLocale:
    def test_params_carried_over(self, localized: RoutingConfig) -> None:
        ctx = LocaleContext(locale="de", config=localized)
        nav = Navigation(localized)
        assert nav.switch_locale("/de/neuigkeiten/3", "en", context=ctx) == "/en/news/3"

    def test_to_non_default(self, localized: RoutingConfig) -> None:
        ctx = LocaleContext(locale="en", config=localized)
        assert Navigation(localized).switch_locale("/about", "de", context=ctx) == "/de/ueber-uns"

    def test_unmatched_pathname_only_reprefixed(self, localized: RoutingConfig) -> None:
        ctx = LocaleContext(locale="de", config=localized)
        nav = Navigation(localized)
        assert nav.switch_locale("/de/search/[q]", "en", context=ctx) == "/en/search/[q]"
