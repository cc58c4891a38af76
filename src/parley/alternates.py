"""Alternate links — the locale variants of the current page.

Serialized as an HTTP ``Link`` header so search engines can discover
every localized URL::

    <https://example.com/about>; rel="alternate"; hreflang="en",
    <https://example.com/de/ueber-uns>; rel="alternate"; hreflang="de",
    <https://example.com/about>; rel="alternate"; hreflang="x-default"
"""

from collections.abc import Sequence
from dataclasses import dataclass

from parley.config import DomainConfig, PrefixMode, RoutingConfig
from parley.domains import DomainMatcher
from parley.prefix import apply_pathname_prefix
from parley.routing.params import encode_url
from parley.routing.pathnames import PathnameCompiler, TemplateMatch


@dataclass(frozen=True, slots=True)
class AlternateLink:
    """One ``rel="alternate"`` entry."""

    href: str
    hreflang: str

    def to_header_value(self) -> str:
        return f'<{self.href}>; rel="alternate"; hreflang="{self.hreflang}"'


def format_link_header(links: Sequence[AlternateLink]) -> str:
    """Join *links* into a single ``Link`` header value."""
    return ", ".join(link.to_header_value() for link in links)


def _scheme(origin: str) -> str:
    scheme, sep, _ = origin.partition("://")
    return scheme if sep else "https"


def alternate_links(
    config: RoutingConfig,
    pathname: str,
    *,
    origin: str,
    match: TemplateMatch | None = None,
    query: str = "",
    compiler: PathnameCompiler | None = None,
) -> list[AlternateLink]:
    """Compute the alternate links for the canonical *pathname*.

    *pathname* is the internal, unprefixed path. When *match* is given
    (the request matched a ``pathnames`` entry) each locale's variant is
    compiled from it; otherwise *pathname* is used for every locale.

    With ``domains``, each locale is listed once per domain that permits
    it, prefixed according to that domain's default. ``x-default`` points
    at the unprefixed default-locale page on *origin*: always under
    ``AS_NEEDED``, only for ``/`` under ``ALWAYS``. Nothing is emitted
    when alternate links are disabled, under ``NEVER``, or without an
    explicit locale list.
    """
    if not config.alternate_links or config.mode is PrefixMode.NEVER or config.locales is None:
        return []

    compiler = compiler or PathnameCompiler(config)
    suffix = f"?{query}" if query else ""

    def localized(locale: str) -> str:
        if match is None:
            return pathname
        return compiler.compile(match.template, locale, match.params)

    def url(base: str, locale: str, domain: DomainConfig | None) -> str:
        path = apply_pathname_prefix(localized(locale), locale, config, domain)
        return encode_url(base + path + suffix)

    links: list[AlternateLink] = []
    if config.domains:
        matcher = DomainMatcher(config)
        scheme = _scheme(origin)
        for locale in config.locales:
            for domain in matcher.domains_for_locale(locale):
                links.append(AlternateLink(url(f"{scheme}://{domain.host}", locale, domain), locale))
    else:
        links.extend(AlternateLink(url(origin, locale, None), locale) for locale in config.locales)

    if config.mode is not PrefixMode.ALWAYS or pathname == "/":
        links.append(
            AlternateLink(encode_url(origin + localized(config.default_locale) + suffix), "x-default")
        )
    return links
