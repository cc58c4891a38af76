"""Navigation path builder — localized hrefs for links and redirects.

Composes the pathname compiler and the prefix policy::

    nav = Navigation(routing)
    nav.get_pathname({"pathname": "/news/[articleId]", "params": {"articleId": 3}}, "de")
    # -> "/de/neuigkeiten/3"

``AS_NEEDED`` combined with ``domains`` needs the current host to know
whether a locale is the default. When the host isn't known (rendering
ahead of a request) the prefix is always included, and ``build_link``
returns a ``LinkTarget`` whose ``resolve(host)`` drops it again once the
host is known. Both forms are valid links: the negotiator redirects the
redundant prefix away.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from parley.config import PrefixMode, RoutingConfig
from parley.context import LocaleContext
from parley.domains import DomainMatcher
from parley.http.response import Redirect
from parley.prefix import apply_pathname_prefix, split_suffix, strip_locale_prefix
from parley.routing.params import encode_url
from parley.routing.pathnames import PathnameCompiler, QueryValue, serialize_query

_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z\d+\-.]*:")


@dataclass(frozen=True, slots=True)
class Href:
    """A canonical href: template pathname plus params and query."""

    pathname: str
    params: Mapping[str, Any] = field(default_factory=dict)
    query: Mapping[str, QueryValue] | None = None


HrefLike: TypeAlias = str | Href | Mapping[str, Any]


def normalize_href(href: HrefLike) -> Href:
    """Coerce a string, mapping or ``Href`` into an ``Href``."""
    match href:
        case Href():
            return href
        case str():
            return Href(pathname=href)
        case Mapping():
            return Href(
                pathname=href["pathname"],
                params=href.get("params") or {},
                query=href.get("query"),
            )
    msg = f"Unsupported href {href!r}; expected str, Href or a mapping with 'pathname'."
    raise TypeError(msg)


def is_localizable_href(pathname: str) -> bool:
    """True for app-internal absolute paths.

    External URLs (``https://...``, ``//cdn...``), ``mailto:``/``tel:``
    links, bare ``#hash`` and relative paths are left untouched.
    """
    if not pathname.startswith("/") or pathname.startswith("//"):
        return False
    return not _SCHEME.match(pathname)


def _join_suffix(suffix: str, query: str) -> str:
    """Merge a ``?query#hash`` suffix with a serialized ``?query``."""
    if not query:
        return suffix
    existing, _, fragment = suffix.partition("#")
    fragment = f"#{fragment}" if fragment else ""
    if existing.startswith("?") and len(existing) > 1:
        return existing + "&" + query[1:] + fragment
    return query + fragment


@dataclass(frozen=True, slots=True)
class UnprefixedTarget:
    """What a client needs to drop a forced prefix once the host is known."""

    domains: Mapping[str, str]
    pathname: str


@dataclass(frozen=True, slots=True)
class LinkTarget:
    """A built link: the href safe to render now, plus its unprefixed form.

    ``switches_locale`` marks links to an explicitly chosen locale. A
    client that follows the unprefixed form of such a link must also
    write the locale cookie, or the negotiator keeps the stored locale.
    """

    href: str
    locale: str
    unprefixed: UnprefixedTarget | None = None
    switches_locale: bool = False

    def resolve(self, host: str | None) -> str:
        """Recompute the href on the client, where the host is known.

        Returns the unprefixed pathname when *host* is a domain whose
        default locale is this link's locale, else the prefixed href.
        """
        if self.unprefixed is None or not host:
            return self.href
        name = host.strip().lower()
        default = self.unprefixed.domains.get(name)
        if default is None:
            default = self.unprefixed.domains.get(name.rsplit(":", 1)[0])
        if default == self.locale:
            return self.unprefixed.pathname
        return self.href


class Navigation:
    """Build localized pathnames for links and redirects.

    Usage::

        nav = Navigation(routing)
        nav.build_href("/about", context=ctx)         # ambient locale
        nav.build_href("/about", "de")                # explicit locale
        nav.redirect("/login", context=ctx)           # -> Redirect("/de/login", 307)
    """

    __slots__ = ("_compiler", "config")

    def __init__(self, config: RoutingConfig) -> None:
        self.config = config
        self._compiler = PathnameCompiler(config)

    @property
    def forces_prefix_without_host(self) -> bool:
        """True when hrefs must keep their prefix until the host is known."""
        return self.config.mode is PrefixMode.AS_NEEDED and bool(self.config.domains)

    def _compile(self, href: Href, locale: str) -> str:
        path, suffix = split_suffix(href.pathname)
        pathname = self._compiler.compile(path, locale, href.params)
        return pathname + _join_suffix(suffix, serialize_query(href.query))

    def get_pathname(
        self,
        href: HrefLike,
        locale: str,
        *,
        domain: str | None = None,
        force_prefix: bool = False,
    ) -> str:
        """Compile *href* for *locale* and apply the prefix policy.

        *domain* is a configured host; under ``AS_NEEDED`` it decides
        which locale counts as the default. Raises
        ``MissingParameterError`` if a template parameter is missing and
        ``InvalidHrefError`` if *href* is a malformed template.
        """
        target = normalize_href(href)
        if not is_localizable_href(target.pathname):
            return target.pathname
        return self._prefix(self._compile(target, locale), locale, domain, force_prefix)

    def _prefix(self, pathname: str, locale: str, domain: str | None, force: bool) -> str:
        domain_config = DomainMatcher(self.config).match(domain) if domain else None
        return apply_pathname_prefix(pathname, locale, self.config, domain_config, force=force)

    def _target(self, locale: str | None, context: LocaleContext | None) -> tuple[str, str | None]:
        resolved = locale or (context.locale if context is not None else None)
        if resolved is None:
            msg = "No locale given and no LocaleContext to take the current locale from."
            raise LookupError(msg)
        host = context.domain.host if context is not None and context.domain is not None else None
        return resolved, host

    def _forces_prefix(self, locale: str | None, host: str | None) -> bool:
        return locale is not None or (self.forces_prefix_without_host and host is None)

    def build_href(
        self,
        href: HrefLike,
        locale: str | None = None,
        *,
        context: LocaleContext | None = None,
    ) -> str:
        """Return the localized pathname a link or redirect should use.

        The locale is *locale* if given, else the context's. An explicit
        *locale* always keeps its prefix (except under ``NEVER``): the
        negotiator honours the prefix over a stored cookie, so a link to
        the default locale still switches to it.
        """
        target_locale, host = self._target(locale, context)
        force = self._forces_prefix(locale, host)
        return self.get_pathname(href, target_locale, domain=host, force_prefix=force)

    def build_link(
        self,
        href: HrefLike,
        locale: str | None = None,
        *,
        context: LocaleContext | None = None,
    ) -> LinkTarget:
        """Like ``build_href`` but keeps what's needed to unprefix later.

        Under ``AS_NEEDED`` with ``domains`` every localizable link carries
        its unprefixed form, compiled for the link's locale.
        """
        target_locale, _ = self._target(locale, context)
        built = self.build_href(href, locale, context=context)
        target = normalize_href(href)
        unprefixed = None
        if self.forces_prefix_without_host and is_localizable_href(target.pathname):
            domains = {d.host.lower(): d.default_locale for d in self.config.domains or ()}
            unprefixed = UnprefixedTarget(domains=domains, pathname=self._compile(target, target_locale))
        switches = locale is not None and (context is None or locale != context.locale)
        return LinkTarget(
            href=built, locale=target_locale, unprefixed=unprefixed, switches_locale=switches
        )

    def redirect(
        self,
        href: HrefLike,
        locale: str | None = None,
        *,
        context: LocaleContext | None = None,
        permanent: bool = False,
    ) -> Redirect:
        """Build a ``Redirect`` (307, or 308 when *permanent*) to *href*."""
        url = encode_url(self.build_href(href, locale, context=context))
        return Redirect(url=url, status=308 if permanent else 307)

    def permanent_redirect(
        self,
        href: HrefLike,
        locale: str | None = None,
        *,
        context: LocaleContext | None = None,
    ) -> Redirect:
        return self.redirect(href, locale, context=context, permanent=True)

    def base_pathname(self, pathname: str, locale: str | None = None) -> str:
        """Map an external pathname back to its canonical template.

        ``/de/neuigkeiten/3`` -> ``/news/[articleId]``. Without a matching
        ``pathnames`` entry the unprefixed pathname is returned.
        """
        found = strip_locale_prefix(pathname, self.config)
        rest = found.pathname if found.locale is not None else pathname
        effective = found.locale or locale
        if effective is not None and self._compiler.enabled:
            match = self._compiler.match_template(rest, effective)
            if match is not None:
                return match.template
        return rest

    def switch_locale(self, pathname: str, locale: str, *, context: LocaleContext) -> str:
        """The href of the page at *pathname* in another *locale*.

        Parameters extracted from the current localized pathname are
        compiled into the target locale's variant. Pathnames outside the
        table are only re-prefixed, never parsed as templates.
        """
        found = strip_locale_prefix(pathname, self.config)
        rest = found.pathname if found.locale is not None else pathname
        if self._compiler.enabled:
            match = self._compiler.match_template(rest, found.locale or context.locale)
            if match is not None:
                href = Href(pathname=match.template, params=match.params)
                return self.build_href(href, locale, context=context)
        _, host = self._target(locale, context)
        return self._prefix(rest, locale, host, self._forces_prefix(locale, host))
