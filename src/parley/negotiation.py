"""Locale negotiation — derive the locale and routing action for a request.

Precedence for the candidate locale, highest first:

1. A recognized locale prefix in the pathname (not under ``NEVER``)
2. The matched domain's permitted locales (a prefix for a locale the
   domain doesn't permit is ignored and negotiation continues)
3. The locale cookie (only with ``locale_detection``)
4. The ``Accept-Language`` header (only with ``locale_detection``)
5. The applicable default (the domain's, else the global one)

The pathname then decides the action: redirect when the prefix or the
localized segments don't match what the resolved locale requires,
rewrite when localized segments translate to a different canonical
path, pass otherwise. Nothing is stored between requests.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from urllib.parse import unquote

from parley.accept import best_match
from parley.alternates import alternate_links, format_link_header
from parley.config import DomainConfig, PrefixMode, RoutingConfig
from parley.domains import DomainMatcher
from parley.http.cookies import SetCookie, parse_cookies
from parley.http.request import Request
from parley.prefix import (
    PrefixMatch,
    apply_pathname_prefix,
    normalize_pathname,
    strip_locale_prefix,
)
from parley.routing.pathnames import PathnameCompiler, TemplateMatch

logger = logging.getLogger("parley.negotiation")


class Action(Enum):
    PASS = "pass"
    REDIRECT = "redirect"
    REWRITE = "rewrite"


class NegotiationState(Enum):
    """Which signal settled the locale.

    ``DOMAIN_RESTRICTED`` means a domain matched and its own default was
    used; ``DEFAULTED`` means the global default was used.
    """

    UNRESOLVED = "unresolved"
    PREFIX_MATCHED = "prefix"
    DOMAIN_RESTRICTED = "domain"
    COOKIE_MATCHED = "cookie"
    HEADER_MATCHED = "header"
    DEFAULTED = "default"


@dataclass(frozen=True, slots=True)
class NegotiationResult:
    """Outcome of negotiating one request.

    ``internal_path`` is the canonical, unprefixed path the application
    should route on. ``target_path`` is set for redirects and includes
    the query string.
    """

    locale: str
    action: Action
    state: NegotiationState
    internal_path: str
    target_path: str | None = None
    set_cookie: SetCookie | None = None
    link_header: str | None = None
    domain: DomainConfig | None = None


class LocaleNegotiator:
    """Resolve the locale and action for incoming requests.

    Holds only the read-only config and structures derived from it, so
    one instance serves any number of concurrent requests::

        negotiator = LocaleNegotiator(routing)
        result = negotiator.negotiate("/about", accept_language="de")
        result.action       # Action.REDIRECT
        result.target_path  # "/de/about"
    """

    __slots__ = ("_compiler", "_domains", "config")

    def __init__(self, config: RoutingConfig) -> None:
        self.config = config
        self._compiler = PathnameCompiler(config)
        self._domains = DomainMatcher(config)

    # -- Candidate locale --

    def _detect(
        self,
        cookie_value: str | None,
        accept_language: str | None,
        domain: DomainConfig | None,
    ) -> tuple[str, NegotiationState]:
        """Tiers 3-5: cookie, header, default."""
        config = self.config
        permitted = config.locales_for(domain)
        if config.locale_detection:
            if config.has_locale(cookie_value) and (permitted is None or cookie_value in permitted):
                return cookie_value, NegotiationState.COOKIE_MATCHED  # type: ignore[return-value]
            header_locale = best_match(accept_language, permitted)
            if header_locale is not None:
                return header_locale, NegotiationState.HEADER_MATCHED
        if domain is not None:
            return domain.default_locale, NegotiationState.DOMAIN_RESTRICTED
        return config.default_locale, NegotiationState.DEFAULTED

    def _path_prefix(self, pathname: str) -> PrefixMatch:
        config = self.config
        if config.mode is PrefixMode.NEVER and config.locales is not None:
            # Stray prefixes under NEVER are honored once, then redirected away.
            return strip_locale_prefix(pathname, config, any_mode=True)
        return strip_locale_prefix(pathname, config)

    def resolve_locale(
        self,
        pathname: str,
        *,
        host: str | None = None,
        cookie_value: str | None = None,
        accept_language: str | None = None,
    ) -> tuple[str, NegotiationState]:
        """Return ``(locale, state)`` without deriving an action."""
        domain = self._domains.match(host)
        found = self._path_prefix(normalize_pathname(pathname or "/"))
        permitted = self.config.locales_for(domain)
        if found.locale is not None and (permitted is None or found.locale in permitted):
            return found.locale, NegotiationState.PREFIX_MATCHED
        return self._detect(cookie_value, accept_language, domain)

    # -- Full negotiation --

    def negotiate(
        self,
        pathname: str,
        *,
        host: str | None = None,
        cookie_header: str = "",
        accept_language: str = "",
        query: str = "",
        scheme: str = "http",
    ) -> NegotiationResult:
        """Negotiate the locale and action for a request.

        *pathname* is the decoded request path, *query* the raw query
        string without ``?``. Never raises for request input: unknown
        hosts, cookies, header values or pathnames fall through.
        """
        return self._negotiate(
            pathname,
            host=host,
            cookies=parse_cookies(cookie_header),
            accept_language=accept_language,
            query=query,
            scheme=scheme,
        )

    def negotiate_request(self, request: Request) -> NegotiationResult:
        """Negotiate using the path, host, cookies and header of *request*."""
        scheme, _, _ = request.origin.partition("://")
        return self._negotiate(
            request.path,
            host=request.host,
            cookies=request.cookies,
            accept_language=request.headers.get("accept-language", "") or "",
            query=request.query_string,
            scheme=scheme,
        )

    def _negotiate(
        self,
        pathname: str,
        *,
        host: str | None,
        cookies: Mapping[str, str],
        accept_language: str,
        query: str,
        scheme: str,
    ) -> NegotiationResult:
        config = self.config
        normalized = normalize_pathname(pathname or "/")
        domain = self._domains.match(host)

        cookie_value: str | None = None
        if config.locale_cookie is not None:
            cookie_value = cookies.get(config.locale_cookie.name)

        found = self._path_prefix(normalized)
        permitted = config.locales_for(domain)
        if found.locale is not None and (permitted is None or found.locale in permitted):
            locale, state = found.locale, NegotiationState.PREFIX_MATCHED
        else:
            if found.locale is not None:
                logger.debug(
                    "Locale %r from %r not permitted on %r; negotiating",
                    found.locale,
                    pathname,
                    domain.host if domain else None,
                )
            locale, state = self._detect(cookie_value, accept_language, domain)

        # Remainder after the (possibly disallowed) prefix, as the user sees it
        rest = found.pathname if found.locale is not None else normalized

        match: TemplateMatch | None = None
        expected_rest = rest
        internal_path = rest
        if self._compiler.enabled:
            located = self._compiler.find_template(rest, locale)
            if located is not None:
                _, match = located
                expected_rest = unquote(self._compiler.compile(match.template, locale, match.params))
                canonical = config.pathnames[match.template].canonical  # type: ignore[index]
                internal_path = unquote(canonical.compile(match.params))

        expected = apply_pathname_prefix(expected_rest, locale, config, domain)
        set_cookie = self._cookie_for(locale, cookie_value)

        if expected != normalized:
            target = expected + (f"?{query}" if query else "")
            logger.debug(
                "Redirect %s -> %s (locale=%s via %s)", pathname, target, locale, state.value
            )
            return NegotiationResult(
                locale=locale,
                action=Action.REDIRECT,
                state=state,
                internal_path=internal_path,
                target_path=target,
                set_cookie=set_cookie,
                domain=domain,
            )

        action = Action.REWRITE if internal_path != rest else Action.PASS
        link_header = None
        if host and config.alternate_links:
            links = alternate_links(
                config,
                internal_path,
                origin=f"{scheme}://{host}",
                match=match,
                query=query,
                compiler=self._compiler,
            )
            link_header = format_link_header(links) or None

        logger.debug(
            "%s %s (internal=%s, locale=%s via %s)",
            action.value.capitalize(),
            pathname,
            internal_path,
            locale,
            state.value,
        )
        return NegotiationResult(
            locale=locale,
            action=action,
            state=state,
            internal_path=internal_path,
            set_cookie=set_cookie,
            link_header=link_header,
            domain=domain,
        )

    def _cookie_for(self, locale: str, current: str | None) -> SetCookie | None:
        """A locale cookie write, only when the stored value differs."""
        cookie = self.config.locale_cookie
        if cookie is None or not self.config.locale_detection or current == locale:
            return None
        return SetCookie(
            name=cookie.name,
            value=locale,
            max_age=cookie.max_age,
            path=cookie.path,
            domain=cookie.domain,
            secure=cookie.secure,
            # Client-side locale switchers read and update it
            httponly=False,
            samesite=cookie.samesite,
        )
