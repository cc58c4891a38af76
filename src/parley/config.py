"""Routing configuration.

``RoutingConfig`` is a frozen dataclass, immutable after creation and
shared read-only by every request. Build it with ``define_routing()``
(or ``RoutingConfig.from_mapping()``), which fills defaults, resolves the
loosely typed user input into canonical types, and validates::

    routing = define_routing(
        locales=("en", "de", "es"),
        default_locale="en",
        locale_prefix={"mode": "as-needed", "prefixes": {"es": "/spain"}},
        pathnames={"/about": {"en": "/about", "de": "/ueber-uns", "es": "/acerca"}},
    )

Invalid configuration raises ``ConfigurationError`` here, at setup
time, never while serving a request.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from parley.accept import is_locale_tag
from parley.errors import ConfigurationError
from parley.routing.pathnames import LocalizedPathname, RawPathnames, build_pathname_table

logger = logging.getLogger("parley.config")

ONE_YEAR = 60 * 60 * 24 * 365


class PrefixMode(Enum):
    """Whether a locale prefix appears in pathnames."""

    ALWAYS = "always"
    AS_NEEDED = "as-needed"
    NEVER = "never"


@dataclass(frozen=True, slots=True)
class LocalePrefix:
    """Prefix policy: a base mode plus optional custom prefixes.

    ``prefixes`` maps a locale to the prefix used instead of ``/{locale}``
    (e.g. ``{"es": "/spain"}``). Locales without an entry keep their own
    identifier as the prefix.
    """

    mode: PrefixMode = PrefixMode.ALWAYS
    prefixes: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_custom(self) -> bool:
        return bool(self.prefixes)


@dataclass(frozen=True, slots=True)
class DomainConfig:
    """A host with its own default locale and permitted locales."""

    host: str
    default_locale: str
    locales: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class LocaleCookie:
    """Locale cookie attributes. The value is a bare locale identifier."""

    name: str = "NEXT_LOCALE"
    max_age: int | None = ONE_YEAR
    path: str = "/"
    samesite: str = "lax"
    domain: str | None = None
    secure: bool = False


@dataclass(frozen=True, slots=True)
class RoutingConfig:
    """Canonical routing configuration. Immutable after creation.

    Construct through ``define_routing()``; constructing directly skips
    input normalization but not validation.
    """

    default_locale: str
    locales: tuple[str, ...] | None = None
    locale_prefix: LocalePrefix = field(default_factory=LocalePrefix)
    domains: tuple[DomainConfig, ...] | None = None
    pathnames: Mapping[str, LocalizedPathname] | None = None
    locale_cookie: LocaleCookie | None = field(default_factory=LocaleCookie)
    locale_detection: bool = True
    alternate_links: bool = True
    reserved_segments: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        _validate(self)

    @property
    def mode(self) -> PrefixMode:
        return self.locale_prefix.mode

    @property
    def is_unbounded(self) -> bool:
        """True when no explicit locale list was configured."""
        return self.locales is None

    def has_locale(self, candidate: str | None) -> bool:
        """True if *candidate* is a supported locale.

        In unbounded mode any well-formed language tag is accepted.
        """
        if not candidate:
            return False
        if self.locales is None:
            return is_locale_tag(candidate)
        return candidate in self.locales

    def default_for(self, domain: DomainConfig | None) -> str:
        """The applicable default locale: the domain's, else the global one."""
        return domain.default_locale if domain is not None else self.default_locale

    def locales_for(self, domain: DomainConfig | None) -> tuple[str, ...] | None:
        """Locales permitted on *domain* (all locales when ``None``)."""
        return domain.locales if domain is not None else self.locales

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> RoutingConfig:
        """Build a config from a plain mapping (snake_case or camelCase keys)."""
        options = {_ALIASES.get(key, key): value for key, value in raw.items()}
        unknown = sorted(set(options) - _OPTIONS)
        if unknown:
            msg = f"Unknown routing option(s): {', '.join(unknown)}."
            raise ConfigurationError(msg)
        if "default_locale" not in options:
            msg = "Routing config requires 'default_locale'."
            raise ConfigurationError(msg)
        return define_routing(**options)


_ALIASES = {
    "defaultLocale": "default_locale",
    "localePrefix": "locale_prefix",
    "localeCookie": "locale_cookie",
    "localeDetection": "locale_detection",
    "alternateLinks": "alternate_links",
    "reservedSegments": "reserved_segments",
}

_OPTIONS = frozenset({
    "locales",
    "default_locale",
    "locale_prefix",
    "domains",
    "pathnames",
    "locale_cookie",
    "locale_detection",
    "alternate_links",
    "reserved_segments",
})


# -- Resolver --


def define_routing(
    *,
    default_locale: str,
    locales: Iterable[str] | None = None,
    locale_prefix: str | PrefixMode | LocalePrefix | Mapping[str, Any] = PrefixMode.ALWAYS,
    domains: Iterable[DomainConfig | Mapping[str, Any]] | None = None,
    pathnames: RawPathnames | None = None,
    locale_cookie: bool | LocaleCookie | Mapping[str, Any] | None = True,
    locale_detection: bool = True,
    alternate_links: bool = True,
    reserved_segments: Iterable[str] = (),
) -> RoutingConfig:
    """Resolve user routing options into a validated ``RoutingConfig``.

    Raises ``ConfigurationError`` describing the first invalid option.
    """
    locale_list = _resolve_locales(locales)
    prefix = resolve_locale_prefix(locale_prefix)
    domain_list = _resolve_domains(domains, locale_list)

    table = None
    if pathnames:
        if locale_list is None:
            msg = "'pathnames' requires an explicit 'locales' list."
            raise ConfigurationError(msg)
        table = build_pathname_table(pathnames, locale_list)

    config = RoutingConfig(
        default_locale=default_locale,
        locales=locale_list,
        locale_prefix=prefix,
        domains=domain_list,
        pathnames=table,
        locale_cookie=_resolve_cookie(locale_cookie),
        locale_detection=locale_detection,
        # Pathnames aren't unique per locale without a prefix
        alternate_links=alternate_links and prefix.mode is not PrefixMode.NEVER,
        reserved_segments=tuple(s.strip("/").lower() for s in reserved_segments),
    )
    logger.debug(
        "Resolved routing: locales=%s default=%s mode=%s domains=%d pathnames=%d",
        config.locales,
        config.default_locale,
        prefix.mode.value,
        len(config.domains or ()),
        len(config.pathnames or {}),
    )
    return config


def resolve_locale_prefix(value: str | PrefixMode | LocalePrefix | Mapping[str, Any]) -> LocalePrefix:
    """Normalize the ``locale_prefix`` option into a ``LocalePrefix``.

    Accepts ``"always"``/``"as-needed"``/``"never"``, a ``PrefixMode``, a
    ``LocalePrefix``, or a mapping ``{"mode": ..., "prefixes": {...}}``.
    """
    match value:
        case LocalePrefix():
            return value
        case PrefixMode():
            return LocalePrefix(mode=value)
        case str():
            return LocalePrefix(mode=_parse_mode(value))
        case Mapping():
            mode = _parse_mode(value.get("mode", PrefixMode.ALWAYS))
            prefixes = dict(value.get("prefixes") or {})
            return LocalePrefix(mode=mode, prefixes=MappingProxyType(prefixes))
    msg = f"Invalid locale_prefix {value!r}."
    raise ConfigurationError(msg)


def _parse_mode(value: str | PrefixMode) -> PrefixMode:
    if isinstance(value, PrefixMode):
        return value
    try:
        return PrefixMode(value)
    except ValueError:
        choices = ", ".join(repr(m.value) for m in PrefixMode)
        msg = f"Invalid locale prefix mode {value!r}. Expected one of {choices}."
        raise ConfigurationError(msg) from None


def _resolve_locales(locales: Iterable[str] | None) -> tuple[str, ...] | None:
    if locales is None:
        return None
    if isinstance(locales, str):
        msg = f"'locales' must be a list of locales, not the string {locales!r}."
        raise ConfigurationError(msg)
    return tuple(locales)


def _resolve_domains(
    domains: Iterable[DomainConfig | Mapping[str, Any]] | None,
    locales: tuple[str, ...] | None,
) -> tuple[DomainConfig, ...] | None:
    if domains is None:
        return None
    if locales is None:
        msg = "'domains' requires an explicit 'locales' list."
        raise ConfigurationError(msg)

    resolved: list[DomainConfig] = []
    for entry in domains:
        if isinstance(entry, DomainConfig):
            resolved.append(entry)
            continue
        host = entry.get("host", entry.get("domain"))
        default = entry.get("default_locale", entry.get("defaultLocale"))
        if not host or not default:
            msg = f"Domain entry {dict(entry)!r} needs a 'host' and a 'default_locale'."
            raise ConfigurationError(msg)
        permitted = entry.get("locales")
        resolved.append(
            DomainConfig(
                host=host,
                default_locale=default,
                locales=tuple(permitted) if permitted is not None else locales,
            )
        )
    return tuple(resolved)


def _resolve_cookie(value: bool | LocaleCookie | Mapping[str, Any] | None) -> LocaleCookie | None:
    match value:
        case None | False:
            return None
        case True:
            return LocaleCookie()
        case LocaleCookie():
            return value
        case Mapping():
            options = {_COOKIE_ALIASES.get(k, k): v for k, v in value.items()}
            try:
                return LocaleCookie(**options)
            except TypeError as exc:
                msg = f"Invalid locale_cookie option: {exc}"
                raise ConfigurationError(msg) from None
    msg = f"Invalid locale_cookie {value!r}."
    raise ConfigurationError(msg)


_COOKIE_ALIASES = {"maxAge": "max_age", "sameSite": "samesite"}


# -- Validation --


def _validate(config: RoutingConfig) -> None:
    locales = config.locales
    if locales is not None:
        if not locales:
            msg = "'locales' must not be empty."
            raise ConfigurationError(msg)
        duplicates = sorted({loc for loc in locales if locales.count(loc) > 1})
        if duplicates:
            msg = f"Duplicate locale(s) in 'locales': {duplicates!r}."
            raise ConfigurationError(msg)
        if config.default_locale not in locales:
            msg = (
                f"default_locale {config.default_locale!r} is not one of "
                f"the configured locales {list(locales)!r}."
            )
            raise ConfigurationError(msg)
    elif not config.default_locale:
        msg = "'default_locale' must not be empty."
        raise ConfigurationError(msg)
    elif config.domains or config.pathnames or config.locale_prefix.is_custom:
        msg = "'domains', 'pathnames' and custom prefixes require an explicit 'locales' list."
        raise ConfigurationError(msg)

    _validate_prefixes(config)
    _validate_domains(config)
    _validate_cookie(config.locale_cookie)


def _validate_prefixes(config: RoutingConfig) -> None:
    custom = config.locale_prefix.prefixes
    locales = config.locales or ()
    unknown = sorted(set(custom) - set(locales))
    if unknown:
        msg = f"Custom prefixes given for unknown locale(s): {unknown!r}."
        raise ConfigurationError(msg)

    effective: dict[str, str] = {}
    for locale in locales:
        prefix = custom.get(locale, f"/{locale}")
        if not prefix.startswith("/") or prefix.endswith("/") or "//" in prefix:
            msg = f"Prefix {prefix!r} for locale {locale!r} must look like '/segment'."
            raise ConfigurationError(msg)
        effective[locale] = prefix.lower()

    for locale, prefix in effective.items():
        first = prefix.strip("/").split("/", 1)[0]
        if first in config.reserved_segments:
            msg = f"Prefix {prefix!r} for locale {locale!r} collides with a reserved path segment."
            raise ConfigurationError(msg)
        for other, other_prefix in effective.items():
            if other == locale:
                continue
            if prefix == other_prefix:
                msg = f"Locales {locale!r} and {other!r} share the prefix {prefix!r}."
                raise ConfigurationError(msg)
            if prefix.startswith(other_prefix + "/"):
                msg = (
                    f"Prefix {prefix!r} for locale {locale!r} is nested under "
                    f"{other_prefix!r} for locale {other!r}."
                )
                raise ConfigurationError(msg)


def _validate_domains(config: RoutingConfig) -> None:
    if config.domains is None:
        return
    locales = config.locales or ()
    seen: set[str] = set()
    for domain in config.domains:
        host = domain.host.lower()
        if host in seen:
            msg = f"Domain {domain.host!r} is configured more than once."
            raise ConfigurationError(msg)
        seen.add(host)
        if not domain.locales:
            msg = f"Domain {domain.host!r} must permit at least one locale."
            raise ConfigurationError(msg)
        unknown = [loc for loc in domain.locales if loc not in locales]
        if unknown:
            msg = f"Domain {domain.host!r} permits unknown locale(s) {unknown!r}."
            raise ConfigurationError(msg)
        if domain.default_locale not in domain.locales:
            msg = (
                f"Domain {domain.host!r} default_locale {domain.default_locale!r} "
                f"is not among its locales {list(domain.locales)!r}."
            )
            raise ConfigurationError(msg)


def _validate_cookie(cookie: LocaleCookie | None) -> None:
    if cookie is None:
        return
    if not cookie.name:
        msg = "Locale cookie name must not be empty."
        raise ConfigurationError(msg)
    if cookie.samesite.lower() not in ("lax", "strict", "none"):
        msg = f"Invalid locale cookie samesite {cookie.samesite!r}."
        raise ConfigurationError(msg)
