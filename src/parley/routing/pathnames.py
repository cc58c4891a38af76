"""Pathname compiler — canonical templates to localized pathnames and back.

``pathnames`` maps a canonical (internal) template to either one template
shared by all locales or a per-locale mapping::

    {
        "/about": {"en": "/about", "de": "/ueber-uns"},
        "/news/[articleId]": {"en": "/news/[articleId]", "de": "/neuigkeiten/[articleId]"},
        "/imprint": "/imprint",
    }

Entries are parsed once into ``LocalizedPathname`` objects when the
config is resolved.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, TypeAlias
from urllib.parse import unquote, urlencode

from parley.errors import ConfigurationError, InvalidHrefError
from parley.routing.params import is_dynamic_segment
from parley.routing.template import PathTemplate, parse_template

if TYPE_CHECKING:
    from parley.config import RoutingConfig

RawPathnames: TypeAlias = Mapping[str, str | Mapping[str, str]]
QueryValue: TypeAlias = str | int | float | bool | Sequence[str | int | float] | None


@dataclass(frozen=True, slots=True)
class LocalizedPathname:
    """A canonical template and its per-locale variants."""

    canonical: PathTemplate
    variants: Mapping[str, PathTemplate]

    def for_locale(self, locale: str) -> PathTemplate:
        """Return the variant for *locale*, or the canonical template."""
        return self.variants.get(locale, self.canonical)


@dataclass(frozen=True, slots=True)
class TemplateMatch:
    """Result of matching an external pathname against ``pathnames``."""

    template: str
    params: dict[str, str | list[str]]


def build_pathname_table(
    raw: RawPathnames,
    locales: Sequence[str],
) -> Mapping[str, LocalizedPathname]:
    """Parse and validate a raw ``pathnames`` mapping.

    Raises ``ConfigurationError`` when a variant names an unknown locale,
    declares a different parameter set than its canonical template, or
    two canonical entries share a localized template within one locale.
    """
    table: dict[str, LocalizedPathname] = {}
    claimed: dict[tuple[str, str], str] = {}

    for key, entry in raw.items():
        canonical = parse_template(key)
        if isinstance(entry, str):
            shared = parse_template(entry)
            _check_params(key, canonical, shared, locale=None)
            variants = dict.fromkeys(locales, shared)
        else:
            unknown = [locale for locale in entry if locale not in locales]
            if unknown:
                msg = (
                    f"Pathname {key!r} declares unknown locale(s) {unknown!r}. "
                    f"Configured locales: {list(locales)!r}."
                )
                raise ConfigurationError(msg)
            variants = {}
            for locale in locales:
                template = parse_template(entry[locale]) if locale in entry else canonical
                _check_params(key, canonical, template, locale=locale)
                variants[locale] = template

        for locale, template in variants.items():
            shape = _shape(template)
            previous = claimed.setdefault((locale, shape), key)
            if previous != key:
                msg = (
                    f"Pathnames {previous!r} and {key!r} both map to "
                    f"{template.template!r} for locale {locale!r}."
                )
                raise ConfigurationError(msg)

        table[key] = LocalizedPathname(canonical=canonical, variants=MappingProxyType(variants))

    return MappingProxyType(table)


def _signature(template: PathTemplate) -> frozenset[tuple[str, str]]:
    return frozenset((s.value, s.kind.value) for s in template.segments if s.kind.is_wildcard)


def _shape(template: PathTemplate) -> str:
    # Parameter names don't distinguish templates: /a/[x] and /a/[y] collide.
    return "/".join(s.kind.value if s.kind.is_wildcard else s.value for s in template.segments)


def _check_params(
    key: str,
    canonical: PathTemplate,
    template: PathTemplate,
    locale: str | None,
) -> None:
    if _signature(canonical) == _signature(template):
        return
    where = f" for locale {locale!r}" if locale else ""
    msg = (
        f"Pathname {template.template!r}{where} must declare the same parameters "
        f"as {key!r}: expected {sorted(canonical.param_names)!r}, "
        f"got {sorted(template.param_names)!r}."
    )
    raise ConfigurationError(msg)


def serialize_query(query: Mapping[str, QueryValue] | Iterable[tuple[str, Any]] | None) -> str:
    """Serialize query parameters, preserving input order.

    Sequence values repeat the key (``tag=a&tag=b``); ``None`` values are
    dropped. Returns ``""`` when there is nothing to serialize, otherwise
    a string starting with ``?``.
    """
    if not query:
        return ""
    items = query.items() if isinstance(query, Mapping) else query
    pairs: list[tuple[str, str]] = []
    for key, value in items:
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((key, _query_str(v)) for v in value)
        else:
            pairs.append((key, _query_str(value)))
    if not pairs:
        return ""
    return "?" + urlencode(pairs)


def _query_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class PathnameCompiler:
    """Bidirectional mapping between canonical and localized pathnames.

    Usage::

        compiler = PathnameCompiler(config)
        compiler.compile("/news/[articleId]", "de", {"articleId": 3})
        # -> "/neuigkeiten/3"
        compiler.match_template("/neuigkeiten/3", "de")
        # -> TemplateMatch(template="/news/[articleId]", params={"articleId": "3"})
    """

    __slots__ = ("_config", "_ordered")

    def __init__(self, config: RoutingConfig) -> None:
        self._config = config
        entries = config.pathnames or {}
        # Most specific canonical entry first, per locale, at match time.
        self._ordered: dict[str, list[tuple[str, PathTemplate]]] = {}
        for locale in config.locales or ():
            candidates = [(key, entry.for_locale(locale)) for key, entry in entries.items()]
            candidates.sort(key=lambda item: item[1].specificity)
            self._ordered[locale] = candidates

    @property
    def enabled(self) -> bool:
        return bool(self._config.pathnames)

    def localized_template(self, canonical: str, locale: str) -> PathTemplate | None:
        """Return the localized template for *canonical* in *locale*.

        Pathnames without a ``pathnames`` entry are parsed as templates
        only when they contain well-formed dynamic segments. Concrete
        pathnames (``/search/a[1]``) return ``None`` and are used verbatim.
        Raises ``InvalidHrefError`` for a malformed template.
        """
        entry = (self._config.pathnames or {}).get(canonical)
        if entry is not None:
            return entry.for_locale(locale)
        if not any(is_dynamic_segment(part) for part in canonical.split("/")):
            return None
        try:
            return parse_template(canonical)
        except ConfigurationError as exc:
            raise InvalidHrefError(canonical, str(exc)) from exc

    def compile(
        self,
        canonical: str,
        locale: str,
        params: Mapping[str, Any] | None = None,
        query: Mapping[str, QueryValue] | None = None,
    ) -> str:
        """Compile *canonical* into the localized pathname for *locale*.

        Raises ``MissingParameterError`` if a required parameter is absent.
        The query string is appended after substitution.
        """
        template = self.localized_template(canonical, locale)
        pathname = template.compile(params) if template is not None else canonical
        return pathname + serialize_query(query)

    def match_template(self, pathname: str, locale: str) -> TemplateMatch | None:
        """Find the canonical template that produced *pathname* in *locale*.

        Returns ``None`` when no entry matches; the caller then treats
        the pathname as already canonical.
        """
        for key, template in self._ordered.get(locale, ()):
            params = template.match(pathname)
            if params is not None:
                return TemplateMatch(template=key, params=params)
        return None

    def find_template(self, pathname: str, locale: str) -> tuple[str, TemplateMatch] | None:
        """Like ``match_template`` but also searches other locales' variants.

        Returns ``(matched_locale, match)``; *locale* is tried first.
        """
        match = self.match_template(pathname, locale)
        if match is not None:
            return locale, match
        for other in self._config.locales or ():
            if other == locale:
                continue
            match = self.match_template(pathname, other)
            if match is not None:
                return other, match
        return None

    def internal_pathname(self, pathname: str, locale: str) -> str:
        """Translate a localized *pathname* into the canonical concrete path.

        Returns *pathname* unchanged when no entry matches.
        """
        match = self.match_template(pathname, locale)
        if match is None:
            return pathname
        canonical = self._config.pathnames[match.template].canonical  # type: ignore[index]
        return unquote(canonical.compile(match.params))
