"""Prefix policy engine — when and which locale prefix a pathname carries.

Three modes:

- ``ALWAYS``: every locale is prefixed (``/en/about``, ``/de/about``).
- ``AS_NEEDED``: the applicable default locale is unprefixed (``/about``),
  every other locale is prefixed.
- ``NEVER``: no pathname carries a prefix.

Custom prefixes replace ``/{locale}`` per locale under any mode.
"""

import re
from dataclasses import dataclass

from parley.accept import is_locale_tag
from parley.config import DomainConfig, PrefixMode, RoutingConfig

_REPEATED_SLASHES = re.compile(r"/{2,}")


@dataclass(frozen=True, slots=True)
class PrefixMatch:
    """Result of stripping a locale prefix from a pathname.

    ``locale`` is ``None`` when no recognized prefix was present; then
    ``pathname`` is the input unchanged. ``matched`` is the prefix text as
    observed, which differs from ``prefix`` only in letter case.
    """

    locale: str | None
    pathname: str
    prefix: str | None = None
    matched: str | None = None

    @property
    def is_canonical_case(self) -> bool:
        return self.matched == self.prefix


def get_locale_prefix(locale: str, config: RoutingConfig) -> str:
    """Return the prefix string for *locale* (custom, else ``/{locale}``)."""
    return config.locale_prefix.prefixes.get(locale, f"/{locale}")


def requires_prefix(
    locale: str,
    config: RoutingConfig,
    domain: DomainConfig | None = None,
    *,
    force: bool = False,
) -> bool:
    """Whether pathnames for *locale* must carry its prefix.

    Under ``AS_NEEDED`` "default" means the domain's default when a
    *domain* is given. *force* adds a prefix in every mode but ``NEVER``.
    """
    match config.mode:
        case PrefixMode.NEVER:
            return False
        case PrefixMode.ALWAYS:
            return True
        case PrefixMode.AS_NEEDED:
            return force or locale != config.default_for(domain)


def split_suffix(href: str) -> tuple[str, str]:
    """Split *href* into ``(pathname, "?query#hash")``."""
    cut = len(href)
    for marker in ("?", "#"):
        index = href.find(marker)
        if index != -1:
            cut = min(cut, index)
    return href[:cut], href[cut:]


def normalize_pathname(pathname: str) -> str:
    """Collapse repeated slashes and strip trailing ones, keeping the root as ``/``.

    A path must never start with ``//``: browsers read that as a
    scheme-relative URL pointing at another host.
    """
    collapsed = _REPEATED_SLASHES.sub("/", pathname)
    return collapsed.rstrip("/") or "/"


def prefix_pathname(prefix: str, pathname: str) -> str:
    """Join *prefix* and *pathname* (``/de`` + ``/`` -> ``/de``)."""
    path, suffix = split_suffix(pathname)
    if path in ("", "/"):
        return prefix + suffix
    return prefix + path + suffix


def unprefix_pathname(pathname: str, prefix: str) -> str:
    """Remove *prefix* (case-insensitive) from the start of *pathname*."""
    if pathname.lower() == prefix.lower():
        return "/"
    if pathname.lower().startswith(prefix.lower() + "/"):
        return pathname[len(prefix):]
    return pathname


def apply_pathname_prefix(
    pathname: str,
    locale: str,
    config: RoutingConfig,
    domain: DomainConfig | None = None,
    *,
    force: bool = False,
) -> str:
    """Prefix *pathname* for *locale* when the policy requires it.

    Query strings and hashes in *pathname* are preserved.
    """
    if not requires_prefix(locale, config, domain, force=force):
        return pathname
    return prefix_pathname(get_locale_prefix(locale, config), pathname)


def strip_locale_prefix(
    pathname: str,
    config: RoutingConfig,
    *,
    any_mode: bool = False,
) -> PrefixMatch:
    """Recognize and strip a locale prefix from an external *pathname*.

    Prefixes match on segment boundaries and case-insensitively; the
    longest prefix wins. ``NEVER`` recognizes no prefixes unless
    *any_mode* is set (used to redirect stray prefixes away). Without an
    explicit locale list, any well-formed leading language tag that is
    not a reserved segment is provisionally accepted.
    """
    if config.mode is PrefixMode.NEVER and not any_mode:
        return PrefixMatch(locale=None, pathname=pathname)

    lowered = pathname.lower()
    if config.locales is None:
        first = pathname.strip("/").split("/", 1)[0]
        if first and first.lower() not in config.reserved_segments and is_locale_tag(first):
            prefix = f"/{first}"
            return PrefixMatch(
                locale=first,
                pathname=unprefix_pathname(pathname, prefix),
                prefix=prefix,
                matched=prefix,
            )
        return PrefixMatch(locale=None, pathname=pathname)

    candidates = sorted(
        ((locale, get_locale_prefix(locale, config)) for locale in config.locales),
        key=lambda item: len(item[1]),
        reverse=True,
    )
    for locale, prefix in candidates:
        lowered_prefix = prefix.lower()
        if lowered == lowered_prefix or lowered.startswith(lowered_prefix + "/"):
            return PrefixMatch(
                locale=locale,
                pathname=unprefix_pathname(pathname, prefix),
                prefix=prefix,
                matched=pathname[: len(prefix)],
            )
    return PrefixMatch(locale=None, pathname=pathname)
