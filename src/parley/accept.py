"""Accept-Language parsing and language-range matching.

Tags are decomposed with babel's ``parse_locale`` so ``de-AT``,
``de_AT`` and ``DE-at`` all compare equal, and a requested ``de-AT``
can fall back to a supported ``de`` (or the reverse).
"""

from collections.abc import Sequence
from dataclasses import dataclass
from itertools import groupby

from babel.core import parse_locale


@dataclass(frozen=True, slots=True)
class LanguageRange:
    """One entry of an ``Accept-Language`` header."""

    tag: str
    quality: float = 1.0


def split_tag(tag: str) -> tuple[str, ...] | None:
    """Return the lowercased subtags of *tag*, or ``None`` if malformed.

    Examples::

        split_tag("en-US")   -> ("en", "us")
        split_tag("zh-Hant") -> ("zh", "hant")
        split_tag("about")   -> None
    """
    try:
        parts = parse_locale(tag.replace("_", "-"), sep="-")
    except ValueError:
        return None
    language, territory, script, variant = parts[:4]
    if not 2 <= len(language) <= 3:
        return None
    return tuple(p.lower() for p in (language, script, territory, variant) if p)


def is_locale_tag(value: str) -> bool:
    """True if *value* is a well-formed language tag."""
    return split_tag(value) is not None


def parse_accept_language(header: str | None) -> list[LanguageRange]:
    """Parse an ``Accept-Language`` header into ranges, best first.

    Order is stable for equal qualities. Entries with ``q=0`` and
    malformed quality values are dropped.
    """
    if not header:
        return []
    ranges: list[LanguageRange] = []
    for part in header.split(","):
        tag, _, params = part.strip().partition(";")
        tag = tag.strip()
        if not tag:
            continue
        quality = 1.0
        for param in params.split(";"):
            key, _, value = param.strip().partition("=")
            if key.strip().lower() == "q":
                try:
                    quality = float(value.strip())
                except ValueError:
                    quality = -1.0
        if 0 < quality <= 1:
            ranges.append(LanguageRange(tag=tag, quality=quality))
    ranges.sort(key=lambda r: r.quality, reverse=True)
    return ranges


def match_locale(tag: str, locales: Sequence[str]) -> str | None:
    """Find the supported locale best matching a single requested *tag*.

    Lookup order:

    1. Exact tag (case-insensitive, ``-``/``_`` agnostic)
    2. Requested tag truncated one subtag at a time (``de-AT`` -> ``de``)
    3. First supported locale sharing the primary language (``de`` -> ``de-AT``)
    """
    requested = split_tag(tag)
    if requested is None:
        return None
    supported = [(locale, split_tag(locale)) for locale in locales]

    for length in range(len(requested), 0, -1):
        prefix = requested[:length]
        for locale, parts in supported:
            if parts == prefix:
                return locale

    for locale, parts in supported:
        if parts is not None and parts[0] == requested[0]:
            return locale
    return None


def best_match(header: str | None, locales: Sequence[str] | None) -> str | None:
    """Return the supported locale that best satisfies *header*.

    Ranges are tried in quality order. Among ranges of equal quality the
    match declared first in *locales* wins, whatever the header order.
    ``*`` selects the first supported locale. With ``locales=None``
    (unbounded) the best well-formed tag is returned as is, ties keeping
    header order.
    """
    for _, group in groupby(parse_accept_language(header), key=lambda r: r.quality):
        candidates: list[str] = []
        for lang_range in group:
            if lang_range.tag == "*":
                if locales:
                    candidates.append(locales[0])
                continue
            if locales is None:
                if is_locale_tag(lang_range.tag):
                    return lang_range.tag
                continue
            match = match_locale(lang_range.tag, locales)
            if match is not None:
                candidates.append(match)
        if candidates:
            return min(candidates, key=locales.index)  # type: ignore[union-attr]
    return None
