"""Pathname template segments and parameter encoding.

Templates use bracketed segments::

    /news/[articleId]        named parameter
    /docs/[...slug]          catch-all (one or more segments)
    /shop/[[...filters]]     optional catch-all (zero or more segments)
"""

import re
from enum import Enum
from urllib.parse import quote, unquote

from parley.errors import ConfigurationError

_NAME = re.compile(r"^[A-Za-z_][\w-]*$")


class SegmentKind(Enum):
    STATIC = "static"
    PARAM = "param"
    CATCH_ALL = "catch_all"
    OPTIONAL_CATCH_ALL = "optional_catch_all"

    @property
    def is_wildcard(self) -> bool:
        return self is not SegmentKind.STATIC

    @property
    def is_catch_all(self) -> bool:
        return self in (SegmentKind.CATCH_ALL, SegmentKind.OPTIONAL_CATCH_ALL)


def classify_segment(part: str, template: str) -> tuple[SegmentKind, str]:
    """Return ``(kind, value)`` for one slash-separated template segment.

    *value* is the parameter name for dynamic segments and the literal
    text for static ones. Raises ``ConfigurationError`` for malformed
    brackets such as ``[id`` or ``[...]``.
    """
    if part.startswith("[[...") and part.endswith("]]"):
        kind, name = SegmentKind.OPTIONAL_CATCH_ALL, part[5:-2]
    elif part.startswith("[...") and part.endswith("]"):
        kind, name = SegmentKind.CATCH_ALL, part[4:-1]
    elif part.startswith("[") and part.endswith("]"):
        kind, name = SegmentKind.PARAM, part[1:-1]
    elif "[" in part or "]" in part:
        msg = (
            f"Invalid segment {part!r} in pathname {template!r}. "
            "Dynamic segments must span a whole segment: /[id], /[...slug] or /[[...slug]]."
        )
        raise ConfigurationError(msg)
    else:
        return SegmentKind.STATIC, part

    if not _NAME.match(name):
        msg = f"Invalid parameter name {name!r} in pathname {template!r}."
        raise ConfigurationError(msg)
    return kind, name


def is_dynamic_segment(part: str) -> bool:
    """True if *part* is a well-formed ``[name]``, ``[...name]`` or ``[[...name]]``."""
    for opening, closing in (("[[...", "]]"), ("[...", "]"), ("[", "]")):
        if part.startswith(opening) and part.endswith(closing):
            return bool(_NAME.match(part[len(opening):-len(closing)]))
    return False


def encode_segment(value: object) -> str:
    """Percent-encode a single path segment value (``/`` included)."""
    return quote(str(value), safe="")


def decode_segment(value: str) -> str:
    return unquote(value)


def encode_url(url: str) -> str:
    """Percent-encode characters a header value cannot carry (e.g. ``ü``).

    Already-encoded sequences and URL delimiters are left intact.
    """
    return quote(url, safe="/:?#[]@!$&'()*+,;=%~")
