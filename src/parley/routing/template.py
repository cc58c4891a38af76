"""PathSegment and PathTemplate frozen dataclasses.

A ``PathTemplate`` is parsed once at config time and then compiled
(params -> concrete path) or matched (concrete path -> params) per call.
"""

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from parley.errors import ConfigurationError, MissingParameterError
from parley.routing.params import SegmentKind, classify_segment, decode_segment, encode_segment

ParamValue: TypeAlias = str | int | float | Sequence[str | int | float]


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a pathname template.

    Static:         ``/news``           (kind=STATIC, value="news")
    Param:          ``/[id]``           (kind=PARAM, value="id")
    Catch-all:      ``/[...slug]``      (kind=CATCH_ALL, value="slug")
    Optional:       ``/[[...slug]]``    (kind=OPTIONAL_CATCH_ALL, value="slug")
    """

    value: str
    kind: SegmentKind = SegmentKind.STATIC


@dataclass(frozen=True, slots=True)
class PathTemplate:
    """A parsed pathname template."""

    template: str
    segments: tuple[PathSegment, ...]
    _regex: re.Pattern[str] = field(repr=False, compare=False)

    @property
    def param_names(self) -> frozenset[str]:
        return frozenset(s.value for s in self.segments if s.kind.is_wildcard)

    @property
    def is_static(self) -> bool:
        return not any(s.kind.is_wildcard for s in self.segments)

    @property
    def specificity(self) -> tuple[int, int, int, str]:
        """Sort key: most specific template first.

        Fewest wildcard segments, then fewest catch-alls, then the
        longest run of leading literal segments.
        """
        wildcards = sum(1 for s in self.segments if s.kind.is_wildcard)
        catch_alls = sum(1 for s in self.segments if s.kind.is_catch_all)
        literal_prefix = 0
        for seg in self.segments:
            if seg.kind.is_wildcard:
                break
            literal_prefix += 1
        return (wildcards, catch_alls, -literal_prefix, self.template)

    def compile(self, params: Mapping[str, Any] | None = None) -> str:
        """Substitute *params* into the template.

        Raises ``MissingParameterError`` if a required parameter has no
        value. Optional catch-alls without a value are dropped.
        """
        params = params or {}
        parts: list[str] = []
        for seg in self.segments:
            match seg.kind:
                case SegmentKind.STATIC:
                    parts.append(seg.value)
                case SegmentKind.PARAM:
                    value = params.get(seg.value)
                    if value is None or value == "":
                        raise MissingParameterError(self.template, seg.value)
                    parts.append(encode_segment(value))
                case SegmentKind.CATCH_ALL | SegmentKind.OPTIONAL_CATCH_ALL:
                    values = _as_list(params.get(seg.value))
                    if not values:
                        if seg.kind is SegmentKind.CATCH_ALL:
                            raise MissingParameterError(self.template, seg.value)
                        continue
                    parts.extend(encode_segment(v) for v in values)
        return "/" + "/".join(parts)

    def match(self, pathname: str) -> dict[str, str | list[str]] | None:
        """Match a concrete pathname, returning decoded params or ``None``."""
        subject = "" if pathname in ("", "/") else pathname.rstrip("/")
        m = self._regex.match(subject)
        if m is None:
            return None
        params: dict[str, str | list[str]] = {}
        dynamic = [s for s in self.segments if s.kind.is_wildcard]
        for seg, raw in zip(dynamic, m.groups(), strict=True):
            if seg.kind is SegmentKind.PARAM:
                params[seg.value] = decode_segment(raw)
            elif raw is not None:
                params[seg.value] = [decode_segment(p) for p in raw.split("/")]
        return params


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (str, int, float)):
        return [value]
    return list(value)


def parse_template(template: str) -> PathTemplate:
    """Parse a pathname template string into a ``PathTemplate``.

    Examples::

        "/"                     -> PathTemplate("/", ())
        "/news/[articleId]"     -> [PathSegment("news"), PathSegment("articleId", PARAM)]
        "/docs/[...slug]"       -> [PathSegment("docs"), PathSegment("slug", CATCH_ALL)]

    Raises ``ConfigurationError`` for templates that do not start with
    ``/``, repeat a parameter name, or place a catch-all anywhere but
    the last segment.
    """
    if not template.startswith("/"):
        msg = f"Pathname {template!r} must start with '/'."
        raise ConfigurationError(msg)

    segments: list[PathSegment] = []
    seen: set[str] = set()
    for part in template.strip("/").split("/"):
        if not part:
            continue
        if segments and segments[-1].kind.is_catch_all:
            msg = f"Catch-all segment must be last in pathname {template!r}."
            raise ConfigurationError(msg)
        kind, value = classify_segment(part, template)
        if kind.is_wildcard:
            if value in seen:
                msg = f"Duplicate parameter {value!r} in pathname {template!r}."
                raise ConfigurationError(msg)
            seen.add(value)
        segments.append(PathSegment(value=value, kind=kind))

    return PathTemplate(
        template=template,
        segments=tuple(segments),
        _regex=re.compile(_pattern(segments), re.DOTALL),
    )


def _pattern(segments: list[PathSegment]) -> str:
    parts: list[str] = ["^"]
    for seg in segments:
        match seg.kind:
            case SegmentKind.STATIC:
                parts.append("/" + re.escape(seg.value))
            case SegmentKind.PARAM:
                parts.append("/([^/]+)")
            case SegmentKind.CATCH_ALL:
                parts.append("/(.+)")
            case SegmentKind.OPTIONAL_CATCH_ALL:
                parts.append("(?:/(.+))?")
    parts.append("$")
    return "".join(parts)
