"""Immutable HTTP request.

Middleware that needs to hand a different path or header downstream
builds a new request with ``with_path()`` / ``with_header()`` instead of
mutating this one.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from parley.domains import host_from_headers
from parley.http.cookies import parse_cookies
from parley.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Cookies are parsed once at creation time (in ``from_asgi``) and stored
    as a frozen field, not re-parsed on every access.
    """

    method: str
    path: str
    headers: Headers
    query_string: str = ""
    scheme: str = "http"
    server: tuple[str, int] | None = None
    cookies: Mapping[str, str] = field(default_factory=dict)

    # -- Computed properties --

    @property
    def host(self) -> str | None:
        """The requested host (``X-Forwarded-Host`` first, then ``Host``)."""
        host = host_from_headers(self.headers)
        if host is None and self.server is not None:
            name, port = self.server
            return name if port in (80, 443) else f"{name}:{port}"
        return host

    @property
    def origin(self) -> str:
        """``scheme://host`` of the request, honoring ``X-Forwarded-Proto``."""
        proto = self.headers.get("x-forwarded-proto")
        scheme = proto.split(",", 1)[0].strip() if proto else self.scheme
        return f"{scheme}://{self.host or 'localhost'}"

    @property
    def url(self) -> str:
        """Request path plus query string."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path

    # -- Derived requests --

    def with_path(self, path: str) -> Request:
        """Return a copy of this request with a different path."""
        return replace(self, path=path)

    def with_header(self, name: str, value: str) -> Request:
        """Return a copy with header *name* set to *value* (replacing it)."""
        return replace(self, headers=self.headers.replace(name, value))

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any]) -> Request:
        """Create a Request from an ASGI HTTP scope."""
        headers = Headers(tuple(scope.get("headers", ())))
        server = scope.get("server")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=headers,
            query_string=scope.get("query_string", b"").decode("latin-1"),
            scheme=scope.get("scheme", "http"),
            server=tuple(server) if server else None,
            cookies=parse_cookies(headers.get("cookie", "") or ""),
        )
