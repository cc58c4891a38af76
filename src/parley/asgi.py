"""ASGI wrapper — locale routing in front of any ASGI application.

Usage::

    from parley import define_routing
    from parley.asgi import LocaleRoutingApp

    routing = define_routing(locales=["en", "de"], default_locale="en")
    app = LocaleRoutingApp(inner_app, routing)

The wrapped application sees the canonical, unprefixed path in
``scope["path"]`` and the negotiated locale in the ``x-parley-locale``
request header. Lifespan and websocket scopes pass through untouched.
"""

import logging
from typing import Any
from urllib.parse import quote

from parley._internal.asgi import ASGIApp, Receive, Scope, Send
from parley.config import RoutingConfig
from parley.context import LOCALE_HEADER
from parley.http.request import Request
from parley.http.response import Redirect
from parley.middleware.locale import decorate_response
from parley.negotiation import LocaleNegotiator, NegotiationResult
from parley.routing.params import encode_url
from parley.server.sender import send_response

logger = logging.getLogger("parley.asgi")


def _rewrite_scope(scope: Scope, result: NegotiationResult) -> dict[str, Any]:
    """Copy *scope* with the internal path and the locale header."""
    locale_key = LOCALE_HEADER.encode("latin-1")
    headers = [(name, value) for name, value in scope.get("headers", ()) if name.lower() != locale_key]
    headers.append((locale_key, result.locale.encode("latin-1")))
    path = result.internal_path
    return {
        **scope,
        "path": path,
        "raw_path": quote(path, safe="/:@!$&'()*+,;=~").encode("latin-1"),
        "headers": headers,
    }


def _response_headers(result: NegotiationResult) -> list[tuple[bytes, bytes]]:
    extra: list[tuple[bytes, bytes]] = []
    if result.set_cookie is not None:
        extra.append((b"set-cookie", result.set_cookie.to_header_value().encode("latin-1")))
    if result.link_header:
        extra.append((b"link", result.link_header.encode("latin-1")))
    return extra


class LocaleRoutingApp:
    """ASGI application that negotiates the locale, then delegates."""

    __slots__ = ("_negotiator", "app", "config")

    def __init__(self, app: ASGIApp, config: RoutingConfig) -> None:
        self.app = app
        self.config = config
        self._negotiator = LocaleNegotiator(config)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request.from_asgi(scope)
        result = self._negotiator.negotiate_request(request)

        target = result.target_path
        if target is not None:
            logger.debug("Redirecting %s to %s", request.url, target)
            response = Redirect(url=encode_url(target), status=307).to_response()
            await send_response(decorate_response(response, result), send)
            return

        extra = _response_headers(result)

        async def send_wrapper(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start" and extra:
                message = {**message, "headers": [*message.get("headers", ()), *extra]}
            await send(message)

        await self.app(_rewrite_scope(scope, result), receive, send_wrapper)
