"""Locale middleware — negotiate the locale before the handler runs.

Redirects short-circuit the chain. Otherwise the handler receives a
request whose path is the canonical, unprefixed pathname and whose
``x-parley-locale`` header carries the negotiated locale; the locale
cookie and ``Link`` header are added to its response on the way out.
"""

import logging

from parley.config import RoutingConfig
from parley.context import LOCALE_HEADER
from parley.http.request import Request
from parley.http.response import Redirect, Response
from parley.middleware.protocol import Next
from parley.negotiation import LocaleNegotiator, NegotiationResult
from parley.routing.params import encode_url

logger = logging.getLogger("parley.middleware")


def decorate_response(response: Response, result: NegotiationResult) -> Response:
    """Attach the locale cookie and alternate links of *result*."""
    if result.set_cookie is not None:
        response = response.with_set_cookie(result.set_cookie)
    if result.link_header:
        response = response.with_header("Link", result.link_header)
    return response


class LocaleMiddleware:
    """Locale routing middleware.

    Usage::

        from parley import define_routing
        from parley.middleware import LocaleMiddleware

        routing = define_routing(locales=["en", "de"], default_locale="en")
        locale_mw = LocaleMiddleware(routing)

        # In a handler:
        ctx = LocaleContext.from_request(request, routing)
    """

    __slots__ = ("_negotiator", "config")

    def __init__(self, config: RoutingConfig) -> None:
        self.config = config
        self._negotiator = LocaleNegotiator(config)

    async def __call__(self, request: Request, next: Next) -> Response:
        result = self._negotiator.negotiate_request(request)

        target = result.target_path
        if target is not None:
            logger.debug("Redirecting %s to %s", request.url, target)
            response = Redirect(url=encode_url(target), status=307).to_response()
            return decorate_response(response, result)

        downstream = request.with_path(result.internal_path).with_header(
            LOCALE_HEADER, result.locale
        )
        response = await next(downstream)
        return decorate_response(response, result)
