"""Per-request locale context.

The negotiated locale travels with the request explicitly: the
middleware stores it in the internal ``x-parley-locale`` header of the
request it hands downstream, and handlers rebuild a ``LocaleContext``
from that request. Nothing lives in process-wide state, so the context
is valid for exactly one request.

Usage::

    from parley.context import LocaleContext

    async def handler(request):
        ctx = LocaleContext.from_request(request, routing)
        href = navigation.build_href("/about", context=ctx)
"""

from __future__ import annotations

from dataclasses import dataclass

from parley.config import DomainConfig, RoutingConfig
from parley.domains import DomainMatcher
from parley.http.request import Request

LOCALE_HEADER = "x-parley-locale"
"""Internal request header carrying the negotiated locale."""


@dataclass(frozen=True, slots=True)
class LocaleContext:
    """The locale, config and domain in effect for one request."""

    locale: str
    config: RoutingConfig
    domain: DomainConfig | None = None
    pathname: str = "/"

    @classmethod
    def from_request(cls, request: Request, config: RoutingConfig) -> LocaleContext:
        """Rebuild the context from a request processed by the middleware.

        Raises ``LookupError`` if the request carries no negotiated locale,
        i.e. the locale middleware did not run.
        """
        locale = request.headers.get(LOCALE_HEADER)
        if not locale:
            msg = (
                f"No negotiated locale on this request ({LOCALE_HEADER!r} header missing). "
                "Ensure LocaleMiddleware or LocaleRoutingApp wraps the application."
            )
            raise LookupError(msg)
        return cls(
            locale=locale,
            config=config,
            domain=DomainMatcher(config).match(request.host),
            pathname=request.path,
        )
