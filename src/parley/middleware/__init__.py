"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    LocaleMiddleware -- Locale negotiation, prefix redirects and rewrites
"""

from parley.middleware.locale import LocaleMiddleware
from parley.middleware.protocol import Middleware, Next

__all__ = [
    "LocaleMiddleware",
    "Middleware",
    "Next",
]
