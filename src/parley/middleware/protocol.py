"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. The shape is checked, not the lineage.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from parley.http.request import Request
from parley.http.response import Response

# The next handler in the middleware chain
Next: TypeAlias = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for request/response middleware.

    Accepts both functions and callable objects::

        async def vary(request: Request, next: Next) -> Response:
            response = await next(request)
            return response.with_header("Vary", "Accept-Language")
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...
