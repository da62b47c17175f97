"""Middleware: ``async (request, next) -> Response`` callables.

No base class is needed; anything with that call shape works, at app
level (``app.add_middleware``) or per component (``@get(path, mw)``)::

    async def timing(request: Request, next: Next) -> Response:
        start = time.monotonic()
        response = await next(request)
        return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")
"""

from collections.abc import Awaitable, Callable, Sequence
from functools import reduce
from typing import Protocol

from trill.http.request import Request
from trill.http.response import Response

type Next = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    async def __call__(self, request: Request, next: Next) -> Response: ...


def _wrap(inner: Next, middleware: Middleware) -> Next:
    async def call(request: Request) -> Response:
        return await middleware(request, inner)

    return call


def chain(middleware: Sequence[Middleware], endpoint: Next) -> Next:
    """*endpoint* wrapped so the first middleware runs first."""
    return reduce(_wrap, reversed(middleware), endpoint)
