"""The HTTP side of the ASGI app: dispatch and error responses.

Every request goes app middleware -> router -> route handler. Anything
raised on the way becomes a response here: ``HTTPError`` keeps its
status, other exceptions are logged and become a 500. A handler
registered for the exception class (or a base class) or for the status
code takes precedence over the built-in pages.
"""

import logging
import traceback
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from trill._internal.asgi import Receive, Scope, Send
from trill._internal.invoke import invoke, positional_arity
from trill.errors import HTTPError
from trill.http.request import Request
from trill.http.response import Response, as_response
from trill.middleware import Middleware, chain
from trill.routing import Router
from trill.tags import escape, html

logger = logging.getLogger("trill.server")

type ErrorHandler = Callable[..., Any]
type ErrorHandlers = Mapping[int | type, ErrorHandler]

# htmx swaps error fragments into this element
ERROR_TARGET = "#trill-error"


async def handle_http(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: Sequence[Middleware] = (),
    error_handlers: ErrorHandlers | None = None,
    debug: bool = False,
    max_body: int | None = None,
) -> None:
    """Serve one ``http`` scope."""
    request = Request.from_scope(scope, receive, max_body=max_body)

    async def dispatch(req: Request) -> Response:
        found = router.match(req.method, req.path)
        return as_response(await invoke(found.route.handler, req.with_path_params(found.path_params)))

    try:
        response = await chain(middleware, dispatch)(request)
    except Exception as exc:
        response = await error_response(exc, request, error_handlers or {}, debug=debug)
    await response.send(send, head_only=request.method == "HEAD")


def _handler_for(exc: Exception, status: int, handlers: ErrorHandlers) -> ErrorHandler | None:
    for cls in type(exc).__mro__:
        if cls in handlers:
            return handlers[cls]
    return handlers.get(status)


async def _call_handler(handler: ErrorHandler, request: Request, exc: Exception) -> Response:
    # Handlers take (), (request) or (request, exc)
    arity = positional_arity(handler)
    args = (request, exc) if arity is None else (request, exc)[:arity]
    return as_response(await invoke(handler, *args))


def error_fragment(status: int, message: str) -> str:
    """The snippet htmx requests get instead of an error page."""
    return html(['<div class="trill-error" data-status="', '">', "</div>"], status, message)


async def error_response(
    exc: Exception,
    request: Request,
    handlers: ErrorHandlers,
    *,
    debug: bool = False,
) -> Response:
    """Turn *exc* into the response the client should get."""
    if isinstance(exc, HTTPError):
        status = exc.status
        logger.debug("%d %s %s: %s", status, request.method, request.path, exc.detail)
    else:
        status = 500
        logger.exception("500 %s %s", request.method, request.path)

    handler = _handler_for(exc, status, handlers)
    if handler is not None:
        response = await _call_handler(handler, request, exc)
        # A handler that did not pick a status answers with the error's
        return response.with_status(status) if response.status == 200 else response

    if isinstance(exc, HTTPError) and status != 500:
        message = exc.detail or f"Error {status}"
        body = error_fragment(status, message) if request.is_fragment else escape(message)
        response = Response(body=body, status=status, headers=exc.headers)
    else:
        message = "Internal Server Error"
        if debug:
            body = html(["<pre>", "</pre>"], "".join(traceback.format_exception(exc)))
        elif request.is_fragment:
            body = error_fragment(status, message)
        else:
            body = message
        response = Response(body=body, status=500)

    if request.is_fragment:
        response = (
            response.with_header("HX-Retarget", ERROR_TARGET)
            .with_header("HX-Reswap", "innerHTML")
            .with_header("HX-Trigger", "trillError")
        )
    return response
