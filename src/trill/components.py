"""Components — functions from request props to an HTML fragment.

Decorating a definition turns it into a ``Component``: a route that
renders the fragment inside the app's document shell, plus an ``html()``
method for rendering it directly (e.g. nested in another component)::

    from trill import get, html

    @get("/hello/{name}")
    def hello(props):
        return html(t"<div>hello {props['name']}</div>")

    hello.html({"name": "world"})   # '<div>hello world</div>'

Definitions take ``(props)`` or ``(props, hx)`` and may be async. Props
merge the parsed body, path parameters, and query parameters (later
sources win), plus ``session`` and, for ``use`` components, ``method``.

``hx`` exposes ``redirect(url)``, ``set(name, value)`` for response
headers, and ``get(name)`` for request headers.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from functools import partial
from typing import Any

from trill._internal.invoke import invoke, positional_arity
from trill.document import render_document
from trill.head import HeadContent
from trill.http.request import Request
from trill.http.response import Response, redirect
from trill.middleware import Middleware, chain
from trill.routing import ALL_METHODS, Route
from trill.sessions import current_session, save_session

logger = logging.getLogger("trill.components")

type Props = dict[str, Any]

# A user-written component body: (props) or (props, hx) -> fragment
type Definition = Callable[..., Any]


class Hx:
    """Per-request helpers passed to a definition as its second argument.

    Outside a request (``Component.html()``) redirects and headers are
    recorded but go nowhere, and ``get()`` returns ``None``.
    """

    __slots__ = ("_request", "headers", "redirect_to")

    def __init__(self, request: Request | None = None) -> None:
        self._request = request
        self.headers: list[tuple[str, str]] = []
        self.redirect_to: str | None = None

    def redirect(self, url: str) -> None:
        """Answer with a redirect to *url* instead of the rendered page.

        The session is saved first and ``HX-Refresh: true`` is set so htmx
        reloads the whole page.
        """
        self.redirect_to = url

    def set(self, name: str, value: str) -> None:
        """Add a response header."""
        self.headers.append((name, value))

    def get(self, name: str) -> str | None:
        """Read a request header (case-insensitive)."""
        if self._request is None:
            return None
        return self._request.header(name)


@dataclass(frozen=True, slots=True)
class Component:
    """A definition plus, for routed components, its route.

    ``route.handler`` expects the app's head content as ``head=``;
    ``App.mount()`` binds it.
    """

    definition: Definition
    route: Route | None = None

    @property
    def name(self) -> str:
        return getattr(self.definition, "__name__", type(self.definition).__name__)

    def html(self, props: Mapping[str, Any] | None = None) -> Any:
        """Render the fragment without a request.

        Returns whatever the definition returns, so async definitions
        give a coroutine.
        """
        return _call_definition(self.definition, dict(props or {}), Hx())


def _call_definition(definition: Definition, props: Props, hx: Hx) -> Any:
    arity = positional_arity(definition)
    if arity is None or arity >= 2:
        return definition(props, hx)
    if arity == 1:
        return definition(props)
    return definition()


async def request_props(request: Request) -> Props:
    """Merge body, path parameters and query parameters into props.

    Later sources win. Path parameters arrive converted (``{id:int}``
    gives an ``int``).
    """
    return {**await request.data(), **request.path_params, **request.query}


async def respond(
    definition: Definition,
    request: Request,
    *,
    head: HeadContent | str = "",
    include_method: bool = False,
) -> Response:
    """Run *definition* for *request* and build the page response."""
    props = await request_props(request)
    session = current_session()
    props["session"] = session
    if include_method:
        props["method"] = request.method

    hx = Hx(request)
    fragment = await invoke(_call_definition, definition, props, hx)

    if hx.redirect_to is not None:
        await save_session(session)
        logger.debug("%s %s -> redirect %s", request.method, request.path, hx.redirect_to)
        response = redirect(hx.redirect_to).with_hx_refresh()
    else:
        response = Response(body=render_document(fragment, head))

    for name, value in hx.headers:
        response = response.with_header(name, value)
    return response


def _define(
    methods: frozenset[str],
    path: str,
    middleware: tuple[Middleware, ...],
    *,
    mount: bool = False,
) -> Callable[[Definition], Component]:
    # A mount matches below its path too and passes the method as a prop
    def decorator(definition: Definition) -> Component:
        async def handler(request: Request, head: HeadContent | str = "") -> Response:
            async def endpoint(req: Request) -> Response:
                return await respond(
                    definition,
                    req,
                    head=head,
                    include_method=mount,
                )

            return await chain(middleware, endpoint)(request)

        route = Route(
            path=path,
            handler=handler,
            methods=methods,
            name=getattr(definition, "__name__", None),
            prefix=mount,
        )
        return Component(definition=definition, route=route)

    return decorator


def get(path: str, *middleware: Middleware) -> Callable[[Definition], Component]:
    """Define a component answering GET (and HEAD) on *path*."""
    return _define(frozenset({"GET", "HEAD"}), path, middleware)


def post(path: str, *middleware: Middleware) -> Callable[[Definition], Component]:
    """Define a component answering POST on *path*."""
    return _define(frozenset({"POST"}), path, middleware)


def put(path: str, *middleware: Middleware) -> Callable[[Definition], Component]:
    """Define a component answering PUT on *path*."""
    return _define(frozenset({"PUT"}), path, middleware)


def patch(path: str, *middleware: Middleware) -> Callable[[Definition], Component]:
    """Define a component answering PATCH on *path*."""
    return _define(frozenset({"PATCH"}), path, middleware)


def delete(path: str, *middleware: Middleware) -> Callable[[Definition], Component]:
    """Define a component answering DELETE on *path*."""
    return _define(frozenset({"DELETE"}), path, middleware)


def use(path: str, *middleware: Middleware) -> Callable[[Definition], Component]:
    """Define a component answering every method on *path* and below it.

    ``use("/admin")`` also answers ``/admin/users``. The request method is
    passed as ``props["method"]``.
    """
    return _define(ALL_METHODS, path, middleware, mount=True)


def private(definition: Definition) -> Component:
    """Wrap *definition* as a component with no route.

    For fragments that are only ever nested in other components.
    """
    return Component(definition=definition)


routeless = private


def bind_route(component: Component, head: HeadContent | str) -> Route:
    """The component's route with *head* bound into its handler."""
    if component.route is None:
        msg = f"Component {component.name!r} has no route."
        raise ValueError(msg)
    return replace(component.route, handler=partial(component.route.handler, head=head))
