"""The trill application.

An ``App`` is configured during setup (components, plain routes,
middleware, error handlers, hooks) and frozen when it starts serving.
``init()`` does the usual setup in one call: head content, then every
component found in a directory.
"""

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from trill._internal.asgi import Receive, Scope, Send
from trill._internal.invoke import invoke
from trill.components import Component, bind_route
from trill.config import AppConfig
from trill.head import HeadConfig, HeadContent
from trill.middleware import Middleware
from trill.routing import Route, Router
from trill.server import ErrorHandler, handle_http

logger = logging.getLogger("trill.app")


class App:
    """An ASGI 3 application serving components.

    ``head`` is this app's ``HeadContent``; pages of components mounted
    here render with it.

    Setup is single-threaded. The switch to serving happens once, under
    a lock, on the first request or lifespan event.
    """

    __slots__ = (
        "_error_handlers",
        "_lock",
        "_middleware",
        "_router",
        "_routes",
        "_shutdown",
        "_startup",
        "components",
        "config",
        "head",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config = config or AppConfig()
        self.head = HeadContent()
        self.components: tuple[Component, ...] = ()
        self._routes: list[Route] = []
        self._middleware: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup: list[Callable[..., Any]] = []
        self._shutdown: list[Callable[..., Any]] = []
        self._router: Router | None = None
        self._lock = threading.Lock()

    # -- Setup --

    def mount(self, component: Component) -> Component:
        """Serve *component* from this app. Routeless components are ignored.

        Returns the component, so it stacks above ``@get(...)``.
        """
        self._check_setup()
        if component.route is None:
            logger.debug("not mounting routeless component %s", component.name)
        else:
            self.components += (component,)
        return component

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register ``handler(request)``; its result is sent without the page shell."""

        def register(handler: Callable[..., Any]) -> Callable[..., Any]:
            self._check_setup()
            verbs = frozenset(m.upper() for m in methods or ["GET"])
            self._routes.append(Route(path, handler, verbs, name or handler.__name__))
            return handler

        return register

    def error(self, key: int | type[Exception]) -> Callable[[ErrorHandler], ErrorHandler]:
        """Handle a status code or an exception class (and its subclasses)."""

        def register(handler: ErrorHandler) -> ErrorHandler:
            self._check_setup()
            self._error_handlers[key] = handler
            return handler

        return register

    def add_middleware(self, middleware: Middleware) -> None:
        self._check_setup()
        self._middleware.append(middleware)

    def on_startup(self, hook: Callable[..., Any]) -> Callable[..., Any]:
        self._check_setup()
        self._startup.append(hook)
        return hook

    def on_shutdown(self, hook: Callable[..., Any]) -> Callable[..., Any]:
        self._check_setup()
        self._shutdown.append(hook)
        return hook

    # -- Serving --

    async def startup(self) -> None:
        """Freeze the app and run the startup hooks in order."""
        self._freeze()
        for hook in self._startup:
            await invoke(hook)

    async def shutdown(self) -> None:
        for hook in self._shutdown:
            await invoke(hook)

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve with pounce (``pip install trill[server]``)."""
        from pounce.config import ServerConfig
        from pounce.server import Server

        self._freeze()
        server_config = ServerConfig(
            host=host or self.config.host,
            port=port or self.config.port,
            workers=1,
            reload=self.config.debug,
            reload_dirs=self.config.reload_dirs,
        )
        Server(server_config, self).run()

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
        elif scope["type"] == "http":
            await handle_http(
                scope,
                receive,
                send,
                router=self._freeze(),
                middleware=self._middleware,
                error_handlers=self._error_handlers,
                debug=self.config.debug,
                max_body=self.config.max_content_length,
            )

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            event = (await receive())["type"]
            if event == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif event == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _freeze(self) -> Router:
        """Build the router once; setup methods refuse to run afterwards."""
        if self._router is None:
            with self._lock:
                if self._router is None:
                    routes = [bind_route(c, self.head) for c in self.components]
                    self._router = Router([*routes, *self._routes])
                    logger.debug(
                        "serving %d component(s) and %d route(s)",
                        len(routes),
                        len(self._routes),
                    )
        return self._router

    def _check_setup(self) -> None:
        if self._router is not None:
            msg = "The app is already serving; finish setup before the first request."
            raise RuntimeError(msg)


def init(
    app: App,
    components_dir: str | Path | None = None,
    head: HeadConfig | None = None,
) -> list[Component]:
    """Set up *app*: extend its head content, then mount discovered components.

    Arguments default to ``app.config.components_dir`` and
    ``app.config.head``. A malformed head entry raises
    ``InvalidResourceSpec`` before any component is mounted.

    Head content accumulates, so calling this twice repeats every tag.
    """
    from trill.discovery import discover_components

    app.head.extend(head if head is not None else app.config.head)

    directory = components_dir if components_dir is not None else app.config.components_dir
    if directory is None:
        return []
    components = discover_components(directory)
    for component in components:
        app.mount(component)
    logger.info("mounted %d component(s) from %s", len(components), directory)
    return components
