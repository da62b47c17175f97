"""Trill — htmx components on a small ASGI core.

A component is a function from request props to an HTML fragment.
Decorating it gives it a route; the fragment is served inside a shared
page shell whose ``<head>`` carries htmx plus your own scripts,
stylesheets, favicon, and links.

Basic usage::

    from trill import App, HeadConfig, get, html, init

    @get("/hello/{name}")
    def hello(props):
        return html(t"<div>hello {props['name']}</div>")

    app = App()
    app.mount(hello)
    init(app, head=HeadConfig(stylesheets=("/app.css",)))
    app.run()

Or let ``init(app, "components")`` import every module in a directory
and mount the components it finds.
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "Attributes",
    "BadRequest",
    "Component",
    "ConfigurationError",
    "HTTPError",
    "HeadConfig",
    "HeadContent",
    "Hx",
    "InvalidResourceSpec",
    "MethodNotAllowed",
    "NotFound",
    "PayloadTooLarge",
    "Request",
    "Response",
    "TrillError",
    "Url",
    "build_head",
    "css",
    "delete",
    "get",
    "html",
    "init",
    "patch",
    "post",
    "private",
    "put",
    "routeless",
    "use",
]

_COMPONENT_NAMES = frozenset(
    {"Component", "Hx", "delete", "get", "patch", "post", "private", "put", "routeless", "use"}
)
_HEAD_NAMES = frozenset({"Attributes", "HeadConfig", "HeadContent", "Url", "build_head"})
_ERROR_NAMES = frozenset(
    {
        "BadRequest",
        "ConfigurationError",
        "HTTPError",
        "InvalidResourceSpec",
        "MethodNotAllowed",
        "NotFound",
        "PayloadTooLarge",
        "TrillError",
    }
)


def __getattr__(name: str) -> object:
    """Import public names on first access, so ``import trill`` stays cheap."""
    if name in ("App", "init"):
        from trill import app as _app

        return getattr(_app, name)

    if name == "AppConfig":
        from trill.config import AppConfig

        return AppConfig

    if name in ("html", "css"):
        from trill import tags as _tags

        return getattr(_tags, name)

    if name in _COMPONENT_NAMES:
        from trill import components as _components

        return getattr(_components, name)

    if name in _HEAD_NAMES:
        from trill import head as _head

        return getattr(_head, name)

    if name == "Request":
        from trill.http.request import Request

        return Request

    if name == "Response":
        from trill.http.response import Response

        return Response

    if name in _ERROR_NAMES:
        from trill import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
