"""Path routing.

Every route compiles its path to its own regular expression, so two
components can use the same path shape with different parameter names
or converters::

    @get("/items/{id:int}")
    def show(props): ...

    @post("/items/{name}")
    def rename(props): ...

Routes are tried in the order they were added; the first whose path
matches and whose methods include the request method wins.
"""

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from trill.errors import ConfigurationError, MethodNotAllowed, NotFound

# name -> (pattern for one captured value, type it converts to)
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}

ALL_METHODS: frozenset[str] = frozenset(
    {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"}
)


@dataclass(frozen=True, slots=True)
class Param:
    """A ``{name:type}`` placeholder in a route path."""

    name: str
    type: str = "str"

    def convert(self, raw: str) -> Any:
        return CONVERTERS[self.type][1](raw)


def parse_path(path: str) -> list[str | Param]:
    """Split *path* into literal segments and ``Param`` placeholders.

    ``{name}``, ``{name:type}`` and the shorthand ``:name`` declare
    parameters::

        parse_path("/users/{id:int}/posts")  # ["users", Param("id", "int"), "posts"]
    """
    segments: list[str | Param] = []
    seen: set[str] = set()
    for part in filter(None, path.split("/")):
        if part[0] == "<" and part[-1] == ">":
            msg = f"Route {path!r} uses <param> syntax; write {{param}} or :param instead."
            raise ConfigurationError(msg)

        if part[0] == "{" and part[-1] == "}":
            name, _, kind = part[1:-1].partition(":")
            param = Param(name, kind or "str")
        elif part[0] == ":" and len(part) > 1:
            param = Param(part[1:])
        else:
            segments.append(part)
            continue

        if not param.name.isidentifier():
            msg = f"Route {path!r} has an invalid parameter name {param.name!r}."
            raise ConfigurationError(msg)
        if param.type not in CONVERTERS:
            msg = f"Route {path!r} uses unknown converter {param.type!r}."
            raise ConfigurationError(msg)
        if param.name in seen:
            msg = f"Route {path!r} repeats parameter {param.name!r}."
            raise ConfigurationError(msg)
        seen.add(param.name)
        segments.append(param)
    return segments


def normalize_path(path: str) -> str:
    """Collapse empty segments: ``//a/b/`` becomes ``/a/b``."""
    return "/" + "/".join(filter(None, path.split("/")))


def _compile(segments: list[str | Param], prefix: bool) -> re.Pattern[str]:
    pieces = [
        f"(?P<{seg.name}>{CONVERTERS[seg.type][0]})" if isinstance(seg, Param) else re.escape(seg)
        for seg in segments
    ]
    pattern = "/" + "/".join(pieces)
    if prefix:
        # A prefix also matches anything below it
        pattern += ".*" if not pieces else "(?:/.*)?"
    return re.compile(pattern + r"\Z")


@dataclass(frozen=True, slots=True)
class Route:
    """A path pattern, the methods it answers and its handler.

    ``prefix`` routes match their path and every path below it.
    """

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    name: str | None = None
    prefix: bool = False
    params: tuple[Param, ...] = field(init=False, compare=False)
    pattern: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        segments = parse_path(self.path)
        object.__setattr__(self, "params", tuple(s for s in segments if isinstance(s, Param)))
        object.__setattr__(self, "pattern", _compile(segments, self.prefix))

    def match(self, path: str) -> dict[str, Any] | None:
        """Converted parameters if *path* (normalized) matches, else ``None``."""
        found = self.pattern.match(path)
        if found is None:
            return None
        return {param.name: param.convert(found[param.name]) for param in self.params}


@dataclass(frozen=True, slots=True)
class RouteMatch:
    route: Route
    path_params: dict[str, Any]


class Router:
    """An ordered, immutable route table."""

    __slots__ = ("_routes",)

    def __init__(self, routes: Iterable[Route] = ()) -> None:
        self._routes = tuple(routes)

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._routes

    def match(self, method: str, path: str) -> RouteMatch:
        """The first route answering *method* on *path*.

        Raises ``MethodNotAllowed`` when routes match the path but none
        takes the method, and ``NotFound`` when no route matches at all.
        """
        normalized = normalize_path(path)
        allowed: set[str] = set()
        for route in self._routes:
            params = route.match(normalized)
            if params is None:
                continue
            if method in route.methods:
                return RouteMatch(route, params)
            allowed |= route.methods
        if allowed:
            raise MethodNotAllowed(frozenset(allowed))
        raise NotFound(f"No route matches {method} {path!r}")
