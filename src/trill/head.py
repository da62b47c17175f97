"""Head content assembly — favicon, links, stylesheets, and scripts.

A ``HeadConfig`` describes the resources every page needs. ``HeadContent``
renders it into the ``<head>`` inner HTML that the document shell wraps
around each component's output.

Resource references are either a bare URL or an ordered attribute bag::

    HeadConfig(
        favicon="/favicon.png",
        stylesheets=("/app.css", {"href": "/print.css", "media": "print"}),
        scripts=({"src": "/app.js", "defer": "defer"},),
    )

Attribute values are written into the markup verbatim. They come from
application configuration, not from requests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from trill.errors import InvalidResourceSpec

logger = logging.getLogger("trill.head")


# -- Resource references --


@dataclass(frozen=True, slots=True)
class Url:
    """A resource given as a bare URL."""

    url: str


@dataclass(frozen=True, slots=True)
class Attributes:
    """A resource given as tag attributes, in the order they were supplied."""

    items: tuple[tuple[str, str], ...] = ()

    @classmethod
    def of(cls, mapping: Mapping[str, Any] | None = None, /, **attrs: Any) -> Attributes:
        """Build from a mapping and/or keyword arguments, keeping key order."""
        merged = {**(mapping or {}), **attrs}
        return cls(tuple((str(k), str(v)) for k, v in merged.items()))

    def __contains__(self, key: object) -> bool:
        return any(name == key for name, _ in self.items)

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return the value for *key*, or *default* if missing."""
        for name, value in self.items:
            if name == key:
                return value
        return default

    def render(self) -> str:
        """Render as ``k1="v1" k2="v2"``."""
        return " ".join(f'{name}="{value}"' for name, value in self.items)


type Resource = Url | Attributes

# What callers may put in a HeadConfig
type ResourceRef = str | Mapping[str, Any] | Resource


def as_resource(value: Any) -> Resource | None:
    """Coerce caller input into a ``Url`` or ``Attributes``.

    Returns ``None`` for values that are neither a string nor a mapping.
    """
    if isinstance(value, Url | Attributes):
        return value
    if isinstance(value, str):
        return Url(value)
    if isinstance(value, Mapping):
        return Attributes.of(value)
    return None


DEFAULT_BASE_LIBRARY: Attributes = Attributes.of(
    src="https://unpkg.com/htmx.org@1.9.5/dist/htmx.min.js",
    integrity="sha384-xcuj3WpfgjlKF+FXhSQFQ0ZNr39ln+hwjN3npfM9VBnUskLolQAcN80McRIVOPuO",
    crossorigin="anonymous",
)
"""htmx, included ahead of every other script unless overridden."""


# -- Configuration --


@dataclass(frozen=True, slots=True)
class HeadConfig:
    """Resources rendered into every page's ``<head>``.

    ``base_library`` replaces the default htmx reference; it still renders
    before the other scripts.
    """

    stylesheets: Sequence[ResourceRef] = ()
    scripts: Sequence[ResourceRef] = ()
    base_library: ResourceRef | None = None
    favicon: ResourceRef | None = None
    links: Sequence[ResourceRef] = ()


# -- Tag rendering --


def _entries(kind: str, value: Any) -> Sequence[Any]:
    """The entries of a list-valued field; a bare string is not a list."""
    if isinstance(value, str | Mapping) or not isinstance(value, Sequence):
        raise InvalidResourceSpec(kind, value)
    return value


def render_favicon(config: HeadConfig) -> list[str]:
    # An empty favicon string means none
    if config.favicon is None or config.favicon == "":
        return []
    resource = as_resource(config.favicon)
    if isinstance(resource, Url):
        return [f'<link rel="icon" type="image/png" href="{resource.url}">']
    if isinstance(resource, Attributes) and resource.get("href"):
        return [f'<link rel="icon" {resource.render()}>']
    raise InvalidResourceSpec("favicon", config.favicon)


def render_links(config: HeadConfig) -> list[str]:
    tags: list[str] = []
    for link in _entries("link", config.links):
        resource = as_resource(link)
        if not isinstance(resource, Attributes) or not resource.get("rel"):
            raise InvalidResourceSpec("link", link)
        tags.append(f"<link {resource.render()}>")
    return tags


def render_stylesheets(config: HeadConfig) -> list[str]:
    tags: list[str] = []
    for stylesheet in _entries("stylesheet", config.stylesheets):
        resource = as_resource(stylesheet)
        if isinstance(resource, Url):
            tags.append(f'<link rel="stylesheet" href="{resource.url}">')
        elif isinstance(resource, Attributes) and resource.get("href"):
            tags.append(f'<link rel="stylesheet" {resource.render()}>')
        else:
            raise InvalidResourceSpec("stylesheet", stylesheet)
    return tags


def render_scripts(config: HeadConfig) -> list[str]:
    base = config.base_library if config.base_library is not None else DEFAULT_BASE_LIBRARY
    tags: list[str] = []
    for script in (base, *_entries("script", config.scripts)):
        resource = as_resource(script)
        if isinstance(resource, Url):
            tags.append(f'<script src="{resource.url}"></script>')
        elif isinstance(resource, Attributes) and resource.get("src"):
            tags.append(f"<script {resource.render()}></script>")
        else:
            raise InvalidResourceSpec("script", script)
    return tags


# Fixed assembly order
_CATEGORIES: tuple[tuple[str, Callable[[HeadConfig], list[str]]], ...] = (
    ("favicon", render_favicon),
    ("links", render_links),
    ("stylesheets", render_stylesheets),
    ("scripts", render_scripts),
)


# -- Accumulated head content --


class HeadContent:
    """The ``<head>`` inner HTML shared by every page of an app.

    Built once during setup and read by the document shell on every
    request. ``extend()`` appends; it never resets, so extending twice
    with the same config repeats every tag.

    Not locked: extend during single-threaded setup, before serving.
    """

    __slots__ = ("_tags",)

    def __init__(self, config: HeadConfig | None = None) -> None:
        self._tags: list[str] = []
        if config is not None:
            self.extend(config)

    def extend(self, config: HeadConfig) -> None:
        """Render *config* category by category and append the tags.

        Raises ``InvalidResourceSpec`` at the first malformed entry.
        Categories rendered before the bad one stay appended.
        """
        for category, render in _CATEGORIES:
            tags = render(config)
            self._tags.extend(tags)
            logger.debug("head: +%d %s", len(tags), category)

    @property
    def tags(self) -> tuple[str, ...]:
        """Rendered tags in assembly order."""
        return tuple(self._tags)

    def render(self) -> str:
        """The head fragment, one tag per line."""
        return "\n".join(self._tags)

    def __str__(self) -> str:
        return self.render()

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)


# -- Result-typed assembly --


@dataclass(frozen=True, slots=True)
class Ok:
    """Successful assembly. Truthy."""

    fragment: str

    @property
    def ok(self) -> bool:
        return True

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Err:
    """Failed assembly. Falsy, so ``if not result:`` reads naturally."""

    error: InvalidResourceSpec

    @property
    def ok(self) -> bool:
        return False

    def __bool__(self) -> bool:
        return False


type HeadResult = Ok | Err


def build_head(config: HeadConfig) -> HeadResult:
    """Assemble a standalone head fragment without raising.

    Usage::

        result = build_head(config)
        if not result:
            log.error("bad %s: %r", result.error.kind, result.error.value)
    """
    try:
        head = HeadContent(config)
    except InvalidResourceSpec as exc:
        return Err(exc)
    return Ok(head.render())
