"""Exceptions raised by trill.

Setup mistakes raise ``ConfigurationError`` (or its head-specific
``InvalidResourceSpec``) before anything is served. While serving,
``HTTPError`` and its subclasses carry the status the client gets.
"""

from dataclasses import dataclass
from typing import Any


class TrillError(Exception):
    """Root of trill's exceptions."""


class ConfigurationError(TrillError):
    """Bad setup: a route path, a session secret, a head entry.

    Only raised while the app is being configured.
    """


class InvalidResourceSpec(ConfigurationError):  # noqa: N818
    """A head entry that is neither a URL nor a usable attribute mapping.

    ``kind`` names the head category (``favicon``, ``link``,
    ``stylesheet`` or ``script``) and ``value`` is what was given.
    """

    def __init__(self, kind: str, value: Any) -> None:
        self.kind = kind
        self.value = value
        super().__init__(f"Invalid {kind} specification: {value!r}")


@dataclass(frozen=True, slots=True)
class HTTPError(TrillError):
    """Answer the request with *status*.

    ``detail`` becomes the response text unless an ``@app.error`` handler
    takes over; ``headers`` are sent either way.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        return f"{self.status}: {self.detail}" if self.detail else str(self.status)


class BadRequest(HTTPError):  # noqa: N818
    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class NotFound(HTTPError):  # noqa: N818
    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """The path exists, the method does not. ``Allow`` lists what would work."""

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        methods = ", ".join(sorted(allowed))
        super().__init__(
            status=405,
            detail=detail or f"Use one of: {methods}",
            headers=(("Allow", methods),),
        )


class PayloadTooLarge(HTTPError):  # noqa: N818
    def __init__(self, detail: str = "Request body too large") -> None:
        super().__init__(status=413, detail=detail)
