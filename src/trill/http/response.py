"""Outgoing responses.

``Response`` is frozen; the ``with_*`` methods return modified copies so
middleware can decorate what a component produced.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from http.cookies import SimpleCookie

from trill._internal.asgi import Send

# Statuses that never carry a body
_NO_BODY = frozenset({204, 304})


def cookie_header(
    name: str,
    value: str,
    *,
    max_age: int | None = None,
    path: str = "/",
    secure: bool = False,
    httponly: bool = True,
    samesite: str | None = "lax",
) -> str:
    """Serialize one ``Set-Cookie`` header value."""
    jar = SimpleCookie()
    jar[name] = value
    morsel = jar[name]
    morsel["path"] = path
    if max_age is not None:
        morsel["max-age"] = max_age
    if samesite:
        morsel["samesite"] = samesite
    morsel["secure"] = secure
    morsel["httponly"] = httponly
    return morsel.OutputString()


@dataclass(frozen=True, slots=True)
class Response:
    body: str | bytes = ""
    status: int = 200
    headers: tuple[tuple[str, str], ...] = ()
    content_type: str = "text/html; charset=utf-8"

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        return replace(self, headers=(*self.headers, (name, value)))

    def with_cookie(self, name: str, value: str, **options: object) -> Response:
        """Add a ``Set-Cookie`` header; *options* as for ``cookie_header``."""
        return self.with_header("Set-Cookie", cookie_header(name, value, **options))  # type: ignore[arg-type]

    def with_hx_refresh(self) -> Response:
        """Ask htmx for a full page reload."""
        return self.with_header("HX-Refresh", "true")

    def header(self, name: str) -> str | None:
        """The first header called *name*, in any case."""
        wanted = name.lower()
        return next((v for k, v in self.headers if k.lower() == wanted), None)

    @property
    def body_bytes(self) -> bytes:
        return self.body.encode("utf-8") if isinstance(self.body, str) else self.body

    @property
    def text(self) -> str:
        return self.body if isinstance(self.body, str) else self.body.decode("utf-8")

    async def send(self, send: Send, *, head_only: bool = False) -> None:
        """Emit this response as ASGI ``http.response.*`` messages.

        Informational, 204 and 304 responses go out without a body, and so
        do answers to HEAD, though those keep the real Content-Length.
        """
        body = b"" if self.status < 200 or self.status in _NO_BODY else self.body_bytes
        headers = [(b"content-type", self.content_type.encode("latin-1"))]
        headers += [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in self.headers]
        headers.append((b"content-length", str(len(body)).encode("latin-1")))
        await send({"type": "http.response.start", "status": self.status, "headers": headers})
        await send({"type": "http.response.body", "body": b"" if head_only else body})


def redirect(url: str, status: int = 302) -> Response:
    return Response(status=status, headers=(("Location", url),))


def as_response(value: object) -> Response:
    """Wrap a handler's return value: ``None`` is an empty 200."""
    if isinstance(value, Response):
        return value
    if value is None:
        return Response()
    if isinstance(value, bytes | str):
        return Response(body=value)
    return Response(body=str(value))
