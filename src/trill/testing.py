"""In-process test client.

Calls the app's ASGI interface directly, so tests need no server and no
network::

    async with TestClient(app) as client:
        response = await client.get("/hello/world")
        assert "hello world" in response.text
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

from trill._internal.asgi import Message
from trill.app import App
from trill.http.request import parse_cookies
from trill.http.response import Response


class TestClient:
    """Sends requests to *app* and keeps the cookies it sets.

    Entering the context freezes the app and runs its startup hooks;
    leaving runs the shutdown hooks.
    """

    __test__ = False

    def __init__(self, app: App) -> None:
        self.app = app
        self.cookies: dict[str, str] = {}

    async def __aenter__(self) -> TestClient:
        await self.app.startup()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.app.shutdown()

    async def get(self, path: str, **kwargs: Any) -> Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Response:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Response:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Response:
        return await self.request("DELETE", path, **kwargs)

    async def fragment(self, path: str, method: str = "GET", **kwargs: Any) -> Response:
        """A request as htmx would send it (``HX-Request: true``)."""
        headers = {"HX-Request": "true", **kwargs.pop("headers", {})}
        return await self.request(method, path, headers=headers, **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        query: Mapping[str, str] | None = None,
        body: bytes = b"",
        json: Any = None,
        form: Mapping[str, str] | None = None,
    ) -> Response:
        path, _, query_string = path.partition("?")
        if query:
            query_string = "&".join(filter(None, (query_string, urlencode(query))))

        sent_headers: dict[str, str] = {}
        if json is not None:
            body = json_module.dumps(json).encode()
            sent_headers["content-type"] = "application/json"
        elif form is not None:
            body = urlencode(form).encode()
            sent_headers["content-type"] = "application/x-www-form-urlencoded"
        if self.cookies:
            sent_headers["cookie"] = "; ".join(f"{k}={v}" for k, v in self.cookies.items())
        sent_headers.update((k.lower(), v) for k, v in (headers or {}).items())

        scope = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "scheme": "http",
            "path": path,
            "query_string": query_string.encode("latin-1"),
            "headers": [(k.encode("latin-1"), v.encode("latin-1")) for k, v in sent_headers.items()],
            "client": ("127.0.0.1", 0),
            "server": ("testserver", 80),
        }
        inbox = [{"type": "http.request", "body": body, "more_body": False}]
        outbox: list[Message] = []

        async def receive() -> Message:
            return inbox.pop(0) if inbox else {"type": "http.disconnect"}

        async def send(message: Message) -> None:
            outbox.append(message)

        await self.app(scope, receive, send)
        return self._collect(outbox)

    def _collect(self, messages: list[Message]) -> Response:
        start = next(m for m in messages if m["type"] == "http.response.start")
        content_type = "text/html; charset=utf-8"
        headers: list[tuple[str, str]] = []
        for raw_name, raw_value in start["headers"]:
            name, value = raw_name.decode("latin-1"), raw_value.decode("latin-1")
            if name == "content-type":
                content_type = value
            elif name != "content-length":
                headers.append((name, value))
            if name == "set-cookie":
                self._store_cookie(value)
        body = b"".join(m.get("body", b"") for m in messages if m["type"] == "http.response.body")
        return Response(
            body=body,
            status=start["status"],
            headers=tuple(headers),
            content_type=content_type,
        )

    def _store_cookie(self, header: str) -> None:
        expired = "max-age=0" in header.lower().replace(" ", "")
        for name, value in parse_cookies(header.split(";", 1)[0]).items():
            if expired:
                self.cookies.pop(name, None)
            else:
                self.cookies[name] = value
