"""The incoming request, as components and middleware see it."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from http.cookies import CookieError, SimpleCookie
from typing import Any
from urllib.parse import parse_qsl

from trill._internal.asgi import Receive
from trill.errors import BadRequest, PayloadTooLarge

# Parsed query or form data: repeated keys collect into a list
type Fields = dict[str, str | list[str]]


def parse_fields(text: str) -> Fields:
    """Parse ``a=1&b=2&b=3`` into ``{"a": "1", "b": ["2", "3"]}``."""
    fields: Fields = {}
    for key, value in parse_qsl(text, keep_blank_values=True):
        current = fields.get(key)
        if current is None:
            fields[key] = value
        elif isinstance(current, list):
            current.append(value)
        else:
            fields[key] = [current, value]
    return fields


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header; a malformed one gives ``{}``."""
    jar = SimpleCookie()
    try:
        jar.load(header)
    except CookieError:
        return {}
    return {name: morsel.value for name, morsel in jar.items()}


def _header_dict(raw: list[tuple[bytes, bytes]]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw_name, raw_value in raw:
        name = raw_name.decode("latin-1").lower()
        value = raw_value.decode("latin-1")
        if name in headers:
            # Repeated headers combine; cookies use their own separator
            joiner = "; " if name == "cookie" else ", "
            headers[name] = f"{headers[name]}{joiner}{value}"
        else:
            headers[name] = value
    return headers


@dataclass(frozen=True, slots=True)
class Request:
    """An HTTP request.

    ``headers`` keys are lower-case. The body is read lazily, once, and
    kept for later calls.
    """

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    query: Fields = field(default_factory=dict)
    path_params: dict[str, Any] = field(default_factory=dict)
    cookies: Mapping[str, str] = field(default_factory=dict)
    query_string: str = ""
    receive: Receive = field(default=None, repr=False, compare=False)
    max_body: int | None = field(default=None, repr=False)
    _body: list[bytes] = field(default_factory=list, repr=False, compare=False)

    @classmethod
    def from_scope(
        cls,
        scope: Mapping[str, Any],
        receive: Receive,
        *,
        max_body: int | None = None,
    ) -> Request:
        headers = _header_dict(list(scope.get("headers", ())))
        query_string = scope.get("query_string", b"").decode("latin-1")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=headers,
            query=parse_fields(query_string),
            cookies=parse_cookies(headers.get("cookie", "")),
            query_string=query_string,
            receive=receive,
            max_body=max_body,
        )

    def header(self, name: str, default: str | None = None) -> str | None:
        """A request header by name, in any case."""
        return self.headers.get(name.lower(), default)

    @property
    def is_fragment(self) -> bool:
        """Sent by htmx (``HX-Request: true``)."""
        return self.headers.get("hx-request") == "true"

    @property
    def url(self) -> str:
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path

    @property
    def media_type(self) -> str:
        """Content-Type without parameters, lower-cased."""
        return self.headers.get("content-type", "").split(";", 1)[0].strip().lower()

    def with_path_params(self, path_params: dict[str, Any]) -> Request:
        return replace(self, path_params=path_params)

    async def body(self) -> bytes:
        """The whole body. Over ``max_body`` bytes it is a 413."""
        if self._body:
            return self._body[0]
        chunks: list[bytes] = []
        size = 0
        more = self.receive is not None
        while more:
            message = await self.receive()
            chunk = message.get("body", b"")
            size += len(chunk)
            if self.max_body is not None and size > self.max_body:
                raise PayloadTooLarge()
            chunks.append(chunk)
            more = message.get("more_body", False)
        self._body.append(b"".join(chunks))
        return self._body[0]

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")

    async def json(self) -> Any:
        return json.loads(await self.body())

    async def data(self) -> dict[str, Any]:
        """The body as props: JSON objects and URL-encoded forms.

        Anything else, multipart included, gives ``{}``. Malformed JSON
        is a 400.
        """
        kind = self.media_type
        if kind == "application/x-www-form-urlencoded":
            return dict(parse_fields(await self.text()))
        if kind != "application/json" and not kind.endswith("+json"):
            return {}
        raw = await self.body()
        if not raw.strip():
            return {}
        try:
            parsed = json.loads(raw)
        except ValueError as exc:
            raise BadRequest("Malformed JSON body") from exc
        return dict(parsed) if isinstance(parsed, dict) else {}
