"""Signed cookie sessions.

The whole session is a JSON object signed with ``itsdangerous`` and kept
in one cookie. Components get it as ``props["session"]``; other code can
call ``get_session()`` while a request is in flight::

    app.add_middleware(SessionMiddleware(SessionConfig(secret_key="...")))

The cookie is rewritten when the session's contents change or when
``save()`` was called, which ``hx.redirect()`` always does.
"""

import copy
import logging
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

from itsdangerous import BadData, URLSafeTimedSerializer

from trill._internal.invoke import invoke
from trill.errors import ConfigurationError
from trill.http.request import Request
from trill.http.response import Response
from trill.middleware import Next

logger = logging.getLogger("trill.sessions")


class Session(dict[str, Any]):
    """Session data plus a ``saved`` flag set by ``save()``."""

    __slots__ = ("saved",)

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.saved = False

    def save(self) -> None:
        self.saved = True


async def save_session(session: Any) -> None:
    """Call ``session.save()`` (sync or async) if there is one.

    ``None`` and objects without ``save`` are left alone, so components
    work with or without sessions installed.
    """
    save = getattr(session, "save", None)
    if callable(save):
        await invoke(save)


_current: ContextVar[Session | None] = ContextVar("trill_session", default=None)


def current_session() -> Session | None:
    """The session of the request in flight, if sessions are installed."""
    return _current.get()


def get_session() -> Session:
    """Like ``current_session()``, but raises ``LookupError`` when absent."""
    session = _current.get()
    if session is None:
        msg = "No active session: add SessionMiddleware to the app."
        raise LookupError(msg)
    return session


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Sessions are signed, not encrypted: keep secrets out of them."""

    secret_key: str
    cookie_name: str = "trill_session"
    max_age: int = 24 * 60 * 60
    secure: bool = False
    samesite: str = "lax"


class SessionMiddleware:
    __slots__ = ("config", "serializer")

    def __init__(self, config: SessionConfig) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        self.config = config
        self.serializer = URLSafeTimedSerializer(config.secret_key, salt="trill.session")

    def load(self, request: Request) -> dict[str, Any]:
        """The verified session data from *request*, or ``{}``."""
        token = request.cookies.get(self.config.cookie_name)
        if not token:
            return {}
        try:
            data = self.serializer.loads(token, max_age=self.config.max_age)
        except BadData:
            logger.debug("discarding session cookie that failed verification")
            return {}
        return data if isinstance(data, dict) else {}

    def store(self, response: Response, session: Session) -> Response:
        return response.with_cookie(
            self.config.cookie_name,
            self.serializer.dumps(dict(session)),
            max_age=self.config.max_age,
            secure=self.config.secure,
            samesite=self.config.samesite,
        )

    async def __call__(self, request: Request, next: Next) -> Response:
        original = self.load(request)
        # A deep copy, so edits to nested values show up as changes
        session = Session(copy.deepcopy(original))
        token = _current.set(session)
        try:
            response = await next(request)
        finally:
            _current.reset(token)
        if session.saved or session != original:
            return self.store(response, session)
        return response
