"""Tests for session middleware — signed cookie sessions."""

import pytest

from trill.app import App
from trill.errors import ConfigurationError
from trill.sessions import (
    Session,
    SessionConfig,
    SessionMiddleware,
    current_session,
    get_session,
    save_session,
)
from trill.testing import TestClient


def _app() -> App:
    app = App()
    app.add_middleware(SessionMiddleware(SessionConfig(secret_key="test-secret")))
    return app


class TestSessionConfig:
    def test_default_config(self) -> None:
        config = SessionConfig(secret_key="secret")
        assert config.cookie_name == "trill_session"
        assert config.max_age == 86400
        assert config.samesite == "lax"

    def test_empty_secret_key_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="secret_key must not be empty"):
            SessionMiddleware(SessionConfig(secret_key=""))


class TestSession:
    def test_starts_unsaved(self) -> None:
        session = Session({"a": 1})
        assert session["a"] == 1
        assert session.saved is False

    def test_save_marks_saved(self) -> None:
        session = Session()
        session.save()
        assert session.saved is True


class TestSaveSession:
    @pytest.mark.asyncio
    async def test_saves_session(self) -> None:
        session = Session()
        await save_session(session)
        assert session.saved is True

    @pytest.mark.asyncio
    async def test_async_save_method(self) -> None:
        calls: list[str] = []

        class Store:
            async def save(self) -> None:
                calls.append("saved")

        await save_session(Store())
        assert calls == ["saved"]

    @pytest.mark.asyncio
    async def test_without_save_is_noop(self) -> None:
        await save_session(None)
        await save_session({"plain": "dict"})


class TestGetSession:
    def test_raises_outside_request(self) -> None:
        with pytest.raises(LookupError, match="No active session"):
            get_session()

    def test_current_session_none_outside_request(self) -> None:
        assert current_session() is None


class TestSessionMiddleware:
    @pytest.mark.asyncio
    async def test_set_and_read(self) -> None:
        app = _app()

        @app.route("/set")
        def set_name(request):
            get_session()["name"] = "alice"
            return "set"

        @app.route("/get")
        def get_name(request):
            return f"name={get_session().get('name', 'none')}"

        async with TestClient(app) as client:
            await client.get("/set")
            response = await client.get("/get")

        assert response.text == "name=alice"

    @pytest.mark.asyncio
    async def test_unchanged_session_sets_no_cookie(self) -> None:
        app = _app()

        @app.route("/")
        def index(request):
            return "hi"

        async with TestClient(app) as client:
            response = await client.get("/")

        assert response.header("set-cookie") is None

    @pytest.mark.asyncio
    async def test_saved_session_sets_cookie(self) -> None:
        app = _app()

        @app.route("/")
        def index(request):
            get_session().save()
            return "hi"

        async with TestClient(app) as client:
            response = await client.get("/")

        cookie = response.header("set-cookie")
        assert cookie is not None
        assert cookie.startswith("trill_session=")
        assert "HttpOnly" in cookie

    @pytest.mark.asyncio
    async def test_tampered_cookie_gives_empty_session(self) -> None:
        app = _app()

        @app.route("/")
        def index(request):
            return f"keys={sorted(get_session())}"

        async with TestClient(app) as client:
            client.cookies["trill_session"] = "not-a-valid-signature"
            response = await client.get("/")

        assert response.text == "keys=[]"

    @pytest.mark.asyncio
    async def test_other_secret_rejected(self) -> None:
        writer = App()
        writer.add_middleware(SessionMiddleware(SessionConfig(secret_key="one")))
        reader = App()
        reader.add_middleware(SessionMiddleware(SessionConfig(secret_key="two")))

        @writer.route("/")
        def write(request):
            get_session()["user"] = "alice"
            return "ok"

        @reader.route("/")
        def read(request):
            return f"user={get_session().get('user')}"

        async with TestClient(writer) as client:
            await client.get("/")
            cookies = dict(client.cookies)

        async with TestClient(reader) as client:
            client.cookies.update(cookies)
            response = await client.get("/")

        assert response.text == "user=None"

    @pytest.mark.asyncio
    async def test_nested_mutation_persists(self) -> None:
        app = _app()

        @app.route("/add")
        def add(request):
            get_session().setdefault("todos", []).append(request.query["item"])
            return "ok"

        @app.route("/list")
        def list_todos(request):
            return ",".join(get_session().get("todos", []))

        async with TestClient(app) as client:
            await client.get("/add?item=a")
            await client.get("/add?item=b")
            response = await client.get("/list")

        assert response.text == "a,b"
