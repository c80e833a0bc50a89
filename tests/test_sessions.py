"""Tests for perch.sessions: modification tracking and signed cookie storage."""

import pytest

from perch.config import AppConfig
from perch.errors import ConfigurationError
from perch.http.request import Request
from perch.http.response import Response
from perch.sessions import Session, SessionStore

SECRET = "test-secret"


def _request(cookie: str | None = None) -> Request:
    headers = [(b"cookie", cookie.encode("latin-1"))] if cookie is not None else []
    scope = {"type": "http", "method": "GET", "path": "/", "headers": headers}

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    return Request.from_asgi(scope, receive)


def _cookie_value(response: Response) -> str:
    (cookie,) = response.cookies
    return cookie.value


class TestSession:
    def test_starts_unmodified(self) -> None:
        assert not Session({"a": 1}).modified

    def test_set_and_delete_mark_modified(self) -> None:
        session = Session()
        session["a"] = 1
        assert session.modified

        session = Session({"a": 1})
        del session["a"]
        assert session.modified

    def test_pop_missing_does_not_mark(self) -> None:
        session = Session()
        assert session.pop("nope", None) is None
        assert not session.modified

    def test_clear_and_setdefault(self) -> None:
        empty = Session()
        empty.clear()
        assert not empty.modified

        session = Session({"a": 1})
        session.setdefault("a", 2)
        assert not session.modified
        session.setdefault("b", 2)
        assert session.modified

    def test_update_marks_modified(self) -> None:
        session = Session()
        session.update(a=1)
        assert session.modified
        assert session["a"] == 1


class TestSessionStore:
    def test_requires_secret(self) -> None:
        with pytest.raises(ConfigurationError, match="secret_key"):
            SessionStore(AppConfig())

    def test_no_cookie_starts_empty(self) -> None:
        store = SessionStore(AppConfig(secret_key=SECRET))
        session = store.load(_request())
        assert session == {}
        assert not session.modified

    def test_round_trip(self) -> None:
        store = SessionStore(AppConfig(secret_key=SECRET))
        session = Session()
        session["perch.page:/counter.htm"] = {"count": 3}
        response = store.save(Response(), session)

        (cookie,) = response.cookies
        assert cookie.name == "perch_session"
        assert cookie.httponly

        loaded = store.load(_request(f"perch_session={cookie.value}"))
        assert loaded == {"perch.page:/counter.htm": {"count": 3}}
        assert not loaded.modified

    def test_unmodified_session_is_not_written(self) -> None:
        store = SessionStore(AppConfig(secret_key=SECRET))
        response = store.save(Response(), Session({"a": 1}))
        assert response.cookies == ()

    def test_bad_signature_starts_empty(self) -> None:
        store = SessionStore(AppConfig(secret_key=SECRET))
        other = SessionStore(AppConfig(secret_key="another-secret"))
        session = Session()
        session["a"] = 1
        forged = _cookie_value(other.save(Response(), session))

        assert store.load(_request(f"perch_session={forged}")) == {}
        assert store.load(_request("perch_session=garbage")) == {}

    def test_emptied_session_deletes_cookie(self) -> None:
        store = SessionStore(AppConfig(secret_key=SECRET))
        session = Session({"a": 1})
        del session["a"]
        response = store.save(Response(), session)

        (cookie,) = response.cookies
        assert cookie.value == ""
        assert cookie.max_age == 0
