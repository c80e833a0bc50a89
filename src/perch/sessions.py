"""Signed cookie sessions.

Session data is serialized as JSON and signed using ``itsdangerous``.
Session values must therefore be JSON-serializable: submit-check tokens,
saved form state and stateful page snapshots all are.
"""

from __future__ import annotations

import logging
from typing import Any

from itsdangerous import BadSignature, URLSafeTimedSerializer

from perch.config import AppConfig
from perch.errors import ConfigurationError
from perch.http.request import Request
from perch.http.response import Response, SetCookie

logger = logging.getLogger("perch.server")


class Session(dict[str, Any]):
    """The per-request session dict, tracking whether it was modified."""

    __slots__ = ("modified",)

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.modified = False

    def __setitem__(self, key: str, value: Any) -> None:
        super().__setitem__(key, value)
        self.modified = True

    def __delitem__(self, key: str) -> None:
        super().__delitem__(key)
        self.modified = True

    def pop(self, key: str, *default: Any) -> Any:
        if key in self:
            self.modified = True
        return super().pop(key, *default)

    def clear(self) -> None:
        if self:
            self.modified = True
        super().clear()

    def update(self, *args: Any, **kwargs: Any) -> None:
        super().update(*args, **kwargs)
        self.modified = True

    def setdefault(self, key: str, default: Any = None) -> Any:
        if key not in self:
            self.modified = True
        return super().setdefault(key, default)


class SessionStore:
    """Loads the session from the request cookie and writes it back.

    Usage::

        store = SessionStore(AppConfig(secret_key="my-secret-key"))
        session = store.load(request)
        ...
        response = store.save(response, session)
    """

    __slots__ = ("_config", "_serializer")

    def __init__(self, config: AppConfig) -> None:
        if not config.secret_key:
            msg = "AppConfig.secret_key must not be empty to persist sessions."
            raise ConfigurationError(msg)
        self._config = config
        self._serializer = URLSafeTimedSerializer(config.secret_key, salt="perch.session")

    def load(self, request: Request) -> Session:
        """Deserialize and verify the session cookie; bad cookies start empty."""
        cookie_value = request.cookies.get(self._config.session_cookie)
        if not cookie_value:
            return Session()
        try:
            data = self._serializer.loads(cookie_value, max_age=self._config.session_max_age)
        except BadSignature:
            logger.debug("Discarding session cookie with a bad or expired signature")
            return Session()
        if not isinstance(data, dict):
            return Session()
        return Session(data)

    def save(self, response: Response, session: Session) -> Response:
        """Serialize the session onto the response when it changed."""
        if not session.modified:
            return response
        cfg = self._config
        if not session:
            return response.without_cookie(cfg.session_cookie, path=cfg.session_path)
        cookie = SetCookie(
            name=cfg.session_cookie,
            value=self._serializer.dumps(dict(session)),
            max_age=cfg.session_max_age,
            path=cfg.session_path,
            secure=cfg.session_secure,
            httponly=cfg.session_httponly,
            samesite=cfg.session_samesite,
        )
        return response.with_cookie(cookie)
