"""Immutable HTTP request.

Frozen metadata with async body access. Pages and controls do not use the
request directly: the lifecycle processor reads the body once, merges it
into ``RequestParameters`` and hands controls a ``Context``.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field
from typing import Any

from perch._internal.asgi import Receive
from perch.http.forms import FormData, is_form_content_type, parse_form_data
from perch.http.headers import Headers


def parse_cookies(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` header value into a name-value dict.

    Returns an empty dict for empty or missing headers.
    """
    if not header:
        return {}
    cookies: dict[str, str] = {}
    for pair in header.split(";"):
        pair = pair.strip()
        if "=" in pair:
            key, _, value = pair.partition("=")
            cookies[key.strip()] = value.strip()
    return cookies


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Cookies are parsed once at creation time (in ``from_asgi``) and stored
    as a frozen field.
    """

    method: str
    path: str
    headers: Headers
    query_string: bytes
    root_path: str
    http_version: str
    client: tuple[str, int] | None
    cookies: Mapping[str, str]

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: mutable cache for body and parsed form data
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def is_ajax(self) -> bool:
        """True for XMLHttpRequest/fetch or htmx requests."""
        return (
            self.headers.get("x-requested-with", "").lower() == "xmlhttprequest"
            or self.headers.get("hx-request") == "true"
        )

    @property
    def url(self) -> str:
        """Request path plus query string."""
        if self.query_string:
            return f"{self.path}?{self.query_string.decode('latin-1')}"
        return self.path

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body (cached after the first call)."""
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def form(self) -> FormData:
        """Parse the body as form data, or return empty data for other bodies.

        Result is cached; the body is read and parsed once.
        """
        if "_form" in self._cache:
            return self._cache["_form"]
        if is_form_content_type(self.content_type):
            raw = await self.body()
            result = parse_form_data(raw, self.content_type or "")
        else:
            result = FormData()
        self._cache["_form"] = result
        return result

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: dict[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        headers = Headers(tuple(scope.get("headers", ())))
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=headers,
            query_string=scope.get("query_string", b""),
            root_path=scope.get("root_path", ""),
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            cookies=parse_cookies(headers.get("cookie", "")),
            _receive=receive,
        )
