"""Request-scoped context via ContextVar.

``Context`` is the facade that pages and controls use to reach the
current request: parameters, request attributes, the session, the
forward/post flags, the resource path and the locale. The lifecycle
processor builds one per request and installs it in ``context_var``;
controls look it up with ``get_context()``.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    threads. No locks needed.
"""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from perch.config import AppConfig
from perch.http.forms import UploadFile
from perch.http.headers import Headers
from perch.http.params import RequestParameters
from perch.sessions import Session

if TYPE_CHECKING:
    from perch.http.request import Request
    from perch.templating.integration import TemplateRenderer


@dataclass(slots=True)
class Context:
    """Per-request facade over the request, session and rendering services.

    Usage::

        ctx = get_context()
        if ctx.is_post and ctx.get_request_parameter("delete"):
            ctx.set_session_attribute("flash", "Deleted")
    """

    method: str
    resource_path: str
    parameters: RequestParameters = field(default_factory=RequestParameters)
    headers: Headers = field(default_factory=Headers)
    session: Session = field(default_factory=Session)
    files: dict[str, UploadFile] = field(default_factory=dict)
    attributes: dict[str, Any] = field(default_factory=dict)
    is_forward: bool = False
    locale: str = "en"
    config: AppConfig = field(default_factory=AppConfig)
    request: Request | None = None
    renderer: TemplateRenderer | None = None

    # -- Request flags --

    @property
    def is_post(self) -> bool:
        return self.method == "POST"

    @property
    def is_get(self) -> bool:
        return self.method == "GET"

    @property
    def is_ajax(self) -> bool:
        if self.request is not None:
            return self.request.is_ajax
        return (
            (self.headers.get("x-requested-with") or "").lower() == "xmlhttprequest"
            or self.headers.get("hx-request") == "true"
        )

    # -- Request parameters --

    def get_request_parameter(self, name: str) -> str | None:
        return self.parameters.get(name)

    def get_request_parameter_values(self, name: str) -> list[str]:
        return self.parameters.get_list(name)

    def has_request_parameter(self, name: str) -> bool:
        return name in self.parameters

    def set_request_parameter(self, name: str, value: str | list[str] | None) -> None:
        """Set a parameter; a list sets every value, ``None`` removes it."""
        if value is None:
            self.remove_request_parameter(name)
        elif isinstance(value, str):
            self.parameters[name] = value
        else:
            self.parameters.set_list(name, value)

    def remove_request_parameter(self, name: str) -> None:
        self.parameters.pop(name, None)

    # -- Request attributes --

    def get_request_attribute(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def set_request_attribute(self, name: str, value: Any) -> None:
        if value is None:
            self.attributes.pop(name, None)
        else:
            self.attributes[name] = value

    # -- Session attributes --

    def get_session_attribute(self, name: str, default: Any = None) -> Any:
        return self.session.get(name, default)

    def set_session_attribute(self, name: str, value: Any) -> None:
        """Store a JSON-serializable value in the session; ``None`` removes it."""
        if value is None:
            self.remove_session_attribute(name)
        else:
            self.session[name] = value

    def remove_session_attribute(self, name: str) -> None:
        self.session.pop(name, None)

    def has_session_attribute(self, name: str) -> bool:
        return name in self.session

    # -- Forwarding --

    def for_forward(self, path: str) -> Context:
        """A context for an internal forward to *path*.

        Parameters, attributes and the session are shared with this
        context; only the resource path and the forward flag change.
        """
        return replace(self, resource_path=path, is_forward=True)


context_var: ContextVar[Context] = ContextVar("perch_context")
"""The current context. Set by the lifecycle processor before a page runs."""


def get_context() -> Context:
    """Return the current context.

    Raises ``LookupError`` if called outside a request context.
    """
    return context_var.get()


def negotiate_locale(accept_language: str | None, default: str) -> str:
    """Pick the first language tag from an ``Accept-Language`` header."""
    if not accept_language:
        return default
    first = accept_language.split(",")[0].split(";")[0].strip()
    if not first or first == "*":
        return default
    return first.replace("-", "_")
