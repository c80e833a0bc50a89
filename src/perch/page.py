"""Page: the per-request controller owning a tree of controls.

A page class is registered against a URL path. For every request the
framework creates a fresh instance, runs its lifecycle hooks, and then
either redirects, forwards to another page, or renders ``path`` (the
page's template) with ``model``.

Usage::

    @app.page("/login", template="login.html")
    class LoginPage(Page):
        def __init__(self) -> None:
            super().__init__()
            self.form = Form("form")
            self.form.add(TextField("user", required=True))
            self.form.add(Submit("ok", "Log in"))
            self.form.set_listener(self.on_ok)
            self.add_control(self.form)

        def on_ok(self) -> bool:
            if self.form.is_valid:
                self.set_redirect("/home")
            return True
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar
from urllib.parse import urlencode

from perch.context import get_context
from perch.http.headers import ResponseHeaders
from perch.messages import catalog
from perch.templating.integration import RESERVED_MODEL_KEYS

if TYPE_CHECKING:
    from perch.context import Context
    from perch.controls.base import Control
    from perch.templating.format import Format

logger = logging.getLogger("perch.app")


class Page:
    """Base class for application pages.

    Class attributes:
        path: Template rendered for the page. Usually set at registration.
        template: Optional layout template. When set it is rendered instead
            of ``path``, with ``path`` available in the model so the layout
            can include the page content.
        stateful: Persist the state of named controls in the session
            between requests.

    Lifecycle (driven by ``PageProcessor``): ``on_init``,
    ``on_security_check``, control processing and action listeners,
    ``on_get``/``on_post``, ``on_render``, and always ``on_destroy``.
    """

    path: str | None = None
    template: str | None = None
    stateful: ClassVar[bool] = False

    def __init__(self) -> None:
        self.model: dict[str, Any] = {}
        self.controls: list[Control] = []
        self.forward: str | None = None
        self.redirect: str | None = None
        self.status = 200
        self.headers = ResponseHeaders({})
        self.format: Format | None = None
        self.messages: dict[str, str] = {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self.path!r})"

    # -- Environment --

    @property
    def context(self) -> Context:
        return get_context()

    @property
    def content_type(self) -> str:
        return f"text/html; charset={self.context.config.charset}"

    def get_message(self, key: str, *args: Any) -> str | None:
        """Look *key* up in ``messages``, then the bundle named after the page class."""
        template = self.messages.get(key)
        if template is None:
            locale = self.context.locale
            for cls in type(self).__mro__:
                template = catalog.get_message(cls.__name__, locale, key)
                if template is not None:
                    break
        if template is None:
            return None
        return template.format(*args) if args else template

    # -- Model and controls --

    def add_model(self, name: str, value: Any) -> None:
        if name is None:
            msg = "Null name parameter"
            raise ValueError(msg)
        if name in RESERVED_MODEL_KEYS:
            logger.warning(
                "%s model entry %r is reserved and will be replaced when rendering",
                type(self).__name__,
                name,
            )
        self.model[name] = value

    def add_control(self, control: Control) -> Control:
        """Attach a top-level control; it is also added to the model by name.

        Raises:
            ValueError: if the control is ``None`` or has no name.
        """
        if control is None:
            msg = "Null control parameter"
            raise ValueError(msg)
        if not control.name:
            msg = f"{control!r} must have a name to be added to a page"
            raise ValueError(msg)
        existing = self.get_control(control.name)
        if existing is not None and existing is not control:
            self.remove_control(existing)
        if existing is not control:
            parent = control.parent
            if parent is not None and parent is not self and hasattr(parent, "remove"):
                parent.remove(control)
            self.controls.append(control)
        control.parent = self
        self.add_model(control.name, control)
        return control

    def remove_control(self, control: Control) -> bool:
        for i, candidate in enumerate(self.controls):
            if candidate is control:
                del self.controls[i]
                control.parent = None
                if control.name and self.model.get(control.name) is control:
                    del self.model[control.name]
                return True
        return False

    def get_control(self, name: str) -> Control | None:
        for control in self.controls:
            if control.name == name:
                return control
        return None

    # -- Outcome --

    def set_redirect(self, location: str | None, params: Mapping[str, Any] | None = None) -> None:
        """Redirect (302) to *location* after processing; ``None`` cancels."""
        if location and params:
            separator = "&" if "?" in location else "?"
            location = f"{location}{separator}{urlencode(params, doseq=True)}"
        self.redirect = location

    def set_forward(self, path: str | None) -> None:
        """Hand the request to the page registered at *path*; ``None`` cancels."""
        self.forward = path

    def set_header(self, name: str, value: str | None) -> None:
        self.headers.set(name, value)

    # -- State --

    def get_state(self) -> dict[str, Any]:
        return {
            c.name: c.get_state()  # type: ignore[attr-defined]
            for c in self.controls
            if c.name and hasattr(c, "get_state")
        }

    def set_state(self, state: Any) -> None:
        if not isinstance(state, Mapping):
            return
        for name, value in state.items():
            control = self.get_control(name)
            if control is not None and hasattr(control, "set_state"):
                control.set_state(value)

    # -- Lifecycle hooks --

    def on_init(self) -> None:
        pass

    def on_security_check(self) -> bool:
        """Return False to skip processing and go straight to the outcome."""
        return True

    def on_get(self) -> None:
        pass

    def on_post(self) -> None:
        pass

    def on_render(self) -> None:
        pass

    def on_destroy(self) -> None:
        pass
