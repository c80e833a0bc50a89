"""Panel: a container rendered through its own template."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from perch.controls.base import to_label
from perch.controls.container import Container
from perch.errors import ConfigurationError
from perch.templating.integration import reserved_model

if TYPE_CHECKING:
    from perch.html import HtmlBuffer


class Panel(Container):
    """A reusable fragment of a page.

    With a ``template`` the panel renders it with its ``model`` plus
    ``id`` and ``panel`` (the panel itself, so the template can render
    ``panel.controls``); the page's reserved keys are added by the
    renderer. Without a template the children render inside a ``<div>``.
    """

    tag = "div"

    def __init__(
        self,
        name: str | None = None,
        template: str | None = None,
        model: dict[str, Any] | None = None,
        *,
        label: str | None = None,
    ) -> None:
        super().__init__(name)
        self.template = template
        self.model: dict[str, Any] = dict(model or {})
        self._label = label

    @property
    def label(self) -> str:
        if self._label is None:
            self._label = self.get_message(f"{self.name}.label") or to_label(self.name or "")
        return self._label

    @label.setter
    def label(self, value: str | None) -> None:
        self._label = value

    def add_model(self, name: str, value: Any) -> None:
        if name is None:
            msg = "Null name parameter"
            raise ValueError(msg)
        self.model[name] = value

    def render(self, buffer: HtmlBuffer) -> None:
        if self.template is None:
            super().render(buffer)
            return
        ctx = self.context
        renderer = ctx.renderer
        if renderer is None:
            msg = f"No template renderer available to render panel {self.name!r}"
            raise ConfigurationError(msg)
        model = {**self.model, "id": self.id, "panel": self}
        reserved = reserved_model(ctx, self.page)
        buffer.append(renderer.render_string(self.template, model, reserved))
