"""Anchor controls.

``ActionLink`` points back at the current page and fires its listener
when followed; ``PageLink`` points at another page path. Disabled links
render as a ``<span>`` carrying the label.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from perch.controls.base import BaseControl, to_label

if TYPE_CHECKING:
    from perch.html import HtmlBuffer

ACTION_LINK = "actionLink"
"""Request parameter naming the clicked action link."""

VALUE = "value"
"""Request parameter carrying the action link's value."""


class Link(BaseControl):
    tag = "a"

    def __init__(self, name: str | None = None, label: str | None = None) -> None:
        super().__init__(name)
        self._label = label
        self.title: str | None = None
        self.disabled = False
        self.parameters: dict[str, Any] = {}

    @property
    def label(self) -> str:
        if self._label is None:
            self._label = self.get_message(f"{self.name}.label") or to_label(self.name or "")
        return self._label

    @label.setter
    def label(self, value: str | None) -> None:
        self._label = value

    def set_parameter(self, name: str, value: Any) -> None:
        """Add a query parameter to the href; ``None`` removes it."""
        if value is None:
            self.parameters.pop(name, None)
        else:
            self.parameters[name] = value

    @property
    def href(self) -> str:
        """The current page with ``parameters`` as the query string."""
        query = self._query()
        path = self.context.resource_path
        return f"{path}?{query}" if query else path

    def _query(self, first: dict[str, Any] | None = None) -> str:
        params = {**(first or {}), **self.parameters}
        return urlencode(params, doseq=True) if params else ""

    def control_size_est(self) -> int:
        return 48 + len(self.label)

    def render_tag_begin(self, tag: str, buffer: HtmlBuffer) -> None:
        buffer.elem_start(tag)
        buffer.append_attribute("id", self.id)
        if self._attributes:
            buffer.append_attributes(self._attributes)

    def render(self, buffer: HtmlBuffer) -> None:
        if self.disabled:
            self.render_tag_begin("span", buffer)
            buffer.close_tag()
            buffer.append_escaped(self.label)
            buffer.elem_end("span")
            return
        self.render_tag_begin("a", buffer)
        buffer.append_attribute("href", self.href)
        buffer.append_attribute("title", self.title)
        buffer.close_tag()
        buffer.append_escaped(self.label)
        buffer.elem_end("a")


class ActionLink(Link):
    """A link back to the current page that fires its listener when followed.

    The link is clicked when the ``actionLink`` parameter equals its name.
    Its ``value`` parameter is bound on every request it is clicked.
    """

    def __init__(
        self, name: str | None = None, label: str | None = None, value: Any = None
    ) -> None:
        super().__init__(name, label)
        self.value = None if value is None else str(value)

    @property
    def is_clicked(self) -> bool:
        return self.context.get_request_parameter(ACTION_LINK) == self.name

    @property
    def href(self) -> str:
        first: dict[str, Any] = {ACTION_LINK: self.name}
        if self.value is not None:
            first[VALUE] = self.value
        return f"{self.context.resource_path}?{self._query(first)}"

    def on_process(self) -> bool:
        if self.is_clicked:
            self.value = self.context.get_request_parameter(VALUE)
            self.dispatch_action_event()
        return True


class PageLink(Link):
    """A link to another page path."""

    def __init__(
        self,
        name: str | None = None,
        path: str = "/",
        label: str | None = None,
        parameters: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(name, label)
        self.path = path
        self.parameters.update(parameters or {})

    @property
    def href(self) -> str:
        query = self._query()
        return f"{self.path}?{query}" if query else self.path
