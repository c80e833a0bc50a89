"""Buttons: inputs that trigger their listener when clicked."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from perch.controls.base import BaseControl
from perch.controls.field import Field
from perch.controls.link import VALUE
from perch.html import escape

if TYPE_CHECKING:
    from perch.html import HtmlBuffer

ACTION_BUTTON = "actionButton"
"""Request parameter naming the clicked action button."""


class Button(Field):
    """An ``<input type="button">`` rendering its label as the value.

    A button is clicked when the request carries a parameter with its
    name; only then is its listener dispatched. Buttons hold no value and
    are never validated.
    """

    input_type = "button"

    @property
    def is_clicked(self) -> bool:
        return self.context.has_request_parameter(self.name or "")

    def on_process(self) -> bool:
        if self.is_clicked:
            self.dispatch_action_event()
        return True

    def get_state(self) -> None:
        return None

    def set_state(self, state: object) -> None:
        pass

    def render_value_attribute(self, buffer: HtmlBuffer) -> None:
        buffer.append_attribute("value", self.label)


class Submit(Button):
    input_type = "submit"


class Reset(Button):
    input_type = "reset"

    def on_process(self) -> bool:
        return True


class ActionButton(Button):
    """A button that reloads the current page and fires its listener.

    The button counterpart of ``ActionLink``: its ``onclick`` navigates to
    ``<path>?actionButton=<name>&value=<value>``. It is clicked when the
    ``actionButton`` parameter equals its name, and then binds ``value``
    from the request.
    """

    def __init__(self, name: str | None = None, label: str | None = None, value: Any = None) -> None:
        super().__init__(name, label, value=value)
        self.parameters: dict[str, Any] = {}

    @property
    def name(self) -> str | None:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        if value == ACTION_BUTTON:
            msg = f"Invalid name {ACTION_BUTTON!r}: it is reserved for the request parameter"
            raise ValueError(msg)
        BaseControl.name.fset(self, value)  # type: ignore[attr-defined]

    def set_parameter(self, name: str, value: Any) -> None:
        """Add a query parameter to the target URL; ``None`` removes it."""
        if value is None:
            self.parameters.pop(name, None)
        else:
            self.parameters[name] = value

    @property
    def is_clicked(self) -> bool:
        return self.context.get_request_parameter(ACTION_BUTTON) == self.name

    @property
    def href(self) -> str:
        params: dict[str, Any] = {ACTION_BUTTON: self.name}
        if self.value:
            params[VALUE] = self.value
        params.update(self.parameters)
        return f"{self.context.resource_path}?{urlencode(params, doseq=True)}"

    def on_process(self) -> bool:
        if self.is_clicked:
            self.value = self.context.get_request_parameter(VALUE)
            self.dispatch_action_event()
        return True

    def render_common_attributes(self, buffer: HtmlBuffer) -> None:
        # Event attributes are written raw, so the script is escaped here.
        script = f"window.location.href={json.dumps(self.href)};"
        buffer.append_attribute("onclick", escape(script))
        super().render_common_attributes(buffer)
