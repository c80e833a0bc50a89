"""Field: a control that binds a request parameter to a typed value.

Processing a field is: bind the raw parameter (trimmed by default) into
``value``, clear the previous error, validate, then queue the listener.
Validation failures are soft: they set ``error`` and keep ``value_object``
at ``None``, but ``on_process`` still returns ``True`` so sibling fields
are processed and the whole form can be redisplayed with every error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from perch.controls.base import BaseControl, to_label

if TYPE_CHECKING:
    from perch.controls.form import Form
    from perch.html import HtmlBuffer


class Field(BaseControl):
    """Base class for every input control.

    ``disabled`` and ``readonly`` report the effective state: a field is
    disabled when its own flag is set or when any enclosing form or
    fieldset is disabled. Setting them only ever touches the field's own
    flag.
    """

    input_type: ClassVar[str | None] = None
    value_type: ClassVar[type] = str

    def __init__(
        self,
        name: str | None = None,
        label: str | None = None,
        *,
        required: bool = False,
        value: Any = None,
    ) -> None:
        super().__init__(name)
        self._label = label
        self._value = ""
        self._disabled = False
        self._readonly = False
        self.required = required
        self.error: str | None = None
        self.trim = True
        self.title: str | None = None
        self.help: str | None = None
        self.tabindex = 0
        self.focus = False
        if value is not None:
            self.value_object = value

    # -- Value --

    @property
    def value(self) -> str:
        """The bound string value; ``""`` when unset."""
        return self._value

    @value.setter
    def value(self, value: str | None) -> None:
        self._value = "" if value is None else str(value)

    @property
    def value_object(self) -> Any:
        """The typed value, or ``None`` when empty or invalid."""
        if not self._value or self.error is not None:
            return None
        return self.parse_value(self._value)

    @value_object.setter
    def value_object(self, obj: Any) -> None:
        self._value = "" if obj is None else self.format_value(obj)

    def parse_value(self, value: str) -> Any:
        """Convert a non-empty string value to ``value_type``; ``None`` if it can't."""
        return value

    def format_value(self, obj: Any) -> str:
        return str(obj)

    # -- State --

    def get_state(self) -> Any:
        """A JSON-serializable snapshot of the field's value."""
        return self._value

    def set_state(self, state: Any) -> None:
        self.value = state

    # -- Flags --

    @property
    def disabled(self) -> bool:
        return self._disabled or _inherited_flag(self, "_disabled")

    @disabled.setter
    def disabled(self, value: bool) -> None:
        self._disabled = value

    @property
    def readonly(self) -> bool:
        return self._readonly or _inherited_flag(self, "_readonly")

    @readonly.setter
    def readonly(self, value: bool) -> None:
        self._readonly = value

    @property
    def is_hidden(self) -> bool:
        return False

    @property
    def is_valid(self) -> bool:
        return self.error is None

    # -- Naming --

    @property
    def form(self) -> Form | None:
        from perch.controls.form import Form

        node = self.parent
        while node is not None:
            if isinstance(node, Form):
                return node
            node = getattr(node, "parent", None)
        return None

    @property
    def id(self) -> str | None:
        """Explicit ``id`` attribute, else ``<form id>_<name>`` inside a form."""
        explicit = self.get_attribute("id")
        if explicit is not None:
            return explicit
        form = self.form
        if form is not None and self.name:
            return f"{form.id}_{self.name}"
        return self.name

    @id.setter
    def id(self, value: str | None) -> None:
        self.set_attribute("id", value)

    @property
    def label(self) -> str:
        if self._label is None:
            self._label = self.get_message(f"{self.name}.label") or to_label(self.name or "")
        return self._label

    @label.setter
    def label(self, value: str | None) -> None:
        self._label = value

    @property
    def error_label(self) -> str:
        return self.label.strip().removesuffix(":")

    # -- Processing --

    def get_request_value(self) -> str:
        value = self.context.get_request_parameter(self.name or "")
        if value is None:
            return ""
        return value.strip() if self.trim else value

    def bind_request_value(self) -> None:
        self.value = self.get_request_value()
        self.error = None

    @property
    def validation_enabled(self) -> bool:
        form = self.form
        return form.validation if form is not None else True

    def on_process(self) -> bool:
        self.bind_request_value()
        if self.validation_enabled:
            self.validate()
        self.dispatch_action_event()
        return True

    def validate(self) -> None:
        """Set ``error`` when the value is unacceptable. Required check only."""
        if self.required and not self._value:
            self.set_error("field-required-error")

    def set_error(self, key: str, *args: Any) -> None:
        """Set ``error`` from message *key*, formatted with the label first."""
        self.error = self.get_message(key, self.error_label, *args) or key

    # -- Rendering --

    def render(self, buffer: HtmlBuffer) -> None:
        self.render_tag_begin("input", buffer)
        buffer.append_attribute("type", self.input_type)
        self.render_value_attribute(buffer)
        self.render_common_attributes(buffer)
        buffer.elem_end()

    def render_value_attribute(self, buffer: HtmlBuffer) -> None:
        buffer.append_attribute("value", self._value)

    def render_common_attributes(self, buffer: HtmlBuffer) -> None:
        buffer.append_attribute("title", self.title)
        if self.tabindex > 0:
            buffer.append_attribute("tabindex", self.tabindex)
        if self.disabled:
            buffer.append_attribute_disabled()
        if self.readonly:
            buffer.append_attribute_readonly()
        if not self.is_valid:
            buffer.append_attribute("aria-invalid", "true")

    def render_tag_begin(self, tag: str, buffer: HtmlBuffer) -> None:
        if self.is_valid:
            self.remove_style_class("error")
        else:
            self.add_style_class("error")
        super().render_tag_begin(tag, buffer)


def _inherited_flag(control: BaseControl, flag: str) -> bool:
    node = control.parent
    while node is not None:
        if getattr(node, flag, False) is True:
            return True
        node = getattr(node, "parent", None)
    return False
