"""Checkbox, select and radio fields."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from perch.controls.field import Field

if TYPE_CHECKING:
    from perch.html import HtmlBuffer


class Checkbox(Field):
    """An ``<input type="checkbox">`` whose typed value is a bool.

    Browsers omit unchecked boxes from the submission, so any non-empty
    parameter counts as checked. A required checkbox must be checked.
    """

    input_type = "checkbox"
    value_type = bool

    @property
    def checked(self) -> bool:
        return bool(self.value)

    @checked.setter
    def checked(self, value: bool) -> None:
        self.value = "true" if value else ""

    @property
    def value_object(self) -> bool:
        return self.checked

    @value_object.setter
    def value_object(self, obj: Any) -> None:
        self.checked = bool(obj) and str(obj).lower() not in ("false", "0", "off")

    def get_state(self) -> bool:
        return self.checked

    def set_state(self, state: Any) -> None:
        self.checked = bool(state)

    def bind_request_value(self) -> None:
        self.checked = bool(self.context.get_request_parameter(self.name or ""))
        self.error = None

    def validate(self) -> None:
        if self.required and not self.checked:
            self.set_error("not-checked-error")

    def render_value_attribute(self, buffer: HtmlBuffer) -> None:
        buffer.append_attribute("value", "true")
        if self.checked:
            buffer.append_attribute("checked", "checked")


@dataclass(frozen=True, slots=True)
class Option:
    """One ``<option>``; the label defaults to the value."""

    value: str
    label: str | None = None

    @property
    def text(self) -> str:
        return self.value if self.label is None else self.label


class Select(Field):
    """A ``<select>`` list, single or ``multiple``.

    A multiple select binds every submitted value; ``value`` then holds the
    first and ``selected_values`` all of them.
    """

    def __init__(
        self,
        name: str | None = None,
        label: str | None = None,
        *,
        required: bool = False,
        value: Any = None,
        multiple: bool = False,
        size: int = 0,
        options: Iterable[Option | str] = (),
    ) -> None:
        self.selected_values: list[str] = []
        super().__init__(name, label, required=required, value=value)
        self.multiple = multiple
        self.size = size
        self.options: list[Option] = []
        self.add_all(options)

    def add_option(self, option: Option | str, label: str | None = None) -> Option:
        if option is None:
            msg = "Null option parameter"
            raise ValueError(msg)
        if isinstance(option, str):
            option = Option(option, label)
        self.options.append(option)
        return option

    def add_all(self, options: Iterable[Option | str]) -> None:
        for option in options:
            self.add_option(option)

    @property
    def value_object(self) -> Any:
        if self.multiple:
            return list(self.selected_values) if self.error is None else None
        return Field.value_object.fget(self)  # type: ignore[attr-defined]

    @value_object.setter
    def value_object(self, obj: Any) -> None:
        if obj is None:
            values: list[str] = []
        elif isinstance(obj, (list, tuple, set, frozenset)):
            values = [str(v) for v in obj]
        else:
            values = [str(obj)]
        self.selected_values = values
        self.value = values[0] if values else ""

    def get_state(self) -> Any:
        return list(self.selected_values) if self.multiple else self.value

    def set_state(self, state: Any) -> None:
        self.value_object = state

    def bind_request_value(self) -> None:
        name = self.name or ""
        if self.multiple:
            self.value_object = self.context.get_request_parameter_values(name)
        else:
            self.value_object = self.get_request_value() or None
        self.error = None

    def validate(self) -> None:
        if self.required and not any(self.selected_values):
            self.set_error("select-error")

    def is_selected(self, option: Option) -> bool:
        return option.value in self.selected_values

    def control_size_est(self) -> int:
        return 64 + 48 * len(self.options)

    def render(self, buffer: HtmlBuffer) -> None:
        self.render_tag_begin("select", buffer)
        if self.multiple:
            buffer.append_attribute("multiple", "multiple")
        if self.size > 0:
            buffer.append_attribute("size", self.size)
        self.render_common_attributes(buffer)
        buffer.close_tag()
        for option in self.options:
            buffer.append("\n")
            buffer.elem_start("option")
            buffer.append_attribute("value", option.value)
            if self.is_selected(option):
                buffer.append_attribute("selected", "selected")
            buffer.close_tag()
            buffer.append_escaped(option.text)
            buffer.elem_end("option")
        buffer.append("\n")
        buffer.elem_end("select")


class Radio(Field):
    """One ``<input type="radio">`` followed by its ``<label>``.

    A radio's value is fixed at construction. Inside a ``RadioGroup`` it
    takes the group's name and is checked when the group's value equals
    its own; on its own it is checked when the request posts its value.
    """

    input_type = "radio"

    def __init__(self, value: str, label: str | None = None, name: str | None = None) -> None:
        super().__init__(name, label)
        self.value = value
        self._checked = False

    @property
    def group(self) -> RadioGroup | None:
        return self.parent if isinstance(self.parent, RadioGroup) else None

    @property
    def name(self) -> str | None:
        group = self.group
        return group.name if group is not None else self._name

    @name.setter
    def name(self, value: str) -> None:
        Field.name.fset(self, value)  # type: ignore[attr-defined]

    @property
    def id(self) -> str | None:
        explicit = self.get_attribute("id")
        if explicit is not None:
            return explicit
        group = self.group
        base = group.id if group is not None else self.name
        return f"{base}_{self.value}" if base else self.value

    @id.setter
    def id(self, value: str | None) -> None:
        self.set_attribute("id", value)

    @property
    def label(self) -> str:
        return self.value if self._label is None else self._label

    @label.setter
    def label(self, value: str | None) -> None:
        self._label = value

    @property
    def checked(self) -> bool:
        group = self.group
        if group is not None:
            return group.value == self.value
        return self._checked

    @checked.setter
    def checked(self, value: bool) -> None:
        self._checked = value

    @property
    def is_valid(self) -> bool:
        group = self.group
        return group.is_valid if group is not None else self.error is None

    def get_state(self) -> bool:
        return self.checked

    def set_state(self, state: Any) -> None:
        self.checked = bool(state)

    def bind_request_value(self) -> None:
        self.checked = self.context.get_request_parameter(self.name or "") == self.value
        self.error = None

    def on_process(self) -> bool:
        self.bind_request_value()
        if self.checked:
            self.dispatch_action_event()
        return True

    def render(self, buffer: HtmlBuffer) -> None:
        buffer.elem_start("input")
        buffer.append_attribute("type", self.input_type)
        buffer.append_attribute("name", self.name)
        buffer.append_attribute("value", self.value)
        buffer.append_attribute("id", self.id)
        if self._attributes:
            buffer.append_attributes(self._attributes)
        if self.checked:
            buffer.append_attribute("checked", "checked")
        self.render_common_attributes(buffer)
        if not self.is_valid:
            buffer.append_attribute("class", "error")
        buffer.elem_end()
        buffer.elem_start("label")
        buffer.append_attribute("for", self.id)
        buffer.close_tag()
        buffer.append_escaped(self.label)
        buffer.elem_end("label")


class RadioGroup(Field):
    """A set of ``Radio`` buttons sharing one name and one value.

    A required group must have one radio selected. Radios render side by
    side, or one per line when ``vertical`` is set.
    """

    def __init__(
        self,
        name: str | None = None,
        label: str | None = None,
        *,
        required: bool = False,
        value: Any = None,
        vertical: bool = False,
        radios: Iterable[Radio | str] = (),
    ) -> None:
        super().__init__(name, label, required=required, value=value)
        self.vertical = vertical
        self.radios: list[Radio] = []
        self.add_all(radios)

    def add(self, radio: Radio | str, label: str | None = None) -> Radio:
        if radio is None:
            msg = "Null radio parameter"
            raise ValueError(msg)
        if isinstance(radio, str):
            radio = Radio(radio, label)
        radio.parent = self
        self.radios.append(radio)
        return radio

    def add_all(self, radios: Iterable[Radio | str]) -> None:
        for radio in radios:
            self.add(radio)

    def validate(self) -> None:
        if self.required and not self.value:
            self.set_error("select-error")

    def control_size_est(self) -> int:
        return 16 + 96 * len(self.radios)

    def render(self, buffer: HtmlBuffer) -> None:
        separator = "<br/>\n" if self.vertical else "\n"
        for index, radio in enumerate(self.radios):
            if index:
                buffer.append(separator)
            radio.render(buffer)
