"""Text input fields."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from perch.controls.binding import coerce
from perch.controls.field import Field

if TYPE_CHECKING:
    from perch.html import HtmlBuffer


class TextField(Field):
    """A single-line ``<input type="text">``.

    Validation runs required first; when a value is present, ``min_length``
    then ``max_length``. The first failing constraint sets the error.
    """

    input_type = "text"

    def __init__(
        self,
        name: str | None = None,
        label: str | None = None,
        *,
        required: bool = False,
        value: Any = None,
        size: int = 20,
        min_length: int = 0,
        max_length: int = 0,
    ) -> None:
        super().__init__(name, label, required=required, value=value)
        self.size = size
        self.min_length = min_length
        self.max_length = max_length

    def validate(self) -> None:
        validate_length(self)

    def render_common_attributes(self, buffer: HtmlBuffer) -> None:
        buffer.append_attribute("size", self.size)
        if self.max_length > 0:
            buffer.append_attribute("maxlength", self.max_length)
        super().render_common_attributes(buffer)


class PasswordField(TextField):
    input_type = "password"


_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class EmailField(TextField):
    """Text field that only accepts ``local@domain.tld`` addresses."""

    input_type = "email"

    def validate(self) -> None:
        super().validate()
        if self.error is None and self.value and not _EMAIL.match(self.value):
            self.set_error("email-format-error")


class TextArea(Field):
    """A multi-line ``<textarea>``. The value is the escaped element body."""

    def __init__(
        self,
        name: str | None = None,
        label: str | None = None,
        *,
        required: bool = False,
        value: Any = None,
        cols: int = 20,
        rows: int = 3,
        min_length: int = 0,
        max_length: int = 0,
    ) -> None:
        super().__init__(name, label, required=required, value=value)
        self.cols = cols
        self.rows = rows
        self.min_length = min_length
        self.max_length = max_length

    def validate(self) -> None:
        validate_length(self)

    def control_size_est(self) -> int:
        return 96 + len(self.value)

    def render(self, buffer: HtmlBuffer) -> None:
        self.render_tag_begin("textarea", buffer)
        buffer.append_attribute("cols", self.cols)
        buffer.append_attribute("rows", self.rows)
        self.render_common_attributes(buffer)
        buffer.close_tag()
        buffer.append_escaped(self.value)
        buffer.elem_end("textarea")


class HiddenField(Field):
    """A hidden input holding a value of ``value_type``.

    Hidden fields are bound but never validated.
    """

    input_type = "hidden"

    def __init__(self, name: str | None = None, value: Any = None, value_type: type = str) -> None:
        self.value_type = value_type
        super().__init__(name, value=value)

    @property
    def is_hidden(self) -> bool:
        return True

    def parse_value(self, value: str) -> Any:
        try:
            return coerce(value, self.value_type)
        except (TypeError, ValueError):
            return None

    def format_value(self, obj: Any) -> str:
        return coerce(obj, str)

    def on_process(self) -> bool:
        self.bind_request_value()
        self.dispatch_action_event()
        return True

    def render_common_attributes(self, buffer: HtmlBuffer) -> None:
        if self.disabled:
            buffer.append_attribute_disabled()


def validate_length(field: TextField | TextArea) -> None:
    length = len(field.value)
    if length == 0:
        Field.validate(field)
    elif field.min_length > 0 and length < field.min_length:
        field.set_error("field-minlength-error", field.min_length)
    elif field.max_length > 0 and length > field.max_length:
        field.set_error("field-maxlength-error", field.max_length)
