"""FieldSet: a field that groups other fields under a legend."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from perch.controls.button import Button
from perch.controls.container import ContainerMixin
from perch.controls.field import Field
from perch.controls.layout import render_field_rows, render_hidden

if TYPE_CHECKING:
    from perch.controls.base import Control
    from perch.html import HtmlBuffer


class FieldSet(ContainerMixin, Field):
    """A ``<fieldset>`` holding input fields laid out in a table.

    Only fields may be added: buttons and nested fieldsets are rejected.
    The state is a dict of the children's states keyed by name.

    Usage::

        address = FieldSet("address", legend="Address")
        address.add(TextField("street", required=True), width=2)
        address.add(TextField("city"))
        form.add(address)
    """

    tag = "fieldset"

    def __init__(
        self,
        name: str | None = None,
        legend: str | None = None,
        *,
        columns: int = 1,
        show_border: bool = True,
    ) -> None:
        super().__init__(name)
        self.legend = legend
        self.columns = columns
        self.show_border = show_border
        self.field_widths: dict[str, int] = {}
        self._field_list: list[Field] | None = None
        self._fields: dict[str, Field] | None = None

    # -- Structure --

    def add(self, control: Control, width: int | None = None) -> Control:  # type: ignore[override]
        if width is not None:
            if width < 1:
                msg = f"Invalid field width: {width}"
                raise ValueError(msg)
            self.field_widths[control.name or ""] = width
        return super().add(control)

    def _check_insertable(self, control: Control) -> None:
        super()._check_insertable(control)
        if not isinstance(control, Field):
            msg = f"FieldSet only accepts fields, not {type(control).__name__}"
            raise ValueError(msg)
        if isinstance(control, (Button, FieldSet)):
            msg = f"FieldSet does not accept {type(control).__name__} controls"
            raise ValueError(msg)

    def _structure_changed(self) -> None:
        self._field_list = None
        self._fields = None

    @property
    def field_list(self) -> list[Field]:
        """The child fields in order. Cached until the children change."""
        if self._field_list is None:
            self._field_list = [c for c in self._controls if isinstance(c, Field)]
        return self._field_list

    @property
    def fields(self) -> dict[str, Field]:
        if self._fields is None:
            self._fields = {f.name: f for f in self.field_list if f.name}
        return self._fields

    def get_field(self, name: str) -> Field | None:
        return self.fields.get(name)

    # -- Value --

    @property
    def is_valid(self) -> bool:
        return self.error is None and all(f.is_valid for f in self.field_list)

    def get_state(self) -> dict[str, Any]:
        return {f.name: f.get_state() for f in self.field_list if f.name}

    def set_state(self, state: Any) -> None:
        if not isinstance(state, Mapping):
            return
        for name, value in state.items():
            field = self.fields.get(name)
            if field is not None:
                field.set_state(value)

    # -- Rendering --

    @property
    def legend_text(self) -> str | None:
        if self.legend is not None:
            return self.legend
        return self.get_message(f"{self.name}.legend")

    def control_size_est(self) -> int:
        return 120 + 160 * len(self._controls)

    def render(self, buffer: HtmlBuffer) -> None:
        if not self.show_border:
            self.set_style("border", "none")
        self.render_tag_begin("fieldset", buffer)
        buffer.close_tag()
        buffer.append("\n")
        legend = self.legend_text
        if legend:
            buffer.append("<legend>")
            buffer.append_escaped(legend)
            buffer.append("</legend>\n")
        render_hidden(self.field_list, buffer)
        render_field_rows(self.field_list, buffer, self.columns, self.field_widths)
        buffer.elem_end("fieldset")
