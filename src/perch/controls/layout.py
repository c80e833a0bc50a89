"""Table layout shared by ``Form`` and ``FieldSet``.

Fields are laid out left to right in ``columns`` label/control cell
pairs. A field's width (from ``field_widths``) spans several pairs; a
field that doesn't fit the current row starts a new one. Fieldsets take
their span without a label cell. Any other control (a ``Div``, a panel,
a link) gets a full-width row of its own.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from perch.controls.field import Field
from perch.html import escape

if TYPE_CHECKING:
    from perch.controls.base import Control
    from perch.html import HtmlBuffer


def render_label(field: Field, buffer: HtmlBuffer) -> None:
    """``<label for=id>`` with the (not-)required prefix/suffix markup."""
    kind = "required" if field.required else "not-required"
    buffer.elem_start("label")
    buffer.append_attribute("for", field.id)
    if field.disabled:
        buffer.append_attribute("class", "disabled")
    buffer.close_tag()
    buffer.append(field.get_message(f"label-{kind}-prefix") or "")
    buffer.append(escape(field.label))
    buffer.append(field.get_message(f"label-{kind}-suffix") or "")
    buffer.elem_end("label")


def render_hidden(fields: Iterable[Field], buffer: HtmlBuffer) -> None:
    for field in fields:
        if field.is_hidden:
            field.render(buffer)
            buffer.append("\n")


def render_field_rows(
    controls: Iterable[Control],
    buffer: HtmlBuffer,
    columns: int,
    widths: Mapping[str, int],
    label_align: str = "left",
) -> None:
    """Lay *controls* out in rows; non-field controls get a full-width row."""
    from perch.controls.fieldset import FieldSet

    columns = max(columns, 1)
    column = 0
    buffer.append('<table class="fields">\n')
    for control in controls:
        if not isinstance(control, Field):
            if column > 0:
                buffer.append("</tr>\n")
                column = 0
            buffer.append(f'<tr>\n<td class="fields" colspan="{columns * 2}">\n')
            control.render(buffer)
            buffer.append("\n</td>\n</tr>\n")
            continue
        field = control
        if field.is_hidden:
            continue
        width = min(widths.get(field.name or "", 1), columns)
        if column > 0 and column + width > columns:
            buffer.append("</tr>\n")
            column = 0
        if column == 0:
            buffer.append("<tr>\n")

        if isinstance(field, FieldSet):
            buffer.append(f'<td class="fields" colspan="{width * 2}">\n')
            field.render(buffer)
            buffer.append("\n</td>\n")
        else:
            buffer.append(f'<td class="fields" align="{escape(label_align)}">')
            render_label(field, buffer)
            buffer.append("</td>\n")
            span = f' colspan="{width * 2 - 1}"' if width > 1 else ""
            buffer.append(f'<td{span} align="left">')
            field.render(buffer)
            buffer.append("</td>\n")

        column += width
        if column >= columns:
            buffer.append("</tr>\n")
            column = 0
    if column > 0:
        buffer.append("</tr>\n")
    buffer.append("</table>\n")
