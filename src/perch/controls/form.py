"""Form: the container that binds, validates and guards a submission.

A form named ``"login"`` renders a hidden ``form_name=login`` field. On a
request whose method matches and whose ``form_name`` equals the form's
name, the form processes its fields; any other request leaves the fields
untouched, so a GET renders the form as it was built.

Duplicate submissions are rejected with ``on_submit_check``: a random
token is stored both in the session and in a hidden field, and a
submission must echo the current token back.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from perch.controls import binding
from perch.controls.base import BaseControl
from perch.controls.button import Button
from perch.controls.container import ContainerMixin
from perch.controls.field import Field
from perch.controls.file import FileField
from perch.controls.layout import render_field_rows, render_hidden
from perch.controls.text import HiddenField
from perch.controls.utils import get_error_fields, get_input_fields
from perch.errors import ControlStateError

if TYPE_CHECKING:
    from perch.context import Context
    from perch.controls.base import Control
    from perch.html import HtmlBuffer

logger = logging.getLogger("perch.controls")

FORM_NAME = "form_name"
"""Hidden field (and request parameter) naming the submitted form."""

SUBMIT_CHECK = "SUBMIT_CHECK_"
"""Prefix of the hidden submit-check token field."""

MULTIPART_FORM_DATA = "multipart/form-data"


def is_system_field(control: Control) -> bool:
    name = control.name or ""
    return isinstance(control, HiddenField) and (
        name == FORM_NAME or name.startswith(SUBMIT_CHECK)
    )


class Form(ContainerMixin, BaseControl):
    """An HTML ``<form>`` of fields and buttons laid out in a table.

    ``field_list``, ``button_list`` and ``fields`` are cached views over
    the top-level children; ``get_field`` also searches fieldsets.

    Usage::

        form = Form("login")
        form.add(TextField("user", required=True))
        form.add(PasswordField("password", required=True))
        form.add(Submit("ok", "Log in"))
        form.set_listener(page.on_login)
    """

    tag = "form"

    def __init__(self, name: str | None = None) -> None:
        self._field_list: list[Field] | None = None
        self._button_list: list[Button] | None = None
        self._fields: dict[str, Field] | None = None
        super().__init__(name)
        self.method = "post"
        self._action: str | None = None
        self._enctype: str | None = None
        self.validation = True
        self.columns = 1
        self.label_align = "left"
        self.field_widths: dict[str, int] = {}
        self.error: str | None = None
        self._disabled = False
        self._readonly = False

    # -- Naming --

    @property
    def name(self) -> str | None:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        BaseControl.name.fset(self, value)  # type: ignore[attr-defined]
        field = self._control_map.get(FORM_NAME)
        if field is None:
            self.add(HiddenField(FORM_NAME, value))
        else:
            field.value = value  # type: ignore[attr-defined]

    # -- Attributes --

    @property
    def action(self) -> str:
        """Submission URL; defaults to the current resource path."""
        if self._action is not None:
            return self._action
        return self.context.resource_path

    @action.setter
    def action(self, value: str | None) -> None:
        self._action = value

    @property
    def enctype(self) -> str | None:
        """Explicit encoding, else multipart when the form holds a file field."""
        if self._enctype is not None:
            return self._enctype
        if any(isinstance(f, FileField) for f in get_input_fields(self)):
            return MULTIPART_FORM_DATA
        return None

    @enctype.setter
    def enctype(self, value: str | None) -> None:
        self._enctype = value

    @property
    def disabled(self) -> bool:
        return self._disabled

    @disabled.setter
    def disabled(self, value: bool) -> None:
        self._disabled = value

    @property
    def readonly(self) -> bool:
        return self._readonly

    @readonly.setter
    def readonly(self, value: bool) -> None:
        self._readonly = value

    # -- Structure --

    def add(self, control: Control, width: int | None = None) -> Control:  # type: ignore[override]
        """Add *control* before the hidden system fields.

        *width* is the number of layout columns the field spans.
        """
        if width is not None:
            if isinstance(control, (Button, HiddenField)):
                msg = f"{type(control).__name__} controls cannot have a width"
                raise ValueError(msg)
            if width < 1:
                msg = f"Invalid field width: {width}"
                raise ValueError(msg)
            self.field_widths[control.name or ""] = width
        if is_system_field(control):
            return self.insert(control, len(self._controls))
        return self.insert(control, self._user_insert_index())

    def _user_insert_index(self) -> int:
        index = len(self._controls)
        while index > 0 and is_system_field(self._controls[index - 1]):
            index -= 1
        return index

    def remove(self, control: Control) -> bool:
        removed = super().remove(control)
        if removed and control.name:
            self.field_widths.pop(control.name, None)
        return removed

    def _structure_changed(self) -> None:
        self._field_list = None
        self._button_list = None
        self._fields = None

    @property
    def field_list(self) -> list[Field]:
        """Top-level fields (fieldsets included, buttons excluded), in order."""
        if self._field_list is None:
            self._field_list = [
                c for c in self._controls if isinstance(c, Field) and not isinstance(c, Button)
            ]
        return self._field_list

    @property
    def button_list(self) -> list[Button]:
        if self._button_list is None:
            self._button_list = [c for c in self._controls if isinstance(c, Button)]
        return self._button_list

    @property
    def fields(self) -> dict[str, Field]:
        """Top-level fields and buttons by name."""
        if self._fields is None:
            self._fields = {
                c.name: c for c in self._controls if isinstance(c, Field) and c.name
            }
        return self._fields

    def get_field(self, name: str) -> Field | None:
        """Find a field by name, looking inside fieldsets too."""
        field = self.fields.get(name)
        if field is not None:
            return field
        for candidate in get_input_fields(self):
            if candidate.name == name:
                return candidate
        return None

    def get_field_value(self, name: str) -> str | None:
        field = self.get_field(name)
        return field.value if field is not None else None

    # -- Submission --

    def is_form_submission(self) -> bool:
        """True when this request posts this form back (not a forward)."""
        ctx = self.context
        if ctx.is_forward:
            return False
        if ctx.method.lower() != self.method.lower():
            return False
        return self.name is not None and ctx.get_request_parameter(FORM_NAME) == self.name

    def on_process(self) -> bool:
        self.error = None
        if not self.is_form_submission():
            return True
        controls = [c for c in self._controls if not (c.name or "").startswith(SUBMIT_CHECK)]
        continue_processing = self.process_controls(controls)
        if self.validation:
            self.validate()
        self.dispatch_action_event()
        return continue_processing

    def validate(self) -> None:
        """Form-level validation hook, run after every field is processed."""

    @property
    def is_valid(self) -> bool:
        return self.error is None and not self.error_fields

    @property
    def error_fields(self) -> list[Field]:
        return get_error_fields(self)

    def clear_errors(self) -> None:
        self.error = None
        for field in get_input_fields(self):
            field.error = None

    def clear_values(self) -> None:
        """Reset every user field; the hidden system fields keep their values."""
        for field in get_input_fields(self):
            if not is_system_field(field):
                field.value_object = None

    # -- Submit check --

    @property
    def submit_check_name(self) -> str:
        path = self.context.resource_path.replace("/", "_")
        if not path.startswith("_"):
            path = "_" + path
        return f"{SUBMIT_CHECK}{self.name}{path}"

    def on_submit_check(self, page: Any, invalid_submit_path: str) -> bool:
        """Reject replayed or stale submissions.

        Returns False and redirects *page* to *invalid_submit_path* when
        the posted token doesn't match the one issued with the form.
        Ajax requests always pass, and so does a submission when the
        session holds no token yet (a fresh session cannot be told apart
        from one that lost its token).

        Raises:
            ControlStateError: if the form has no name.
        """
        if not self.name:
            msg = "Form name is not defined"
            raise ControlStateError(msg)
        ctx = self.context
        if ctx.is_ajax:
            return True

        token_name = self.submit_check_name
        expected = ctx.get_session_attribute(token_name)
        valid = True
        if expected is not None and self.is_form_submission():
            posted = ctx.get_request_parameter(token_name)
            if not posted:
                logger.warning(
                    "Submit check token %s missing from submission of form %r",
                    token_name,
                    self.name,
                )
                valid = False
            else:
                valid = secrets.compare_digest(posted, str(expected))

        token = secrets.token_hex(16)
        ctx.set_session_attribute(token_name, token)
        field = self._control_map.get(token_name)
        if field is None:
            field = self.add(HiddenField(token_name))
        field.value = token  # type: ignore[attr-defined]

        if not valid:
            page.set_redirect(invalid_submit_path)
        return valid

    # -- Binding --

    def _user_fields(self) -> list[Field]:
        return [f for f in get_input_fields(self) if not is_system_field(f)]

    def copy_to(self, obj: Any) -> None:
        """Copy field values onto *obj*'s same-named attributes (or keys)."""
        binding.copy_to(self._user_fields(), obj)

    def copy_from(self, obj: Any) -> None:
        binding.copy_from(self._user_fields(), obj)

    # -- State --

    def get_state(self) -> dict[str, Any]:
        return {
            f.name: f.get_state()
            for f in self.field_list
            if f.name and not is_system_field(f)
        }

    def set_state(self, state: Any) -> None:
        if not isinstance(state, Mapping):
            return
        for name, value in state.items():
            field = self.fields.get(name)
            if field is not None and not is_system_field(field):
                field.set_state(value)

    def _state_key(self, ctx: Context) -> str:
        return f"perch.form:{ctx.resource_path}:{self.name}"

    def save_state(self, ctx: Context) -> None:
        """Store the field state in the session."""
        ctx.set_session_attribute(self._state_key(ctx), self.get_state())

    def restore_state(self, ctx: Context) -> bool:
        """Load state saved by ``save_state``; False if there is none."""
        state = ctx.get_session_attribute(self._state_key(ctx))
        if state is None:
            return False
        self.set_state(state)
        return True

    def remove_state(self, ctx: Context) -> None:
        ctx.remove_session_attribute(self._state_key(ctx))

    # -- Rendering --

    def control_size_est(self) -> int:
        return 400 + 350 * len(self._controls)

    def render(self, buffer: HtmlBuffer) -> None:
        fields = self.field_list
        self.render_tag_begin("form", buffer)
        buffer.append_attribute("method", self.method)
        buffer.append_attribute("action", self.action)
        buffer.append_attribute("enctype", self.enctype)
        buffer.close_tag()
        buffer.append("\n")
        render_hidden(fields, buffer)
        self.render_errors(buffer)
        rows = [c for c in self._controls if not isinstance(c, Button)]
        render_field_rows(rows, buffer, self.columns, self.field_widths, self.label_align)
        self.render_buttons(buffer)
        buffer.elem_end("form")

    def render_errors(self, buffer: HtmlBuffer) -> None:
        errors = [self.error] if self.error else []
        errors.extend(f.error for f in self.error_fields if f.error)
        if not errors:
            return
        buffer.append('<ul class="errors">\n')
        for error in errors:
            buffer.append("<li>")
            buffer.append_escaped(error)
            buffer.append("</li>\n")
        buffer.append("</ul>\n")

    def render_buttons(self, buffer: HtmlBuffer) -> None:
        buttons = self.button_list
        if not buttons:
            return
        buffer.append('<div class="buttons">')
        for button in buttons:
            button.render(buffer)
        buffer.append("</div>\n")
