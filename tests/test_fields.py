"""Tests for field binding, validation and rendering."""

from datetime import date
from decimal import Decimal

import pytest

from perch.controls import (
    Checkbox,
    DateField,
    DecimalField,
    DoubleField,
    EmailField,
    Field,
    FileField,
    HiddenField,
    IntegerField,
    Option,
    PasswordField,
    Radio,
    RadioGroup,
    Select,
    TextArea,
    TextField,
)
from perch.dispatch import fire_action_events
from perch.http.forms import UploadFile
from perch.testing import mock_context


def _process(field: Field, params: dict[str, str | list[str]]) -> Field:
    with mock_context("/edit", "POST", params):
        field.on_process()
        fire_action_events()
    return field


# ---------------------------------------------------------------------------
# Field basics
# ---------------------------------------------------------------------------


class TestField:
    def test_value_defaults_to_empty_string(self) -> None:
        field = TextField("name")
        assert field.value == ""
        assert field.value_object is None

    def test_initial_value(self) -> None:
        assert TextField("name", value="ann").value == "ann"

    def test_setting_none_clears(self) -> None:
        field = TextField("name", value="ann")
        field.value_object = None
        assert field.value == ""

    def test_label_derived_from_name(self) -> None:
        assert TextField("firstName").label == "First Name"
        assert TextField("x", "Your name:").error_label == "Your name"

    def test_binding_trims_by_default(self) -> None:
        assert _process(TextField("name"), {"name": "  ann  "}).value == "ann"

    def test_binding_without_trim(self) -> None:
        field = TextField("name")
        field.trim = False
        assert _process(field, {"name": "  ann "}).value == "  ann "

    def test_missing_parameter_binds_empty(self) -> None:
        field = TextField("name", value="old")
        assert _process(field, {}).value == ""

    def test_required(self) -> None:
        field = _process(TextField("name", required=True), {"name": ""})
        assert field.error == "Name is required."
        assert not field.is_valid

    def test_invalid_field_has_no_value_object(self) -> None:
        field = _process(IntegerField("age"), {"age": "old"})
        assert field.value == "old"
        assert field.value_object is None

    def test_error_cleared_on_rebind(self) -> None:
        field = _process(TextField("name", required=True), {"name": ""})
        _process(field, {"name": "ann"})
        assert field.error is None

    def test_process_dispatches_listener_after_binding(self) -> None:
        seen: list[str] = []
        field = TextField("name")
        field.set_listener(lambda: seen.append(field.value) or True)
        _process(field, {"name": "ann"})
        assert seen == ["ann"]

    def test_state_round_trip(self) -> None:
        field = TextField("name", value="ann")
        other = TextField("name")
        other.set_state(field.get_state())
        assert other.value == "ann"


class TestFieldRendering:
    def test_text_field(self) -> None:
        html = str(TextField("name", value="a&b", max_length=10))
        assert html == (
            '<input name="name" id="name" type="text" value="a&amp;b" size="20" maxlength="10"/>'
        )

    def test_bound_markup_is_escaped(self) -> None:
        field = _process(TextField("comment"), {"comment": "<script>alert(1)</script>"})
        html = str(field)
        assert "<script>" not in html
        assert 'value="&lt;script&gt;alert(1)&lt;/script&gt;"' in html

    def test_error_class_and_aria(self) -> None:
        field = _process(TextField("name", required=True), {})
        html = str(field)
        assert 'class="error"' in html
        assert 'aria-invalid="true"' in html

    def test_error_class_removed_when_valid(self) -> None:
        field = _process(TextField("name", required=True), {})
        str(field)
        _process(field, {"name": "ann"})
        assert "error" not in str(field)

    def test_disabled_readonly_title_tabindex(self) -> None:
        field = TextField("name")
        field.disabled = True
        field.readonly = True
        field.title = "Your name"
        field.tabindex = 2
        html = str(field)
        assert 'title="Your name"' in html
        assert 'tabindex="2"' in html
        assert 'disabled="disabled"' in html
        assert 'readonly="readonly"' in html

    def test_password(self) -> None:
        assert 'type="password"' in str(PasswordField("secret"))

    def test_explicit_id(self) -> None:
        field = TextField("name")
        field.id = "custom"
        assert 'id="custom"' in str(field)


# ---------------------------------------------------------------------------
# Text fields
# ---------------------------------------------------------------------------


class TestTextValidation:
    def test_min_length(self) -> None:
        field = _process(TextField("code", min_length=3), {"code": "ab"})
        assert field.error == "Code must be at least 3 characters."

    def test_max_length(self) -> None:
        field = _process(TextField("code", max_length=3), {"code": "abcd"})
        assert field.error == "Code must be no longer than 3 characters."

    def test_empty_optional_skips_length_checks(self) -> None:
        field = _process(TextField("code", min_length=3), {"code": ""})
        assert field.error is None

    def test_email(self) -> None:
        assert _process(EmailField("email"), {"email": "ann@example.com"}).is_valid
        field = _process(EmailField("email"), {"email": "not-an-address"})
        assert field.error == "Email is not a valid email address."

    def test_email_required_message_first(self) -> None:
        field = _process(EmailField("email", required=True), {"email": ""})
        assert field.error == "Email is required."

    def test_textarea(self) -> None:
        area = TextArea("notes", rows=5, max_length=4)
        _process(area, {"notes": "<hello>"})
        assert area.error == "Notes must be no longer than 4 characters."
        html = str(area)
        assert html.startswith('<textarea name="notes" id="notes" class="error" cols="20" rows="5"')
        assert ">&lt;hello&gt;</textarea>" in html


class TestHiddenField:
    def test_is_hidden_and_never_validated(self) -> None:
        field = HiddenField("token")
        field.required = True
        _process(field, {"token": ""})
        assert field.is_hidden
        assert field.error is None

    def test_typed_value(self) -> None:
        field = _process(HiddenField("id", value_type=int), {"id": "42"})
        assert field.value_object == 42

    def test_unparseable_typed_value(self) -> None:
        field = _process(HiddenField("id", value_type=int), {"id": "x"})
        assert field.value_object is None

    def test_date_value_formatted_iso(self) -> None:
        field = HiddenField("when", date(2024, 3, 1), value_type=date)
        assert field.value == "2024-03-01"
        assert field.value_object == date(2024, 3, 1)

    def test_render(self) -> None:
        assert str(HiddenField("id", 7)) == '<input name="id" id="id" type="hidden" value="7"/>'


# ---------------------------------------------------------------------------
# Numeric and date fields
# ---------------------------------------------------------------------------


class TestNumberFields:
    def test_integer(self) -> None:
        field = _process(IntegerField("age"), {"age": "42"})
        assert field.value_object == 42
        assert isinstance(field.value_object, int)

    def test_integer_rejects_fraction(self) -> None:
        field = _process(IntegerField("age"), {"age": "4.5"})
        assert field.error == "Age must be a number."

    def test_double(self) -> None:
        field = _process(DoubleField("ratio"), {"ratio": "0.25"})
        assert field.value_object == pytest.approx(0.25)

    def test_decimal(self) -> None:
        field = _process(DecimalField("price"), {"price": "19.99"})
        assert field.value_object == Decimal("19.99")

    def test_decimal_format_error(self) -> None:
        field = _process(DecimalField("price"), {"price": "cheap"})
        assert field.error == "Price must be a number."

    def test_min_and_max(self) -> None:
        low = _process(IntegerField("qty", min_value=1, max_value=10), {"qty": "0"})
        assert low.error == "Qty must be greater than or equal to 1."
        high = _process(IntegerField("qty", min_value=1, max_value=10), {"qty": "11"})
        assert high.error == "Qty must be less than or equal to 10."
        ok = _process(IntegerField("qty", min_value=1, max_value=10), {"qty": "10"})
        assert ok.is_valid

    @pytest.mark.parametrize("text", ["NaN", "nan", "inf", "-Infinity", "sNaN"])
    def test_decimal_non_finite_is_format_error(self, text: str) -> None:
        field = _process(DecimalField("price", min_value=1, max_value=100), {"price": text})
        assert field.error == "Price must be a number."
        assert field.value_object is None

    @pytest.mark.parametrize("text", ["nan", "inf", "-inf"])
    def test_double_non_finite_is_format_error(self, text: str) -> None:
        field = _process(DoubleField("ratio", min_value=0, max_value=1), {"ratio": text})
        assert field.error == "Ratio must be a number."

    def test_empty_optional_number(self) -> None:
        field = _process(IntegerField("qty", min_value=1), {"qty": ""})
        assert field.is_valid
        assert field.value_object is None

    def test_empty_required_number(self) -> None:
        field = _process(IntegerField("qty", required=True), {"qty": ""})
        assert field.error == "Qty is required."

    def test_value_object_setter(self) -> None:
        field = DecimalField("price")
        field.value_object = Decimal("3.50")
        assert field.value == "3.50"
        assert 'size="10"' in str(field)


class TestDateField:
    def test_parse(self) -> None:
        field = _process(DateField("born"), {"born": "1990-05-17"})
        assert field.value_object == date(1990, 5, 17)

    def test_custom_format(self) -> None:
        field = DateField("born", format="%d/%m/%Y", value=date(1990, 5, 17))
        assert field.value == "17/05/1990"

    def test_format_error(self) -> None:
        field = _process(DateField("born"), {"born": "17 May"})
        assert field.error == "Born must be a date in the format %Y-%m-%d."


# ---------------------------------------------------------------------------
# Checkbox and select
# ---------------------------------------------------------------------------


class TestCheckbox:
    def test_checked_when_present(self) -> None:
        box = _process(Checkbox("agree"), {"agree": "true"})
        assert box.checked is True
        assert box.value_object is True

    def test_unchecked_when_absent(self) -> None:
        box = Checkbox("agree", value=True)
        _process(box, {})
        assert box.checked is False
        assert box.value_object is False

    def test_required_must_be_checked(self) -> None:
        box = _process(Checkbox("agree", required=True), {})
        assert box.error == "Agree must be checked."

    def test_value_object_from_strings(self) -> None:
        box = Checkbox("agree")
        box.value_object = "false"
        assert box.checked is False
        box.value_object = "on"
        assert box.checked is True

    def test_render(self) -> None:
        html = str(Checkbox("agree", value=True))
        assert 'type="checkbox" value="true" checked="checked"' in html

    def test_state(self) -> None:
        box = Checkbox("agree")
        box.set_state(True)
        assert box.get_state() is True


class TestSelect:
    def test_options_from_strings_and_options(self) -> None:
        select = Select("color", options=["red", Option("g", "Green")])
        assert [o.text for o in select.options] == ["red", "Green"]

    def test_single_binding(self) -> None:
        select = _process(Select("color", options=["red", "blue"]), {"color": "blue"})
        assert select.value == "blue"
        assert select.value_object == "blue"

    def test_multiple_binding(self) -> None:
        select = Select("tags", multiple=True, options=["a", "b", "c"])
        _process(select, {"tags": ["a", "c"]})
        assert select.selected_values == ["a", "c"]
        assert select.value_object == ["a", "c"]
        assert select.value == "a"

    def test_initial_multiple_value(self) -> None:
        select = Select("tags", multiple=True, value=["a", "b"])
        assert select.selected_values == ["a", "b"]

    def test_required(self) -> None:
        select = _process(Select("color", required=True, options=["", "red"]), {"color": ""})
        assert select.error == "Please select a Color value."

    def test_render(self) -> None:
        select = Select("color", options=["red", Option("b", "<Blue>")], value="b")
        html = str(select)
        assert html.startswith('<select name="color" id="color">')
        assert '<option value="red">red</option>' in html
        assert '<option value="b" selected="selected">&lt;Blue&gt;</option>' in html
        assert html.endswith("</select>")

    def test_render_multiple(self) -> None:
        html = str(Select("tags", multiple=True, size=4))
        assert 'multiple="multiple" size="4"' in html

    def test_null_option_rejected(self) -> None:
        with pytest.raises(ValueError):
            Select("color").add_option(None)  # type: ignore[arg-type]


class TestRadioGroup:
    def _group(self, **kwargs: object) -> RadioGroup:
        group = RadioGroup("size", **kwargs)  # type: ignore[arg-type]
        group.add("s")
        group.add(Radio("m", "<Medium>"))
        return group

    def test_single_value_binding(self) -> None:
        group = _process(self._group(), {"size": "m"})
        assert group.value == "m"
        assert group.value_object == "m"
        assert [r.checked for r in group.radios] == [False, True]

    def test_radios_share_group_name(self) -> None:
        group = self._group()
        assert [r.name for r in group.radios] == ["size", "size"]
        assert [r.id for r in group.radios] == ["size_s", "size_m"]

    def test_required_without_selection(self) -> None:
        group = _process(self._group(required=True), {})
        assert group.error == "Please select a Size value."
        assert not group.radios[0].is_valid

    def test_optional_without_selection(self) -> None:
        group = _process(self._group(), {})
        assert group.error is None
        assert group.value_object is None

    def test_render(self) -> None:
        html = str(self._group(value="m"))
        assert html == (
            '<input type="radio" name="size" value="s" id="size_s"/>'
            '<label for="size_s">s</label>\n'
            '<input type="radio" name="size" value="m" id="size_m" checked="checked"/>'
            '<label for="size_m">&lt;Medium&gt;</label>'
        )

    def test_render_vertical(self) -> None:
        html = str(self._group(vertical=True))
        assert '<label for="size_s">s</label><br/>\n<input type="radio"' in html

    def test_render_error(self) -> None:
        group = _process(self._group(required=True), {})
        html = str(group)
        assert html.count('aria-invalid="true" class="error"/>') == 2

    def test_null_radio_rejected(self) -> None:
        with pytest.raises(ValueError):
            RadioGroup("size").add(None)  # type: ignore[arg-type]


class TestRadio:
    def test_standalone_checked_from_request(self) -> None:
        radio = _process(Radio("yes", name="agree"), {"agree": "yes"})
        assert radio.checked
        assert radio.id == "agree_yes"

    def test_standalone_other_value(self) -> None:
        radio = _process(Radio("yes", name="agree"), {"agree": "no"})
        assert not radio.checked

    def test_checked_fires_listener(self) -> None:
        calls: list[str] = []
        radio = Radio("yes", name="agree")
        radio.set_listener(lambda: calls.append(radio.value) or True)
        _process(radio, {"agree": "yes"})
        assert calls == ["yes"]

    def test_label_defaults_to_value(self) -> None:
        assert Radio("yes").label == "yes"


# ---------------------------------------------------------------------------
# File upload
# ---------------------------------------------------------------------------


class TestFileField:
    def test_binds_upload(self) -> None:
        upload = UploadFile("cv.pdf", "application/pdf", 3, b"pdf")
        field = FileField("cv")
        with mock_context("/apply", "POST", files={"cv": upload}):
            field.on_process()
        assert field.value_object is upload
        assert field.value == "cv.pdf"

    def test_empty_upload_is_missing(self) -> None:
        upload = UploadFile("", "application/octet-stream", 0, b"")
        field = FileField("cv", required=True)
        with mock_context("/apply", "POST", files={"cv": upload}):
            field.on_process()
        assert field.value_object is None
        assert field.error == "Cv is required."

    def test_render(self) -> None:
        assert str(FileField("cv")) == '<input name="cv" id="cv" type="file" size="20"/>'
