"""Controls: the components a page is built from.

All public control classes are re-exported here::

    from perch.controls import Form, TextField, Submit
"""

from perch.controls.attributes import AttributeBag
from perch.controls.base import BaseControl, Control
from perch.controls.button import ActionButton, Button, Reset, Submit
from perch.controls.choice import Checkbox, Option, Radio, RadioGroup, Select
from perch.controls.container import Container, ContainerMixin, Div
from perch.controls.field import Field
from perch.controls.fieldset import FieldSet
from perch.controls.file import FileField
from perch.controls.form import FORM_NAME, SUBMIT_CHECK, Form
from perch.controls.link import ActionLink, PageLink
from perch.controls.numeric import DateField, DecimalField, DoubleField, IntegerField, NumberField
from perch.controls.panel import Panel
from perch.controls.text import EmailField, HiddenField, PasswordField, TextArea, TextField

__all__ = [
    "FORM_NAME",
    "SUBMIT_CHECK",
    "ActionButton",
    "ActionLink",
    "AttributeBag",
    "BaseControl",
    "Button",
    "Checkbox",
    "Container",
    "ContainerMixin",
    "Control",
    "DateField",
    "DecimalField",
    "Div",
    "DoubleField",
    "EmailField",
    "Field",
    "FieldSet",
    "FileField",
    "Form",
    "HiddenField",
    "IntegerField",
    "NumberField",
    "Option",
    "PageLink",
    "Panel",
    "PasswordField",
    "Radio",
    "RadioGroup",
    "Reset",
    "Select",
    "Submit",
    "TextArea",
    "TextField",
]
