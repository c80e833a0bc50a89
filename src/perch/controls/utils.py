"""Control tree queries."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

from perch.controls.button import Button
from perch.controls.container import ContainerMixin
from perch.controls.field import Field

if TYPE_CHECKING:
    from perch.controls.base import Control
    from perch.controls.form import Form


def walk(controls: Iterable[Control]) -> Iterator[Control]:
    """Yield every control depth-first, parents before children."""
    for control in controls:
        yield control
        if isinstance(control, ContainerMixin):
            yield from walk(control.controls)


def _children(root: Any) -> Iterable[Control]:
    if isinstance(root, ContainerMixin):
        return root.controls
    return getattr(root, "controls", ())


def find_form(control: Any) -> Form | None:
    """The nearest enclosing form of *control*, or ``None``."""
    from perch.controls.form import Form

    node = control
    while node is not None:
        if isinstance(node, Form):
            return node
        node = getattr(node, "parent", None)
    return None


def get_input_fields(root: Any) -> list[Field]:
    """Every value-holding field below *root*: no buttons, no fieldsets."""
    from perch.controls.fieldset import FieldSet

    return [
        c
        for c in walk(_children(root))
        if isinstance(c, Field) and not isinstance(c, (Button, FieldSet))
    ]


def get_buttons(root: Any) -> list[Button]:
    return [c for c in walk(_children(root)) if isinstance(c, Button)]


def get_error_fields(root: Any) -> list[Field]:
    return [f for f in get_input_fields(root) if not f.is_valid]


def find_control_by_name(root: Any, name: str) -> Control | None:
    """Depth-first search for the first control called *name*."""
    for control in walk(_children(root)):
        if control.name == name:
            return control
    return None
