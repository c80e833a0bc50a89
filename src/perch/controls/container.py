"""Containers: ordered, name-indexed collections of child controls.

``ContainerMixin`` carries the child list, the name index and the
lifecycle delegation. It is combined with ``BaseControl`` for plain
containers and with ``Field`` for containers that also behave as fields
(``FieldSet``, ``Form``).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from perch.controls.base import BaseControl, Control
from perch.errors import ControlStateError

if TYPE_CHECKING:
    from perch.html import HtmlBuffer

logger = logging.getLogger("perch.controls")


class ContainerMixin:
    """Child management and lifecycle delegation.

    Invariants:
        - A name appears at most once; adding a control with an existing
          name replaces the old one at the same position.
        - A container never contains itself or one of its ancestors.
        - A control has at most one parent; adding it elsewhere detaches it.
    """

    tag: Any
    name: str | None
    parent: Any

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._controls: list[Control] = []
        self._control_map: dict[str, Control] = {}
        super().__init__(*args, **kwargs)

    # -- Structure --

    @property
    def controls(self) -> list[Control]:
        """The children in render order. Do not mutate; use add/remove."""
        return self._controls

    @property
    def control_map(self) -> Mapping[str, Control]:
        return MappingProxyType(self._control_map)

    def has_controls(self) -> bool:
        return bool(self._controls)

    def contains(self, control: Control) -> bool:
        return any(c is control for c in self._controls)

    def get_control(self, name: str) -> Control | None:
        return self._control_map.get(name)

    def add(self, control: Control) -> Control:
        """Append *control*, or replace the same-named child in place."""
        return self.insert(control, len(self._controls))

    def insert(self, control: Control, index: int) -> Control:
        self._check_insertable(control)
        size = len(self._controls)
        if index < 0 or index > size:
            msg = f"Index: {index}, Size: {size}"
            raise IndexError(msg)

        if self.contains(control):
            return control

        self._detach_from_parent(control)

        existing = self._control_map.get(control.name) if control.name else None
        if existing is not None:
            position = self._index_of(existing)
            self._controls[position] = control
            existing.parent = None
        else:
            self._controls.insert(index, control)

        control.parent = self
        if control.name:
            self._control_map[control.name] = control
        self._structure_changed()
        return control

    def replace(self, current: Control, new: Control) -> Control:
        """Swap *current* for *new* at the same position."""
        if not self.contains(current):
            msg = f"{current!r} is not a child of {self!r}"
            raise ValueError(msg)
        self._check_insertable(new)
        self._detach_from_parent(new)
        position = self._index_of(current)
        self._controls[position] = new
        if current.name and self._control_map.get(current.name) is current:
            del self._control_map[current.name]
        current.parent = None
        new.parent = self
        if new.name:
            self._control_map[new.name] = new
        self._structure_changed()
        return new

    def remove(self, control: Control) -> bool:
        """Remove *control*; return whether it was a child."""
        if control is None:
            msg = "Null control parameter"
            raise ValueError(msg)
        if not self.contains(control):
            return False
        del self._controls[self._index_of(control)]
        if control.parent is self:
            control.parent = None
        if control.name and self._control_map.get(control.name) is control:
            del self._control_map[control.name]
        self._structure_changed()
        return True

    def _index_of(self, control: Control) -> int:
        for i, child in enumerate(self._controls):
            if child is control:
                return i
        raise ValueError(control)

    def _check_insertable(self, control: Control) -> None:
        if control is None:
            msg = "Null control parameter"
            raise ValueError(msg)
        node: Any = self
        while node is not None:
            if node is control:
                msg = f"Cannot add container {control!r} to itself"
                raise ControlStateError(msg)
            node = getattr(node, "parent", None)
        parent = control.parent
        if parent is not None and not isinstance(parent, ContainerMixin):
            msg = (
                f"{control!r} belongs to page {type(parent).__name__}; "
                "remove it from the page before adding it to a container."
            )
            raise ControlStateError(msg)

    def _detach_from_parent(self, control: Control) -> None:
        parent = control.parent
        if parent is not None and parent is not self:
            parent.remove(control)
            logger.debug("Reset parent of %r from %r to %r", control, parent, self)

    def _structure_changed(self) -> None:
        """Hook for subclasses caching derived views of the children."""

    # -- Lifecycle --

    def on_init(self) -> None:
        super().on_init()  # type: ignore[misc]
        for control in self._controls:
            control.on_init()

    def on_process(self) -> bool:
        """Process children in order, stopping at the first that returns False.

        The container's own listener is dispatched once either way.
        """
        continue_processing = self.process_controls(self._controls)
        self.dispatch_action_event()  # type: ignore[attr-defined]
        return continue_processing

    def process_controls(self, controls: Iterable[Control]) -> bool:
        for control in controls:
            if not control.on_process():
                logger.debug("   %r stopped processing", control)
                return False
        return True

    def on_render(self) -> None:
        super().on_render()  # type: ignore[misc]
        for control in self._controls:
            control.on_render()

    def on_destroy(self) -> None:
        super().on_destroy()  # type: ignore[misc]
        for control in self._controls:
            try:
                control.on_destroy()
            except Exception:
                logger.exception("on_destroy error in %r", control)

    # -- Rendering --

    def control_size_est(self) -> int:
        size = 20
        if self.tag is not None and self.has_attributes():  # type: ignore[attr-defined]
            size += 20 * len(self.attributes)  # type: ignore[attr-defined]
        if self._controls:
            size += len(self._controls) * size
        return size

    def render(self, buffer: HtmlBuffer) -> None:
        if self.tag is not None:
            self.render_tag_begin(self.tag, buffer)  # type: ignore[attr-defined]
            buffer.close_tag()
            if self._controls:
                buffer.append("\n")
            self.render_content(buffer)
            buffer.elem_end(self.tag)
        else:
            self.render_content(buffer)

    def render_content(self, buffer: HtmlBuffer) -> None:
        self.render_children(buffer)

    def render_children(self, buffer: HtmlBuffer) -> None:
        for control in self._controls:
            before = len(buffer)
            control.render(buffer)
            if len(buffer) > before:
                buffer.append("\n")


class Container(ContainerMixin, BaseControl):
    """A generic container rendering its children inside ``tag`` (or bare)."""

    def __init__(self, name: str | None = None, tag: str | None = None) -> None:
        super().__init__(name)
        if tag is not None:
            self.tag = tag


class Div(Container):
    tag = "div"

    def __init__(self, name: str | None = None) -> None:
        super().__init__(name)
