"""The control capability and its shared implementation.

A control is a node in a page's component tree. ``Control`` is the
structural protocol the lifecycle relies on; ``BaseControl`` implements
the bookkeeping every concrete control shares: the name, the parent
back-reference, lazily created attributes, an optional action listener,
message lookup and the single rendering path.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, runtime_checkable

from perch.context import get_context
from perch.controls.attributes import AttributeBag
from perch.dispatch import Listener, register_action_event
from perch.errors import ControlStateError
from perch.html import HtmlBuffer
from perch.messages import CONTROL_MESSAGES, catalog

if TYPE_CHECKING:
    from perch.context import Context
    from perch.deploy import ResourceDeployer

logger = logging.getLogger("perch.controls")


@runtime_checkable
class Control(Protocol):
    """What the page lifecycle needs from a node in the control tree.

    ``on_process`` returns ``False`` to stop processing of the remaining
    controls; every other hook returns nothing.
    """

    name: str | None
    parent: Any

    @property
    def id(self) -> str | None: ...
    def on_init(self) -> None: ...
    def on_process(self) -> bool: ...
    def on_render(self) -> None: ...
    def on_destroy(self) -> None: ...
    def on_deploy(self, deployer: ResourceDeployer) -> None: ...
    def render(self, buffer: HtmlBuffer) -> None: ...


_LABEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|[_\-.]+")


def to_label(name: str) -> str:
    """Derive a display label from a control name.

    >>> to_label("firstName"), to_label("postal_code")
    ('First Name', 'Postal Code')
    """
    words = [w for w in _LABEL_BOUNDARY.split(name) if w]
    return " ".join(w[:1].upper() + w[1:] for w in words)


class BaseControl:
    """Shared implementation of the ``Control`` protocol.

    Subclasses set ``tag`` to render as an HTML element; a control with
    no tag renders nothing by default.

    The parent is a plain back-reference used for id derivation, form
    lookup and disabled/readonly inheritance. It is never used to drive
    the lifecycle: pages and containers walk their children instead.
    """

    tag: ClassVar[str | None] = None

    def __init__(self, name: str | None = None) -> None:
        self._name: str | None = None
        self.parent: Any = None
        self._attributes: AttributeBag | None = None
        self._listener: Listener | None = None
        self.messages: dict[str, str] = {}
        if name is not None:
            self.name = name

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r})"

    # -- Naming --

    @property
    def name(self) -> str | None:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        if value is None:
            msg = "Null name parameter"
            raise ValueError(msg)
        if value == self._name:
            return
        if self.parent is not None:
            msg = (
                f"Cannot rename {type(self).__name__} {self._name!r} to {value!r} "
                "after it has been added to a parent."
            )
            raise ControlStateError(msg)
        self._name = value

    @property
    def id(self) -> str | None:
        """The explicit ``id`` attribute, falling back to the name."""
        explicit = self.get_attribute("id")
        return explicit if explicit is not None else self._name

    @id.setter
    def id(self, value: str | None) -> None:
        self.set_attribute("id", value)

    # -- Attributes --

    @property
    def attributes(self) -> AttributeBag:
        if self._attributes is None:
            self._attributes = AttributeBag()
        return self._attributes

    def has_attributes(self) -> bool:
        return bool(self._attributes)

    def get_attribute(self, name: str) -> str | None:
        if self._attributes is None:
            return None
        return self._attributes.get(name)

    def set_attribute(self, name: str, value: str | None) -> None:
        """Set an HTML attribute; ``None`` removes it."""
        self.attributes.set(name, value)

    def add_style_class(self, value: str | None) -> None:
        self.attributes.add_style_class(value)

    def remove_style_class(self, value: str | None) -> None:
        if self._attributes is not None:
            self._attributes.remove_style_class(value)

    def set_style(self, name: str, value: str | None) -> None:
        self.attributes.set_style(name, value)

    def get_style(self, name: str) -> str | None:
        if self._attributes is None:
            return None
        return self._attributes.get_style(name)

    # -- Environment --

    @property
    def context(self) -> Context:
        """The current request context. Raises ``LookupError`` outside a request."""
        return get_context()

    @property
    def page(self) -> Any:
        """The page at the root of this control's tree, or ``None``."""
        node = self.parent
        while isinstance(node, BaseControl):
            node = node.parent
        return node

    # -- Listener --

    @property
    def listener(self) -> Listener | None:
        return self._listener

    @listener.setter
    def listener(self, listener: Listener | None) -> None:
        self._listener = listener

    def set_listener(self, listener: Listener) -> None:
        """Register the action callback. It takes no arguments and returns a bool."""
        if listener is None:
            msg = "Null listener parameter"
            raise ValueError(msg)
        self._listener = listener

    def dispatch_action_event(self) -> None:
        """Queue this control's listener on the current dispatch scope."""
        if self._listener is not None:
            register_action_event(self, self._listener)

    # -- Messages --

    def get_message(self, key: str, *args: Any) -> str | None:
        """Look *key* up, most specific first.

        Instance ``messages``, then bundles named after each class in the
        MRO, then the shared control bundle. ``None`` when nobody has it.
        """
        template = self.messages.get(key)
        if template is None:
            locale = _current_locale()
            for cls in type(self).__mro__:
                template = catalog.get_message(cls.__name__, locale, key)
                if template is not None:
                    break
            else:
                template = catalog.get_message(CONTROL_MESSAGES, locale, key)
        if template is None:
            return None
        return template.format(*args) if args else template

    # -- Lifecycle --

    def on_init(self) -> None:
        pass

    def on_process(self) -> bool:
        self.dispatch_action_event()
        return True

    def on_render(self) -> None:
        pass

    def on_destroy(self) -> None:
        pass

    def on_deploy(self, deployer: ResourceDeployer) -> None:
        """Copy static resources this control needs; called once at startup."""

    # -- Rendering --

    def control_size_est(self) -> int:
        size = 20
        if self.tag is not None and self.has_attributes():
            size += 20 * len(self.attributes)
        return size

    def render_tag_begin(self, tag: str, buffer: HtmlBuffer) -> None:
        buffer.elem_start(tag)
        buffer.append_attribute("name", self._name)
        buffer.append_attribute("id", self.id)
        if self._attributes:
            buffer.append_attributes(self._attributes)

    def render(self, buffer: HtmlBuffer) -> None:
        if self.tag is None:
            return
        self.render_tag_begin(self.tag, buffer)
        buffer.elem_end()

    def __str__(self) -> str:
        buffer = HtmlBuffer(self.control_size_est())
        self.render(buffer)
        return str(buffer)

    def __html__(self) -> str:
        return str(self)


def _current_locale() -> str | None:
    try:
        return get_context().locale
    except LookupError:
        return None
