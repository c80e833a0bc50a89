"""HTML output buffer shared by every control's ``render()``.

One buffer is threaded through the whole control tree so a page renders
in a single pass. Values are HTML-escaped on the way in; JavaScript event
attributes are the one exception and are written raw.
"""

import html
from collections.abc import Mapping

JS_ATTRIBUTES: frozenset[str] = frozenset(
    {
        "onload", "onunload", "onclick", "ondblclick", "onmousedown",
        "onmouseup", "onmouseover", "onmousemove", "onmouseout", "onfocus",
        "onblur", "onkeypress", "onkeydown", "onkeyup", "onsubmit", "onreset",
        "onselect", "onchange",
    }
)


def escape(value: object) -> str:
    """HTML-escape *value* (quotes included) for text and attribute content."""
    return html.escape(str(value), quote=True)


def is_javascript_attribute(name: str) -> bool:
    """True for event handler attributes such as ``onclick``."""
    if len(name) < 6 or len(name) > 11 or not name.startswith("on"):
        return False
    return name.lower() in JS_ATTRIBUTES


class HtmlBuffer:
    """Append-only HTML string builder.

    ``size_hint`` is the caller's estimate of the rendered length (see
    ``BaseControl.control_size_est``). Parts are collected in a list and
    joined once, so the hint is kept for introspection only.

    Usage::

        buffer = HtmlBuffer()
        buffer.elem_start("input")
        buffer.append_attribute("value", '<b>"hi"</b>')
        buffer.elem_end()
        str(buffer)  # '<input value="&lt;b&gt;&quot;hi&quot;&lt;/b&gt;"/>'
    """

    __slots__ = ("_length", "_parts", "size_hint")

    def __init__(self, size_hint: int = 64) -> None:
        self.size_hint = size_hint
        self._parts: list[str] = []
        self._length = 0

    def append(self, value: object) -> None:
        """Append *value* verbatim."""
        if value is None:
            msg = "Null value parameter"
            raise ValueError(msg)
        text = str(value)
        self._parts.append(text)
        self._length += len(text)

    def append_escaped(self, value: object) -> None:
        """Append *value* HTML-escaped."""
        if value is None:
            msg = "Null value parameter"
            raise ValueError(msg)
        self.append(escape(value))

    def append_attribute(self, name: str, value: object) -> None:
        """Append `` name="value"``; ``None`` values are skipped."""
        if name is None:
            msg = "Null name parameter"
            raise ValueError(msg)
        if value is None:
            return
        text = str(value) if is_javascript_attribute(name) else escape(value)
        self.append(f' {name}="{text}"')

    def append_attribute_disabled(self) -> None:
        self.append(' disabled="disabled"')

    def append_attribute_readonly(self) -> None:
        self.append(' readonly="readonly"')

    def append_attributes(self, attributes: Mapping[str, str]) -> None:
        """Append every attribute except ``id``, which callers render first."""
        if attributes is None:
            msg = "Null attributes parameter"
            raise ValueError(msg)
        for name, value in attributes.items():
            if name != "id":
                self.append_attribute(name, value)

    def elem_start(self, tag: str) -> None:
        self.append(f"<{tag}")

    def close_tag(self) -> None:
        self.append(">")

    def elem_end(self, tag: str | None = None) -> None:
        """Close a self-closing element, or append ``</tag>``."""
        if tag is None:
            self.append("/>")
        else:
            self.append(f"</{tag}>")

    def __len__(self) -> int:
        return self._length

    def __str__(self) -> str:
        return "".join(self._parts)

    def __repr__(self) -> str:
        return f"HtmlBuffer(length={self._length}, size_hint={self.size_hint})"
