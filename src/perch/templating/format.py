"""Value formatting helper exposed to page templates as ``format``.

Every method is null-safe: ``None`` renders as ``blank_value`` (an empty
string by default), so templates can write ``{{ format.currency(price) }}``
without guarding. Methods returning markup (``email``, ``link``) escape
their input and return kida ``Markup`` so autoescape leaves them alone.
"""

import html
import json
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any
from urllib.parse import quote

from kida.template import Markup


class Format:
    """Template formatting helper.

    Usage in a template::

        <td>{{ format.currency(order.total) }}</td>
        <td>{{ format.date(order.placed, "%d %b %Y") }}</td>
        <td>{{ format.email(customer.email) }}</td>
    """

    def __init__(
        self,
        locale: str = "en",
        *,
        blank_value: str = "",
        currency_symbol: str = "$",
        date_format: str = "%Y-%m-%d",
        time_format: str = "%H:%M:%S",
    ) -> None:
        self.locale = locale
        self.blank_value = blank_value
        self.currency_symbol = currency_symbol
        self.date_format = date_format
        self.time_format = time_format

    def blank(self, value: Any) -> str:
        """``value`` as text, or the blank value for ``None``/``""``."""
        if value is None or value == "":
            return self.blank_value
        return str(value)

    def currency(self, value: float | Decimal | None) -> str:
        if value is None:
            return self.blank_value
        amount = Decimal(str(value)).quantize(Decimal("0.01"))
        sign = "-" if amount < 0 else ""
        return f"{sign}{self.currency_symbol}{abs(amount):,.2f}"

    def decimal(self, value: float | Decimal | None, places: int = 2) -> str:
        if value is None:
            return self.blank_value
        return f"{value:,.{places}f}"

    def percentage(self, value: float | Decimal | None, places: int = 0) -> str:
        """0.25 -> ``"25%"``."""
        if value is None:
            return self.blank_value
        return f"{float(value) * 100:.{places}f}%"

    def date(self, value: date | datetime | None, pattern: str | None = None) -> str:
        if value is None:
            return self.blank_value
        return value.strftime(pattern or self.date_format)

    def time(self, value: time | datetime | None, pattern: str | None = None) -> str:
        if value is None:
            return self.blank_value
        return value.strftime(pattern or self.time_format)

    def html(self, value: Any) -> str:
        """Escape *value* for HTML text or attribute content."""
        if value is None:
            return self.blank_value
        return html.escape(str(value), quote=True)

    def javascript(self, value: Any) -> Markup:
        """*value* as a JavaScript string literal, safe inside ``<script>``."""
        if value is None:
            return Markup('""')
        literal = json.dumps(str(value))
        return Markup(literal.replace("<", "\\u003c").replace(">", "\\u003e"))

    def url(self, value: Any) -> str:
        if value is None:
            return self.blank_value
        return quote(str(value), safe="")

    def limit_length(self, value: Any, length: int, suffix: str = "...") -> str:
        """Truncate *value* to *length* characters, suffix included."""
        if value is None:
            return self.blank_value
        text = str(value)
        if len(text) <= length:
            return text
        return text[: max(length - len(suffix), 0)] + suffix

    def email(self, value: str | None, attributes: str | None = None) -> Markup | str:
        """A ``mailto:`` link for *value*."""
        if not value:
            return self.blank_value
        address = html.escape(value, quote=True)
        extra = f" {attributes}" if attributes else ""
        return Markup(f'<a href="mailto:{address}"{extra}>{address}</a>')

    def link(self, value: str | None, label: str | None = None) -> Markup | str:
        """An anchor to *value*; only http(s) and relative URLs are linked."""
        if not value:
            return self.blank_value
        href = html.escape(value, quote=True)
        text = html.escape(label if label is not None else value, quote=True)
        if not value.startswith(("http://", "https://", "/")):
            return text
        return Markup(f'<a href="{href}">{text}</a>')
