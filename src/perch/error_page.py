"""Error page rendered when a page lifecycle fails.

Uses the application's ``error_template`` when the template directory
has one. Otherwise it falls back to a self-contained HTML report built
with f-strings, so a broken template environment cannot prevent error
reporting. Every interpolated value is escaped; the traceback is only
shown in development mode.
"""

from __future__ import annotations

import html
import traceback
from typing import TYPE_CHECKING, Any

from perch.errors import HTTPError
from perch.messages import CONTROL_MESSAGES, catalog
from perch.page import Page

if TYPE_CHECKING:
    from perch.templating.integration import TemplateRenderer


class ErrorPage(Page):
    """Displays *error* raised while processing *page*.

    ``mode`` is ``"development"`` or ``"production"``. The response status
    is the ``HTTPError`` status, or 500 for any other exception.
    """

    def __init__(self, error: BaseException, mode: str = "production", page: Page | None = None) -> None:
        super().__init__()
        self.error = error
        self.mode = mode
        self.page = page
        self.status = error.status if isinstance(error, HTTPError) else 500

    @property
    def is_development(self) -> bool:
        return self.mode == "development"

    @property
    def title(self) -> str:
        if isinstance(self.error, HTTPError):
            return f"{self.error.status} {self.error.detail}"
        return self._message("error-page-title")

    @property
    def message(self) -> str:
        if isinstance(self.error, HTTPError):
            return self.error.detail
        return self._message("error-page-message")

    def _message(self, key: str) -> str:
        return (
            self.get_message(key)
            or catalog.get_message(CONTROL_MESSAGES, self.context.locale, key)
            or key
        )

    @property
    def traceback_text(self) -> str | None:
        if not self.is_development:
            return None
        return "".join(traceback.format_exception(self.error))

    def on_init(self) -> None:
        self.add_model("error", self.error)
        self.add_model("mode", self.mode)
        self.add_model("status", self.status)
        self.add_model("title", self.title)
        self.add_model("message", self.message)
        self.add_model("traceback", self.traceback_text)
        self.add_model("page_class", type(self.page).__name__ if self.page else None)

    def render_body(self, renderer: TemplateRenderer | None, template: str, reserved: dict[str, Any]) -> bytes:
        """The response body: the error template if present, else built-in HTML."""
        charset = self.context.config.charset
        if renderer is not None and renderer.has_template(template):
            return renderer.render(template, self.model, reserved)
        return self.render_builtin().encode(charset)

    def render_builtin(self) -> str:
        title = html.escape(self.title)
        parts = [
            "<!DOCTYPE html>\n<html>\n<head>\n",
            f'<meta charset="{html.escape(self.context.config.charset)}">\n',
            f"<title>{title}</title>\n</head>\n<body>\n",
            f'<div class="perch-error" data-status="{self.status}">\n',
            f"<h1>{title}</h1>\n",
            f"<p>{html.escape(self.message)}</p>\n",
        ]
        if self.is_development:
            if self.page is not None:
                parts.append(f"<p>Page: <code>{html.escape(type(self.page).__name__)}</code></p>\n")
            parts.append(
                f"<p><strong>{html.escape(type(self.error).__name__)}</strong>: "
                f"{html.escape(str(self.error))}</p>\n"
            )
            parts.append(f"<pre>{html.escape(self.traceback_text or '')}</pre>\n")
        parts.append("</div>\n</body>\n</html>\n")
        return "".join(parts)

