"""Application configuration.

AppConfig is a frozen dataclass, immutable after creation. Loaded once at
startup and read-only thereafter.
"""

from dataclasses import dataclass
from pathlib import Path

DEFAULT_HEADERS: tuple[tuple[str, str], ...] = (
    ("Pragma", "no-cache"),
    ("Cache-Control", "no-store, no-cache, must-revalidate, max-age=0"),
)


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, secret_key="s3cr3t", template_dir="pages")
    """

    # Application
    debug: bool = False  # Development mode: detailed error pages, lifecycle trace
    secret_key: str = ""
    locale: str = "en"  # Fallback when the request has no Accept-Language
    charset: str = "utf-8"

    # Templates
    template_dir: str | Path = "templates"
    autoescape: bool = True
    trim_blocks: bool = True
    lstrip_blocks: bool = True
    error_template: str = "error.html"  # Rendered by ErrorPage when present in template_dir

    # Pages: shared by every page until the page edits its own copy
    default_headers: tuple[tuple[str, str], ...] = DEFAULT_HEADERS

    # Sessions (signed cookie, requires secret_key)
    session_cookie: str = "perch_session"
    session_max_age: int = 86400  # 24 hours
    session_path: str = "/"
    session_secure: bool = False
    session_httponly: bool = True
    session_samesite: str = "lax"

    # Deployment of control resources (None disables deployment)
    deploy_dir: str | Path | None = None

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB

    # Logging
    log_level: str = "info"

    @property
    def mode(self) -> str:
        """``"development"`` or ``"production"``, exposed to the error page."""
        return "development" if self.debug else "production"
