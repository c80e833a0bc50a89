"""Kida environment setup and page template rendering.

Creates a kida Environment from perch's AppConfig and binds
user-registered filters and globals. The environment and its
``TemplateRenderer`` are created once during ``App._freeze()`` and
reached by pages and panels through ``Context.renderer``.
"""

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from kida import Environment, FileSystemLoader

from perch.config import AppConfig
from perch.context import Context

logger = logging.getLogger("perch.app")

RESERVED_MODEL_KEYS = frozenset({"request", "response", "session", "context", "format"})
"""Model names always supplied by the framework."""


def create_environment(
    config: AppConfig,
    filters: dict[str, Callable[..., Any]],
    globals_: dict[str, Any],
) -> Environment:
    """Create a kida Environment from app configuration.

    Called once during ``App._freeze()``. The returned environment
    is immutable for the lifetime of the app.
    """
    env = Environment(
        loader=FileSystemLoader(str(config.template_dir)),
        autoescape=config.autoescape,
        auto_reload=config.debug,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
    )

    if filters:
        env.update_filters(filters)

    for name, value in globals_.items():
        env.add_global(name, value)

    return env


def reserved_model(ctx: Context, page: Any = None) -> dict[str, Any]:
    """The framework-supplied model entries for a page (or panel) render."""
    return {
        "request": ctx.request,
        "response": getattr(page, "headers", None),
        "session": ctx.session,
        "context": ctx,
        "format": getattr(page, "format", None),
    }


def merge_model(model: Mapping[str, Any], reserved: Mapping[str, Any]) -> dict[str, Any]:
    """Combine a user model with the reserved entries; reserved values win."""
    merged = dict(model)
    for key, value in reserved.items():
        if key in merged and merged[key] is not value:
            logger.warning(
                "Model entry %r is reserved and will be replaced by the framework value",
                key,
            )
        merged[key] = value
    return merged


class TemplateRenderer:
    """Renders named templates with a model into text or encoded bytes.

    Usage::

        renderer = TemplateRenderer(env, config)
        body = renderer.render("home.html", {"title": "Home"})
    """

    __slots__ = ("charset", "env", "template_dir")

    def __init__(self, env: Environment, config: AppConfig) -> None:
        self.env = env
        self.charset = config.charset
        self.template_dir = Path(config.template_dir)

    def has_template(self, name: str) -> bool:
        """True when the application template directory holds *name*.

        Names resolving outside the directory (``../x.html``) never match.
        """
        root = self.template_dir.resolve()
        candidate = (root / name).resolve()
        return candidate.is_relative_to(root) and candidate.is_file()

    def render_string(
        self,
        template: str,
        model: Mapping[str, Any],
        reserved: Mapping[str, Any] | None = None,
    ) -> str:
        full = merge_model(model, reserved) if reserved else dict(model)
        return self.env.get_template(template).render(full)

    def render(
        self,
        template: str,
        model: Mapping[str, Any],
        reserved: Mapping[str, Any] | None = None,
    ) -> bytes:
        return self.render_string(template, model, reserved).encode(self.charset)

    def render_source(self, source: str, model: Mapping[str, Any]) -> str:
        """Render an inline template string (used by the built-in error page)."""
        return self.env.from_string(source).render(dict(model))
