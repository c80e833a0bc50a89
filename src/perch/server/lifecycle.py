"""Page request lifecycle.

``PageProcessor`` turns a ``Context`` into a ``Response`` by running the
page registered for ``ctx.resource_path`` through its phases:

1. create the page, inject shared headers, format and template path,
   restore control state for stateful pages
2. ``on_init`` (page, then controls)
3. ``on_security_check``; False skips to the outcome
4. control ``on_process`` in order, stopping at the first False
   (skipped for forwarded requests)
5. fire the deferred action events, then ``on_post``/``on_get``
6. outcome: redirect, forward, or render ``path``
7. ``on_destroy`` (controls, then page), always

The lifecycle itself is synchronous: only reading the body and sending
the response await, and both happen in the ASGI handler.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from perch.context import Context, context_var
from perch.dispatch import current_scope, fire_action_events, pop_scope, push_scope
from perch.error_page import ErrorPage
from perch.errors import ConfigurationError, ErrorPageError, HTTPError, NotFound
from perch.http.headers import ResponseHeaders
from perch.http.response import Response, redirect
from perch.page import Page
from perch.templating.format import Format
from perch.templating.integration import reserved_model

if TYPE_CHECKING:
    from perch.config import AppConfig
    from perch.templating.integration import TemplateRenderer

logger = logging.getLogger("perch.server")

MAX_FORWARD_DEPTH = 10


@dataclass(frozen=True, slots=True)
class PageRoute:
    """A page class registered at a URL path, with its template."""

    path: str
    page_class: type[Page]
    template: str | None = None


def state_key(resource_path: str) -> str:
    return f"perch.page:{resource_path}"


class PageProcessor:
    """Runs pages for requests. Created once at freeze time and shared."""

    __slots__ = ("config", "pages", "renderer", "shared_headers")

    def __init__(
        self,
        config: AppConfig,
        pages: Mapping[str, PageRoute],
        renderer: TemplateRenderer | None,
    ) -> None:
        self.config = config
        self.pages = pages
        self.renderer = renderer
        self.shared_headers: dict[str, str] = dict(config.default_headers)

    # -- Entry point --

    def process(self, ctx: Context) -> Response:
        """Run the page for *ctx*; failures render through the error page."""
        page: Page | None = None
        try:
            page = self.create_page(ctx)
            return self.process_page(page, ctx)
        except Exception as exc:
            return self.handle_exception(exc, ctx, page)
        finally:
            if page is not None:
                self.destroy_page(page)

    # -- Phases --

    def create_page(self, ctx: Context) -> Page:
        route = self.pages.get(ctx.resource_path)
        if route is None:
            template = ctx.resource_path.lstrip("/")
            if not template or self.renderer is None or not self.renderer.has_template(template):
                raise NotFound(f"No page or template for {ctx.resource_path}")
            route = PageRoute(ctx.resource_path, Page, template)

        page = route.page_class()
        if page.path is None:
            page.path = route.template
        page.headers = ResponseHeaders(self.shared_headers)
        page.format = Format(ctx.locale)
        logger.debug("   invoked: %s.__init__()", type(page).__name__)

        if page.stateful:
            state = ctx.get_session_attribute(state_key(ctx.resource_path))
            if state is not None:
                page.set_state(state)
                logger.debug("   restored: %s state", type(page).__name__)
        return page

    def process_page(self, page: Page, ctx: Context) -> Response:
        name = type(page).__name__

        page.on_init()
        logger.debug("   invoked: %s.on_init()", name)
        for control in page.controls:
            control.on_init()

        continue_processing = page.on_security_check()
        logger.debug("   invoked: %s.on_security_check() : %s", name, continue_processing)

        if continue_processing:
            if page.controls and not ctx.is_forward:
                continue_processing = self.process_controls(page)
            if continue_processing:
                continue_processing = fire_action_events()
                if continue_processing:
                    if ctx.is_post:
                        page.on_post()
                        logger.debug("   invoked: %s.on_post()", name)
                    else:
                        page.on_get()
                        logger.debug("   invoked: %s.on_get()", name)

        response = self.perform_outcome(page, ctx)
        if page.stateful:
            ctx.set_session_attribute(state_key(ctx.resource_path), page.get_state())
        return response

    def process_controls(self, page: Page) -> bool:
        for control in page.controls:
            result = control.on_process()
            logger.debug("   invoked: %r.on_process() : %s", control, result)
            if not result:
                return False
        return True

    def perform_outcome(self, page: Page, ctx: Context) -> Response:
        if page.redirect:
            location = page.redirect
            root_path = ctx.request.root_path if ctx.request is not None else ""
            if location.startswith("/") and root_path and not location.startswith(root_path):
                location = root_path + location
            logger.debug("   redirect: %s", location)
            return redirect(location).with_headers(page.headers)

        if page.forward:
            return self.forward(page.forward, ctx)

        if page.path or page.template:
            body = self.render_page(page, ctx)
            return Response(
                body=body,
                status=page.status,
                content_type=page.content_type,
            ).with_headers(page.headers)

        msg = f"Path not defined for page {type(page).__name__}"
        raise ConfigurationError(msg)

    def forward(self, path: str, ctx: Context) -> Response:
        """Process the page at *path* with a forwarded context and a fresh scope."""
        if current_scope().depth >= MAX_FORWARD_DEPTH:
            msg = f"Forward depth exceeded at {path!r}; check for a forward loop"
            raise ConfigurationError(msg)
        logger.debug("   forward: %s -> %s", ctx.resource_path, path)
        forwarded = ctx.for_forward(path)
        token = context_var.set(forwarded)
        push_scope()
        try:
            return self.process(forwarded)
        finally:
            pop_scope()
            context_var.reset(token)

    def render_page(self, page: Page, ctx: Context) -> bytes:
        page.on_render()
        logger.debug("   invoked: %s.on_render()", type(page).__name__)
        for control in page.controls:
            control.on_render()

        if self.renderer is None:
            msg = "No template renderer configured"
            raise ConfigurationError(msg)
        template = page.template or page.path
        model: dict[str, Any] = {**page.model, "path": page.path}
        return self.renderer.render(template, model, reserved_model(ctx, page))  # type: ignore[arg-type]

    def destroy_page(self, page: Page) -> None:
        for control in page.controls:
            try:
                control.on_destroy()
            except Exception:
                logger.exception("on_destroy error in %r", control)
        try:
            page.on_destroy()
            logger.debug("   invoked: %s.on_destroy()", type(page).__name__)
        except Exception:
            logger.exception("on_destroy error in %s", type(page).__name__)

    # -- Errors --

    def handle_exception(self, exc: Exception, ctx: Context, page: Page | None) -> Response:
        """Render the error page for *exc*.

        Raises:
            ErrorPageError: if the error page itself fails.
        """
        if isinstance(exc, HTTPError) and exc.status < 500:
            logger.info("%d %s %s: %s", exc.status, ctx.method, ctx.resource_path, exc.detail)
        else:
            logger.exception("Error processing %s %s", ctx.method, ctx.resource_path)

        error_page = ErrorPage(exc, self.config.mode, page)
        error_page.headers = ResponseHeaders(self.shared_headers)
        error_page.format = Format(ctx.locale)
        try:
            error_page.on_init()
            if error_page.on_security_check():
                if ctx.is_post:
                    error_page.on_post()
                else:
                    error_page.on_get()
            error_page.on_render()
            body = error_page.render_body(
                self.renderer,
                self.config.error_template,
                reserved_model(ctx, error_page),
            )
        except Exception:
            logger.exception("Error page failed while handling %r", exc)
            msg = f"Error page failed while handling {type(exc).__name__}: {exc}"
            raise ErrorPageError(msg, exc) from exc
        finally:
            error_page.on_destroy()

        response = Response(
            body=body,
            status=error_page.status,
            content_type=error_page.content_type,
        ).with_headers(error_page.headers)
        if isinstance(exc, HTTPError):
            for name, value in exc.headers:
                response = response.with_header(name, value)
        return response
