"""Perch application class.

Mutable during setup (page registration, filters, deployable controls).
Frozen at runtime on lifespan startup or when ``__call__()`` is first
invoked.
"""

import inspect
import logging
import threading
from collections.abc import Callable
from typing import Any, TypeVar

from perch._internal.asgi import Receive, Scope, Send
from perch.config import AppConfig
from perch.controls.base import Control
from perch.deploy import ResourceDeployer, deploy_control_resources
from perch.errors import ConfigurationError
from perch.page import Page
from perch.server.handler import handle_request
from perch.server.lifecycle import PageProcessor, PageRoute
from perch.sessions import SessionStore
from perch.templating.integration import TemplateRenderer, create_environment

logger = logging.getLogger("perch.app")

P = TypeVar("P", bound=type[Page])


class App:
    """The perch application, an ASGI 3.0 callable.

    Usage::

        app = App(AppConfig(secret_key="change-me", template_dir="templates"))

        @app.page("/", template="home.html")
        class HomePage(Page):
            ...

    Serve it with any ASGI server (``uvicorn myapp:app``).

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check to ensure exactly
        one thread builds the template environment and page processor,
        even when several workers call ``__call__()`` on first request.
    """

    __slots__ = (
        "_deployables",
        "_freeze_lock",
        "_frozen",
        "_pages",
        # Compiled state (populated by _freeze)
        "_processor",
        "_session_store",
        "_shutdown_hooks",
        "_startup_hooks",
        "_template_filters",
        "_template_globals",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pages: dict[str, PageRoute] = {}
        self._deployables: list[Control] = []
        self._template_filters: dict[str, Callable[..., Any]] = {}
        self._template_globals: dict[str, Any] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._processor: PageProcessor | None = None
        self._session_store: SessionStore | None = None

    # -- Pages --

    def page(self, path: str, *, template: str | None = None) -> Callable[[P], P]:
        """Register a page class at URL *path* via decorator.

        *template* is the page template; it defaults to the class's own
        ``path`` attribute.
        """

        def decorator(page_class: P) -> P:
            self.add_page(path, page_class, template=template)
            return page_class

        return decorator

    def add_page(self, path: str, page_class: type[Page], *, template: str | None = None) -> None:
        self._check_not_frozen()
        if not path.startswith("/"):
            msg = f"Page path must start with '/': {path!r}"
            raise ConfigurationError(msg)
        if not (isinstance(page_class, type) and issubclass(page_class, Page)):
            msg = f"{page_class!r} is not a Page subclass"
            raise ConfigurationError(msg)
        if path in self._pages:
            msg = f"Duplicate page path {path!r}: {self._pages[path].page_class.__name__}"
            raise ConfigurationError(msg)
        self._pages[path] = PageRoute(path, page_class, template or page_class.path)

    @property
    def pages(self) -> dict[str, PageRoute]:
        return dict(self._pages)

    # -- Deployment --

    def deploy(self, control: Control) -> Control:
        """Register a control whose ``on_deploy`` runs once at startup."""
        self._check_not_frozen()
        self._deployables.append(control)
        return control

    # -- Template integration --

    def template_filter(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template filter."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            filter_name = name or func.__name__
            self._template_filters[filter_name] = func
            return func

        return decorator

    def template_global(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template global."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            global_name = name or func.__name__
            self._template_globals[global_name] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()
        assert self._processor is not None

        await handle_request(
            scope,
            receive,
            send,
            config=self.config,
            processor=self._processor,
            session_store=self._session_store,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before first HTTP request), then
        runs registered startup/shutdown hooks and signals completion
        back to the server.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Build the template environment, session store and page processor."""
        cfg = self.config
        logging.getLogger("perch").setLevel(cfg.log_level.upper())

        env = create_environment(cfg, self._template_filters, self._template_globals)
        renderer = TemplateRenderer(env, cfg)

        if cfg.secret_key:
            self._session_store = SessionStore(cfg)
        else:
            logger.warning(
                "No secret_key configured: sessions last for a single request "
                "and submit checks will always pass on the first round trip."
            )

        if cfg.deploy_dir is not None:
            deployer = ResourceDeployer(cfg.deploy_dir)
            deploy_control_resources(deployer)
            for control in self._deployables:
                control.on_deploy(deployer)

        self._processor = PageProcessor(cfg, dict(self._pages), renderer)
        self._frozen = True
        logger.info("%s mode: %d pages registered", cfg.mode, len(self._pages))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register pages, filters and deployable controls before serving."
            )
            raise RuntimeError(msg)
