"""Perch: a component-based web MVC framework.

Pages are classes owning a tree of controls. Request parameters are bound
to typed field values, action listeners fire after every control has
bound its value, and the control tree renders itself into the page
template.

Basic usage::

    from perch import App, AppConfig, Page
    from perch.controls import Form, Submit, TextField

    app = App(AppConfig(secret_key="change-me"))

    @app.page("/hello", template="hello.html")
    class HelloPage(Page):
        def __init__(self) -> None:
            super().__init__()
            self.form = self.add_control(Form("form"))
            self.form.add(TextField("name", required=True))
            self.form.add(Submit("ok", "Greet"))

Serve ``app`` with any ASGI server.
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "Context",
    "ControlStateError",
    "ErrorPage",
    "HTTPError",
    "MethodNotAllowed",
    "NotFound",
    "Page",
    "PerchError",
    "Request",
    "Response",
    "get_context",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import perch`` fast while providing a clean top-level API.
    """
    if name == "App":
        from perch.app import App

        return App

    if name == "AppConfig":
        from perch.config import AppConfig

        return AppConfig

    if name == "Page":
        from perch.page import Page

        return Page

    if name == "ErrorPage":
        from perch.error_page import ErrorPage

        return ErrorPage

    if name == "Request":
        from perch.http.request import Request

        return Request

    if name == "Response":
        from perch.http.response import Response

        return Response

    if name in ("Context", "get_context"):
        from perch import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "ConfigurationError",
        "ControlStateError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "PerchError",
    ):
        from perch import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
