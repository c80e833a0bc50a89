"""Perch exception hierarchy.

Shared across controls, pages, the lifecycle processor and the ASGI
handler so every module raises and catches the same types.

Invalid arguments (``None`` names, controls or listeners) raise the
builtin ``ValueError``; everything here is framework-specific.
"""

from dataclasses import dataclass


class PerchError(Exception):
    """Base for all perch-specific errors."""


class ConfigurationError(PerchError):
    """Raised when app or page configuration is invalid.

    Typically raised during ``App._freeze()`` at startup, or when a page
    finishes its lifecycle without a redirect, forward or path.
    """


class ControlStateError(PerchError):
    """Raised when a control is asked to do something its state forbids.

    Renaming a control that already has a parent, adding a container to
    itself, or registering an action event with no dispatch scope active.
    """


class ErrorPageError(PerchError):
    """Raised when the error page itself fails while handling an error.

    The original request failure is kept as ``original`` and chained as
    ``__cause__``; the error page's own failure is the ``__context__``.
    """

    def __init__(self, message: str, original: BaseException) -> None:
        super().__init__(message)
        self.original = original


@dataclass(frozen=True, slots=True)
class HTTPError(PerchError):
    """An error that maps directly to an HTTP status code.

    Raised by pages or the lifecycle processor. The error page renders
    with this status instead of 500.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 - conventional name in web frameworks
    """404 - no page or template is mapped to the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818 - conventional name in web frameworks
    """405 - the page does not accept this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
