"""Deferred action-event dispatch.

Controls such as links and buttons must not run their listeners while the
page is still binding request values, otherwise a listener could read a
sibling field before it was processed. Instead, ``on_process`` registers a
(source, listener) pair with the current ``DispatchScope`` and the
lifecycle processor fires them all once processing is complete.

Scopes nest: a forwarded request pushes a new scope whose ``parent`` is
the outer one, so the forwarded page's actions never mix with the caller's.

Thread safety:
    The current scope lives in a ``ContextVar``, which is task-local under
    asyncio and thread-local under threads. Popping the last scope resets
    the variable to ``None`` so nothing leaks into the next request.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from contextvars import ContextVar
from typing import Any

from perch.errors import ControlStateError

logger = logging.getLogger("perch.dispatch")

type Listener = Callable[[], bool | None]
"""A zero-argument callable. Returning ``False`` stops further processing."""


class DispatchScope:
    """An ordered queue of action events for one logical request.

    Attributes:
        parent: The enclosing scope (``None`` for the outermost request).
    """

    __slots__ = ("_events", "parent")

    def __init__(self, parent: DispatchScope | None = None) -> None:
        self.parent = parent
        self._events: list[tuple[Any, Listener]] = []

    @property
    def events(self) -> tuple[tuple[Any, Listener], ...]:
        """Registered (source, listener) pairs in registration order."""
        return tuple(self._events)

    @property
    def depth(self) -> int:
        depth, scope = 1, self.parent
        while scope is not None:
            depth, scope = depth + 1, scope.parent
        return depth

    def register(self, source: Any, listener: Listener) -> None:
        if source is None:
            msg = "Null source parameter"
            raise ValueError(msg)
        if listener is None:
            msg = "Null listener parameter"
            raise ValueError(msg)
        self._events.append((source, listener))

    def fire(self) -> bool:
        """Invoke every listener in order; return the AND of their results.

        A listener returning ``False`` does not stop the remaining
        listeners from running. The scope is empty afterwards.
        """
        events, self._events = self._events, []
        continue_processing = True
        for source, listener in events:
            logger.debug("   invoked: %s listener %r", _describe(source), listener)
            if listener() is False:
                continue_processing = False
        return continue_processing

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)

    def __repr__(self) -> str:
        return f"<DispatchScope depth={self.depth} events={len(self._events)}>"


def _describe(source: Any) -> str:
    name = getattr(source, "name", None)
    kind = type(source).__name__
    return f"{kind}({name!r})" if name else kind


# -- Current scope --

_scope_var: ContextVar[DispatchScope | None] = ContextVar("perch_dispatch_scope", default=None)


def push_scope() -> DispatchScope:
    """Open a new scope nested inside the current one (if any)."""
    scope = DispatchScope(parent=_scope_var.get())
    _scope_var.set(scope)
    return scope


def pop_scope() -> DispatchScope:
    """Close the current scope and restore its parent.

    Raises ``ControlStateError`` when no scope is active.
    """
    scope = current_scope()
    scope.clear()
    _scope_var.set(scope.parent)
    return scope


def current_scope() -> DispatchScope:
    scope = _scope_var.get()
    if scope is None:
        msg = "No dispatch scope available"
        raise ControlStateError(msg)
    return scope


def has_scope() -> bool:
    return _scope_var.get() is not None


def register_action_event(source: Any, listener: Listener) -> None:
    """Queue *listener* on the current scope, to run after processing."""
    current_scope().register(source, listener)


def fire_action_events() -> bool:
    """Fire the current scope's events. See ``DispatchScope.fire``."""
    return current_scope().fire()


def clear_registry() -> None:
    current_scope().clear()
