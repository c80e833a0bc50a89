"""Copy field values to and from plain objects.

``copy_to``/``copy_from`` match fields to attributes by name. For each
target class a binding table (attribute name -> declared type, getter,
setter) is built once from its dataclass fields, annotations and
settable properties, then reused for every copy. Values are coerced to
the declared type on the way in; mappings are supported as targets too.

Dotted field names (``address.street``) walk nested attributes or keys.
"""

from __future__ import annotations

import dataclasses
import functools
import inspect
import logging
import types
from collections.abc import Callable, Iterable, Mapping, MutableMapping
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin, get_type_hints

if TYPE_CHECKING:
    from perch.controls.field import Field

logger = logging.getLogger("perch.controls")

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})


@dataclass(frozen=True, slots=True)
class Binding:
    """How to read and write one attribute of a target class."""

    name: str
    type: Any
    get: Callable[[Any], Any]
    set: Callable[[Any, Any], None]


def _unwrap_optional(hint: Any) -> Any:
    """``X | None`` -> ``X``; anything else unchanged."""
    if isinstance(hint, types.UnionType) or get_origin(hint) is Union:
        args = [a for a in get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def coerce(value: Any, target: Any) -> Any:
    """Convert *value* to *target* type.

    Empty strings become ``None`` for non-string targets. Raises
    ``ValueError`` (or ``TypeError``) when the conversion is impossible.
    """
    target = _unwrap_optional(target)
    if value is None or not isinstance(target, type) or target is object:
        return value
    if isinstance(value, target) and not (target is int and isinstance(value, bool)):
        if not (target is date and isinstance(value, datetime)):
            return value
    if isinstance(value, str):
        text = value.strip()
        if target is str:
            return value
        if not text:
            return None
        if target is bool:
            return text.lower() in _TRUE_STRINGS
        if target is datetime:
            return datetime.fromisoformat(text)
        if target is date:
            return date.fromisoformat(text)
        return target(text)
    if target is str:
        return value.isoformat() if isinstance(value, date) else str(value)
    if target is datetime and isinstance(value, date):
        return datetime.combine(value, time())
    if target is date and isinstance(value, datetime):
        return value.date()
    return target(value)


def _make_getter(name: str) -> Callable[[Any], Any]:
    return lambda obj: getattr(obj, name)


def _make_setter(name: str) -> Callable[[Any, Any], None]:
    return lambda obj, value: setattr(obj, name, value)


@functools.cache
def binding_table(cls: type) -> Mapping[str, Binding]:
    """Build (once per class) the name -> ``Binding`` table for *cls*."""
    try:
        hints = get_type_hints(cls)
    except (NameError, TypeError):
        hints = dict(getattr(cls, "__annotations__", {}))

    names: list[str] = []
    if dataclasses.is_dataclass(cls):
        names.extend(f.name for f in dataclasses.fields(cls))
    names.extend(n for n in hints if not n.startswith("_") and n not in names)

    table: dict[str, Binding] = {
        name: Binding(name, hints.get(name, Any), _make_getter(name), _make_setter(name))
        for name in names
    }
    for name, member in inspect.getmembers(cls, lambda m: isinstance(m, property)):
        if name.startswith("_") or member.fset is None or name in table:
            continue
        returns = inspect.signature(member.fget).return_annotation if member.fget else Any
        hint = Any if returns is inspect.Signature.empty or isinstance(returns, str) else returns
        table[name] = Binding(name, hint, _make_getter(name), _make_setter(name))
    return types.MappingProxyType(table)


def _resolve(obj: Any, path: list[str]) -> Any:
    for part in path:
        if obj is None:
            return None
        obj = obj.get(part) if isinstance(obj, Mapping) else getattr(obj, part, None)
    return obj


def _binding_for(target: Any, name: str) -> Binding | None:
    binding = binding_table(type(target)).get(name)
    if binding is None and name in getattr(target, "__dict__", {}):
        current = target.__dict__[name]
        hint = type(current) if current is not None else Any
        binding = Binding(name, hint, _make_getter(name), _make_setter(name))
    return binding


def copy_to(fields: Iterable[Field], obj: Any) -> None:
    """Copy each field's typed value onto the same-named attribute of *obj*."""
    if obj is None:
        msg = "Null object parameter"
        raise ValueError(msg)
    for field in fields:
        *path, leaf = (field.name or "").split(".")
        target = _resolve(obj, path)
        if target is None:
            continue
        if isinstance(target, MutableMapping):
            target[leaf] = field.value_object
            continue
        binding = _binding_for(target, leaf)
        if binding is None:
            continue
        binding.set(target, coerce(field.value_object, binding.type))
        logger.debug("   copied %s -> %s.%s", field.name, type(target).__name__, leaf)


def copy_from(fields: Iterable[Field], obj: Any) -> None:
    """Load each field's value from the same-named attribute of *obj*."""
    if obj is None:
        msg = "Null object parameter"
        raise ValueError(msg)
    for field in fields:
        *path, leaf = (field.name or "").split(".")
        source = _resolve(obj, path)
        if source is None:
            continue
        if isinstance(source, Mapping):
            if leaf in source:
                field.value_object = source[leaf]
            continue
        binding = _binding_for(source, leaf)
        if binding is not None:
            field.value_object = binding.get(source)
