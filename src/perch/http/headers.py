"""HTTP headers: immutable request headers and copy-on-write page headers.

``Headers`` wraps the raw byte pairs of an ASGI scope and decodes on
access. ``ResponseHeaders`` is what a page writes to: every page starts
out sharing the application's default header dict and only clones it the
first time the page edits a header.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive request headers.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header.
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        object.__setattr__(self, "_raw", raw)

    @classmethod
    def from_dict(cls, headers: Mapping[str, str]) -> Headers:
        """Build headers from a plain mapping (tests, mock contexts)."""
        return cls(
            tuple(
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in headers.items()
            )
        )

    def __getitem__(self, key: str) -> str:
        key_lower = key.lower().encode("latin-1")
        for name, value in self._raw:
            if name.lower() == key_lower:
                return value.decode("latin-1")
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = key.lower().encode("latin-1")
        return any(name.lower() == key_lower for name, _ in self._raw)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._raw:
            key = name.decode("latin-1").lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        key_lower = key.lower().encode("latin-1")
        return [value.decode("latin-1") for name, value in self._raw if name.lower() == key_lower]


class ResponseHeaders(Mapping[str, str]):
    """Page response headers with copy-on-write over a shared default dict.

    The shared dict is never mutated through this object: the first
    ``set``/``remove`` copies it and flips ``edited``.
    """

    __slots__ = ("_data", "edited")

    def __init__(self, shared: dict[str, str]) -> None:
        self._data = shared
        self.edited = False

    def _writable(self) -> dict[str, str]:
        if not self.edited:
            self._data = dict(self._data)
            self.edited = True
        return self._data

    def set(self, name: str, value: str | None) -> None:
        """Set a header; ``None`` removes it."""
        if name is None:
            msg = "Null header name parameter"
            raise ValueError(msg)
        if value is None:
            self.remove(name)
        else:
            self._writable()[name] = str(value)

    def remove(self, name: str) -> None:
        if name in self._data:
            del self._writable()[name]

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ResponseHeaders({self._data!r}, edited={self.edited})"
