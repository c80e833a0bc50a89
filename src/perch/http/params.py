"""Request parameters: query string and form body merged into one mapping.

Unlike request headers, parameters are mutable for the lifetime of a
request: a page may set parameters before forwarding, and tests set and
remove them to simulate submissions.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from urllib.parse import parse_qs


class RequestParameters(MutableMapping[str, str]):
    """Multi-valued request parameters.

    ``__getitem__`` returns the first value for a key.
    ``get_list`` returns all values for a key (checkboxes, multi-selects).
    Query string values come first, then form body values.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Iterable[str]] | None = None) -> None:
        self._data: dict[str, list[str]] = {k: list(v) for k, v in (data or {}).items()}

    @classmethod
    def from_query_string(cls, query_string: bytes) -> RequestParameters:
        parsed = parse_qs(query_string.decode("latin-1"), keep_blank_values=True)
        return cls(parsed)

    @classmethod
    def from_dict(cls, values: Mapping[str, str | Iterable[str]]) -> RequestParameters:
        """Build parameters from ``{"name": "value"}`` or ``{"name": [...]}``."""
        return cls({k: [v] if isinstance(v, str) else list(v) for k, v in values.items()})

    def merge(self, other: Mapping[str, Iterable[str]]) -> None:
        """Append every value of *other* after the existing values."""
        for key, values in other.items():
            self._data.setdefault(key, []).extend(values)

    def __getitem__(self, key: str) -> str:
        values = self._data[key]
        if not values:
            raise KeyError(key)
        return values[0]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key] = [value]

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"RequestParameters({self._data!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._data.get(key)
        if values:
            return values[0]
        return default

    def get_list(self, key: str) -> list[str]:
        return list(self._data.get(key, []))

    def set_list(self, key: str, values: Iterable[str]) -> None:
        self._data[key] = list(values)

    def copy(self) -> RequestParameters:
        return RequestParameters(self._data)
