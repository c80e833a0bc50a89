"""String attribute storage for controls.

Besides plain get/set, the bag knows two structured attributes: ``class``
(a space-delimited ordered set of tokens) and ``style`` (a
``;``-delimited ordered map of ``name:value`` pairs).
"""

from collections.abc import Iterator, MutableMapping


class AttributeBag(MutableMapping[str, str]):
    """Ordered HTML attributes for a single control.

    ``set(name, None)`` removes the attribute, so callers can pass
    optional values straight through.
    """

    __slots__ = ("_data",)

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    # -- Mapping protocol --

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        self.set(key, value)

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"AttributeBag({self._data!r})"

    def set(self, name: str, value: str | None) -> None:
        if name is None:
            msg = "Null name parameter"
            raise ValueError(msg)
        if value is None:
            self._data.pop(name, None)
        else:
            self._data[name] = str(value)

    # -- class --

    def style_classes(self) -> list[str]:
        return self._data.get("class", "").split()

    def add_style_class(self, value: str | None) -> None:
        if value is None:
            return
        classes = self.style_classes()
        for token in value.split():
            if token not in classes:
                classes.append(token)
        self._set_classes(classes)

    def remove_style_class(self, value: str | None) -> None:
        if value is None or "class" not in self._data:
            return
        remove = set(value.split())
        self._set_classes([c for c in self.style_classes() if c not in remove])

    def has_style_class(self, value: str) -> bool:
        return value in self.style_classes()

    def _set_classes(self, classes: list[str]) -> None:
        self.set("class", " ".join(classes) if classes else None)

    # -- style --

    def styles(self) -> dict[str, str]:
        """Parse the ``style`` attribute into an ordered name -> value dict.

        Entries without a ``:`` or with an empty name or value are skipped.
        """
        result: dict[str, str] = {}
        for token in self._data.get("style", "").split(";"):
            name, sep, value = token.partition(":")
            name, value = name.strip(), value.strip()
            if sep and name and value:
                result[name] = value
        return result

    def get_style(self, name: str) -> str | None:
        return self.styles().get(name)

    def set_style(self, name: str, value: str | None) -> None:
        if name is None:
            msg = "Null name parameter"
            raise ValueError(msg)
        styles = self.styles()
        if value is None:
            styles.pop(name, None)
        else:
            styles[name] = value
        if styles:
            self.set("style", "".join(f"{k}:{v};" for k, v in styles.items()))
        else:
            self.set("style", None)
