"""Tests for perch.controls.binding: type coercion and binding tables."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

import pytest

from perch.controls.binding import binding_table, coerce, copy_from, copy_to
from perch.controls import TextField


class TestCoerce:
    def test_string_targets(self) -> None:
        assert coerce(" keep ", str) == " keep "
        assert coerce(42, str) == "42"
        assert coerce(date(2024, 1, 2), str) == "2024-01-02"

    def test_numbers(self) -> None:
        assert coerce("42", int) == 42
        assert coerce("2.5", float) == 2.5
        assert coerce("1.10", Decimal) == Decimal("1.10")
        assert coerce(3, float) == 3.0

    def test_bool(self) -> None:
        assert coerce("on", bool) is True
        assert coerce("no", bool) is False
        assert coerce(True, int) == 1

    def test_dates(self) -> None:
        assert coerce("2024-01-02", date) == date(2024, 1, 2)
        assert coerce("2024-01-02T03:04:05", datetime) == datetime(2024, 1, 2, 3, 4, 5)
        assert coerce(datetime(2024, 1, 2, 3, 4), date) == date(2024, 1, 2)
        assert coerce(date(2024, 1, 2), datetime) == datetime(2024, 1, 2)

    def test_empty_string_is_none_for_non_strings(self) -> None:
        assert coerce("", int) is None
        assert coerce("  ", date) is None

    def test_optional_unwrapped(self) -> None:
        assert coerce("7", int | None) == 7

    def test_none_and_untyped_pass_through(self) -> None:
        assert coerce(None, int) is None
        assert coerce("x", object) == "x"

    def test_impossible_conversion(self) -> None:
        with pytest.raises(ValueError):
            coerce("abc", int)


@dataclass
class Product:
    name: str = ""
    price: Decimal | None = None


class Settings:
    theme: str = "light"

    def __init__(self) -> None:
        self._size = 0

    @property
    def size(self) -> int:
        return self._size

    @size.setter
    def size(self, value: int) -> None:
        self._size = value

    @property
    def read_only(self) -> str:
        return "fixed"


class TestBindingTable:
    def test_dataclass_fields(self) -> None:
        table = binding_table(Product)
        assert set(table) == {"name", "price"}
        assert table["name"].type is str

    def test_annotations_and_settable_properties(self) -> None:
        table = binding_table(Settings)
        assert "theme" in table
        assert table["size"].type is int
        assert "read_only" not in table

    def test_cached_per_class(self) -> None:
        assert binding_table(Product) is binding_table(Product)

    def test_copy_coerces_to_declared_type(self) -> None:
        product = Product()
        copy_to([TextField("price", value="9.50")], product)
        assert product.price == Decimal("9.50")

    def test_property_setter_used(self) -> None:
        settings = Settings()
        copy_to([TextField("size", value="12")], settings)
        assert settings.size == 12

    def test_unknown_attribute_skipped(self) -> None:
        product = Product()
        copy_to([TextField("colour", value="red")], product)
        assert not hasattr(product, "colour")

    def test_instance_attribute_fallback(self) -> None:
        class Plain:
            def __init__(self) -> None:
                self.nickname = "old"

        plain = Plain()
        copy_to([TextField("nickname", value="new")], plain)
        assert plain.nickname == "new"

        field = TextField("nickname")
        copy_from([field], plain)
        assert field.value == "new"
