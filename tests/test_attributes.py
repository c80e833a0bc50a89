"""Tests for perch.controls.attributes: class and style handling."""

import pytest

from perch.controls.attributes import AttributeBag


class TestAttributeBag:
    def test_set_and_get(self) -> None:
        bag = AttributeBag()
        bag.set("title", "Hello")
        assert bag["title"] == "Hello"
        assert len(bag) == 1

    def test_set_none_removes(self) -> None:
        bag = AttributeBag()
        bag["title"] = "Hello"
        bag.set("title", None)
        assert "title" not in bag

    def test_values_are_stringified(self) -> None:
        bag = AttributeBag()
        bag.set("tabindex", 3)  # type: ignore[arg-type]
        assert bag["tabindex"] == "3"

    def test_null_name_rejected(self) -> None:
        with pytest.raises(ValueError):
            AttributeBag().set(None, "x")  # type: ignore[arg-type]

    def test_insertion_order_preserved(self) -> None:
        bag = AttributeBag()
        bag["b"] = "1"
        bag["a"] = "2"
        assert list(bag) == ["b", "a"]


class TestStyleClasses:
    def test_add_is_idempotent(self) -> None:
        bag = AttributeBag()
        bag.add_style_class("big")
        bag.add_style_class("red big")
        assert bag["class"] == "big red"

    def test_remove(self) -> None:
        bag = AttributeBag()
        bag.add_style_class("big red bold")
        bag.remove_style_class("red")
        assert bag["class"] == "big bold"
        assert bag.has_style_class("bold")
        assert not bag.has_style_class("red")

    def test_removing_last_class_drops_attribute(self) -> None:
        bag = AttributeBag()
        bag.add_style_class("error")
        bag.remove_style_class("error")
        assert "class" not in bag

    def test_none_is_ignored(self) -> None:
        bag = AttributeBag()
        bag.add_style_class(None)
        bag.remove_style_class(None)
        assert len(bag) == 0


class TestStyles:
    def test_set_style(self) -> None:
        bag = AttributeBag()
        bag.set_style("color", "red")
        bag.set_style("border", "none")
        assert bag["style"] == "color:red;border:none;"
        assert bag.get_style("border") == "none"

    def test_replace_keeps_position(self) -> None:
        bag = AttributeBag()
        bag.set_style("color", "red")
        bag.set_style("border", "none")
        bag.set_style("color", "blue")
        assert bag["style"] == "color:blue;border:none;"

    def test_remove_style(self) -> None:
        bag = AttributeBag()
        bag.set_style("color", "red")
        bag.set_style("color", None)
        assert "style" not in bag

    def test_parse_skips_malformed_entries(self) -> None:
        bag = AttributeBag()
        bag["style"] = "color: red; junk; :x; width:;margin:0"
        assert bag.styles() == {"color": "red", "margin": "0"}
