"""Tests for perch.controls.link."""

import pytest

from perch.controls import ActionButton, ActionLink, PageLink
from perch.controls.button import ACTION_BUTTON
from perch.controls.link import ACTION_LINK, VALUE, Link
from perch.dispatch import fire_action_events
from perch.testing import mock_context


class TestActionLink:
    def test_href_points_back_at_current_page(self) -> None:
        link = ActionLink("delete", "Delete", value=7)
        with mock_context("/customers"):
            assert link.href == "/customers?actionLink=delete&value=7"

    def test_extra_parameters(self) -> None:
        link = ActionLink("sort")
        link.set_parameter("dir", "desc")
        with mock_context("/list"):
            assert link.href == "/list?actionLink=sort&dir=desc"
        link.set_parameter("dir", None)
        assert link.parameters == {}

    def test_clicked_fires_listener_with_value(self) -> None:
        seen: list[str | None] = []
        link = ActionLink("delete")
        link.set_listener(lambda: seen.append(link.value) or True)
        with mock_context("/customers", params={ACTION_LINK: "delete", VALUE: "7"}):
            assert link.is_clicked
            assert link.on_process() is True
            fire_action_events()
        assert seen == ["7"]

    def test_other_link_clicked(self) -> None:
        calls: list[str] = []
        link = ActionLink("delete")
        link.set_listener(lambda: calls.append("x") or True)
        with mock_context("/customers", params={ACTION_LINK: "edit"}):
            assert not link.is_clicked
            link.on_process()
            fire_action_events()
        assert calls == []

    def test_render(self) -> None:
        link = ActionLink("delete", "Delete <all>")
        link.title = "Remove"
        with mock_context("/c"):
            html = str(link)
        assert html == (
            '<a id="delete" href="/c?actionLink=delete" title="Remove">Delete &lt;all&gt;</a>'
        )

    def test_disabled_renders_span(self) -> None:
        link = ActionLink("delete", "Delete")
        link.disabled = True
        assert str(link) == '<span id="delete">Delete</span>'

    def test_label_from_name(self) -> None:
        assert ActionLink("deleteAll").label == "Delete All"


class TestPageLink:
    def test_href(self) -> None:
        assert PageLink("home", "/home").href == "/home"

    def test_href_with_parameters(self) -> None:
        link = PageLink("edit", "/edit", "Edit", {"id": 3})
        assert link.href == "/edit?id=3"

    def test_render_with_attributes(self) -> None:
        link = PageLink("home", "/home", "Home")
        link.add_style_class("nav")
        assert str(link) == '<a id="home" class="nav" href="/home">Home</a>'

    def test_link_is_not_a_field(self) -> None:
        link = PageLink("home", "/home")
        assert link.on_process() is True


class TestLink:
    def test_href_defaults_to_current_page(self) -> None:
        link = Link("refresh")
        with mock_context("/list"):
            assert link.href == "/list"
            link.set_parameter("a", 1)
            assert link.href == "/list?a=1"
            assert str(link) == '<a id="refresh" href="/list?a=1">Refresh</a>'


# ---------------------------------------------------------------------------
# ActionButton
# ---------------------------------------------------------------------------


class TestActionButton:
    def test_href(self) -> None:
        button = ActionButton("go", "Go", value=7)
        button.set_parameter("page", 2)
        with mock_context("/list"):
            assert button.href == "/list?actionButton=go&value=7&page=2"

    def test_clicked_fires_listener_with_value(self) -> None:
        seen: list[str] = []
        button = ActionButton("go")
        button.set_listener(lambda: seen.append(button.value) or True)
        with mock_context("/list", params={ACTION_BUTTON: "go", VALUE: "7"}):
            assert button.is_clicked
            assert button.on_process() is True
            fire_action_events()
        assert seen == ["7"]

    def test_other_button_clicked(self) -> None:
        calls: list[str] = []
        button = ActionButton("go")
        button.set_listener(lambda: calls.append("x") or True)
        with mock_context("/list", params={ACTION_BUTTON: "stop", "go": "1"}):
            assert not button.is_clicked
            button.on_process()
            fire_action_events()
        assert calls == []

    def test_reserved_name(self) -> None:
        with pytest.raises(ValueError, match="reserved"):
            ActionButton(ACTION_BUTTON)

    def test_render_escapes_onclick(self) -> None:
        button = ActionButton("go", "Go", value="a&b")
        with mock_context("/list"):
            html = str(button)
        assert html == (
            '<input name="go" id="go" type="button" value="Go" '
            'onclick="window.location.href=&quot;/list?actionButton=go&amp;value=a%26b&quot;;"/>'
        )
