"""Tests for perch.messages: locale fallback and bundles."""

from perch.messages import CONTROL_MESSAGES, MessageCatalog, get_message, locale_chain


class TestLocaleChain:
    def test_specific_to_general(self) -> None:
        assert locale_chain("en-GB") == ["en_GB", "en", ""]
        assert locale_chain("nb_NO") == ["nb_NO", "nb", ""]

    def test_no_locale(self) -> None:
        assert locale_chain(None) == [""]
        assert locale_chain("") == [""]


class TestMessageCatalog:
    def test_control_bundle_registered(self) -> None:
        catalog = MessageCatalog()
        assert CONTROL_MESSAGES in catalog
        assert catalog.get_message(CONTROL_MESSAGES, None, "field-required-error") == (
            "{0} is required."
        )

    def test_fallback_order(self) -> None:
        catalog = MessageCatalog()
        catalog.register("Page", {"hi": "Hello", "bye": "Bye"})
        catalog.register("Page", {"hi": "Hei"}, locale="nb")
        catalog.register("Page", {"hi": "Hei du"}, locale="nb_NO")

        assert catalog.get_message("Page", "nb_NO", "hi") == "Hei du"
        assert catalog.get_message("Page", "nb_SE", "hi") == "Hei"
        assert catalog.get_message("Page", "nb_NO", "bye") == "Bye"
        assert catalog.get_message("Page", "fr", "hi") == "Hello"

    def test_register_extends_bundle(self) -> None:
        catalog = MessageCatalog()
        catalog.register("B", {"a": "1"})
        catalog.register("B", {"b": "2"})
        assert catalog.get_message("B", None, "a") == "1"
        assert catalog.get_message("B", None, "b") == "2"

    def test_missing(self) -> None:
        catalog = MessageCatalog()
        assert catalog.get_message("Nope", "en", "x") is None
        assert catalog.get_message(CONTROL_MESSAGES, "en", "nope") is None
        assert catalog.format("Nope", "en", "x") is None

    def test_format(self) -> None:
        catalog = MessageCatalog()
        text = catalog.format(CONTROL_MESSAGES, "en", "field-minlength-error", "Code", 3)
        assert text == "Code must be at least 3 characters."

    def test_module_level_lookup(self) -> None:
        assert get_message(CONTROL_MESSAGES, "en", "select-error") == "Please select a {0} value."
