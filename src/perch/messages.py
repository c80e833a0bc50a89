"""Localized message lookup.

Messages are grouped into named bundles (a control class name, a page
class name, or the shared ``perch-control`` bundle), each holding one
dict of templates per locale. Templates use ``str.format`` positional
placeholders: ``"{0} is required."``.

Lookup falls back from the most specific locale to the least specific
and finally to the bundle's default (locale-less) entries::

    en_GB -> en -> default
"""

from collections.abc import Mapping
from typing import Any

CONTROL_MESSAGES = "perch-control"

DEFAULT_CONTROL_MESSAGES: dict[str, str] = {
    "field-required-error": "{0} is required.",
    "field-minlength-error": "{0} must be at least {1} characters.",
    "field-maxlength-error": "{0} must be no longer than {1} characters.",
    "number-format-error": "{0} must be a number.",
    "number-minvalue-error": "{0} must be greater than or equal to {1}.",
    "number-maxvalue-error": "{0} must be less than or equal to {1}.",
    "email-format-error": "{0} is not a valid email address.",
    "date-format-error": "{0} must be a date in the format {1}.",
    "select-error": "Please select a {0} value.",
    "not-checked-error": "{0} must be checked.",
    "label-required-prefix": "",
    "label-required-suffix": '<span class="required">*</span>',
    "label-not-required-prefix": "",
    "label-not-required-suffix": "",
    "error-page-title": "Error",
    "error-page-message": "The application encountered an unexpected error.",
}


def locale_chain(locale: str | None) -> list[str]:
    """Return lookup keys from most to least specific, ending with ``""``.

    >>> locale_chain("en-GB")
    ['en_GB', 'en', '']
    """
    if not locale:
        return [""]
    parts = locale.replace("-", "_").split("_")
    chain = ["_".join(parts[:i]) for i in range(len(parts), 0, -1)]
    chain.append("")
    return chain


class MessageCatalog:
    """A registry of message bundles keyed by name and locale.

    The catalog is populated at import/startup time and read during
    requests; it is not mutated while serving.
    """

    __slots__ = ("_bundles",)

    def __init__(self) -> None:
        self._bundles: dict[str, dict[str, dict[str, str]]] = {}
        self.register(CONTROL_MESSAGES, DEFAULT_CONTROL_MESSAGES)

    def register(
        self,
        base_name: str,
        messages: Mapping[str, str],
        locale: str | None = None,
    ) -> None:
        """Add (or extend) a bundle for *locale* (``None`` = default)."""
        key = locale_chain(locale)[0]
        bundle = self._bundles.setdefault(base_name, {})
        bundle.setdefault(key, {}).update(messages)

    def get_message(self, base_name: str, locale: str | None, key: str) -> str | None:
        """Return the template for *key*, or ``None`` when no bundle has it."""
        bundle = self._bundles.get(base_name)
        if not bundle:
            return None
        for candidate in locale_chain(locale):
            messages = bundle.get(candidate)
            if messages and key in messages:
                return messages[key]
        return None

    def format(self, base_name: str, locale: str | None, key: str, *args: Any) -> str | None:
        template = self.get_message(base_name, locale, key)
        if template is None:
            return None
        return template.format(*args) if args else template

    def __contains__(self, base_name: object) -> bool:
        return base_name in self._bundles


catalog = MessageCatalog()
"""The process-wide catalog used by controls and pages."""


def get_message(base_name: str, locale: str | None, key: str) -> str | None:
    """Look *key* up in the process-wide catalog."""
    return catalog.get_message(base_name, locale, key)
