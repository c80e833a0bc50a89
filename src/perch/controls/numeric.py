"""Number and date fields."""

from __future__ import annotations

import math
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from perch.controls.text import TextField


class NumberField(TextField):
    """Text field holding a number of ``value_type``, bounded by min/max value.

    Validation order: number format, then minimum, then maximum; an empty
    value only runs the required check.
    """

    value_type: type = float

    def __init__(
        self,
        name: str | None = None,
        label: str | None = None,
        *,
        required: bool = False,
        value: Any = None,
        min_value: float | None = None,
        max_value: float | None = None,
        size: int = 10,
    ) -> None:
        super().__init__(name, label, required=required, value=value, size=size)
        self.min_value = min_value
        self.max_value = max_value

    def parse_value(self, value: str) -> Any:
        """The number, or ``None`` for text that isn't a finite number."""
        try:
            number = self.value_type(value)
        except (TypeError, ValueError, ArithmeticError):
            return None
        if isinstance(number, Decimal):
            return number if number.is_finite() else None
        if isinstance(number, float) and not math.isfinite(number):
            return None
        return number

    def validate(self) -> None:
        if not self.value:
            super().validate()
            return
        number = self.parse_value(self.value)
        if number is None:
            self.set_error("number-format-error")
        elif self.min_value is not None and number < self.min_value:
            self.set_error("number-minvalue-error", self.min_value)
        elif self.max_value is not None and number > self.max_value:
            self.set_error("number-maxvalue-error", self.max_value)


class IntegerField(NumberField):
    value_type = int


class DoubleField(NumberField):
    value_type = float


class DecimalField(NumberField):
    value_type = Decimal


class DateField(TextField):
    """Text field holding a ``date`` parsed with a ``strptime`` format."""

    def __init__(
        self,
        name: str | None = None,
        label: str | None = None,
        *,
        required: bool = False,
        value: Any = None,
        format: str = "%Y-%m-%d",
        size: int = 10,
    ) -> None:
        self.format = format
        super().__init__(name, label, required=required, value=value, size=size)

    def parse_value(self, value: str) -> date | None:
        try:
            return datetime.strptime(value, self.format).date()
        except ValueError:
            return None

    def format_value(self, obj: Any) -> str:
        if isinstance(obj, date):
            return obj.strftime(self.format)
        return str(obj)

    def validate(self) -> None:
        if not self.value:
            super().validate()
        elif self.parse_value(self.value) is None:
            self.set_error("date-format-error", self.format)
