from __future__ import annotations

import re
from typing import Any

from ..models.cell_value import format_cell, parse_float

"""Stock column validators.

Each validator exposes ``validate(value) -> bool`` and ``describe() -> str`` and can be
attached to a ColumnSchema. Validators are runtime-only and never persisted.
"""

__all__ = [
    "RangeValidator",
    "RegexValidator",
    "RequiredValidator",
]


class RangeValidator:
    """Accepts numeric values (or numeric-looking text) within ``[min_value, max_value]``."""

    def __init__(self, min_value: float, max_value: float) -> None:
        self.min_value = min_value
        self.max_value = max_value

    def validate(self, value: Any) -> bool:
        if value is None or isinstance(value, bool):
            return False
        if isinstance(value, (int, float)):
            number: float | None = float(value)
        else:
            number = parse_float(format_cell(value))
        if number is None:
            return False
        return self.min_value <= number <= self.max_value

    def describe(self) -> str:
        return f"Value must be between {self.min_value} and {self.max_value}"


class RegexValidator:
    """Accepts values whose display form matches ``pattern`` (re.search semantics)."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        self._regex = re.compile(pattern)

    def validate(self, value: Any) -> bool:
        if value is None:
            return False
        return self._regex.search(format_cell(value)) is not None

    def describe(self) -> str:
        return f"Value must match pattern: {self.pattern}"


class RequiredValidator:
    def validate(self, value: Any) -> bool:
        return format_cell(value) != ""

    def describe(self) -> str:
        return "This field is required"
