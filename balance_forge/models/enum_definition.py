from __future__ import annotations

from collections.abc import Iterable

"""Ordered value set permitted in an Enum-typed column."""

__all__ = [
    "EnumDefinition",
]


class EnumDefinition:
    """Ordered set of permitted enum strings.

    Insertion order is the display/index order. Duplicates are rejected.
    """

    def __init__(self, enum_name: str, values: Iterable[str] = ()) -> None:
        self.enum_name = enum_name
        self._values: list[str] = []
        for value in values:
            self.add_value(value)

    @property
    def values(self) -> tuple[str, ...]:
        return tuple(self._values)

    def add_value(self, value: str) -> bool:
        if value in self._values:
            return False
        self._values.append(value)
        return True

    def remove_value(self, value: str) -> bool:
        if value not in self._values:
            return False
        self._values.remove(value)
        return True

    def index_of(self, value: str) -> int:
        """Display index of ``value`` or -1 when it is not a member."""
        try:
            return self._values.index(value)
        except ValueError:
            return -1

    def __contains__(self, value: object) -> bool:
        return value in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"EnumDefinition({self.enum_name!r}, {self._values!r})"
