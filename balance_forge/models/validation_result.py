from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

"""Validation report models.

A table-wide validation pass never raises: every failed cell check is collected as a
ValidationError in a ValidationResult, in row-major order (rows outer, columns inner).
"""

__all__ = [
    "Severity",
    "ValidationError",
    "ValidationResult",
]


class Severity(Enum):
    """Severity of a validation finding.

    - WARNING: soft expectation (optional column rejected by its validator)
    - ERROR: hard requirement (required column empty or rejected)
    - CRITICAL: reserved for callers that escalate findings
    """
    WARNING = "Warning"
    ERROR = "Error"
    CRITICAL = "Critical"


@dataclass(frozen=True)
class ValidationError:
    """One failed cell check. Not an exception: it is reported, never raised."""
    row_id: str
    column_id: str
    message: str
    severity: Severity = Severity.ERROR


@dataclass
class ValidationResult:
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, error: ValidationError) -> None:
        self.errors.append(error)

    def has_errors(self) -> bool:
        return bool(self.errors)

    def count(self, severity: Severity) -> int:
        return sum(1 for e in self.errors if e.severity is severity)

    def for_row(self, row_id: str) -> list[ValidationError]:
        return [e for e in self.errors if e.row_id == row_id]

    def __iter__(self) -> Iterator[ValidationError]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)
