from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from .validation_result import ValidationError

"""ErrorRecord model for the structured error log.

One record per problem found while importing or validating a table. ``row_id`` and
``column_id`` are null for file-level or table-level errors (unreadable CSV, structure
mismatch). The JSON layout is fixed by ``contracts/error_log_schema.json``; no extra keys.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: source file name, or "" when the table did not come from a file
        table: table name
        row_id: row id, None for file/table-level errors
        column_id: column id, None when the error is not tied to one column
        error_type: error classification in UPPER_SNAKE_CASE
        message: human readable description
    """
    timestamp: str
    file: str
    table: str
    row_id: str | None
    column_id: str | None
    error_type: str
    message: str

    @staticmethod
    def create(
        file: str,
        table: str,
        error_type: str,
        message: str,
        row_id: str | None = None,
        column_id: str | None = None,
    ) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            table=table,
            row_id=row_id,
            column_id=column_id,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_validation(file: str, table: str, error: ValidationError) -> ErrorRecord:
        """Record for one ValidationResult entry; the type is ``VALIDATION_<SEVERITY>``."""
        return ErrorRecord.create(
            file=file,
            table=table,
            error_type=f"VALIDATION_{error.severity.name}",
            message=error.message,
            row_id=error.row_id,
            column_id=error.column_id,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
