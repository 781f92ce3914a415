from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

"""CsvFile processing context and FileStatus enum.

State transitions: pending -> processing -> (success | failed | skipped)
"""

__all__ = [
    "CsvFile",
    "FileStatus",
]


class FileStatus(Enum):
    """Status of one source CSV during an import run.

    - SKIPPED: an existing table of the same name has a different column structure
    """
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class CsvFile:
    """Outcome of importing a single CSV file."""
    path: Path
    name: str
    table_name: str
    table_id: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: FileStatus = FileStatus.PENDING
    imported_rows: int = 0
    validation_errors: int = 0
    validation_warnings: int = 0
    error: str | None = None
