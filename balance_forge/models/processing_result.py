from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

"""Result models for batch import and validation runs.

These aggregate what the SUMMARY lines report and what the CLI turns into an exit code.
"""

__all__ = [
    "FileStat",
    "ProcessingResult",
    "TableStat",
    "ValidationRun",
]


@dataclass(frozen=True)
class FileStat:
    """Per-file import statistics."""
    file_name: str
    status: str  # success/failed/skipped
    table_name: str
    imported_rows: int
    elapsed_seconds: float
    validation_errors: int = 0
    validation_warnings: int = 0


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated result of one ``import_all`` run."""
    success_files: int
    failed_files: int
    skipped_files: int
    total_imported_rows: int
    validation_errors: int
    validation_warnings: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float
    file_stats: list[FileStat] = field(default_factory=list)
    error_log_path: Path | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files + self.skipped_files


@dataclass(frozen=True)
class TableStat:
    """Per-table validation statistics."""
    table_id: str
    table_name: str
    rows: int
    errors: int
    warnings: int

    @property
    def is_valid(self) -> bool:
        return self.errors == 0 and self.warnings == 0


@dataclass(frozen=True)
class ValidationRun:
    """Aggregated result of one ``validate_all`` run."""
    table_stats: list[TableStat]
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    error_log_path: Path | None = None

    @property
    def total_rows(self) -> int:
        return sum(s.rows for s in self.table_stats)

    @property
    def error_count(self) -> int:
        return sum(s.errors for s in self.table_stats)

    @property
    def warning_count(self) -> int:
        return sum(s.warnings for s in self.table_stats)

    @property
    def invalid_tables(self) -> int:
        return sum(1 for s in self.table_stats if not s.is_valid)
