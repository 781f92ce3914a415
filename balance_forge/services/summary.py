from __future__ import annotations

from ..models.processing_result import ProcessingResult, ValidationRun

"""SUMMARY line rendering for batch runs.

Import:
    SUMMARY files={total} success={n} failed={n} skipped={n} rows={n}
    validation_errors={n} validation_warnings={n} elapsed_sec={s} throughput_rps={r}

Validation:
    SUMMARY tables={n} invalid={n} rows={n} errors={n} warnings={n} elapsed_sec={s}

All on one line; numbers are rendered without scientific notation and integral values
without a fractional part.
"""

__all__ = [
    "format_number",
    "render_summary_line",
    "render_validation_summary_line",
]


def format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if abs(value) < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(result: ProcessingResult) -> str:
    """SUMMARY line for an import run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     success_files=2, failed_files=0, skipped_files=1, total_imported_rows=1000,
        ...     validation_errors=0, validation_warnings=3, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0, throughput_rows_per_sec=500.0,
        ... )
        >>> render_summary_line(result)  # doctest: +ELLIPSIS
        'SUMMARY files=3 success=2 failed=0 skipped=1 rows=1000 ...'
    """
    return (
        f"SUMMARY files={result.total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"skipped={result.skipped_files} "
        f"rows={result.total_imported_rows} "
        f"validation_errors={result.validation_errors} "
        f"validation_warnings={result.validation_warnings} "
        f"elapsed_sec={format_number(result.elapsed_seconds)} "
        f"throughput_rps={format_number(result.throughput_rows_per_sec)}"
    )


def render_validation_summary_line(run: ValidationRun) -> str:
    return (
        f"SUMMARY tables={len(run.table_stats)} "
        f"invalid={run.invalid_tables} "
        f"rows={run.total_rows} "
        f"errors={run.error_count} "
        f"warnings={run.warning_count} "
        f"elapsed_sec={format_number(run.elapsed_seconds)}"
    )
