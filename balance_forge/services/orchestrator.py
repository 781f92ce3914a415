from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import AppConfig
from ..interchange.csv_reader import CsvHeaderError, can_import, import_csv
from ..interchange.csv_writer import export_csv
from ..logging.error_log import ErrorLogBuffer
from ..models.cell_value import CellTypeError
from ..models.csv_file import CsvFile, FileStatus
from ..models.error_record import ErrorRecord
from ..models.processing_result import FileStat, ProcessingResult, TableStat, ValidationRun
from ..models.row import Row
from ..models.table import Table
from ..models.validation_result import Severity, ValidationResult
from .progress import ProgressTracker
from .table_store import StoreError, TableStore

"""Batch orchestration: import a directory of CSVs, validate and export the store.

``import_all`` handles every CSV of the source directory independently: one bad file is
recorded in the error log and the run continues with the next one. A CSV named after an
existing table refreshes that table's rows in place (ids of the table and its columns
are kept) as long as the header matches the table's columns positionally.
"""

__all__ = [
    "ProcessingError",
    "export_all",
    "import_all",
    "scan_csv_files",
    "validate_all",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal batch error (source directory missing or unreadable)."""


def scan_csv_files(directory: Path) -> list[Path]:
    """CSV files directly inside ``directory``, sorted by name.

    Raises:
        ProcessingError: directory missing, not a directory or unreadable
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        return sorted(p for p in directory.iterdir() if p.is_file() and can_import(p))
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def _validation_records(file_name: str, table: Table, result: ValidationResult) -> list[ErrorRecord]:
    return [ErrorRecord.from_validation(file_name, table.table_name, e) for e in result]


def _rows_for_existing(
    imported: Table, existing: Table, file_name: str, error_log: ErrorLogBuffer
) -> list[Row]:
    """Re-key imported rows onto the existing table's column ids and types.

    Cells that cannot be represented under the existing column type are left unset and
    reported as TYPE_MISMATCH.
    """
    pairs = list(zip(imported.columns, existing.columns, strict=True))
    rows: list[Row] = []
    for source in imported.rows:
        row = Row()
        for src_col, dst_col in pairs:
            value = source.get_value(src_col.column_id)
            if value is None:
                continue
            try:
                row.set_value(dst_col.column_id, value, dst_col.data_type)
            except CellTypeError as e:
                error_log.append(
                    ErrorRecord.create(
                        file=file_name,
                        table=existing.table_name,
                        error_type="TYPE_MISMATCH",
                        message=str(e),
                        row_id=row.row_id,
                        column_id=dst_col.column_id,
                    )
                )
        rows.append(row)
    return rows


def _replacement_table(imported: Table, existing: Table) -> Table:
    table = Table(table_name=existing.table_name, table_id=existing.table_id)
    for column in imported.columns:
        table.add_column(column)
    table.replace_rows(imported.rows)
    return table


def _failed(path: Path, table_name: str, start: datetime, error: str) -> CsvFile:
    return CsvFile(
        path=path,
        name=path.name,
        table_name=table_name,
        start_time=start,
        end_time=datetime.now(UTC),
        status=FileStatus.FAILED,
        error=error,
    )


def _import_single_file(
    path: Path, store: TableStore, config: AppConfig, error_log: ErrorLogBuffer
) -> CsvFile:
    start = datetime.now(UTC)
    table_name = path.stem

    try:
        imported = import_csv(path)
    except CsvHeaderError as e:
        error_log.append(ErrorRecord.create(path.name, table_name, "CSV_HEADER_ERROR", str(e)))
        return _failed(path, table_name, start, str(e))
    except (OSError, UnicodeDecodeError) as e:
        error_log.append(ErrorRecord.create(path.name, table_name, "READ_ERROR", str(e)))
        return _failed(path, table_name, start, str(e))

    # Nothing reaches the store until the table document is saved; an in-place refresh
    # puts the previous rows back when the save fails.
    existing = store.find_by_name(table_name)
    previous_rows: list[Row] | None = None
    if existing is None:
        table = imported
    elif existing.has_structure([c.display_name for c in imported.columns]):
        previous_rows = existing.rows
        existing.replace_rows(_rows_for_existing(imported, existing, path.name, error_log))
        table = existing
    elif config.replace_on_mismatch:
        logger.warning(f"{path.name}: columns differ from table '{table_name}', replacing it")
        table = _replacement_table(imported, existing)
    else:
        message = (
            f"columns {[c.display_name for c in imported.columns]} do not match table "
            f"'{table_name}' {[c.display_name for c in existing.columns]}"
        )
        error_log.append(ErrorRecord.create(path.name, table_name, "STRUCTURE_MISMATCH", message))
        logger.warning(f"{path.name}: {message}; skipped")
        return CsvFile(
            path=path,
            name=path.name,
            table_name=table_name,
            table_id=existing.table_id,
            start_time=start,
            end_time=datetime.now(UTC),
            status=FileStatus.SKIPPED,
            error=message,
        )

    errors = warnings = 0
    if config.validate_on_import:
        result = table.validate_data()
        error_log.extend(_validation_records(path.name, table, result))
        errors = result.count(Severity.ERROR) + result.count(Severity.CRITICAL)
        warnings = result.count(Severity.WARNING)

    try:
        store.save_table(table)
    except StoreError as e:
        if previous_rows is not None:
            table.replace_rows(previous_rows)
        error_log.append(ErrorRecord.create(path.name, table_name, "STORE_ERROR", str(e)))
        return _failed(path, table_name, start, str(e))
    store.register(table)

    return CsvFile(
        path=path,
        name=path.name,
        table_name=table_name,
        table_id=table.table_id,
        start_time=start,
        end_time=datetime.now(UTC),
        status=FileStatus.SUCCESS,
        imported_rows=len(table),
        validation_errors=errors,
        validation_warnings=warnings,
    )


def _flush(error_log: ErrorLogBuffer) -> Path | None:
    try:
        return error_log.flush()
    except OSError as e:
        logger.error(f"error log could not be written: {e}")
        return None


def import_all(config: AppConfig, store: TableStore, error_log: ErrorLogBuffer | None = None) -> ProcessingResult:
    """Import every CSV in ``config.source_directory`` into ``store``.

    Raises:
        ProcessingError: the source directory cannot be scanned
    """
    start_time = datetime.now(UTC)
    if error_log is None:
        error_log = ErrorLogBuffer(config.logs_path)

    file_paths = scan_csv_files(config.source_path)

    file_stats: list[FileStat] = []
    counts = {status: 0 for status in FileStatus}
    total_rows = validation_errors = validation_warnings = 0

    with ProgressTracker(len(file_paths), description="Importing") as progress:
        for path in file_paths:
            progress.start(path.name)
            outcome = _import_single_file(path, store, config, error_log)
            counts[outcome.status] += 1
            if outcome.status is FileStatus.SUCCESS:
                total_rows += outcome.imported_rows
                validation_errors += outcome.validation_errors
                validation_warnings += outcome.validation_warnings
            else:
                logger.debug(f"{path.name}: {outcome.status.value}: {outcome.error}")
            progress.set_postfix(
                success=counts[FileStatus.SUCCESS],
                failed=counts[FileStatus.FAILED],
                rows=total_rows,
            )
            progress.finish()

            elapsed = 0.0
            if outcome.start_time is not None and outcome.end_time is not None:
                elapsed = (outcome.end_time - outcome.start_time).total_seconds()
            file_stats.append(
                FileStat(
                    file_name=path.name,
                    status=outcome.status.value,
                    table_name=outcome.table_name,
                    imported_rows=outcome.imported_rows,
                    elapsed_seconds=elapsed,
                    validation_errors=outcome.validation_errors,
                    validation_warnings=outcome.validation_warnings,
                )
            )

    log_path = _flush(error_log)

    end_time = datetime.now(UTC)
    elapsed_seconds = (end_time - start_time).total_seconds()
    throughput_rps = total_rows / elapsed_seconds if elapsed_seconds > 0 else 0.0

    return ProcessingResult(
        success_files=counts[FileStatus.SUCCESS],
        failed_files=counts[FileStatus.FAILED],
        skipped_files=counts[FileStatus.SKIPPED],
        total_imported_rows=total_rows,
        validation_errors=validation_errors,
        validation_warnings=validation_warnings,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_rows_per_sec=throughput_rps,
        file_stats=file_stats,
        error_log_path=log_path if error_log.written else None,
    )


def validate_all(store: TableStore, error_log: ErrorLogBuffer) -> ValidationRun:
    """Validate every table in the store; findings go to ``error_log``."""
    start_time = datetime.now(UTC)
    tables = store.tables()
    stats: list[TableStat] = []

    with ProgressTracker(len(tables), description="Validating", unit="table") as progress:
        for table in tables:
            progress.start(table.table_name or table.table_id)
            result = table.validate_data()
            error_log.extend(_validation_records(store.path_for(table.table_id).name, table, result))
            stats.append(
                TableStat(
                    table_id=table.table_id,
                    table_name=table.table_name,
                    rows=len(table),
                    errors=result.count(Severity.ERROR) + result.count(Severity.CRITICAL),
                    warnings=result.count(Severity.WARNING),
                )
            )
            progress.finish()

    log_path = _flush(error_log)
    end_time = datetime.now(UTC)
    return ValidationRun(
        table_stats=stats,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        error_log_path=log_path if error_log.written else None,
    )


def export_all(store: TableStore, directory: Path, tables: Sequence[Table] | None = None) -> list[Path]:
    """Write one ``<tableName>.csv`` per table (the table id when the name is empty).

    Tables sharing a name overwrite each other's file; the last one wins.
    """
    selected = store.tables() if tables is None else list(tables)
    paths: list[Path] = []
    with ProgressTracker(len(selected), description="Exporting", unit="table") as progress:
        for table in selected:
            label = table.table_name or table.table_id
            progress.start(label)
            paths.append(export_csv(table, directory / f"{label}.csv"))
            progress.finish()
    return paths
