from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from balance_forge.config.loader import AppConfig
from balance_forge.logging.error_log import ErrorLogBuffer
from balance_forge.models import CellType, ColumnSchema
from balance_forge.services.orchestrator import (
    ProcessingError,
    export_all,
    import_all,
    scan_csv_files,
    validate_all,
)
from balance_forge.services.table_store import StoreError, TableStore


def _config(root: Path, **overrides) -> AppConfig:
    values = dict(
        source_directory=str(root / "data"),
        store_directory=str(root / "store"),
        export_directory=str(root / "export"),
        logs_directory=str(root / "logs"),
    )
    values.update(overrides)
    return AppConfig(**values)


def _log_lines(path: Path | None) -> list[dict]:
    assert path is not None
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_scan_csv_files(temp_workdir: Path) -> None:
    data = temp_workdir / "data"
    (data / "units.csv").write_text("A\n1\n", encoding="utf-8")
    (data / "items.CSV").write_text("A\n1\n", encoding="utf-8")
    (data / "readme.txt").write_text("ignore", encoding="utf-8")
    (data / "nested.csv").mkdir()
    assert [p.name for p in scan_csv_files(data)] == ["items.CSV", "units.csv"]


def test_scan_missing_directory() -> None:
    with pytest.raises(ProcessingError, match="Directory not found"):
        scan_csv_files(Path("/non/existent/path"))


def test_import_empty_directory(temp_workdir: Path) -> None:
    result = import_all(_config(temp_workdir), TableStore(temp_workdir / "store"))
    assert result.total_files == 0
    assert result.total_imported_rows == 0
    assert result.error_log_path is None


def test_import_new_tables_are_saved(temp_workdir: Path) -> None:
    (temp_workdir / "data" / "items.csv").write_text("Name,Cost\nSword,10\nAxe,12\n", encoding="utf-8")
    store = TableStore(temp_workdir / "store")
    result = import_all(_config(temp_workdir), store)

    assert (result.success_files, result.failed_files, result.total_imported_rows) == (1, 0, 2)
    table = store.find_by_name("items")
    assert table is not None
    assert store.path_for(table.table_id).exists()
    assert result.file_stats[0].status == "success"


def test_reimport_refreshes_rows_and_keeps_ids(temp_workdir: Path) -> None:
    store = TableStore(temp_workdir / "store")
    existing = store.create_table(
        "items",
        [
            ColumnSchema("name", "Name", CellType.STRING, is_required=True),
            ColumnSchema("cost", "Cost", CellType.FLOAT),
        ],
    )
    (temp_workdir / "data" / "items.csv").write_text("Name,Cost\nSword,10\n", encoding="utf-8")

    result = import_all(_config(temp_workdir), store)
    assert result.success_files == 1
    assert store.find_by_name("items") is existing
    row = existing.rows[0]
    assert row.get_value("name") == "Sword"
    # re-keyed onto the existing Float column
    assert row.get_value("cost") == 10.0
    assert row.cell_type("cost") is CellType.FLOAT


def test_structure_mismatch_is_skipped(temp_workdir: Path) -> None:
    store = TableStore(temp_workdir / "store")
    existing = store.create_table("items", [ColumnSchema("name", "Name", CellType.STRING)])
    existing.add_row()
    (temp_workdir / "data" / "items.csv").write_text("Title,Cost\nSword,10\n", encoding="utf-8")

    result = import_all(_config(temp_workdir), store)
    assert result.skipped_files == 1
    assert len(existing) == 1
    records = _log_lines(result.error_log_path)
    assert records[0]["error_type"] == "STRUCTURE_MISMATCH"
    assert records[0]["row_id"] is None


def test_structure_mismatch_replaced_when_configured(temp_workdir: Path) -> None:
    store = TableStore(temp_workdir / "store")
    existing = store.create_table("items", [ColumnSchema("name", "Name", CellType.STRING)])
    (temp_workdir / "data" / "items.csv").write_text("Title,Cost\nSword,10\n", encoding="utf-8")

    result = import_all(_config(temp_workdir, replace_on_mismatch=True), store)
    assert result.success_files == 1
    replaced = store.get(existing.table_id)
    assert replaced is not existing
    assert replaced.has_structure(["Title", "Cost"])
    assert len(store) == 1


def test_type_mismatch_on_refresh_is_logged(temp_workdir: Path) -> None:
    store = TableStore(temp_workdir / "store")
    store.create_table("items", [ColumnSchema("cost", "Cost", CellType.INTEGER)])
    (temp_workdir / "data" / "items.csv").write_text("Cost\n1.5\n", encoding="utf-8")

    result = import_all(_config(temp_workdir), store)
    assert result.success_files == 1
    assert [r["error_type"] for r in _log_lines(result.error_log_path)] == ["TYPE_MISMATCH"]


def test_validation_errors_recorded(temp_workdir: Path) -> None:
    store = TableStore(temp_workdir / "store")
    store.create_table(
        "items",
        [
            ColumnSchema("name", "Name", CellType.STRING, is_required=True),
            ColumnSchema("cost", "Cost", CellType.INTEGER),
        ],
    )
    (temp_workdir / "data" / "items.csv").write_text("Name,Cost\nSword,1\n,2\n", encoding="utf-8")

    result = import_all(_config(temp_workdir), store)
    assert result.validation_errors == 1
    records = _log_lines(result.error_log_path)
    assert records[0]["error_type"] == "VALIDATION_ERROR"
    assert records[0]["column_id"] == "name"


def test_validation_can_be_disabled(temp_workdir: Path) -> None:
    store = TableStore(temp_workdir / "store")
    store.create_table("items", [ColumnSchema("name", "Name", CellType.STRING, is_required=True)])
    (temp_workdir / "data" / "items.csv").write_text("Name\n,\n", encoding="utf-8")
    result = import_all(_config(temp_workdir, validate_on_import=False), store)
    assert result.validation_errors == 0


def test_unreadable_csv_fails_that_file_only(temp_workdir: Path) -> None:
    data = temp_workdir / "data"
    (data / "empty.csv").write_text("\n\n", encoding="utf-8")
    (data / "items.csv").write_text("Name\nSword\n", encoding="utf-8")
    store = TableStore(temp_workdir / "store")

    result = import_all(_config(temp_workdir), store)
    assert (result.success_files, result.failed_files) == (1, 1)
    assert [r["error_type"] for r in _log_lines(result.error_log_path)] == ["CSV_HEADER_ERROR"]


def test_validate_all(temp_workdir: Path) -> None:
    store = TableStore(temp_workdir / "store")
    table = store.create_table("units", [ColumnSchema("id", "Id", CellType.STRING, is_required=True)])
    table.add_row()
    run = validate_all(store, ErrorLogBuffer(temp_workdir / "logs"))
    assert run.error_count == 1
    assert run.invalid_tables == 1
    records = _log_lines(run.error_log_path)
    assert records[0]["file"] == f"{table.table_id}.json"


def test_export_all(temp_workdir: Path) -> None:
    store = TableStore(temp_workdir / "store")
    table = store.create_table("units", [ColumnSchema("id", "Id", CellType.STRING)])
    row = table.add_row()
    table.set_value(row.row_id, "id", "u1")
    paths = export_all(store, temp_workdir / "export")
    assert [p.name for p in paths] == ["units.csv"]
    assert paths[0].read_text(encoding="utf-8") == "Id\nu1\n"


def test_failed_save_leaves_store_unchanged(temp_workdir: Path) -> None:
    store = TableStore(temp_workdir / "store")
    existing = store.create_table("items", [ColumnSchema("name", "Name", CellType.STRING)])
    kept = existing.add_row()
    existing.set_value(kept.row_id, "name", "Shield")
    (temp_workdir / "data" / "items.csv").write_text("Name\nSword\nAxe\n", encoding="utf-8")
    (temp_workdir / "data" / "units.csv").write_text("Id\nu1\n", encoding="utf-8")

    with patch.object(store, "save_table", side_effect=StoreError("disk full")):
        result = import_all(_config(temp_workdir), store)

    assert result.failed_files == 2
    assert [r.row_id for r in existing.rows] == [kept.row_id]
    assert existing.rows[0].get_value("name") == "Shield"
    assert store.find_by_name("units") is None
    assert len(store) == 1
    assert {r["error_type"] for r in _log_lines(result.error_log_path)} == {"STORE_ERROR"}


def test_failed_save_does_not_register_replacement(temp_workdir: Path) -> None:
    store = TableStore(temp_workdir / "store")
    existing = store.create_table("items", [ColumnSchema("name", "Name", CellType.STRING)])
    (temp_workdir / "data" / "items.csv").write_text("Title,Cost\nSword,10\n", encoding="utf-8")

    with patch.object(store, "save_table", side_effect=StoreError("disk full")):
        result = import_all(_config(temp_workdir, replace_on_mismatch=True), store)

    assert result.failed_files == 1
    assert store.get(existing.table_id) is existing
