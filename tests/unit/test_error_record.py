from __future__ import annotations

import json
import re

from balance_forge.models import ErrorRecord, Severity, ValidationError


def test_create_sets_utc_timestamp():
    record = ErrorRecord.create("items.csv", "items", "CSV_HEADER_ERROR", "no header")
    assert re.match(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$", record.timestamp)
    assert record.row_id is None
    assert record.column_id is None


def test_to_json_line_has_fixed_keys():
    record = ErrorRecord.create("items.csv", "items", "TYPE_MISMATCH", "bad", row_id="r1", column_id="c1")
    data = json.loads(record.to_json_line())
    assert list(data) == ["timestamp", "file", "table", "row_id", "column_id", "error_type", "message"]
    assert data["row_id"] == "r1"


def test_from_validation_maps_severity():
    error = ValidationError("r1", "name", "Name is required", Severity.ERROR)
    record = ErrorRecord.from_validation("items.csv", "items", error)
    assert record.error_type == "VALIDATION_ERROR"
    assert (record.row_id, record.column_id, record.message) == ("r1", "name", "Name is required")
    warning = ErrorRecord.from_validation("", "items", ValidationError("r2", "x", "m", Severity.WARNING))
    assert warning.error_type == "VALIDATION_WARNING"


def test_non_ascii_kept_verbatim():
    record = ErrorRecord.create("アイテム.csv", "アイテム", "READ_ERROR", "読めません")
    assert "アイテム.csv" in record.to_json_line()
