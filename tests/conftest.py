# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path

import pytest

from balance_forge.logging.init import reset_logging
from balance_forge.models import CellType, ColumnSchema, Table


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("BALANCE_FORGE_CONFIG", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
store_directory: ./store
export_directory: ./export
logs_directory: ./logs
replace_on_mismatch: false
validate_on_import: true
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "balance_forge.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def balance_table() -> Table:
    """Items table: name (String, required) and value (Integer) with three rows."""
    table = Table(table_name="Items")
    table.add_column(ColumnSchema("name", "Name", CellType.STRING, is_required=True))
    table.add_column(ColumnSchema("value", "Value", CellType.INTEGER))
    for name, value in [("Item1", 10), ("Item2", 20), ("Item3", 30)]:
        row = table.add_row()
        table.set_value(row.row_id, "name", name)
        table.set_value(row.row_id, "value", value)
    return table
