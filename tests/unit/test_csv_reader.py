from __future__ import annotations

from pathlib import Path

import pytest

from balance_forge.interchange.csv_reader import (
    CsvHeaderError,
    can_import,
    import_csv,
    import_csv_text,
    infer_column_types,
    split_csv_text,
)
from balance_forge.models import CellType


def test_can_import_is_case_insensitive():
    assert can_import(Path("units.CSV"))
    assert not can_import(Path("units.xlsx"))


def test_split_skips_blank_lines_and_trims():
    assert split_csv_text("a, b\n\n  \n1 ,2\n") == [["a", "b"], ["1", "2"]]


def test_type_inference_priority():
    records = [
        ["flag", "count", "ratio", "name", "mixed"],
        ["true", "1", "1.5", "Sword", "1"],
        ["False", "-2", "2", "Axe", "x"],
    ]
    types = [c.data_type for c in infer_column_types(records)]
    assert types == [CellType.BOOLEAN, CellType.INTEGER, CellType.FLOAT, CellType.STRING, CellType.STRING]


def test_import_builds_typed_table():
    table = import_csv_text("Name,HP,Speed\nGoblin,30,1.5\nOrc,55,0.75\n", "Enemies")
    assert table.table_name == "Enemies"
    assert [(c.column_id, c.display_name) for c in table.columns] == [
        ("col_0", "Name"),
        ("col_1", "HP"),
        ("col_2", "Speed"),
    ]
    assert [r.get_value("col_1") for r in table.rows] == [30, 55]
    assert table.rows[1].get_value("col_2") == 0.75


def test_empty_cells_stay_absent_and_make_the_column_string():
    table = import_csv_text("Name,HP\nGoblin,\nOrc,5\n", "Enemies")
    assert table.columns[1].data_type is CellType.STRING
    assert not table.rows[0].has_value("col_1")
    assert table.rows[1].get_value("col_1") == "5"


def test_filled_numeric_column_infers_integer():
    table = import_csv_text("Name,HP\nGoblin,7\nOrc,5\n", "Enemies")
    assert table.columns[1].data_type is CellType.INTEGER
    assert [r.get_value("col_1") for r in table.rows] == [7, 5]


def test_extra_cells_ignored_and_short_rows_allowed():
    table = import_csv_text("A,B\n1,2,3\n4\n", "T")
    assert table.rows[0].column_ids() == ["col_0", "col_1"]
    assert table.rows[1].column_ids() == ["col_0"]


def test_header_only_yields_string_columns_and_no_rows():
    table = import_csv_text("A,B\n", "T")
    assert len(table) == 0
    assert all(c.data_type is CellType.STRING for c in table.columns)


def test_no_header_raises():
    with pytest.raises(CsvHeaderError):
        import_csv_text("\n  \n", "T")


def test_import_csv_uses_stem_and_strips_bom(tmp_path: Path):
    path = tmp_path / "weapons.csv"
    path.write_text("\ufeffName,Damage\nSword,12\n", encoding="utf-8")
    table = import_csv(path)
    assert table.table_name == "weapons"
    assert table.columns[0].display_name == "Name"
