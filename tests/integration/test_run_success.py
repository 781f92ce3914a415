from __future__ import annotations

import json
from pathlib import Path

from balance_forge.cli.__main__ import main as cli_main
from balance_forge.services.table_store import TableStore

"""Full CLI run: import a directory of CSVs, re-import, validate and export."""


def _write(path: Path, text: str) -> None:
    path.write_text(text, encoding="utf-8")


def test_import_validate_export_cycle(write_config, temp_workdir: Path, fresh_logging, capsys):
    data = temp_workdir / "data"
    _write(data / "weapons.csv", "Name,Damage,Speed,Twohanded\nSword,12,1.5,false\nMaul,30,0.6,true\n")
    _write(data / "enemies.csv", "Name,HP\nGoblin,30\nOrc,55\nTroll,120\n")

    assert cli_main(["import"]) == 0
    out = capsys.readouterr().out
    assert "SUMMARY files=2 success=2 failed=0 skipped=0 rows=5" in out

    store = TableStore(temp_workdir / "store")
    tables = {t.table_name: t for t in store.load_all()}
    assert set(tables) == {"weapons", "enemies"}
    weapon_ids = tables["weapons"].table_id

    # a second import refreshes rows in place
    _write(data / "weapons.csv", "Name,Damage,Speed,Twohanded\nDagger,5,2.0,false\n")
    assert cli_main(["import"]) == 0
    capsys.readouterr()
    reloaded = TableStore(temp_workdir / "store")
    reloaded.load_all()
    weapons = reloaded.find_by_name("weapons")
    assert weapons.table_id == weapon_ids
    assert [r.get_value("col_0") for r in weapons.rows] == ["Dagger"]

    assert cli_main(["validate"]) == 0
    assert "SUMMARY tables=2 invalid=0 rows=4 errors=0 warnings=0" in capsys.readouterr().out

    assert cli_main(["export"]) == 0
    export = temp_workdir / "export"
    assert (export / "enemies.csv").read_text(encoding="utf-8") == "Name,HP\nGoblin,30\nOrc,55\nTroll,120\n"
    assert (export / "weapons.csv").read_text(encoding="utf-8") == "Name,Damage,Speed,Twohanded\nDagger,5,2,False\n"

    document = json.loads((temp_workdir / "store" / f"{weapon_ids}.json").read_text(encoding="utf-8"))
    assert document["rows"][0]["cellValues"] == {"col_0": "Dagger", "col_1": "5", "col_2": "2.0", "col_3": "False"}
