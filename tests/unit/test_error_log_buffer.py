from __future__ import annotations

import json
import re
from pathlib import Path

from balance_forge.logging.error_log import ErrorLogBuffer
from balance_forge.models import ErrorRecord


def test_flush_writes_json_lines(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    buf.append(ErrorRecord.create("a.csv", "a", "READ_ERROR", "boom"))
    buf.extend([ErrorRecord.create("b.csv", "b", "STRUCTURE_MISMATCH", "cols", row_id=None)])
    assert len(buf) == 2

    path = buf.flush()
    assert path is not None
    assert re.match(r"^errors-\d{8}-\d{6}\.log$", path.name)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["error_type"] for line in lines] == ["READ_ERROR", "STRUCTURE_MISMATCH"]
    assert len(buf) == 0
    assert buf.written == 2


def test_flush_without_records_creates_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_later_flushes_append_to_same_file(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    buf.append(ErrorRecord.create("a.csv", "a", "READ_ERROR", "1"))
    first = buf.flush()
    buf.append(ErrorRecord.create("a.csv", "a", "READ_ERROR", "2"))
    second = buf.flush()
    assert first == second
    assert len(second.read_text(encoding="utf-8").splitlines()) == 2
