from __future__ import annotations

import json
from functools import cache
from pathlib import Path
from typing import Any

"""JSON schemas for the configuration file, persisted tables and the error log."""

__all__ = [
    "CONFIG_SCHEMA",
    "ERROR_LOG_SCHEMA",
    "SCHEMA_DIR",
    "TABLE_ASSET_SCHEMA",
    "load_schema",
]

SCHEMA_DIR = Path(__file__).parent

CONFIG_SCHEMA = "config_schema.json"
ERROR_LOG_SCHEMA = "error_log_schema.json"
TABLE_ASSET_SCHEMA = "table_asset_schema.json"


@cache
def load_schema(name: str) -> dict[str, Any]:
    """Parsed schema document. Raises OSError / json.JSONDecodeError on a broken install."""
    return json.loads((SCHEMA_DIR / name).read_text(encoding="utf-8"))
