from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

import jsonschema
from jsonschema.exceptions import ValidationError as SchemaValidationError

from ..contracts import TABLE_ASSET_SCHEMA, load_schema
from ..models.column import ColumnSchema
from ..models.row import AssetResolver
from ..models.table import Table

"""Directory-backed registry of balance tables.

Each table is persisted as one JSON document ``<tableId>.json`` holding the table layout
(``Table.to_dict``). Documents are checked against ``contracts/table_asset_schema.json``
on both save and load. A store is an explicit object handed to whoever needs it; there
is no process-wide instance.
"""

__all__ = [
    "StoreError",
    "TableStore",
]

logger = logging.getLogger(__name__)

DOCUMENT_SUFFIX = ".json"


class StoreError(Exception):
    """Raised when a table document cannot be read, validated or written."""


def _check_document(document: object, source: str) -> None:
    try:
        jsonschema.validate(document, load_schema(TABLE_ASSET_SCHEMA))
    except SchemaValidationError as e:
        raise StoreError(f"{source}: invalid table document: {e.message}") from e


class TableStore:
    def __init__(self, directory: Path, resolve_asset: AssetResolver | None = None) -> None:
        self.directory = directory
        self.resolve_asset = resolve_asset
        self._tables: dict[str, Table] = {}

    def __len__(self) -> int:
        return len(self._tables)

    def __contains__(self, table_id: object) -> bool:
        return table_id in self._tables

    # -- registry -------------------------------------------------------------------

    def create_table(self, table_name: str, columns: Iterable[ColumnSchema] = ()) -> Table:
        table = Table(table_name=table_name)
        for column in columns:
            table.add_column(column)
        self.register(table)
        return table

    def register(self, table: Table) -> None:
        """Add ``table``; a table already registered under the same id is replaced."""
        self._tables[table.table_id] = table

    def get(self, table_id: str) -> Table | None:
        return self._tables.get(table_id)

    def find_by_name(self, table_name: str) -> Table | None:
        """First registered table called ``table_name``, or None."""
        for table in self._tables.values():
            if table.table_name == table_name:
                return table
        return None

    def tables(self) -> list[Table]:
        return list(self._tables.values())

    # -- persistence ----------------------------------------------------------------

    def path_for(self, table_id: str) -> Path:
        return self.directory / f"{table_id}{DOCUMENT_SUFFIX}"

    def save_table(self, table: Table) -> Path:
        document = table.to_dict()
        _check_document(document, table.table_name or table.table_id)
        path = self.path_for(table.table_id)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            raise StoreError(f"cannot write {path}: {e}") from e
        logger.debug(f"saved table '{table.table_name}' -> {path}")
        return path

    def load_table(self, path: Path) -> Table:
        """Read, validate and register one table document."""
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise StoreError(f"cannot read {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise StoreError(f"{path.name}: invalid JSON: {e}") from e
        _check_document(document, path.name)
        try:
            table = Table.from_dict(document, self.resolve_asset)
        except (KeyError, ValueError) as e:
            raise StoreError(f"{path.name}: {e}") from e
        self.register(table)
        return table

    def load_all(self) -> list[Table]:
        """Load every document in the store directory, in file name order.

        A missing directory is an empty store.
        """
        if not self.directory.exists():
            return []
        if not self.directory.is_dir():
            raise StoreError(f"store path is not a directory: {self.directory}")
        paths = sorted(p for p in self.directory.iterdir() if p.is_file() and p.suffix == DOCUMENT_SUFFIX)
        return [self.load_table(p) for p in paths]

    def delete_table(self, table_id: str) -> bool:
        """Unregister the table and remove its document. False when the id is unknown."""
        table = self._tables.pop(table_id, None)
        path = self.path_for(table_id)
        existed_on_disk = path.exists()
        if existed_on_disk:
            try:
                path.unlink()
            except OSError as e:
                raise StoreError(f"cannot delete {path}: {e}") from e
        return table is not None or existed_on_disk
