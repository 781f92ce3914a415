from __future__ import annotations

import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from .cell_value import (
    AssetRef,
    CellType,
    asset_identity,
    coerce_value,
    deserialize_value,
    serialize_value,
)

"""Row model for balance tables.

A Row stores every cell twice: the canonical serialized string (the persisted truth) and
a decoded cache built lazily on first read. Writes update both or neither.

Asset handles live in a per-row side-list of ``(key, handle)`` pairs where ``key`` is
``<column_id>_<handle identity>``; the serialized cell carries only the index. The
side-list is append-only so indices stay valid for the row's lifetime.

Rows are not thread-safe: the first read populates the decoded cache.
"""

__all__ = [
    "CellSnapshot",
    "Row",
]

AssetResolver = Callable[[AssetRef], Any]


@dataclass(frozen=True)
class CellSnapshot:
    """Verbatim capture of one cell. ``serialized is None`` means the cell was absent."""
    serialized: str | None
    cell_type: CellType | None = None

    @property
    def is_absent(self) -> bool:
        return self.serialized is None


class Row:
    def __init__(self, row_id: str | None = None, created_at: datetime | None = None) -> None:
        self._row_id = row_id or str(uuid.uuid4())
        self._created_at = created_at or datetime.now(UTC)
        self._serialized: dict[str, str] = {}
        self._types: dict[str, CellType] = {}
        self._assets: list[tuple[str, Any]] = []
        # None until first read; rebuilt from _serialized on demand
        self._decoded: dict[str, Any] | None = {}

    @property
    def row_id(self) -> str:
        return self._row_id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def asset_references(self) -> tuple[Any, ...]:
        return tuple(handle for _, handle in self._assets)

    def column_ids(self) -> list[str]:
        return list(self._serialized)

    def has_value(self, column_id: str) -> bool:
        return column_id in self._serialized

    def cell_type(self, column_id: str) -> CellType | None:
        return self._types.get(column_id)

    def get_serialized(self, column_id: str) -> str | None:
        return self._serialized.get(column_id)

    def get_value(self, column_id: str) -> Any:
        """Decoded value of ``column_id`` or None when the cell is unset."""
        self.ensure_deserialized()
        assert self._decoded is not None
        return self._decoded.get(column_id)

    def values(self) -> dict[str, Any]:
        self.ensure_deserialized()
        assert self._decoded is not None
        return dict(self._decoded)

    def set_value(self, column_id: str, value: Any, cell_type: CellType | None = None) -> None:
        """Write a cell. ``None`` clears it.

        Raises CellTypeError (before anything is touched) when ``value`` cannot be stored
        as ``cell_type``. Without an explicit type the payload's own type is used.
        """
        if value is None:
            self.clear_value(column_id)
            return
        tag = cell_type or CellType.of(value)
        payload = coerce_value(value, tag)
        self.ensure_deserialized()
        assert self._decoded is not None
        text = serialize_value(payload, tag, self._assets, column_id)
        self._serialized[column_id] = text
        self._types[column_id] = tag
        self._decoded[column_id] = payload

    def clear_value(self, column_id: str) -> None:
        self._serialized.pop(column_id, None)
        self._types.pop(column_id, None)
        if self._decoded is not None:
            self._decoded.pop(column_id, None)

    def snapshot(self, column_id: str) -> CellSnapshot:
        return CellSnapshot(self._serialized.get(column_id), self._types.get(column_id))

    def restore(self, column_id: str, snapshot: CellSnapshot) -> None:
        """Put back a cell exactly as captured by snapshot()."""
        if snapshot.serialized is None:
            self.clear_value(column_id)
            return
        tag = snapshot.cell_type or CellType.STRING
        self._serialized[column_id] = snapshot.serialized
        self._types[column_id] = tag
        if self._decoded is not None:
            self._decoded[column_id] = deserialize_value(snapshot.serialized, tag, self._assets)

    def ensure_deserialized(self) -> None:
        """Populate the decoded cache now (e.g. before sorting many rows)."""
        if self._decoded is not None:
            return
        self._decoded = {
            column_id: deserialize_value(text, self._types.get(column_id, CellType.STRING), self._assets)
            for column_id, text in self._serialized.items()
        }

    def clone(self) -> Row:
        """Copy of this row with a new id and timestamp.

        Only canonical data is copied; the clone decodes lazily and shares no mutable
        state with the source. Asset handles are shared by reference.
        """
        clone = Row()
        clone._serialized = dict(self._serialized)
        clone._types = dict(self._types)
        clone._assets = list(self._assets)
        clone._decoded = None
        return clone

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "rowId": self._row_id,
            "createdAt": self._created_at.isoformat().replace("+00:00", "Z"),
            "cellValues": dict(self._serialized),
        }
        if self._assets:
            data["assetReferenceSideList"] = [_asset_entry(key, handle) for key, handle in self._assets]
        return data

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        column_types: Mapping[str, CellType] | None = None,
        resolve_asset: AssetResolver | None = None,
    ) -> Row:
        """Rebuild a stored row. Cells are decoded lazily on first access.

        Cell types come from the owning table's columns; cells of unknown columns are
        treated as String.
        """
        created = data.get("createdAt")
        row = cls(
            row_id=data["rowId"],
            created_at=datetime.fromisoformat(created.replace("Z", "+00:00")) if created else None,
        )
        types = column_types or {}
        for column_id, text in data.get("cellValues", {}).items():
            row._serialized[column_id] = str(text)
            row._types[column_id] = types.get(column_id, CellType.STRING)
        for entry in data.get("assetReferenceSideList", []):
            ref = AssetRef(
                asset_id=entry["assetId"],
                asset_type=entry.get("assetType", ""),
                path=entry.get("path"),
            )
            row._assets.append((entry["key"], resolve_asset(ref) if resolve_asset else ref))
        row._decoded = None
        return row

    def __repr__(self) -> str:
        return f"Row(row_id={self._row_id!r}, cells={len(self._serialized)})"


def _asset_entry(key: str, handle: Any) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "key": key,
        "assetId": asset_identity(handle),
        "assetType": getattr(handle, "asset_type", None) or type(handle).__name__,
    }
    path = getattr(handle, "path", None)
    if path:
        entry["path"] = str(path)
    return entry
