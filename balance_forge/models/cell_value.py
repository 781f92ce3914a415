from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

"""Typed cell values and their canonical serialized form.

Every cell in a balance table holds one of a closed set of payload kinds. The kind is
carried by the owning column (``CellType``); the payload itself is a plain Python value:

    String / Enum      -> str
    Integer            -> int
    Float              -> float
    Boolean            -> bool
    Vector2 / Vector3  -> Vector2 / Vector3 dataclasses
    Color              -> Color dataclass
    AssetReference     -> any external handle (AssetRef when rebuilt from storage)

The serialized form is what gets persisted and is always re-derivable from the payload.
Asset handles are the exception: they are stored in a per-row side-list and the text form
only carries the index into that list.
"""

__all__ = [
    "AssetRef",
    "CellType",
    "CellTypeError",
    "Color",
    "Vector2",
    "Vector3",
    "asset_identity",
    "coerce_value",
    "deserialize_value",
    "format_cell",
    "parse_bool",
    "parse_float",
    "parse_int",
    "serialize_value",
    "zero_value",
]

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"^[+-]?[0-9]+$")
_FLOAT_RE = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")
_FLOAT_SPECIALS = {"nan", "+nan", "-nan", "inf", "+inf", "-inf", "infinity", "+infinity", "-infinity"}


class CellTypeError(ValueError):
    """Raised when a payload cannot be represented under the requested cell type."""


class CellType(Enum):
    """Type tag of a column and of every cell stored under it."""
    STRING = "String"
    INTEGER = "Integer"
    FLOAT = "Float"
    BOOLEAN = "Boolean"
    VECTOR2 = "Vector2"
    VECTOR3 = "Vector3"
    COLOR = "Color"
    ENUM = "Enum"
    ASSET_REFERENCE = "AssetReference"

    @classmethod
    def parse(cls, name: str | CellType) -> CellType:
        if isinstance(name, CellType):
            return name
        lowered = str(name).strip().lower()
        for member in cls:
            if member.value.lower() == lowered or member.name.lower() == lowered:
                return member
        raise CellTypeError(f"unknown cell type: {name!r}")

    @classmethod
    def of(cls, value: Any) -> CellType:
        """Infer the tag of a payload. ``None`` is treated as a String."""
        if value is None or isinstance(value, str):
            return cls.STRING
        # bool before int: bool is an int subclass
        if isinstance(value, bool):
            return cls.BOOLEAN
        if isinstance(value, int):
            return cls.INTEGER
        if isinstance(value, float):
            return cls.FLOAT
        if isinstance(value, Vector2):
            return cls.VECTOR2
        if isinstance(value, Vector3):
            return cls.VECTOR3
        if isinstance(value, Color):
            return cls.COLOR
        return cls.ASSET_REFERENCE

    @property
    def is_numeric(self) -> bool:
        return self in (CellType.INTEGER, CellType.FLOAT, CellType.BOOLEAN)


def _num(value: float) -> str:
    if isinstance(value, float) and value.is_integer() and math.isfinite(value):
        return str(int(value))
    return repr(value)


@dataclass(frozen=True)
class Vector2:
    x: float = 0.0
    y: float = 0.0

    def __str__(self) -> str:
        return f"({_num(self.x)}, {_num(self.y)})"


@dataclass(frozen=True)
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __str__(self) -> str:
        return f"({_num(self.x)}, {_num(self.y)}, {_num(self.z)})"


@dataclass(frozen=True)
class Color:
    """RGBA color with float channels in the 0..1 range (not clamped)."""
    r: float = 1.0
    g: float = 1.0
    b: float = 1.0
    a: float = 1.0

    def __str__(self) -> str:
        return f"RGBA({_num(self.r)}, {_num(self.g)}, {_num(self.b)}, {_num(self.a)})"


@dataclass(frozen=True)
class AssetRef:
    """Reference to an externally managed asset.

    Used when a handle has to be rebuilt from persisted data and no live handle
    resolver is available. ``asset_id`` is the handle's stable identity.
    """
    asset_id: str
    asset_type: str = ""
    path: str | None = None

    def __str__(self) -> str:
        return self.path or self.asset_id


_VECTOR_FIELDS: dict[CellType, tuple[type, tuple[str, ...]]] = {
    CellType.VECTOR2: (Vector2, ("x", "y")),
    CellType.VECTOR3: (Vector3, ("x", "y", "z")),
    CellType.COLOR: (Color, ("r", "g", "b", "a")),
}


def asset_identity(handle: Any) -> str:
    """Stable identity of an asset handle (``asset_id`` when present, else object id)."""
    asset_id = getattr(handle, "asset_id", None)
    if asset_id:
        return str(asset_id)
    return f"obj{id(handle)}"


def parse_int(text: str) -> int | None:
    """Locale-invariant integer parse. Returns None when ``text`` is not an integer."""
    stripped = text.strip()
    if not _INT_RE.match(stripped):
        return None
    return int(stripped)


def parse_float(text: str) -> float | None:
    """Locale-invariant float parse ('.' decimal separator, no grouping)."""
    stripped = text.strip()
    if _FLOAT_RE.match(stripped) or stripped.lower() in _FLOAT_SPECIALS:
        return float(stripped)
    return None


def parse_bool(text: str) -> bool | None:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return None


def zero_value(cell_type: CellType) -> Any:
    """Zero value substituted for missing or malformed serialized data."""
    if cell_type is CellType.INTEGER:
        return 0
    if cell_type is CellType.FLOAT:
        return 0.0
    if cell_type is CellType.BOOLEAN:
        return False
    if cell_type is CellType.VECTOR2:
        return Vector2()
    if cell_type is CellType.VECTOR3:
        return Vector3()
    if cell_type is CellType.COLOR:
        return Color()
    if cell_type is CellType.ASSET_REFERENCE:
        return None
    return ""


def format_cell(value: Any) -> str:
    """Display form of a payload, used for CSV export and string comparisons."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, float):
        return _num(value)
    return str(value)


def coerce_value(value: Any, cell_type: CellType) -> Any:
    """Convert ``value`` to the payload kind of ``cell_type``.

    ``None`` passes through unchanged (it means "absent"). Raises CellTypeError when the
    value has no sensible representation under the requested type.
    """
    if value is None:
        return None

    if cell_type in (CellType.STRING, CellType.ENUM):
        return value if isinstance(value, str) else format_cell(value)

    if cell_type is CellType.INTEGER:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            parsed = parse_int(value)
            if parsed is not None:
                return parsed
        raise CellTypeError(f"cannot store {value!r} as {cell_type.value}")

    if cell_type is CellType.FLOAT:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        if isinstance(value, str):
            parsed_f = parse_float(value)
            if parsed_f is not None:
                return parsed_f
        raise CellTypeError(f"cannot store {value!r} as {cell_type.value}")

    if cell_type is CellType.BOOLEAN:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            parsed_b = parse_bool(value)
            if parsed_b is not None:
                return parsed_b
        raise CellTypeError(f"cannot store {value!r} as {cell_type.value}")

    if cell_type in _VECTOR_FIELDS:
        cls, fields = _VECTOR_FIELDS[cell_type]
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            decoded = _decode_struct(value, cell_type)
            if decoded is not None:
                return decoded
            raise CellTypeError(f"cannot store {value!r} as {cell_type.value}")
        if isinstance(value, (tuple, list)):
            items = list(value)
            # RGB tuples are accepted for colors (alpha defaults to opaque)
            if cell_type is CellType.COLOR and len(items) == 3:
                items.append(1.0)
            if len(items) == len(fields) and all(
                isinstance(v, (int, float)) and not isinstance(v, bool) for v in items
            ):
                return cls(*(float(v) for v in items))
        raise CellTypeError(f"cannot store {value!r} as {cell_type.value}")

    # AssetReference: any handle object, but not plain text or numbers
    if isinstance(value, (str, int, float, Vector2, Vector3, Color)):
        raise CellTypeError(f"cannot store {value!r} as {cell_type.value}")
    return value


def _encode_struct(value: Any, cell_type: CellType) -> str:
    _, fields = _VECTOR_FIELDS[cell_type]
    payload = {name: float(getattr(value, name)) for name in fields}
    return json.dumps(payload, separators=(",", ":"))


def _decode_struct(text: str, cell_type: CellType) -> Any | None:
    cls, fields = _VECTOR_FIELDS[cell_type]
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None
    values = []
    for name in fields:
        raw = data.get(name)
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            return None
        values.append(float(raw))
    return cls(*values)


def serialize_value(
    value: Any,
    cell_type: CellType,
    assets: list[tuple[str, Any]] | None = None,
    column_id: str = "",
) -> str:
    """Canonical text form of ``value`` under ``cell_type``.

    For AssetReference the handle is registered in ``assets`` (a row's side-list of
    ``(key, handle)`` pairs) and its index is returned. Without a side-list an asset
    cannot be encoded and the empty string is returned.
    """
    if value is None:
        return ""
    if cell_type is CellType.BOOLEAN:
        return "True" if value else "False"
    if cell_type is CellType.INTEGER:
        return str(int(value))
    if cell_type is CellType.FLOAT:
        return repr(float(value))
    if cell_type in _VECTOR_FIELDS:
        return _encode_struct(value, cell_type)
    if cell_type is CellType.ASSET_REFERENCE:
        if assets is None:
            return ""
        key = f"{column_id}_{asset_identity(value)}"
        for index, (existing_key, _) in enumerate(assets):
            if existing_key == key:
                return str(index)
        assets.append((key, value))
        return str(len(assets) - 1)
    return str(value)


def deserialize_value(
    text: str,
    cell_type: CellType,
    assets: Sequence[tuple[str, Any]] | None = None,
) -> Any:
    """Inverse of serialize_value.

    Malformed input never raises: it is logged and the type's zero value is returned.
    """
    if text == "":
        return zero_value(cell_type)

    if cell_type in (CellType.STRING, CellType.ENUM):
        return text

    decoded: Any
    if cell_type is CellType.INTEGER:
        decoded = parse_int(text)
    elif cell_type is CellType.FLOAT:
        decoded = parse_float(text)
    elif cell_type is CellType.BOOLEAN:
        decoded = parse_bool(text)
    elif cell_type in _VECTOR_FIELDS:
        decoded = _decode_struct(text, cell_type)
    else:
        index = parse_int(text)
        if index is None or assets is None or not 0 <= index < len(assets):
            decoded = None
        else:
            return assets[index][1]

    if decoded is None:
        logger.warning(f"malformed {cell_type.value} value {text!r}; using zero value")
        return zero_value(cell_type)
    return decoded
