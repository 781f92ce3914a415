from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .cell_value import (
    CellType,
    coerce_value,
    deserialize_value,
    format_cell,
    serialize_value,
)
from .enum_definition import EnumDefinition

"""Column schema for balance tables.

A column owns the type tag of every cell stored under its ``column_id``. The default
value is kept in canonical serialized form and goes through the same codec as cells.
"""

__all__ = [
    "ColumnSchema",
    "Validator",
]


@runtime_checkable
class Validator(Protocol):
    """Pluggable per-column check."""

    def validate(self, value: Any) -> bool: ...

    def describe(self) -> str: ...


class ColumnSchema:
    """Definition of one table column.

    Attributes:
        column_id: Stable identifier, unique within a table, never changes
        display_name: Presentation label (mutable, need not be unique)
        data_type: CellType of every value stored in this column
        is_required: Empty/absent values fail validation with Error severity
        enum_definition: Permitted values (Enum columns only)
        asset_type: Declared handle type accepted by AssetReference columns
        validator: Optional runtime check; never persisted
    """

    def __init__(
        self,
        column_id: str,
        display_name: str,
        data_type: CellType | str,
        is_required: bool = False,
        default_value: Any = None,
        validator: Validator | None = None,
        asset_type: str | None = None,
    ) -> None:
        if not column_id or not column_id.strip():
            raise ValueError("column_id must be a non-empty string")
        self._column_id = column_id
        self.display_name = display_name
        self._data_type = CellType.parse(data_type)
        self.is_required = is_required
        self.validator = validator
        self.asset_type = asset_type if self._data_type is CellType.ASSET_REFERENCE else None
        self.enum_definition: EnumDefinition | None = None
        if self._data_type is CellType.ENUM:
            self.enum_definition = EnumDefinition(f"{display_name}_Enum")
        self._default_serialized = ""
        self.default_value = default_value

    @property
    def column_id(self) -> str:
        return self._column_id

    @property
    def data_type(self) -> CellType:
        return self._data_type

    @property
    def default_value(self) -> Any:
        if self._default_serialized == "" and self.enum_definition is not None:
            values = self.enum_definition.values
            return values[0] if values else ""
        return deserialize_value(self._default_serialized, self._data_type)

    @default_value.setter
    def default_value(self, value: Any) -> None:
        # Asset handles cannot live in a column default: there is no side-list here.
        coerced = coerce_value(value, self._data_type)
        self._default_serialized = serialize_value(coerced, self._data_type)

    @property
    def default_serialized(self) -> str:
        return self._default_serialized

    def check(self, value: Any) -> str | None:
        """Return a failure message for ``value`` or None when it passes."""
        if self.is_required and format_cell(value) == "":
            return f"{self.display_name} is required"

        if (
            self.enum_definition is not None
            and len(self.enum_definition) > 0
            and value not in (None, "")
            and value not in self.enum_definition
        ):
            return f"{value!r} is not a permitted value for {self.display_name}"

        if self.asset_type and value is not None and not self.accepts_asset(value):
            return f"{self.display_name} expects a {self.asset_type} asset"

        if self.validator is not None and not self.validator.validate(value):
            return f"{self.display_name}: {self.validator.describe()}"
        return None

    def validate(self, value: Any) -> bool:
        return self.check(value) is None

    def accepts_asset(self, handle: Any) -> bool:
        if not self.asset_type:
            return True
        declared = getattr(handle, "asset_type", None) or type(handle).__name__
        return declared == self.asset_type

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "columnId": self._column_id,
            "displayName": self.display_name,
            "dataType": self._data_type.value,
            "isRequired": self.is_required,
            "defaultValue": self._default_serialized,
        }
        if self.enum_definition is not None:
            data["enumName"] = self.enum_definition.enum_name
            data["enumValues"] = list(self.enum_definition.values)
        if self.asset_type:
            data["assetTypeDescriptor"] = self.asset_type
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ColumnSchema:
        column = cls(
            column_id=data["columnId"],
            display_name=data.get("displayName", data["columnId"]),
            data_type=data["dataType"],
            is_required=bool(data.get("isRequired", False)),
            asset_type=data.get("assetTypeDescriptor"),
        )
        # Stored verbatim; malformed defaults recover lazily through the codec
        column._default_serialized = data.get("defaultValue", "")
        if column.enum_definition is not None:
            column.enum_definition = EnumDefinition(
                data.get("enumName", column.enum_definition.enum_name),
                data.get("enumValues", []),
            )
        return column

    def __repr__(self) -> str:
        return (
            f"ColumnSchema(column_id={self._column_id!r}, display_name={self.display_name!r}, "
            f"data_type={self._data_type.value})"
        )

