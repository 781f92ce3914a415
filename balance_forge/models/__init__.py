"""Domain models for balance tables.

This package contains the typed cell codec and the row/column/table abstractions used
by the query, command and interchange layers.
"""

from .cell_value import AssetRef, CellType, CellTypeError, Color, Vector2, Vector3
from .column import ColumnSchema, Validator
from .csv_file import CsvFile, FileStatus
from .enum_definition import EnumDefinition
from .error_record import ErrorRecord
from .row import CellSnapshot, Row
from .processing_result import FileStat, ProcessingResult, TableStat, ValidationRun
from .table import Table
from .validation_result import Severity, ValidationError, ValidationResult

__all__ = [
    # Cell values
    "AssetRef",
    "CellType",
    "CellTypeError",
    "Color",
    "Vector2",
    "Vector3",
    # Schema
    "ColumnSchema",
    "EnumDefinition",
    "Validator",
    # Data
    "CellSnapshot",
    "Row",
    "Table",
    # Validation
    "Severity",
    "ValidationError",
    "ValidationResult",
    # Batch runs
    "CsvFile",
    "ErrorRecord",
    "FileStat",
    "FileStatus",
    "ProcessingResult",
    "TableStat",
    "ValidationRun",
]
