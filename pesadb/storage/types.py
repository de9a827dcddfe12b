"""
PesaDB Data Type System
=======================
Defines the column types INTEGER, STRING, BOOLEAN, DECIMAL and the closed set
of Python values a record may hold: int, float, str, bool and None.

Values are classified with value_kind() so insert-time checks are a match on
the classification rather than ad-hoc isinstance probing.

Teaching note:
  Records are plain dicts persisted as JSON, so the runtime value set is
  exactly what JSON round-trips: numbers, strings, booleans and null.
"""

from enum import Enum
from typing import Any, Optional, Union

Value = Union[int, float, str, bool, None]


class DataType(Enum):
    """Supported column types in PesaDB."""
    INTEGER = "INTEGER"
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    DECIMAL = "DECIMAL"


def value_kind(value: Any) -> Optional[DataType]:
    """
    Classify a runtime value. Returns None for NULL.
    bool is checked before int since bool subclasses int.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return DataType.BOOLEAN
    if isinstance(value, int):
        return DataType.INTEGER
    if isinstance(value, float):
        return DataType.DECIMAL
    if isinstance(value, str):
        return DataType.STRING
    raise TypeError(f"Unsupported value type: {type(value).__name__}")


def is_numeric(value: Any) -> bool:
    return value_kind(value) in (DataType.INTEGER, DataType.DECIMAL)


# ─── Validation ─────────────────────────────────────────────────────────────

def validate(value: Any, dtype: DataType) -> bool:
    """
    Check a non-null value against a column type at insert time.

    INTEGER accepts any number and STRING accepts text. BOOLEAN and DECIMAL
    columns are not checked.
    """
    if value is None:
        return True  # NULL handled by the nullable check

    kind = value_kind(value)
    if dtype == DataType.INTEGER:
        return kind in (DataType.INTEGER, DataType.DECIMAL)
    elif dtype == DataType.STRING:
        return kind == DataType.STRING
    elif dtype in (DataType.BOOLEAN, DataType.DECIMAL):
        return True
    return False


# ─── Comparison ─────────────────────────────────────────────────────────────

def values_equal(left: Any, right: Any) -> bool:
    """
    Strict equality: a boolean never equals a number, numbers compare by value
    (1 == 1.0), NULL equals NULL.
    """
    if is_numeric(left) and is_numeric(right):
        return left == right
    if type(left) is not type(right):
        return False
    return left == right


def compare(left: Any, right: Any) -> Optional[int]:
    """
    Three-way compare. Returns None when the values are not comparable
    (NULL on either side, or text against a number).
    """
    if left is None or right is None:
        return None
    if not (is_numeric(left) and is_numeric(right)) and type(left) is not type(right):
        return None
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def type_from_string(type_str: str) -> DataType:
    """Convert a string like 'integer' to a DataType enum member."""
    normalized = type_str.strip().upper()
    try:
        return DataType(normalized)
    except ValueError:
        raise ValueError(f"Unknown data type: {type_str!r}. "
                         f"Valid types: {[t.value for t in DataType]}")
