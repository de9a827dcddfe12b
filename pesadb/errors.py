"""
PesaDB Errors
=============
Error kinds raised by the parser, executor and storage engine.

None of these escape the engine facade: the executor turns them into failed
QueryResults, and the facade wraps parse failures the same way.
"""

from typing import Optional


class PesaDBError(Exception):
    """Base class for all engine errors."""
    pass


class ParseError(PesaDBError):
    """Statement text does not match the grammar (the SyntaxError kind)."""

    def __init__(self, message: str, token=None):
        if token is not None:
            message = f"{message} at line {token.line}:{token.col}"
        super().__init__(message)
        self.token = token


class TableNotFoundError(PesaDBError):
    def __init__(self, table_name: str, role: str = "Table"):
        super().__init__(f"{role} {table_name} not found.")
        self.table_name = table_name


class DuplicateTableError(PesaDBError):
    def __init__(self, table_name: str):
        super().__init__(f"Table {table_name} already exists.")
        self.table_name = table_name


class ColumnNotFoundError(PesaDBError):
    def __init__(self, column: str, table_name: str):
        super().__init__(f"Column {column} does not exist in table {table_name}.")
        self.column = column
        self.table_name = table_name


class NotNullViolation(PesaDBError):
    def __init__(self, column: str):
        super().__init__(f"Column {column} cannot be null.")
        self.column = column


class TypeMismatchError(PesaDBError):
    def __init__(self, column: str, expected: str, value=None):
        super().__init__(f"Column {column} expects {expected}, got {value!r}.")
        self.column = column
        self.expected = expected


class UniqueViolation(PesaDBError):
    def __init__(self, column: str, value):
        super().__init__(
            f"Unique constraint violation on {column}. Value {value!r} already exists."
        )
        self.column = column
        self.value = value


class SchemaError(PesaDBError):
    """Invalid table definition (repeated column, second primary key)."""
    pass


class UnsupportedStatementError(PesaDBError):
    def __init__(self, kind: Optional[str]):
        super().__init__(f"Execution for {kind} not implemented.")
        self.kind = kind


class StorageError(PesaDBError):
    """A stored blob could not be decoded."""
    pass
