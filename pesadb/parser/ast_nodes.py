"""
PesaDB Plan Nodes
=================
The parsed form of one statement. Each statement kind is its own dataclass
tagged with a QueryType; the executor dispatches on the tag.

Design:
- Plain dataclasses, built by the parser and consumed once by the executor
- Only the fields a statement kind needs
- Literal values already coerced (int, float, str, bool, None)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from pesadb.storage.schema import ColumnDefinition
from pesadb.storage.types import Value


class QueryType(Enum):
    SHOW_TABLES = "SHOW_TABLES"
    CREATE_TABLE = "CREATE_TABLE"
    INSERT = "INSERT"
    SELECT = "SELECT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    DROP_TABLE = "DROP_TABLE"
    DESCRIBE = "DESCRIBE"


def _literal(value: Value) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    return str(value)


# ═══════════════════════════════════════════════════════════════════════════
# Clauses
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class WhereClause:
    """Single predicate: column <op> literal."""
    column: str
    operator: str  # "=", "!=", "<", ">"
    value: Value

    def __str__(self) -> str:
        return f"{self.column} {self.operator} {_literal(self.value)}"


@dataclass
class JoinClause:
    """JOIN <table> ON <left> = <right>. Either side may name the joined table."""
    table: str
    left: str
    right: str
    kind: str = "INNER"  # INNER or LEFT

    def __str__(self) -> str:
        prefix = "LEFT JOIN" if self.kind == "LEFT" else "JOIN"
        return f"{prefix} {self.table} ON {self.left} = {self.right}"


@dataclass
class OrderBy:
    column: str
    direction: str = "ASC"

    @property
    def ascending(self) -> bool:
        return self.direction == "ASC"

    def __str__(self) -> str:
        return f"{self.column} {self.direction}"


@dataclass
class SelectItem:
    """Item in SELECT list: column [AS alias]."""
    column: str
    alias: Optional[str] = None

    @property
    def output_name(self) -> str:
        return self.alias or self.column

    def __str__(self) -> str:
        if self.alias:
            return f"{self.column} AS {self.alias}"
        return self.column


# ═══════════════════════════════════════════════════════════════════════════
# Statements
# ═══════════════════════════════════════════════════════════════════════════

class Statement:
    """Base class for parsed statements. Every subclass carries table_name."""
    query_type: Optional[QueryType] = None


@dataclass
class ShowTablesStmt(Statement):
    query_type = QueryType.SHOW_TABLES
    table_name: str = ""

    def __repr__(self) -> str:
        return "SHOW TABLES"


@dataclass
class CreateTableStmt(Statement):
    """CREATE TABLE table (col TYPE [PRIMARY KEY] [UNIQUE] [NOT NULL], ...)"""
    query_type = QueryType.CREATE_TABLE
    table_name: str
    columns: List[ColumnDefinition] = field(default_factory=list)

    def __repr__(self) -> str:
        cols = ", ".join(f"{c.name} {c.data_type.value}" for c in self.columns)
        return f"CREATE TABLE {self.table_name} ({cols})"


@dataclass
class InsertStmt(Statement):
    """
    INSERT INTO table (col1, col2) VALUES (val1, val2).
    columns=None means all schema columns in order.
    """
    query_type = QueryType.INSERT
    table_name: str
    columns: Optional[List[str]]
    values: List[Value]

    def __repr__(self) -> str:
        cols = f" ({', '.join(self.columns)})" if self.columns is not None else ""
        vals = ", ".join(_literal(v) for v in self.values)
        return f"INSERT INTO {self.table_name}{cols} VALUES ({vals})"


@dataclass
class SelectStmt(Statement):
    """
    SELECT cols FROM table [JOIN ...] [WHERE ...] [ORDER BY ...]
    columns=None means SELECT *.
    """
    query_type = QueryType.SELECT
    table_name: str
    columns: Optional[List[SelectItem]] = None
    joins: List[JoinClause] = field(default_factory=list)
    where: Optional[WhereClause] = None
    order_by: Optional[OrderBy] = None

    @property
    def column_names(self) -> Optional[List[str]]:
        if self.columns is None:
            return None
        return [item.column for item in self.columns]

    def __repr__(self) -> str:
        cols = ", ".join(map(str, self.columns)) if self.columns else "*"
        parts = [f"SELECT {cols} FROM {self.table_name}"]
        parts.extend(str(j) for j in self.joins)
        if self.where:
            parts.append(f"WHERE {self.where}")
        if self.order_by:
            parts.append(f"ORDER BY {self.order_by}")
        return " ".join(parts)


@dataclass
class UpdateStmt(Statement):
    """UPDATE table SET col=val, ... [WHERE col = val]"""
    query_type = QueryType.UPDATE
    table_name: str
    updates: Dict[str, Value] = field(default_factory=dict)
    where: Optional[WhereClause] = None

    def __repr__(self) -> str:
        sets = ", ".join(f"{k} = {_literal(v)}" for k, v in self.updates.items())
        stmt = f"UPDATE {self.table_name} SET {sets}"
        if self.where:
            stmt += f" WHERE {self.where}"
        return stmt


@dataclass
class DeleteStmt(Statement):
    """DELETE FROM table [WHERE col = val]"""
    query_type = QueryType.DELETE
    table_name: str
    where: Optional[WhereClause] = None

    def __repr__(self) -> str:
        stmt = f"DELETE FROM {self.table_name}"
        if self.where:
            stmt += f" WHERE {self.where}"
        return stmt


@dataclass
class DropTableStmt(Statement):
    query_type = QueryType.DROP_TABLE
    table_name: str

    def __repr__(self) -> str:
        return f"DROP TABLE {self.table_name}"


@dataclass
class DescribeStmt(Statement):
    query_type = QueryType.DESCRIBE
    table_name: str

    def __repr__(self) -> str:
        return f"DESCRIBE {self.table_name}"
