"""
PesaDB Query Executor
=====================
Interprets parsed plans against the storage engine.

Contract:
  - execute(plan) never raises; every failure becomes QueryResult(success=False)
  - Elapsed wall-clock time (ms) is attached to every result
  - Writes are validated against an in-memory copy of the table and then
    persisted with a single save_table call, so a failing statement leaves
    stored state untouched
"""

import math
import time
from typing import Callable, Dict, List

from pesadb.errors import (
    ColumnNotFoundError, DuplicateTableError, NotNullViolation, PesaDBError,
    SchemaError, StorageError, TableNotFoundError, TypeMismatchError,
    UniqueViolation, UnsupportedStatementError,
)
from pesadb.execution.operators import (
    filter_rows, matches, nested_loop_join, project_rows, sort_rows,
)
from pesadb.execution.result import QueryResult
from pesadb.parser.ast_nodes import (
    CreateTableStmt, DeleteStmt, DescribeStmt, DropTableStmt, InsertStmt,
    QueryType, SelectStmt, Statement, UpdateStmt,
)
from pesadb.storage.engine import StorageEngine, TableData
from pesadb.storage.schema import TableSchema
from pesadb.storage.types import is_numeric, validate, values_equal
from pesadb.utils.logging import get_logger

log = get_logger(__name__)

DESCRIBE_COLUMNS = ["name", "type", "primaryKey", "unique", "nullable"]


class QueryExecutor:
    """
    Executes plans.

    Usage:
        executor = QueryExecutor(StorageEngine(MemoryStore()))
        result = executor.execute(parse("SHOW TABLES"))
    """

    def __init__(self, storage: StorageEngine):
        self.storage = storage
        self._handlers: Dict[QueryType, Callable[[Statement], QueryResult]] = {
            QueryType.SHOW_TABLES: self._show_tables,
            QueryType.CREATE_TABLE: self._create_table,
            QueryType.INSERT: self._insert,
            QueryType.SELECT: self._select,
            QueryType.UPDATE: self._update,
            QueryType.DELETE: self._delete,
            QueryType.DROP_TABLE: self._drop_table,
            QueryType.DESCRIBE: self._describe,
        }

    def execute(self, plan: Statement) -> QueryResult:
        start = time.perf_counter()
        try:
            handler = self._handlers.get(plan.query_type)
            if handler is None:
                kind = plan.query_type.value if plan.query_type else type(plan).__name__
                raise UnsupportedStatementError(kind)
            result = handler(plan)
        except PesaDBError as e:
            return QueryResult.failure(str(e))
        except Exception as e:
            log.exception("unexpected failure executing %r", plan)
            return QueryResult.failure(f"Internal error: {e}")
        result.execution_time = (time.perf_counter() - start) * 1000.0
        return result

    # ─── Helpers ────────────────────────────────────────────────────

    def _require_table(self, name: str, role: str = "Table") -> TableData:
        """Load a table that the catalog says exists."""
        if not self.storage.table_exists(name):
            raise TableNotFoundError(name, role)
        table = self.storage.load_table(name)
        if table is None:
            raise StorageError(f"Table {name} is in the catalog but its data is missing.")
        return table

    # ─── Statements ─────────────────────────────────────────────────

    def _show_tables(self, plan: Statement) -> QueryResult:
        tables = self.storage.get_catalog()
        return QueryResult(
            success=True,
            message=f"Found {len(tables)} tables",
            data=[{"table_name": name} for name in tables],
            columns=["table_name"],
        )

    def _create_table(self, plan: CreateTableStmt) -> QueryResult:
        if self.storage.table_exists(plan.table_name):
            raise DuplicateTableError(plan.table_name)

        schema = TableSchema(name=plan.table_name, columns=list(plan.columns))
        schema.validate()
        self.storage.save_table(plan.table_name, schema, [])
        return QueryResult(success=True, message=f"Table {plan.table_name} created successfully.")

    def _insert(self, plan: InsertStmt) -> QueryResult:
        table = self._require_table(plan.table_name)
        schema = table.schema

        columns = plan.columns
        if columns is None:
            columns = schema.column_names()
            if len(columns) != len(plan.values):
                raise SchemaError(
                    f"Table {plan.table_name} has {len(columns)} columns "
                    f"but {len(plan.values)} values were supplied."
                )
        for name in columns:
            if not schema.has_column(name):
                raise ColumnNotFoundError(name, plan.table_name)
        supplied = dict(zip(columns, plan.values))

        record = {}
        for col in schema.columns:
            value = supplied.get(col.name)
            if value is None:
                if not col.nullable and not col.primary_key:
                    raise NotNullViolation(col.name)
                record[col.name] = None
                continue

            if not validate(value, col.data_type):
                raise TypeMismatchError(col.name, col.data_type.value, value)

            if col.primary_key or col.unique:
                if any(values_equal(r.get(col.name), value) for r in table.records):
                    raise UniqueViolation(col.name, value)

            record[col.name] = value

        pk = schema.primary_key
        if pk is not None and is_numeric(record[pk.name]):
            schema.sequence = max(schema.sequence, math.floor(record[pk.name]))

        table.records.append(record)
        self.storage.save_table(plan.table_name, schema, table.records)
        return QueryResult(success=True, message=f"1 row inserted into {plan.table_name}.")

    def _select(self, plan: SelectStmt) -> QueryResult:
        main = self._require_table(plan.table_name)
        rows = [dict(r) for r in main.records]

        # 1. Joins
        for join in plan.joins:
            right = self._require_table(join.table, role="Join table")
            rows = nested_loop_join(rows, right.records, join, plan.table_name,
                                    right.schema.column_names())

        # 2. Filter
        if plan.where is not None:
            rows = filter_rows(rows, plan.where, plan.table_name)

        # 3. Order
        if plan.order_by is not None:
            rows = sort_rows(rows, plan.order_by, plan.table_name)

        # 4. Project
        if plan.columns:
            rows = project_rows(rows, plan.columns, plan.table_name)

        if rows:
            output_columns = list(rows[0].keys())
        elif plan.columns:
            output_columns = [item.output_name for item in plan.columns]
        else:
            output_columns = main.schema.column_names()

        return QueryResult(
            success=True,
            message=f"Selected {len(rows)} rows.",
            data=rows,
            columns=output_columns,
        )

    def _update(self, plan: UpdateStmt) -> QueryResult:
        table = self._require_table(plan.table_name)
        for name in plan.updates:
            if not table.schema.has_column(name):
                raise ColumnNotFoundError(name, plan.table_name)

        # Assigned values are not re-validated against column types/constraints
        count = 0
        records = []
        for row in table.records:
            if plan.where is None or matches(row, plan.where, plan.table_name):
                count += 1
                row = {**row, **plan.updates}
            records.append(row)

        self.storage.save_table(plan.table_name, table.schema, records)
        return QueryResult(success=True, message=f"{count} rows updated.")

    def _delete(self, plan: DeleteStmt) -> QueryResult:
        table = self._require_table(plan.table_name)

        initial = len(table.records)
        if plan.where is None:
            remaining: List[dict] = []
        else:
            remaining = [r for r in table.records
                         if not matches(r, plan.where, plan.table_name)]
        deleted = initial - len(remaining)

        self.storage.save_table(plan.table_name, table.schema, remaining)
        return QueryResult(success=True, message=f"{deleted} rows deleted.")

    def _drop_table(self, plan: DropTableStmt) -> QueryResult:
        self.storage.delete_table(plan.table_name)
        return QueryResult(success=True, message=f"Table {plan.table_name} dropped.")

    def _describe(self, plan: DescribeStmt) -> QueryResult:
        table = self._require_table(plan.table_name)
        return QueryResult(
            success=True,
            message=f"Schema for {plan.table_name}",
            data=[col.to_dict() for col in table.schema.columns],
            columns=list(DESCRIBE_COLUMNS),
        )
