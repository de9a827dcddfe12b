"""
PesaDB Row Operators
====================
Materialized row operations used by SELECT, applied in this order:
join → filter → sort → project.

Rows are plain dicts. After a join, columns of the joined table are stored
under "<join_table>.<column>" so they never collide with the left side.

Teaching note:
  The join is a plain nested loop, O(n·m) per join with no index. Fine for
  tables that fit in one JSON blob.
"""

from typing import Any, Dict, List, Optional, Tuple

from pesadb.parser.ast_nodes import JoinClause, OrderBy, SelectItem, WhereClause
from pesadb.storage.types import DataType, compare, value_kind, values_equal

Row = Dict[str, Any]


def split_ref(ref: str) -> Tuple[Optional[str], str]:
    """'t.col' -> ('t', 'col'); 'col' -> (None, 'col')."""
    if "." in ref:
        table, column = ref.split(".", 1)
        return table, column
    return None, ref


def resolve(row: Row, ref: str, table_name: str) -> Any:
    """
    Look up a column reference in a row. A reference qualified with the
    queried table resolves to the plain column. Missing columns read as NULL.
    """
    if ref in row:
        return row[ref]
    table, column = split_ref(ref)
    if table == table_name and column in row:
        return row[column]
    return None


# ─── Join ───────────────────────────────────────────────────────────────────

def _join_sides(join: JoinClause) -> Tuple[str, str]:
    """
    Work out which side of the ON condition names the joined table.
    Returns (reference into the left rows, column of the joined table).
    """
    left_table, left_col = split_ref(join.left)
    right_table, right_col = split_ref(join.right)
    if right_table == join.table:
        return join.left, right_col
    if left_table == join.table:
        return join.right, left_col
    # Neither side qualified with the joined table: read it positionally
    return join.left, right_col


def nested_loop_join(left_rows: List[Row], right_rows: List[Row], join: JoinClause,
                     table_name: str, right_columns: List[str]) -> List[Row]:
    """
    Combine every left row with every right row where the ON columns are
    equal. LEFT joins keep unmatched left rows with NULL right columns.
    """
    left_ref, right_col = _join_sides(join)
    prefix = join.table + "."

    joined = []
    for left in left_rows:
        left_val = resolve(left, left_ref, table_name)
        matched = False
        for right in right_rows:
            right_val = right.get(right_col)
            # NULL never joins
            if left_val is None or right_val is None:
                continue
            if values_equal(left_val, right_val):
                combined = dict(left)
                for key, value in right.items():
                    combined[prefix + key] = value
                joined.append(combined)
                matched = True
        if not matched and join.kind == "LEFT":
            combined = dict(left)
            for key in right_columns:
                combined[prefix + key] = None
            joined.append(combined)
    return joined


# ─── Filter ─────────────────────────────────────────────────────────────────

def matches(row: Row, where: WhereClause, table_name: str) -> bool:
    value = resolve(row, where.column, table_name)
    if where.operator == "=":
        return values_equal(value, where.value)
    if where.operator == "!=":
        return not values_equal(value, where.value)
    if where.operator == "<":
        return compare(value, where.value) == -1
    if where.operator == ">":
        return compare(value, where.value) == 1
    raise ValueError(f"Unknown operator {where.operator!r}")


def filter_rows(rows: List[Row], where: WhereClause, table_name: str) -> List[Row]:
    return [row for row in rows if matches(row, where, table_name)]


# ─── Sort ───────────────────────────────────────────────────────────────────

_KIND_RANK = {
    DataType.INTEGER: 0,
    DataType.DECIMAL: 0,
    DataType.BOOLEAN: 1,
    DataType.STRING: 2,
}


def sort_rows(rows: List[Row], order_by: OrderBy, table_name: str) -> List[Row]:
    """
    Stable sort on one column. NULL sorts as the largest value, so it comes
    last for ASC and first for DESC; mixed kinds are grouped numbers, then
    booleans, then text.
    """
    def sort_key(row: Row):
        value = resolve(row, order_by.column, table_name)
        if value is None:
            return (True, 0, 0)
        return (False, _KIND_RANK[value_kind(value)], value)

    # reverse=True keeps equal rows in their original order
    return sorted(rows, key=sort_key, reverse=not order_by.ascending)


# ─── Project ────────────────────────────────────────────────────────────────

def project_rows(rows: List[Row], items: List[SelectItem], table_name: str) -> List[Row]:
    """Build new rows holding only the requested columns, in requested order."""
    projected = []
    for row in rows:
        new_row = {}
        for item in items:
            new_row[item.output_name] = resolve(row, item.column, table_name)
        projected.append(new_row)
    return projected
