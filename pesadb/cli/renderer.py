"""
PesaDB Result Renderer
======================
Formats QueryResults for a terminal.

Features:
  - Aligned ASCII tables with auto column width (capped)
  - NULL displayed distinctly, numbers right-aligned
  - Row count + engine time footer
  - Modes: table, vertical, raw
  - Failures printed with a classified prefix
"""

import sys
from typing import Any, Dict, Iterable, List, Optional, TextIO

from pesadb.execution.result import QueryResult

SQL_ERROR_PREFIX = "SQL Error: "


class Renderer:
    """
    Result renderer with configurable display modes.
    """

    MODES = ("table", "vertical", "raw")

    def __init__(self, output: TextIO = None):
        self.output = output or sys.stdout
        self.mode: str = "table"
        self.show_headers: bool = True
        self.show_timer: bool = True
        self.max_col_width: int = 50

    # ─── Public API ─────────────────────────────────────────────────

    def render_result(self, result: QueryResult) -> None:
        """Render any result: rows for SELECT-like results, else the message."""
        if not result.success:
            self.render_failure(result.message)
        elif result.data is not None:
            self.render_rows(result.data, result.columns, result.execution_time)
        else:
            self.render_message(result.message)

    def render_rows(self, rows: Iterable[Dict[str, Any]],
                    column_names: Optional[List[str]] = None,
                    elapsed_ms: Optional[float] = None) -> int:
        """Render rows in the current mode. Returns number of rows rendered."""
        if self.mode == "raw":
            count = self._render_raw(rows, column_names)
        elif self.mode == "vertical":
            count = self._render_vertical(rows, column_names)
        else:
            count = self._render_table(rows, column_names)

        if self.show_timer and elapsed_ms is not None:
            self._print(f"\n{count} row(s) returned ({elapsed_ms:.3f} ms)")
        else:
            self._print(f"\n{count} row(s) returned")
        return count

    def render_message(self, message: str):
        """Render a non-query result message (DML, DDL)."""
        if message:
            self._print(message)

    def render_failure(self, message: str):
        prefix, text = self._classify_failure(message)
        self._print(f"{prefix}: {text}")

    # ─── Table Mode ─────────────────────────────────────────────────

    def _render_table(self, rows: Iterable[Dict[str, Any]],
                      column_names: Optional[List[str]]) -> int:
        buffer = list(rows)
        headers = list(column_names or [])
        if not headers and buffer:
            headers = list(buffer[0].keys())
        if not headers:
            return 0

        widths = self._calculate_widths(headers, buffer)

        if self.show_headers:
            self._print_table_separator(widths, headers)
            self._print_table_row(widths, headers, {h: h for h in headers})
            self._print_table_separator(widths, headers)

        for vals in buffer:
            self._print_table_row(widths, headers, vals)

        if self.show_headers and buffer:
            self._print_table_separator(widths, headers)

        return len(buffer)

    def _calculate_widths(self, headers: List[str], rows: List[Dict]) -> Dict[str, int]:
        widths = {}
        for h in headers:
            widths[h] = min(len(h), self.max_col_width)

        for row in rows:
            for h in headers:
                val = self._format_value(row.get(h))
                widths[h] = max(widths[h], min(len(val), self.max_col_width))

        return widths

    def _print_table_separator(self, widths: Dict[str, int], headers: List[str]):
        """Print +----+------+ separator line."""
        parts = ["+"]
        for h in headers:
            parts.append("-" * (widths[h] + 2) + "+")
        self._print("".join(parts))

    def _print_table_row(self, widths: Dict[str, int], headers: List[str], vals: Dict):
        """Print | col1 | col2 | row."""
        parts = ["|"]
        for h in headers:
            raw_val = vals.get(h)
            val_str = self._format_value(raw_val)
            if len(val_str) > self.max_col_width:
                val_str = val_str[:self.max_col_width - 3] + "..."
            w = widths[h]
            if isinstance(raw_val, (int, float)) and not isinstance(raw_val, bool):
                parts.append(f" {val_str:>{w}} |")
            else:
                parts.append(f" {val_str:<{w}} |")
        self._print("".join(parts))

    # ─── Vertical Mode ──────────────────────────────────────────────

    def _render_vertical(self, rows: Iterable[Dict[str, Any]],
                         column_names: Optional[List[str]]) -> int:
        """Render each row as key: value pairs."""
        count = 0
        for vals in rows:
            headers = column_names or list(vals.keys())
            count += 1
            self._print(f"*** Row {count} ***")
            max_key_len = max(len(h) for h in headers) if headers else 0
            for h in headers:
                self._print(f"  {h:>{max_key_len}}: {self._format_value(vals.get(h))}")
        return count

    # ─── Raw Mode ───────────────────────────────────────────────────

    def _render_raw(self, rows: Iterable[Dict[str, Any]],
                    column_names: Optional[List[str]]) -> int:
        """Render values separated by pipes, no formatting."""
        count = 0
        headers = list(column_names or [])
        if headers and self.show_headers:
            self._print("|".join(headers))
        for vals in rows:
            if not headers:
                headers = list(vals.keys())
                if self.show_headers:
                    self._print("|".join(headers))
            self._print("|".join(self._format_value(vals.get(h)) for h in headers))
            count += 1
        return count

    # ─── Helpers ────────────────────────────────────────────────────

    def _format_value(self, value) -> str:
        """Format a single value for display."""
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float):
            if value == int(value):
                return f"{value:.1f}"
            return f"{value:.6g}"
        return str(value)

    def _classify_failure(self, message: str):
        """Split a failure message into (prefix, text)."""
        if message.startswith(SQL_ERROR_PREFIX):
            return "SyntaxError", message[len(SQL_ERROR_PREFIX):]
        if message.startswith("Internal error: "):
            return "InternalError", message[len("Internal error: "):]
        return "ExecutionError", message

    def _print(self, text: str):
        print(text, file=self.output)
