"""
PesaDB Interactive REPL
=======================
Interactive command-line shell with pesadb> prompt.

Features:
  - Multi-line SQL with ; terminator
  - Meta-commands (dot-prefixed, no ; needed)
  - Ctrl+C cancels current input, Ctrl+D exits
  - Persistent readline history (~/.pesadb_history)
"""

import os
import sys
from typing import List, Optional, TextIO

from pesadb.cli.renderer import Renderer
from pesadb.engine.database import Database
from pesadb.utils.logging import get_logger

log = get_logger(__name__)

# ─── History ────────────────────────────────────────────────────────
HISTORY_FILE = os.path.expanduser("~/.pesadb_history")
HISTORY_MAX = 1000

try:
    import readline
    _HAS_READLINE = True
except ImportError:
    _HAS_READLINE = False


def _load_history():
    if _HAS_READLINE and os.path.exists(HISTORY_FILE):
        try:
            readline.read_history_file(HISTORY_FILE)
        except OSError as e:
            log.debug("could not read history: %s", e)


def _save_history():
    if _HAS_READLINE:
        try:
            readline.set_history_length(HISTORY_MAX)
            readline.write_history_file(HISTORY_FILE)
        except OSError as e:
            log.debug("could not write history: %s", e)


def find_semicolon_outside_quotes(sql: str) -> int:
    """Find the first ; that isn't inside single quotes ('' is an escaped quote)."""
    in_quote = False
    i = 0
    while i < len(sql):
        ch = sql[i]
        if ch == "'":
            if in_quote and i + 1 < len(sql) and sql[i + 1] == "'":
                i += 2
                continue
            in_quote = not in_quote
        elif ch == ";" and not in_quote:
            return i
        i += 1
    return -1


def split_statements(content: str) -> List[str]:
    """Split SQL text on ; outside single quotes. Empty pieces are dropped."""
    statements = []
    rest = content
    while True:
        idx = find_semicolon_outside_quotes(rest)
        if idx == -1:
            break
        statements.append(rest[:idx].strip())
        rest = rest[idx + 1:]
    statements.append(rest.strip())
    return [s for s in statements if s]


# ─── REPL ───────────────────────────────────────────────────────────

class REPL:
    """
    Interactive PesaDB shell.

    Usage:
        repl = REPL(Database.from_settings())
        repl.run()
    """

    PROMPT = "pesadb> "
    CONTINUATION = "   ...> "

    def __init__(self, db: Database, output: Optional[TextIO] = None):
        self.db = db
        self.output = output or sys.stdout
        self.renderer = Renderer(self.output)
        self.running = False
        self._buffer = ""

    def run(self):
        """Main REPL loop."""
        _load_history()
        self.running = True

        self._print("PesaDB v1.0.0")
        self._print('Type ".help" for usage hints.')
        self._print("")

        try:
            while self.running:
                prompt = self.CONTINUATION if self._buffer else self.PROMPT
                try:
                    line = input(prompt)
                except KeyboardInterrupt:
                    self._print("")
                    self._buffer = ""
                    continue
                except EOFError:
                    self._print("")
                    break
                self.feed(line)
        finally:
            _save_history()
            self._print("Goodbye.")

    def feed(self, line: str):
        """Process one line of input: a meta-command or (part of) SQL."""
        stripped = line.strip()
        if not stripped:
            if self._buffer:
                self._buffer += "\n"
            return

        if not self._buffer and stripped.startswith("."):
            self.handle_meta_command(stripped)
            return

        self._buffer = self._buffer + " " + line if self._buffer else line

        while True:
            idx = find_semicolon_outside_quotes(self._buffer)
            if idx == -1:
                break
            statement = self._buffer[:idx].strip()
            self._buffer = self._buffer[idx + 1:].strip()
            if statement:
                self.execute_statement(statement)

    @property
    def pending(self) -> str:
        """SQL typed so far without a terminating ;"""
        return self._buffer

    def execute_statement(self, sql: str):
        self.renderer.render_result(self.db.query(sql))

    # ─── Meta-Commands ──────────────────────────────────────────────

    def handle_meta_command(self, line: str):
        """Handle dot-prefixed meta-commands."""
        parts = line.split(None, 1)
        cmd = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ""

        if cmd in (".quit", ".exit", ".q"):
            self.running = False
        elif cmd == ".help":
            self._cmd_help()
        elif cmd == ".tables":
            self._cmd_tables()
        elif cmd == ".schema":
            self._cmd_schema(arg)
        elif cmd == ".mode":
            self._cmd_mode(arg)
        elif cmd == ".timer":
            self._cmd_timer(arg)
        elif cmd == ".headers":
            self._cmd_headers(arg)
        elif cmd == ".reset":
            self.db.reset()
            self._print("All tables dropped.")
        else:
            self._print(f"Unknown command: {cmd}. Type .help for available commands.")

    def _cmd_help(self):
        self._print("""PesaDB Commands:
  .help                Show this help
  .tables              List all tables
  .schema [TABLE]      Show table schema
  .mode table|vertical|raw  Set output mode (default: table)
  .timer on|off        Toggle query timing display
  .headers on|off      Toggle column headers
  .reset               Drop every table
  .quit                Exit (aliases: .exit, .q)

SQL:
  SHOW TABLES
  DESCRIBE t
  CREATE TABLE t (id INTEGER PRIMARY KEY, name STRING [UNIQUE] [NOT NULL])
  INSERT INTO t [(cols)] VALUES (...)
  SELECT cols FROM t [[LEFT] JOIN u ON t.a = u.b] [WHERE c op v] [ORDER BY c [ASC|DESC]]
  UPDATE t SET c = v [WHERE c = v]
  DELETE FROM t [WHERE c = v]
  DROP TABLE t

Tips:
  - Statements end with ;
  - Multi-line input supported (continue until ;)""")

    def _cmd_tables(self):
        tables = self.db.tables()
        if not tables:
            self._print("No tables.")
        else:
            for t in tables:
                self._print(f"  {t}")

    def _cmd_schema(self, table_name: str):
        if table_name:
            self._print_table_schema(table_name)
            return
        tables = self.db.tables()
        if not tables:
            self._print("No tables.")
            return
        for t in tables:
            self._print_table_schema(t)
            self._print("")

    def _print_table_schema(self, table_name: str):
        result = self.db.query(f"DESCRIBE {table_name}")
        if not result.success:
            self._print(f"Table '{table_name}' not found.")
            return
        self._print(f"Table: {table_name}")
        for col in result.data:
            flags = []
            if col["primaryKey"]:
                flags.append("PRIMARY KEY")
            if col["unique"]:
                flags.append("UNIQUE")
            if not col["nullable"]:
                flags.append("NOT NULL")
            self._print(f"  {col['name']:<20} {col['type']:<10}{' '.join(flags)}".rstrip())

    def _cmd_mode(self, arg: str):
        if arg.lower() in Renderer.MODES:
            self.renderer.mode = arg.lower()
            self._print(f"Output mode: {arg.lower()}")
        else:
            self._print(f"Usage: .mode {{{' | '.join(Renderer.MODES)}}}")
            self._print(f"Current: {self.renderer.mode}")

    def _cmd_timer(self, arg: str):
        if arg.lower() in ("on", "1", "true"):
            self.renderer.show_timer = True
            self._print("Timer ON")
        elif arg.lower() in ("off", "0", "false"):
            self.renderer.show_timer = False
            self._print("Timer OFF")
        else:
            self._print(f"Timer is {'ON' if self.renderer.show_timer else 'OFF'}")

    def _cmd_headers(self, arg: str):
        if arg.lower() in ("on", "1", "true"):
            self.renderer.show_headers = True
            self._print("Headers ON")
        elif arg.lower() in ("off", "0", "false"):
            self.renderer.show_headers = False
            self._print("Headers OFF")
        else:
            self._print(f"Headers are {'ON' if self.renderer.show_headers else 'OFF'}")

    def _print(self, text: str):
        print(text, file=self.output)
