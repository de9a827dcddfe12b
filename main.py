"""
PesaDB, a Minimal SQL-like Database Engine
==========================================
Entry point for the command-line shell.

Usage:
    python main.py [options] [data_dir]

Options:
    --help              Show help
    --memory            Use an in-memory store (nothing persisted)
    --demo              Seed the demo tables if the database is empty
    --execute SQL       Execute single SQL statement and exit
    --file PATH         Execute SQL script file and exit

Default:
    Interactive REPL on the store selected by PESADB_STORAGE (memory unless
    configured). Giving a data_dir selects a directory store at that path.
"""

import os
import sys
from typing import Optional

from pesadb.cli.renderer import Renderer
from pesadb.config import Settings, get_settings
from pesadb.engine.database import Database
from pesadb.utils.logging import configure_logging


def print_help():
    print("""
PesaDB, a Minimal SQL-like Database Engine

Usage:
    python main.py [data_dir]                    Interactive REPL
    python main.py --execute "SQL" [data_dir]    Execute single statement
    python main.py --file script.sql [data_dir]  Execute SQL script

Options:
    --help          Show this help
    --memory        Use an in-memory store
    --demo          Seed demo tables (users, transactions) when empty
    --execute SQL   Execute SQL and exit
    --file PATH     Execute SQL script and exit
    data_dir        Directory store path (default: $PESADB_DATA_DIR)

Meta-Commands (REPL only):
    .help           Command reference
    .tables         List tables
    .schema [T]     Show schema
    .mode M         Set output mode (table/vertical/raw)
    .timer on|off   Toggle timing
    .headers on|off Toggle column headers
    .reset          Drop every table
    .quit           Exit
""")


def build_settings(data_dir: Optional[str], memory: bool, demo: bool) -> Settings:
    """Apply command-line overrides on top of environment settings."""
    updates = {}
    if memory:
        updates["storage"] = "memory"
    elif data_dir is not None:
        updates["storage"] = "directory"
        updates["data_dir"] = data_dir
    if demo:
        updates["seed_demo"] = True
    return get_settings().model_copy(update=updates)


def execute_single(db: Database, sql: str) -> int:
    """Execute a single SQL statement. Returns the process exit code."""
    renderer = Renderer()
    result = db.query(sql)
    renderer.render_result(result)
    return 0 if result.success else 1


def execute_script(db: Database, script_path: str) -> int:
    """
    Execute a SQL script file. Returns the process exit code.

    Statements are split on ; outside quotes. Meta-commands are skipped.
    The first failing statement stops execution.
    """
    from pesadb.cli.repl import split_statements

    if not os.path.isfile(script_path):
        print(f"Error: script file not found: {script_path}", file=sys.stderr)
        return 1

    with open(script_path, "r", encoding="utf-8") as f:
        content = f.read()

    renderer = Renderer()
    renderer.show_timer = False

    for stmt_text in split_statements(content):
        # Skip comment-only pieces
        lines = [ln for ln in stmt_text.splitlines() if not ln.strip().startswith("--")]
        stmt_text = "\n".join(lines).strip()
        if not stmt_text:
            continue

        if stmt_text.startswith("."):
            print(f"-- meta-command not supported in script mode: {stmt_text}",
                  file=sys.stderr)
            continue

        result = db.query(stmt_text)
        renderer.render_result(result)
        if not result.success:
            print(f"Error in statement: {stmt_text[:80]}...", file=sys.stderr)
            return 1
    return 0


def main() -> None:
    """Parse CLI arguments and dispatch."""
    args = sys.argv[1:]

    if "--help" in args or "-h" in args:
        print_help()
        return

    data_dir = None
    execute_sql = None
    script_file = None
    memory = False
    demo = False

    i = 0
    while i < len(args):
        if args[i] == "--execute" and i + 1 < len(args):
            execute_sql = args[i + 1]
            i += 2
        elif args[i] == "--file" and i + 1 < len(args):
            script_file = args[i + 1]
            i += 2
        elif args[i] == "--memory":
            memory = True
            i += 1
        elif args[i] == "--demo":
            demo = True
            i += 1
        elif args[i].startswith("-"):
            print(f"Unknown option: {args[i]}", file=sys.stderr)
            print_help()
            sys.exit(1)
        else:
            data_dir = args[i]
            i += 1

    settings = build_settings(data_dir, memory, demo)
    configure_logging(settings.log_level, settings.json_logs)
    db = Database.from_settings(settings)

    if execute_sql:
        sys.exit(execute_single(db, execute_sql))
    elif script_file:
        sys.exit(execute_script(db, script_file))
    else:
        from pesadb.cli.repl import REPL
        REPL(db).run()


if __name__ == "__main__":
    main()
