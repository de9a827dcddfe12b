"""
PesaDB Engine Facade
====================
The single entry point callers use: text in, QueryResult out.

    parse → primary-key assignment → execute

Nothing raised below this layer reaches the caller. Parse failures come back
as QueryResult(success=False, message="SQL Error: ...") and the executor
already converts its own errors.

Teaching note:
  Auto-increment lives here rather than in the executor because it rewrites
  the plan before execution: the executor only ever sees explicit values.
"""

import asyncio
import math
import random
from typing import Dict, List, Optional

from pesadb.config import Settings, get_settings
from pesadb.errors import ParseError, PesaDBError
from pesadb.execution.executor import QueryExecutor
from pesadb.execution.result import QueryResult
from pesadb.parser import parse
from pesadb.parser.ast_nodes import InsertStmt, Statement
from pesadb.storage.engine import StorageEngine
from pesadb.storage.kv import MemoryStore
from pesadb.storage.types import is_numeric
from pesadb.utils.logging import get_logger

log = get_logger(__name__)

DEMO_STATEMENTS = [
    "CREATE TABLE users (id INTEGER PRIMARY KEY, name STRING, email STRING UNIQUE)",
    "CREATE TABLE transactions (id INTEGER PRIMARY KEY, user_id INTEGER, amount DECIMAL, type STRING)",
    "INSERT INTO users (id, name, email) VALUES (1, 'Alice Maina', 'alice@pesapal.com')",
    "INSERT INTO users (id, name, email) VALUES (2, 'John Doe', 'john@pesapal.com')",
    "INSERT INTO transactions (id, user_id, amount, type) VALUES (101, 1, 2500.50, 'DEPOSIT')",
    "INSERT INTO transactions (id, user_id, amount, type) VALUES (102, 1, 50.00, 'PAYMENT')",
    "INSERT INTO transactions (id, user_id, amount, type) VALUES (103, 2, 1000.00, 'DEPOSIT')",
]


class Database:
    """
    Engine facade over one storage namespace.

    Usage:
        db = Database()                       # in-memory
        db.query("CREATE TABLE t (id INTEGER PRIMARY KEY, name STRING)")
        db.query("INSERT INTO t (name) VALUES ('x')")   # id assigned as 1
        result = db.query("SELECT * FROM t")
    """

    def __init__(self, storage: Optional[StorageEngine] = None,
                 settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.storage = storage or StorageEngine(MemoryStore(), self.settings.key_prefix)
        self.executor = QueryExecutor(self.storage)
        self._counters: Dict[str, int] = {}

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Database":
        """Build a Database on the store the settings select."""
        settings = settings or get_settings()
        storage = StorageEngine(settings.build_store(), settings.key_prefix)
        db = cls(storage=storage, settings=settings)
        if settings.seed_demo:
            db.initialize_demo()
        return db

    # ─── Queries ────────────────────────────────────────────────────

    def query(self, sql: str) -> QueryResult:
        log.debug("executing: %s", sql)
        try:
            plan = parse(sql)
        except ParseError as e:
            log.warning("SQL Error: %s", e)
            return QueryResult.failure(f"SQL Error: {e}")

        try:
            self._assign_primary_key(plan)
        except PesaDBError as e:
            log.warning("failed: %s", e)
            return QueryResult.failure(str(e))

        result = self.executor.execute(plan)
        if result.success:
            log.debug("ok: %s", result.message)
        else:
            log.warning("failed: %s", result.message)
        return result

    async def query_async(self, sql: str) -> QueryResult:
        """query() after a random delay in the configured latency range."""
        delay_ms = random.uniform(self.settings.latency_min_ms, self.settings.latency_max_ms)
        await asyncio.sleep(delay_ms / 1000.0)
        return self.query(sql)

    def _assign_primary_key(self, plan: Statement) -> None:
        """
        Fill in the primary key of an INSERT that omits it (or gives NULL).

        The next id is one past the largest of: any numeric key already
        stored (rounded down), the table's persisted sequence, and the in-process counter.
        Plans for missing tables or tables without a primary key pass through;
        the executor reports those.
        """
        if not isinstance(plan, InsertStmt):
            return
        if not self.storage.table_exists(plan.table_name):
            return
        table = self.storage.load_table(plan.table_name)
        if table is None:
            return
        pk = table.schema.primary_key
        if pk is None:
            return

        if plan.columns is None:
            names = table.schema.column_names()
            if len(names) != len(plan.values):
                return
            plan.columns = names

        if pk.name in plan.columns:
            position = plan.columns.index(pk.name)
            if plan.values[position] is not None:
                return
        else:
            position = None

        highest = max(
            (math.floor(r.get(pk.name)) for r in table.records
             if is_numeric(r.get(pk.name))),
            default=0,
        )
        next_id = max(highest, table.schema.sequence,
                      self._counters.get(plan.table_name, 0)) + 1
        self._counters[plan.table_name] = next_id

        if position is None:
            plan.columns.insert(0, pk.name)
            plan.values.insert(0, next_id)
        else:
            plan.values[position] = next_id
        log.debug("assigned %s.%s = %d", plan.table_name, pk.name, next_id)

    # ─── Lifecycle ──────────────────────────────────────────────────

    def initialize_demo(self) -> bool:
        """Seed the demo tables when the catalog is empty. Returns True if seeded."""
        if self.storage.get_catalog():
            return False
        log.info("initializing fresh demo state")
        for statement in DEMO_STATEMENTS:
            self.query(statement)
        return True

    def reset(self) -> None:
        """Drop every table and forget assigned ids."""
        self.storage.clear_all()
        self._counters.clear()

    def tables(self) -> List[str]:
        return self.storage.get_catalog()
