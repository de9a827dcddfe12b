"""
PesaDB Storage Engine
=====================
Persists each table's schema and records as one JSON blob under a namespaced
key, and keeps the catalog of table names under a separate key.

Key layout (prefix defaults to "pesadb_v1_"):
  <prefix>catalog        JSON list of table names
  <prefix>tbl_<name>     {"schema": {...}, "records": [...]}

Teaching note:
  Existence is answered by the catalog, never by probing for a blob. The
  simulated "disk" behind a KeyValueStore cannot enumerate keys cheaply, and a
  blob left behind by a half-finished drop must not resurrect a table.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pesadb.catalog.catalog import Catalog
from pesadb.errors import StorageError
from pesadb.storage.kv import KeyValueStore
from pesadb.storage.schema import TableSchema
from pesadb.utils.logging import get_logger

log = get_logger(__name__)

Record = Dict[str, Any]

DEFAULT_PREFIX = "pesadb_v1_"


@dataclass
class TableData:
    """A table as loaded from storage: schema plus records in insertion order."""
    schema: TableSchema
    records: List[Record] = field(default_factory=list)


class StorageEngine:
    """
    Table blob persistence over a KeyValueStore.

    Usage:
        engine = StorageEngine(MemoryStore())
        engine.save_table("users", schema, [])
        table = engine.load_table("users")
    """

    def __init__(self, store: KeyValueStore, prefix: str = DEFAULT_PREFIX):
        self._store = store
        self._prefix = prefix
        self.catalog = Catalog(store, f"{prefix}catalog")

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def table_key(self, name: str) -> str:
        return f"{self._prefix}tbl_{name}"

    # ─── Tables ─────────────────────────────────────────────────────

    def save_table(self, name: str, schema: TableSchema, records: List[Record]) -> None:
        """Write schema + records as one unit, then register the name."""
        blob = json.dumps({"schema": schema.to_dict(), "records": records})
        self._store.set(self.table_key(name), blob)
        self.catalog.add(name)

    def load_table(self, name: str) -> Optional[TableData]:
        """Return the stored table, or None if no blob exists."""
        key = self.table_key(name)
        raw = self._store.get(key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            schema = TableSchema.from_dict(data["schema"])
        except (ValueError, KeyError, TypeError) as e:
            raise StorageError(f"Table blob under key {key} is corrupt: {e}") from e
        records = data.get("records") or []
        return TableData(schema=schema, records=records)

    def delete_table(self, name: str) -> None:
        """Remove blob and catalog entry. No-op if absent."""
        self._store.delete(self.table_key(name))
        self.catalog.remove(name)

    def table_exists(self, name: str) -> bool:
        return self.catalog.contains(name)

    # ─── Catalog ────────────────────────────────────────────────────

    def get_catalog(self) -> List[str]:
        return self.catalog.list_tables()

    def clear_all(self) -> None:
        """Remove every table named in the catalog, then the catalog itself."""
        names = self.catalog.list_tables()
        for name in names:
            self._store.delete(self.table_key(name))
        self.catalog.clear()
        log.info("storage cleared (%d tables removed)", len(names))
