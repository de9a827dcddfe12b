"""
PesaDB Catalog
==============
The authoritative list of table names. A table exists iff its name is in the
catalog, whether or not its blob can still be read.

The list is persisted under its own key so existence checks never need to
enumerate the underlying store. In memory it is mirrored by a set for O(1)
membership; the list keeps creation order for SHOW TABLES.

Teaching note:
  PostgreSQL answers "does this table exist" from pg_class, never by looking
  for heap files on disk. Same idea here, on a much smaller scale.
"""

import json
from typing import List, Optional, Set

from pesadb.errors import StorageError
from pesadb.storage.kv import KeyValueStore
from pesadb.utils.logging import get_logger

log = get_logger(__name__)


class Catalog:
    """
    Ordered set of table names persisted as a JSON list under one key.

    Loaded lazily on first use and written through on every change. Call
    reload() if another writer may have touched the same store.
    """

    def __init__(self, store: KeyValueStore, key: str):
        self._store = store
        self._key = key
        self._names: Optional[List[str]] = None
        self._index: Set[str] = set()

    @property
    def key(self) -> str:
        return self._key

    # ─── Load / Save ────────────────────────────────────────────────

    def reload(self) -> None:
        """Re-read the catalog from the store."""
        raw = self._store.get(self._key)
        if raw is None:
            names = []
        else:
            try:
                names = json.loads(raw)
            except ValueError as e:
                raise StorageError(f"Catalog under key {self._key} is corrupt: {e}") from e
            if not isinstance(names, list):
                raise StorageError(f"Catalog under key {self._key} is not a list")
        self._names = [str(n) for n in names]
        self._index = set(self._names)

    def _ensure_loaded(self) -> List[str]:
        if self._names is None:
            self.reload()
        return self._names

    def _save(self) -> None:
        self._store.set(self._key, json.dumps(self._names))

    # ─── Public API ─────────────────────────────────────────────────

    def list_tables(self) -> List[str]:
        return list(self._ensure_loaded())

    def contains(self, name: str) -> bool:
        self._ensure_loaded()
        return name in self._index

    def add(self, name: str) -> bool:
        """Add a table name. Returns False if it was already present."""
        names = self._ensure_loaded()
        if name in self._index:
            return False
        names.append(name)
        self._index.add(name)
        self._save()
        log.debug("catalog: added %s", name)
        return True

    def remove(self, name: str) -> bool:
        """Remove a table name. Returns False if it was not present."""
        names = self._ensure_loaded()
        if name not in self._index:
            return False
        names.remove(name)
        self._index.discard(name)
        self._save()
        log.debug("catalog: removed %s", name)
        return True

    def clear(self) -> List[str]:
        """Delete the catalog key. Returns the names it held."""
        names = self.list_tables()
        self._store.delete(self._key)
        self._names = []
        self._index = set()
        return names
