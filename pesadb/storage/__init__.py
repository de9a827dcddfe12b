"""
PesaDB Storage Layer
====================
Value types, table schemas and key-value stores.

Usage:
    from pesadb.storage import DataType, ColumnDefinition, TableSchema, MemoryStore
    from pesadb.storage.engine import StorageEngine
"""

from pesadb.storage.types import DataType, Value, value_kind, validate, type_from_string
from pesadb.storage.schema import ColumnDefinition, TableSchema
from pesadb.storage.kv import KeyValueStore, MemoryStore, DirectoryStore

__all__ = [
    "DataType", "Value", "value_kind", "validate", "type_from_string",
    "ColumnDefinition", "TableSchema",
    "KeyValueStore", "MemoryStore", "DirectoryStore",
]
