"""
PesaDB Schema Definition
========================
Defines table schemas: ordered column definitions with primary key, unique
and nullable flags, plus serialization to/from the dict stored in a table blob.

Teaching note:
  The schema travels inside the same JSON blob as the records, so there is no
  separate metadata file to keep in sync. Missing keys fall back to defaults,
  which lets blobs written by an older shape still load.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pesadb.errors import SchemaError
from pesadb.storage.types import DataType, type_from_string


@dataclass
class ColumnDefinition:
    """Definition of a single column in a table schema."""
    name: str
    data_type: DataType
    primary_key: bool = False
    unique: bool = False
    nullable: bool = True

    def to_dict(self) -> dict:
        """Serialize column definition to a dictionary."""
        return {
            "name": self.name,
            "type": self.data_type.value,
            "primaryKey": self.primary_key,
            "unique": self.unique,
            "nullable": self.nullable,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ColumnDefinition":
        """Deserialize a column definition from a dictionary."""
        return cls(
            name=d["name"],
            data_type=type_from_string(d["type"]),
            primary_key=bool(d.get("primaryKey", False)),
            unique=bool(d.get("unique", False)),
            nullable=d.get("nullable", True) is not False,
        )


@dataclass
class TableSchema:
    """
    Table schema: name, ordered column list, declared indices (name -> column,
    not used for lookups) and the persisted primary-key sequence.
    """
    name: str
    columns: List[ColumnDefinition] = field(default_factory=list)
    indices: Dict[str, str] = field(default_factory=dict)
    sequence: int = 0

    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def get_column(self, name: str) -> Optional[ColumnDefinition]:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    def has_column(self, name: str) -> bool:
        return self.get_column(name) is not None

    @property
    def primary_key(self) -> Optional[ColumnDefinition]:
        for col in self.columns:
            if col.primary_key:
                return col
        return None

    def validate(self) -> None:
        """Reject repeated column names and more than one primary key."""
        seen = set()
        for col in self.columns:
            if col.name in seen:
                raise SchemaError(
                    f"Column {col.name} is defined more than once in table {self.name}."
                )
            seen.add(col.name)
        primary = [c.name for c in self.columns if c.primary_key]
        if len(primary) > 1:
            raise SchemaError(
                f"Table {self.name} declares more than one primary key: {', '.join(primary)}."
            )

    # ─── Serialization ──────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "columns": [c.to_dict() for c in self.columns],
            "indices": dict(self.indices),
            "sequence": self.sequence,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "TableSchema":
        return cls(
            name=d["name"],
            columns=[ColumnDefinition.from_dict(cd) for cd in d.get("columns", [])],
            indices=dict(d.get("indices") or {}),
            sequence=int(d.get("sequence") or 0),
        )
