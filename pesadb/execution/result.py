"""
PesaDB Query Result
===================
The uniform shape every statement produces, success or failure.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]


@dataclass
class QueryResult:
    success: bool
    message: str
    data: Optional[List[Record]] = None
    columns: Optional[List[str]] = None
    execution_time: Optional[float] = None  # milliseconds, display only

    @classmethod
    def failure(cls, message: str) -> "QueryResult":
        return cls(success=False, message=message)

    @property
    def row_count(self) -> int:
        return len(self.data) if self.data is not None else 0

    def to_dict(self) -> dict:
        """Serialize for callers; optional fields are omitted when unset."""
        d: dict = {"success": self.success, "message": self.message}
        if self.data is not None:
            d["data"] = self.data
        if self.columns is not None:
            d["columns"] = self.columns
        if self.execution_time is not None:
            d["execution_time"] = self.execution_time
        return d
