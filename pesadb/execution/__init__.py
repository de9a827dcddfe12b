from pesadb.execution.executor import QueryExecutor, DESCRIBE_COLUMNS
from pesadb.execution.result import QueryResult

__all__ = ["QueryExecutor", "QueryResult", "DESCRIBE_COLUMNS"]
