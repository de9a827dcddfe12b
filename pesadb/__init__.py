"""
PesaDB
======
A minimal single-process SQL-like database engine.

    from pesadb import Database

    db = Database()
    db.query("CREATE TABLE users (id INTEGER PRIMARY KEY, name STRING)")
    db.query("INSERT INTO users (name) VALUES ('Alice')")
    print(db.query("SELECT * FROM users").data)
"""

from pesadb.engine.database import Database
from pesadb.execution.result import QueryResult

__version__ = "1.0.0"

__all__ = ["Database", "QueryResult", "__version__"]
