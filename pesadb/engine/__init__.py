from pesadb.engine.database import Database, DEMO_STATEMENTS

__all__ = ["Database", "DEMO_STATEMENTS"]
