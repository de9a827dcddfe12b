import os
import sys

import pytest

# Ensure project root is on path
current_dir = os.path.dirname(os.path.abspath(__file__))
parent_dir = os.path.dirname(current_dir)
sys.path.insert(0, parent_dir)

from pesadb.config import Settings, get_settings
from pesadb.engine.database import Database
from pesadb.storage.engine import StorageEngine
from pesadb.storage.kv import MemoryStore


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Tests never see PESADB_* from the developer's shell."""
    for name in list(os.environ):
        if name.startswith("PESADB_"):
            monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings():
    return Settings(latency_min_ms=0, latency_max_ms=1, _env_file=None)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def storage(store):
    return StorageEngine(store)


@pytest.fixture
def db(storage, settings):
    return Database(storage=storage, settings=settings)


@pytest.fixture
def users_db(db):
    """Database with a small users table."""
    db.query("CREATE TABLE users (id INTEGER PRIMARY KEY, name STRING, email STRING UNIQUE)")
    db.query("INSERT INTO users (id, name, email) VALUES (1, 'Alice', 'a@x.com')")
    db.query("INSERT INTO users (id, name, email) VALUES (2, 'Bob', 'b@x.com')")
    db.query("INSERT INTO users (id, name, email) VALUES (3, 'Carol', 'c@x.com')")
    return db
