"""
PesaDB Engine Facade Tests
==========================
End-to-end through Database.query: parse errors, primary-key assignment,
demo seeding, async queries and persistence through a directory store.
"""

import asyncio

import pytest

from pesadb import Database, QueryResult
from pesadb.config import Settings
from pesadb.engine.database import DEMO_STATEMENTS
from pesadb.storage.engine import StorageEngine
from pesadb.storage.kv import DirectoryStore


class TestQuery:

    def test_create_insert_select_drop_show(self, db):
        assert db.query("CREATE TABLE users (id INTEGER PRIMARY KEY, name STRING)").success
        assert db.query("INSERT INTO users (id, name) VALUES (1, 'Alice')").success

        result = db.query("SELECT * FROM users")
        assert result.success
        assert result.data == [{"id": 1, "name": "Alice"}]

        assert db.query("DROP TABLE users").success
        show = db.query("SHOW TABLES")
        assert show.data == []
        assert show.message == "Found 0 tables"

    def test_update_then_select(self, users_db):
        assert users_db.query("UPDATE users SET name = 'Alicia' WHERE id = 1").message == \
            "1 rows updated."
        result = users_db.query("SELECT name FROM users WHERE id = 1")
        assert result.data == [{"name": "Alicia"}]

    def test_parse_error_wrapped(self, db):
        result = db.query("SELEC * FROM users")
        assert isinstance(result, QueryResult)
        assert not result.success
        assert result.message.startswith("SQL Error: Unsupported query")

    def test_syntax_error_inside_statement(self, db):
        result = db.query("CREATE TABLE t (a BLOB)")
        assert not result.success
        assert result.message.startswith("SQL Error: Invalid CREATE TABLE syntax")

    def test_execution_error_not_prefixed(self, db):
        result = db.query("SELECT * FROM nope")
        assert result.message == "Table nope not found."

    def test_tables(self, users_db):
        users_db.query("CREATE TABLE orders (id INTEGER PRIMARY KEY)")
        assert users_db.tables() == ["users", "orders"]


class TestPrimaryKeyAssignment:

    def test_omitted_key_is_assigned(self, db):
        db.query("CREATE TABLE t (id INTEGER PRIMARY KEY, name STRING)")
        db.query("INSERT INTO t (name) VALUES ('a')")
        db.query("INSERT INTO t (name) VALUES ('b')")
        rows = db.query("SELECT * FROM t").data
        assert rows == [{"id": 1, "name": "a"}, {"id": 2, "name": "b"}]

    def test_null_key_is_assigned(self, db):
        db.query("CREATE TABLE t (id INTEGER PRIMARY KEY, name STRING)")
        db.query("INSERT INTO t (id, name) VALUES (NULL, 'a')")
        db.query("INSERT INTO t VALUES (NULL, 'b')")
        assert [r["id"] for r in db.query("SELECT * FROM t").data] == [1, 2]

    def test_continues_after_explicit_ids(self, users_db):
        users_db.query("INSERT INTO users (name) VALUES ('Dan')")
        row = users_db.query("SELECT id FROM users WHERE name = 'Dan'").data[0]
        assert row["id"] == 4

    def test_ids_increase_after_deleting_max(self, db):
        db.query("CREATE TABLE t (id INTEGER PRIMARY KEY, name STRING)")
        for name in ("a", "b", "c"):
            db.query(f"INSERT INTO t (name) VALUES ('{name}')")
        db.query("DELETE FROM t WHERE id = 3")
        db.query("INSERT INTO t (name) VALUES ('d')")
        ids = [r["id"] for r in db.query("SELECT * FROM t ORDER BY id").data]
        assert ids == [1, 2, 4]

    def test_sequence_survives_restart(self, store, settings):
        first = Database(storage=StorageEngine(store), settings=settings)
        first.query("CREATE TABLE t (id INTEGER PRIMARY KEY, name STRING)")
        first.query("INSERT INTO t (name) VALUES ('a')")
        first.query("INSERT INTO t (name) VALUES ('b')")
        first.query("DELETE FROM t")

        second = Database(storage=StorageEngine(store), settings=settings)
        second.query("INSERT INTO t (name) VALUES ('c')")
        assert second.query("SELECT id FROM t").data == [{"id": 3}]

    def test_table_without_primary_key_untouched(self, db):
        db.query("CREATE TABLE log (msg STRING)")
        db.query("INSERT INTO log (msg) VALUES ('hi')")
        assert db.query("SELECT * FROM log").data == [{"msg": "hi"}]

    def test_missing_table_still_reports_not_found(self, db):
        assert db.query("INSERT INTO ghosts (name) VALUES ('x')").message == \
            "Table ghosts not found."

    def test_reset_clears_counters(self, db):
        db.query("CREATE TABLE t (id INTEGER PRIMARY KEY, name STRING)")
        db.query("INSERT INTO t (name) VALUES ('a')")
        db.reset()
        assert db.tables() == []
        db.query("CREATE TABLE t (id INTEGER PRIMARY KEY, name STRING)")
        db.query("INSERT INTO t (name) VALUES ('b')")
        assert db.query("SELECT id FROM t").data == [{"id": 1}]


class TestStorageFailuresThroughFacade:

    def test_insert_into_corrupt_table_blob(self, db, store, storage):
        db.query("CREATE TABLE t (id INTEGER PRIMARY KEY, name STRING)")
        store.set(storage.table_key("t"), "{{{")
        result = db.query("INSERT INTO t (name) VALUES ('a')")
        assert not result.success
        assert result.message.startswith("Table blob under key pesadb_v1_tbl_t is corrupt")

    def test_insert_with_corrupt_catalog(self, store, settings):
        store.set("pesadb_v1_catalog", "not json")
        db = Database(storage=StorageEngine(store), settings=settings)
        result = db.query("INSERT INTO t (name) VALUES ('a')")
        assert not result.success
        assert result.message.startswith("Catalog under key pesadb_v1_catalog is corrupt")

    def test_decimal_primary_key_counts_toward_next_id(self, db, storage):
        db.query("CREATE TABLE t (id INTEGER PRIMARY KEY, name STRING)")
        assert db.query("INSERT INTO t (id, name) VALUES (1.0, 'a')").success
        result = db.query("INSERT INTO t (name) VALUES ('b')")
        assert result.success, result.message
        ids = [r["id"] for r in db.query("SELECT id FROM t ORDER BY id").data]
        assert ids == [1.0, 2]
        assert storage.load_table("t").schema.sequence == 2

    def test_fractional_primary_key_rounds_down(self, db):
        db.query("CREATE TABLE t (id INTEGER PRIMARY KEY, name STRING)")
        db.query("INSERT INTO t (id, name) VALUES (2.5, 'a')")
        db.query("INSERT INTO t (name) VALUES ('b')")
        assert db.query("SELECT id FROM t WHERE name = 'b'").data == [{"id": 3}]

    def test_unsafe_table_name_on_directory_store(self, tmp_path):
        settings = Settings(storage="directory", data_dir=str(tmp_path), _env_file=None)
        db = Database.from_settings(settings)
        result = db.query('CREATE TABLE "my table" (id INTEGER)')
        assert not result.success
        assert "pesadb_v1_tbl_my table" in result.message
        assert not result.message.startswith("Internal error")
        assert db.tables() == []


class TestDemo:

    def test_initialize_demo(self, db):
        assert db.initialize_demo()
        assert db.tables() == ["users", "transactions"]
        assert db.query("SELECT * FROM users").row_count == 2
        assert db.query("SELECT * FROM transactions").row_count == 3
        alice = db.query("SELECT email FROM users WHERE name = 'Alice Maina'").data
        assert alice == [{"email": "alice@pesapal.com"}]

    def test_initialize_demo_only_when_empty(self, db):
        db.query("CREATE TABLE other (id INTEGER)")
        assert not db.initialize_demo()
        assert db.tables() == ["other"]

    def test_demo_statements_all_succeed(self, db):
        for sql in DEMO_STATEMENTS:
            assert db.query(sql).success, sql

    def test_from_settings_seeds_demo(self):
        settings = Settings(seed_demo=True, _env_file=None)
        db = Database.from_settings(settings)
        assert db.tables() == ["users", "transactions"]

    def test_from_settings_directory_store(self, tmp_path):
        settings = Settings(storage="directory", data_dir=str(tmp_path), _env_file=None)
        db = Database.from_settings(settings)
        assert isinstance(db.storage.store, DirectoryStore)
        db.query("CREATE TABLE t (id INTEGER PRIMARY KEY)")
        db.query("INSERT INTO t (id) VALUES (5)")

        reopened = Database.from_settings(settings)
        assert reopened.query("SELECT * FROM t").data == [{"id": 5}]


class TestAsync:

    def test_query_async(self, db):
        result = asyncio.run(db.query_async("SHOW TABLES"))
        assert result.success
        assert result.message == "Found 0 tables"

    def test_query_async_runs_concurrently(self, db):
        async def go():
            return await asyncio.gather(
                db.query_async("CREATE TABLE a (id INTEGER)"),
                db.query_async("CREATE TABLE b (id INTEGER)"),
            )

        results = asyncio.run(go())
        assert all(r.success for r in results)
        assert sorted(db.tables()) == ["a", "b"]

    def test_query_async_error(self, db):
        result = asyncio.run(db.query_async("NOT SQL"))
        assert not result.success
        assert result.message.startswith("SQL Error:")


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.storage == "memory"
        assert settings.key_prefix == "pesadb_v1_"
        assert settings.latency_min_ms == 50
        assert settings.latency_max_ms == 150

    def test_env_aliases(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PESADB_STORAGE", "directory")
        monkeypatch.setenv("PESADB_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("PESADB_LATENCY_MIN_MS", "0")
        monkeypatch.setenv("PESADB_LATENCY_MAX_MS", "5")
        settings = Settings(_env_file=None)
        assert settings.storage == "directory"
        assert settings.data_dir == str(tmp_path)
        assert settings.latency_max_ms == 5
        assert isinstance(settings.build_store(), DirectoryStore)

    def test_latency_range_validated(self):
        with pytest.raises(ValueError):
            Settings(latency_min_ms=100, latency_max_ms=10, _env_file=None)

    def test_invalid_storage(self):
        with pytest.raises(ValueError):
            Settings(storage="redis", _env_file=None)
