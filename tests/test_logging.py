import json
import logging

import pytest

from pesadb.utils.logging import JsonFormatter, configure_logging, get_logger


@pytest.fixture
def restore_pesadb_logger():
    logger = logging.getLogger("pesadb")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("pesadb.engine", logging.INFO, __file__, 1,
                               "seeded %d tables", (2,), None)
    record.tables = ["users", "transactions"]
    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "INFO"
    assert payload["logger"] == "pesadb.engine"
    assert payload["message"] == "seeded 2 tables"
    assert payload["tables"] == ["users", "transactions"]


def test_configure_logging_sets_level(restore_pesadb_logger):
    configure_logging("debug")
    assert restore_pesadb_logger.level == logging.DEBUG
    assert not restore_pesadb_logger.propagate
    assert len(restore_pesadb_logger.handlers) == 1


def test_configure_logging_json(restore_pesadb_logger, capsys):
    configure_logging("INFO", json_logs=True)
    get_logger("pesadb.test").info("hello", extra={"rows": 3})
    line = capsys.readouterr().err.strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["message"] == "hello"
    assert payload["rows"] == 3


def test_failed_query_logged_as_warning(db, caplog):
    with caplog.at_level(logging.WARNING, logger="pesadb"):
        db.query("SELECT * FROM ghosts")
    assert any("Table ghosts not found." in r.getMessage() for r in caplog.records)
