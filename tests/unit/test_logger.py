"""tests/unit/test_logger.py — flight-recorder logging (TRACE level, SQLite journal)."""
import json
import logging
import sqlite3
import sys
import time
from pathlib import Path

import pytest


# ─── Fixtures ─────────────────────────────────────────────────────────────────

@pytest.fixture
def tmp_db(tmp_path) -> Path:
    return tmp_path / "test_scribefix_logging.db"


@pytest.fixture
def logging_env(tmp_db, tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_DB_PATH", str(tmp_db))
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("LOG_CONSOLE", "false")
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)


@pytest.fixture
def fresh_logger(logging_env, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "TRACE")
    from scribefix.logger import init_logging
    return init_logging("test_component")


@pytest.fixture
def journal(fresh_logger):
    from scribefix.logger import get_journal_handler
    handler = get_journal_handler()
    assert handler is not None
    return handler


def _query(db: Path, sql: str, *params):
    conn = sqlite3.connect(str(db))
    try:
        return conn.execute(sql, params).fetchall()
    finally:
        conn.close()


# ─── TRACE level ──────────────────────────────────────────────────────────────

class TestTraceLevel:

    def test_trace_level_value(self):
        from scribefix.logger import TRACE
        assert TRACE == 5
        assert logging.getLevelName(5) == "TRACE"

    def test_trace_enabled_at_trace(self, fresh_logger):
        from scribefix.logger import TRACE
        assert logging.getLogger("trace_enabled_test").isEnabledFor(TRACE)

    def test_trace_method_on_logger(self, fresh_logger):
        logging.getLogger("trace_test").trace("trace_event")  # type: ignore[attr-defined]

    def test_info_level_disables_trace(self, logging_env, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "INFO")
        from scribefix.logger import TRACE, init_logging
        init_logging("env_test")
        assert not logging.getLogger("env_test_log").isEnabledFor(TRACE)


# ─── Level / .env resolution ──────────────────────────────────────────────────

class TestLevelResolution:

    def test_default_is_info(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        from scribefix.logger import _resolve_level
        assert _resolve_level({}) == logging.INFO

    def test_dotenv_used_without_env_var(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        from scribefix.logger import _resolve_level
        assert _resolve_level({"LOG_LEVEL": "debug"}) == logging.DEBUG

    def test_env_var_beats_dotenv(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        from scribefix.logger import _resolve_level
        assert _resolve_level({"LOG_LEVEL": "DEBUG"}) == logging.ERROR

    def test_load_dotenv_parses_file(self, tmp_path):
        (tmp_path / ".env").write_text("# comment\nLOG_LEVEL=WARNING\nLOG_CONSOLE=false\nnoise\n")
        from scribefix.logger import _load_dotenv
        env = _load_dotenv(tmp_path)
        assert env == {"LOG_LEVEL": "WARNING", "LOG_CONSOLE": "false"}


# ─── SQLite journal ───────────────────────────────────────────────────────────

class TestJournalSetup:

    def test_tables_created(self, journal, tmp_db):
        names = {r[0] for r in _query(tmp_db, "SELECT name FROM sqlite_master WHERE type='table'")}
        assert {"journal", "crash_artifacts"} <= names

    def test_wal_mode_active(self, journal, tmp_db):
        assert _query(tmp_db, "PRAGMA journal_mode")[0][0] == "wal"

    def test_indexes_exist(self, journal, tmp_db):
        names = {r[0] for r in _query(tmp_db, "SELECT name FROM sqlite_master WHERE type='index'")}
        assert {"idx_journal_time", "idx_journal_level"} <= names

    def test_log_file_created(self, fresh_logger, tmp_path):
        assert (tmp_path / "logs" / "scribefix.log").exists()


class TestJournalWrites:

    def test_records_written(self, journal, tmp_db):
        log = logging.getLogger("batch_test")
        for i in range(5):
            log.info("batch_event_%d", i)
        journal.flush()
        rows = _query(tmp_db, "SELECT event FROM journal WHERE logger='batch_test'")
        assert [r[0] for r in rows] == [f"batch_event_{i}" for i in range(5)]

    def test_background_flush(self, journal, tmp_db):
        logging.getLogger("bg_test").warning("background_event")
        time.sleep(0.35)
        assert _query(tmp_db, "SELECT level FROM journal WHERE event='background_event'") == [("WARNING",)]

    def test_structured_fields_in_payload(self, journal, tmp_db):
        logging.getLogger("fields_test").debug(
            "homonym_corrected", extra={"fields": {"rule": "their", "start": 4}}
        )
        journal.flush()
        payload = json.loads(_query(tmp_db, "SELECT payload FROM journal WHERE logger='fields_test'")[0][0])
        assert payload["fields"] == {"rule": "their", "start": 4}

    def test_corrector_events_reach_journal(self, journal, tmp_db):
        from scribefix.corrector import HomonymCorrector
        HomonymCorrector().process("I no the answer.")
        journal.flush()
        rows = _query(tmp_db, "SELECT level, payload FROM journal WHERE logger='scribefix.corrector'")
        levels = {r[0] for r in rows}
        assert {"TRACE", "DEBUG", "INFO"} <= levels


class TestRetention:

    def _insert(self, journal, level, event, age):
        journal._conn.execute(
            "INSERT INTO journal (timestamp, level, component, logger, event) VALUES (?,?,?,?,?)",
            (time.time() - age, level, "test", "test", event),
        )
        journal._conn.commit()

    def test_trim_removes_old_trace_rows(self, journal):
        self._insert(journal, "TRACE", "old_trace", 2 * 24 * 3600)
        journal._trim()
        count = journal._conn.execute("SELECT COUNT(*) FROM journal WHERE event='old_trace'").fetchone()[0]
        assert count == 0

    def test_trim_keeps_recent_rows(self, journal):
        self._insert(journal, "TRACE", "fresh_trace", 60)
        journal._trim()
        count = journal._conn.execute("SELECT COUNT(*) FROM journal WHERE event='fresh_trace'").fetchone()[0]
        assert count == 1

    def test_trim_preserves_error_rows(self, journal):
        self._insert(journal, "ERROR", "old_error", 365 * 24 * 3600)
        journal._trim()
        count = journal._conn.execute("SELECT COUNT(*) FROM journal WHERE event='old_error'").fetchone()[0]
        assert count == 1


# ─── Exception hook ───────────────────────────────────────────────────────────

class TestExcepthook:

    def test_excepthook_installed(self, fresh_logger):
        assert sys.excepthook is not sys.__excepthook__

    def test_crash_artifact_written(self, journal, tmp_db):
        journal.write_crash_artifact(
            error_id="crash-test-001",
            message="test crash",
            stack_trace="Traceback: test",
            system_state={"python": "3.12"},
        )
        row = _query(tmp_db, "SELECT message FROM crash_artifacts WHERE error_id='crash-test-001'")
        assert row == [("test crash",)]
