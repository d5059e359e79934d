"""
scribefix/logger.py — scribefix logging
========================================
Flight-recorder style logging for the correction engine.

Features:
  - Custom TRACE level (5) for per-sentence evaluation events
  - Console handler on stderr (stdout carries CLI output)
  - Rotating plain-text log file (5MB × 3)
  - SQLite journal (logs/scribefix_logging.db) with WAL PRAGMAs, batched
    writes (100ms flush / 100 records) and per-level retention trim
  - Structured fields: pass extra={"fields": {...}} and they land in the
    journal's payload column
  - sys.excepthook crash handler → crash_artifacts table
  - Settings from env var → .env file in the working directory → default

Usage:
    from scribefix.logger import init_logging, get_logger
    init_logging("scribefix")
    log = get_logger(__name__)
    log.trace("evaluating sentence")
    log.debug("homonym_corrected", extra={"fields": {"rule": "their"}})
"""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sqlite3
import sys
import threading
import time
import traceback
from pathlib import Path
from typing import Any

from . import config

# ─── TRACE custom level ──────────────────────────────────────────────────────

TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def _trace(self: logging.Logger, msg: str, *args: Any, **kwargs: Any) -> None:
    if self.isEnabledFor(TRACE):
        self._log(TRACE, msg, args, **kwargs)


logging.Logger.trace = _trace  # type: ignore[attr-defined]

# ─── Constants ────────────────────────────────────────────────────────────────

DEFAULT_LEVEL = "INFO"

# Retention per log level (seconds). None = keep forever.
_RETENTION: dict[str, float | None] = {
    "TRACE":    24 * 3600,
    "DEBUG":    3 * 24 * 3600,
    "INFO":     14 * 24 * 3600,
    "WARNING":  30 * 24 * 3600,
    "ERROR":    None,
    "CRITICAL": None,
}

_TRIM_EVERY_N = 1000

_PRAGMAS = [
    "PRAGMA journal_mode = WAL;",
    "PRAGMA synchronous = NORMAL;",
    "PRAGMA temp_store = MEMORY;",
    "PRAGMA busy_timeout = 30000;",
    "PRAGMA wal_autocheckpoint = 1000;",
]

_DDL = """
CREATE TABLE IF NOT EXISTS journal (
    id        INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp REAL    NOT NULL,
    level     TEXT    NOT NULL,
    component TEXT    NOT NULL,
    logger    TEXT    NOT NULL,
    event     TEXT    NOT NULL,
    payload   TEXT
);
CREATE INDEX IF NOT EXISTS idx_journal_time   ON journal(timestamp);
CREATE INDEX IF NOT EXISTS idx_journal_level  ON journal(level);
CREATE INDEX IF NOT EXISTS idx_journal_logger ON journal(logger);

CREATE TABLE IF NOT EXISTS crash_artifacts (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp    REAL    NOT NULL,
    error_id     TEXT    NOT NULL,
    component    TEXT    NOT NULL,
    message      TEXT    NOT NULL,
    stack_trace  TEXT    NOT NULL,
    system_state TEXT
);
"""


# ─── SQLite journal ──────────────────────────────────────────────────────────

class JournalHandler(logging.Handler):
    """
    Batched SQLite log handler.

    Records are buffered in memory and written:
      - every FLUSH_INTERVAL seconds by a daemon thread
      - when the buffer reaches BATCH_SIZE records
      - on close()
    """

    FLUSH_INTERVAL = 0.1
    BATCH_SIZE = 100

    def __init__(self, db_path: Path, component: str) -> None:
        super().__init__()
        self._db_path = db_path
        self._component = component
        self._buffer: list[tuple] = []
        self._lock = threading.Lock()
        self._insert_count = 0

        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: sqlite3.Connection | None = sqlite3.connect(
            str(db_path), check_same_thread=False
        )
        for pragma in _PRAGMAS:
            try:
                self._conn.execute(pragma)
            except sqlite3.OperationalError as e:
                sys.stderr.write(f"[logger] pragma skipped ({pragma}): {e}\n")
        self._conn.executescript(_DDL)
        self._conn.commit()
        self._trim()

        self._stop = threading.Event()
        self._flush_thread = threading.Thread(
            target=self._flush_loop, daemon=True, name="journal-flush"
        )
        self._flush_thread.start()

    # ── logging.Handler interface ────────────────────────────────────────────

    def emit(self, record: logging.LogRecord) -> None:
        try:
            payload: dict[str, Any] = {
                "file": record.filename,
                "line": record.lineno,
                "func": record.funcName,
                "msg": self.format(record),
            }
            fields = getattr(record, "fields", None)
            if isinstance(fields, dict):
                payload["fields"] = fields
            row = (
                record.created,
                record.levelname,
                self._component,
                record.name,
                record.getMessage()[:200],
                json.dumps(payload, default=str),
            )
            with self._lock:
                self._buffer.append(row)
                self._insert_count += 1
                should_flush = len(self._buffer) >= self.BATCH_SIZE
                should_trim = self._insert_count % _TRIM_EVERY_N == 0

            if should_flush:
                self._flush_now()
            if should_trim:
                self._trim()
        except Exception:
            self.handleError(record)

    def flush(self) -> None:
        self._flush_now()

    def close(self) -> None:
        self._stop.set()
        self._flush_thread.join(timeout=2.0)
        self._flush_now()
        with self._lock:
            conn, self._conn = self._conn, None
        if conn is not None:
            conn.close()
        super().close()

    # ── Internal ─────────────────────────────────────────────────────────────

    def _flush_loop(self) -> None:
        while not self._stop.wait(self.FLUSH_INTERVAL):
            self._flush_now()

    def _flush_now(self) -> None:
        with self._lock:
            if not self._buffer or self._conn is None:
                return
            batch, self._buffer = self._buffer, []
            try:
                with self._conn:
                    self._conn.executemany(
                        "INSERT INTO journal "
                        "(timestamp, level, component, logger, event, payload) "
                        "VALUES (?,?,?,?,?,?)",
                        batch,
                    )
            except sqlite3.Error as e:
                sys.stderr.write(f"[logger] flush error: {e}\n")

    def _trim(self) -> None:
        """Delete rows older than their level's retention period."""
        now = time.time()
        with self._lock:
            if self._conn is None:
                return
            try:
                with self._conn:
                    for level, max_age in _RETENTION.items():
                        if max_age is None:
                            continue
                        self._conn.execute(
                            "DELETE FROM journal WHERE level = ? AND timestamp < ?",
                            (level, now - max_age),
                        )
            except sqlite3.Error as e:
                sys.stderr.write(f"[logger] trim error: {e}\n")

    def write_crash_artifact(
        self,
        error_id: str,
        message: str,
        stack_trace: str,
        system_state: dict | None = None,
    ) -> None:
        with self._lock:
            if self._conn is None:
                return
            try:
                with self._conn:
                    self._conn.execute(
                        "INSERT INTO crash_artifacts "
                        "(timestamp, error_id, component, message, stack_trace, system_state) "
                        "VALUES (?,?,?,?,?,?)",
                        (time.time(), error_id, self._component, message, stack_trace,
                         json.dumps(system_state or {}, default=str)),
                    )
            except sqlite3.Error as e:
                sys.stderr.write(f"[logger] crash artifact write error: {e}\n")


# ─── Module-level state ───────────────────────────────────────────────────────

_journal_handler: JournalHandler | None = None
_component: str = "scribefix"


# ─── Public API ───────────────────────────────────────────────────────────────

def _load_dotenv(root: Path | None = None) -> dict[str, str]:
    """Load .env from the working directory, return {KEY: VALUE}."""
    env: dict[str, str] = {}
    env_path = (root or Path.cwd()) / ".env"
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, _, val = line.partition("=")
                env[key.strip()] = val.strip()
    return env


def _setting(name: str, dotenv: dict[str, str], default: str) -> str:
    return os.environ.get(name) or dotenv.get(name) or default


def _resolve_level(dotenv: dict[str, str]) -> int:
    """LOG_LEVEL from env var > .env file > INFO."""
    name = _setting("LOG_LEVEL", dotenv, DEFAULT_LEVEL).upper()
    level_map = {
        "TRACE": TRACE,
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "WARN": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
        "FATAL": logging.CRITICAL,
    }
    return level_map.get(name, logging.INFO)


def init_logging(component: str = "scribefix") -> logging.Logger:
    """
    Initialise logging. Call ONCE at application startup.

    Args:
        component: Service name stored on every journal row.

    Returns:
        The component logger.
    """
    global _journal_handler, _component
    _component = component

    dotenv = _load_dotenv()
    level = _resolve_level(dotenv)
    logs_dir = Path(_setting("LOG_DIR", dotenv, str(config.LOGS_DIR)))
    db_path = Path(_setting("LOG_DB_PATH", dotenv, str(logs_dir / config.LOG_DB_NAME)))
    log_console = _setting("LOG_CONSOLE", dotenv, "true").lower() != "false"

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    if log_console:
        ch = logging.StreamHandler(sys.stderr)
        ch.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)-7s] %(name)s — %(message)s", datefmt="%H:%M:%S"
        ))
        ch.setLevel(level)
        root.addHandler(ch)

    logs_dir.mkdir(parents=True, exist_ok=True)
    fh = logging.handlers.RotatingFileHandler(
        str(logs_dir / config.LOG_FILE_NAME), maxBytes=5_000_000, backupCount=3
    )
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)-7s] %(name)s %(funcName)s:%(lineno)d — %(message)s"
    ))
    fh.setLevel(level)
    root.addHandler(fh)

    _journal_handler = JournalHandler(db_path, component)
    _journal_handler.setLevel(level)
    root.addHandler(_journal_handler)

    _install_excepthook(component)

    logger = logging.getLogger(component)
    logger.info("logging_initialized component=%s level=%s db=%s",
                component, logging.getLevelName(level), db_path)
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name or _component)


def get_journal_handler() -> JournalHandler | None:
    return _journal_handler


# ─── Root exception hook ──────────────────────────────────────────────────────

def _install_excepthook(component: str) -> None:

    def _hook(exctype: type, value: BaseException, tb: Any) -> None:
        if issubclass(exctype, KeyboardInterrupt):
            sys.__excepthook__(exctype, value, tb)
            return

        import uuid
        error_id = f"crash-{int(time.time())}-{uuid.uuid4().hex[:8]}"
        trace = "".join(traceback.format_exception(exctype, value, tb))
        state = {
            "python": sys.version,
            "platform": sys.platform,
            "argv": sys.argv,
            "pid": os.getpid(),
        }
        sys.stderr.write(f"\n[FATAL] {error_id}\n{trace}\n")

        logging.getLogger(component).critical(
            "UNHANDLED EXCEPTION error_id=%s exc=%s", error_id, value
        )
        handler = get_journal_handler()
        if handler:
            handler.write_crash_artifact(error_id, str(value), trace, state)
            handler.close()
        sys.exit(1)

    sys.excepthook = _hook
