"""
SQLite bootstrap and connection helpers
=======================================

- One autocommit connection shared by every repository (WAL journal).
- ``schema.sql`` lives beside this module and is safe to re-run; the applied
  version is tracked in ``PRAGMA user_version``.
"""

from __future__ import annotations

import pathlib
import sqlite3
from typing import Optional

from cloak.config import storage
from cloak.errors import StoreError

SCHEMA_VERSION = 1
SCHEMA_FILE = pathlib.Path(__file__).with_name("schema.sql")


def db_path() -> str:
    return storage.DB_PATH


def connect(path: Optional[str] = None) -> sqlite3.Connection:
    target = path or db_path()
    if target != ":memory:":
        pathlib.Path(target).parent.mkdir(parents=True, exist_ok=True)

    # Autocommit; writes use explicit `with conn:` blocks in worker threads.
    conn = sqlite3.connect(target, isolation_level=None, check_same_thread=False)
    conn.row_factory = sqlite3.Row

    for pragma in (
        "journal_mode=WAL",
        "synchronous=NORMAL",
        "foreign_keys=ON",
        "temp_store=MEMORY",
        f"busy_timeout={int(storage.BUSY_TIMEOUT_MS)}",
    ):
        conn.execute(f"PRAGMA {pragma};")
    return conn


def schema_version(conn: sqlite3.Connection) -> int:
    return int(conn.execute("PRAGMA user_version;").fetchone()[0])


def migrate(conn: sqlite3.Connection) -> int:
    """Apply schema.sql and stamp ``SCHEMA_VERSION``; returns the version."""
    current = schema_version(conn)
    if current > SCHEMA_VERSION:
        raise StoreError(
            f"Database schema v{current} is newer than this build (v{SCHEMA_VERSION})"
        )

    conn.executescript(SCHEMA_FILE.read_text(encoding="utf-8"))
    conn.execute(f"PRAGMA user_version={SCHEMA_VERSION};")
    return SCHEMA_VERSION


def wal_checkpoint_truncate(conn: sqlite3.Connection) -> None:
    """Fold the WAL back into the main file and truncate it."""
    conn.execute("PRAGMA wal_checkpoint(TRUNCATE);")
