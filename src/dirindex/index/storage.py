"""SQLite store holding one row per indexed path."""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from dirindex.errors import DirIndexError, LockPoisonedError, StorageError
from dirindex.models import FileRecord

LOGGER = logging.getLogger(__name__)

TABLE = "main_table"


class SQLiteFileStore:
    """Persistence layer for file metadata records.

    A single connection is shared by every caller. Each operation runs inside
    :meth:`session`, which holds the store lock until the operation finishes.
    If an unexpected exception escapes a session the store is poisoned: later
    sessions raise :class:`LockPoisonedError` unless ``recover_poisoned_lock``
    is set, in which case the pending transaction is rolled back and the store
    is used again.
    """

    def __init__(self, db_path: Path, *, recover_poisoned_lock: bool = False) -> None:
        self.db_path = Path(db_path)
        self.recover_poisoned_lock = recover_poisoned_lock
        self._lock = threading.Lock()
        self._poisoned = False
        try:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL;")
            self._conn.execute("PRAGMA synchronous=NORMAL;")
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        self._ensure_schema()

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    @property
    def poisoned(self) -> bool:
        return self._poisoned

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def session(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            if self._poisoned:
                if not self.recover_poisoned_lock:
                    raise LockPoisonedError()
                self._recover()
            try:
                yield self._conn
            except DirIndexError:
                raise
            except sqlite3.Error as exc:
                raise StorageError(str(exc)) from exc
            except BaseException:
                self._poisoned = True
                LOGGER.error("Operation aborted while holding the index lock")
                raise

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with self.session() as conn:
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def _recover(self) -> None:
        LOGGER.warning("Recovering poisoned index lock for %s", self.db_path)
        try:
            self._conn.rollback()
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        self._poisoned = False

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {TABLE} (
                    name TEXT NOT NULL,
                    path TEXT NOT NULL UNIQUE,
                    extension TEXT,
                    size INTEGER NOT NULL,
                    modified INTEGER NOT NULL
                )
                """
            )
            conn.execute(f"CREATE INDEX IF NOT EXISTS idx_path ON {TABLE}(path)")
            conn.execute(f"CREATE INDEX IF NOT EXISTS idx_name ON {TABLE}(name)")
            conn.execute(f"CREATE INDEX IF NOT EXISTS idx_extension ON {TABLE}(extension)")

    def insert_record(self, record: FileRecord) -> None:
        """Insert or replace ``record``; must run inside :meth:`transaction`."""
        self._conn.execute(
            f"""
            INSERT OR REPLACE INTO {TABLE}(name, path, extension, size, modified)
            VALUES (?, ?, ?, ?, ?)
            """,
            (record.name, record.path, record.extension, record.size, record.modified),
        )

    def upsert(self, record: FileRecord) -> None:
        with self.transaction():
            self.insert_record(record)

    def has_records(self) -> bool:
        with self.session() as conn:
            row = conn.execute(f"SELECT EXISTS(SELECT 1 FROM {TABLE})").fetchone()
        return bool(row[0])

    def count(self) -> int:
        with self.session() as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {TABLE}").fetchone()[0]

    def get_record(self, path: str) -> FileRecord | None:
        with self.session() as conn:
            row = conn.execute(
                f"SELECT name, path, extension, size, modified FROM {TABLE} WHERE path = ?",
                (path,),
            ).fetchone()
        return FileRecord.from_row(row) if row is not None else None

    def remove_missing_files(self) -> int:
        """Remove records whose path no longer exists on disk."""
        with self.transaction() as conn:
            rows = conn.execute(f"SELECT path FROM {TABLE}").fetchall()
            missing = [(row["path"],) for row in rows if not os.path.exists(row["path"])]
            conn.executemany(f"DELETE FROM {TABLE} WHERE path = ?", missing)
        if missing:
            LOGGER.info("Removed %d stale records", len(missing))
        return len(missing)
