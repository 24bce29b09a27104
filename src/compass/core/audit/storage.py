"""Storage backends for the calculation audit log.

Both backends are append-only. Reads always return entries newest first.
"""

from __future__ import annotations

import copy
import dataclasses
import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from compass.core.audit.logger import CalculationLogEntry

logger = logging.getLogger(__name__)

# Current schema version
SCHEMA_VERSION = 1


class AuditLogStorage(Protocol):
    """Interface every audit storage backend implements."""

    def save(self, entry: CalculationLogEntry) -> None: ...

    def get_all(self) -> list[CalculationLogEntry]: ...

    def get_by_id(self, entry_id: str) -> CalculationLogEntry | None: ...

    def get_by_hash(self, input_hash: str) -> list[CalculationLogEntry]: ...

    def get_by_type(self, calculation_type: str) -> list[CalculationLogEntry]: ...

    def get_recent(self, limit: int) -> list[CalculationLogEntry]: ...

    def count(self) -> int: ...

    def clear(self) -> None: ...


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------

def _detached(entry: CalculationLogEntry) -> CalculationLogEntry:
    return dataclasses.replace(
        entry,
        input=copy.deepcopy(entry.input),
        output=copy.deepcopy(entry.output),
        metadata=copy.deepcopy(entry.metadata),
    )


class InMemoryAuditStorage:
    """Process-local append-only list guarded by a mutex.

    ``max_entries`` bounds memory by evicting the oldest entries; ``None``
    keeps everything until :meth:`clear`.

    Entries are copied on the way in and out, so callers never share the
    stored input, output or metadata.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be positive, got {max_entries}")
        self._entries: list[CalculationLogEntry] = []
        self._lock = threading.Lock()
        self._max_entries = max_entries

    def save(self, entry: CalculationLogEntry) -> None:
        stored = _detached(entry)
        with self._lock:
            self._entries.append(stored)
            if self._max_entries is not None and len(self._entries) > self._max_entries:
                del self._entries[: len(self._entries) - self._max_entries]

    def _snapshot(self) -> list[CalculationLogEntry]:
        with self._lock:
            entries = list(reversed(self._entries))
        return [_detached(e) for e in entries]

    def get_all(self) -> list[CalculationLogEntry]:
        return self._snapshot()

    def get_by_id(self, entry_id: str) -> CalculationLogEntry | None:
        for entry in self._snapshot():
            if entry.id == entry_id:
                return entry
        return None

    def get_by_hash(self, input_hash: str) -> list[CalculationLogEntry]:
        return [e for e in self._snapshot() if e.input_hash == input_hash]

    def get_by_type(self, calculation_type: str) -> list[CalculationLogEntry]:
        return [e for e in self._snapshot() if e.calculation_type == calculation_type]

    def get_recent(self, limit: int) -> list[CalculationLogEntry]:
        if limit <= 0:
            return []
        return self._snapshot()[:limit]

    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


# ---------------------------------------------------------------------------
# SQLite
# ---------------------------------------------------------------------------

_SCHEMA_V1 = """
CREATE TABLE IF NOT EXISTS calculation_log (
    id               TEXT PRIMARY KEY,
    timestamp        TEXT NOT NULL,
    calculation_type TEXT NOT NULL,
    input_hash       TEXT NOT NULL,
    input_json       TEXT NOT NULL,
    output_json      TEXT NOT NULL,
    duration_ms      REAL NOT NULL,
    version          TEXT NOT NULL,
    metadata_json    TEXT
);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_calc_hash ON calculation_log(input_hash);
CREATE INDEX IF NOT EXISTS idx_calc_type ON calculation_log(calculation_type);
"""


class AuditStorageError(Exception):
    """Raised when the persisted audit store is used before initialization."""


class SQLiteAuditStorage:
    """Persisted audit log in a SQLite file (or ``:memory:`` for tests).

    Insertion order is the rowid, so newest-first reads sort by rowid.

    Usage::

        storage = SQLiteAuditStorage("~/.compass/audit.db")
        storage.initialize()
        audit = CalculationAuditLogger(storage)
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    @property
    def connection(self) -> sqlite3.Connection:
        """Active connection.

        Raises:
            AuditStorageError: If :meth:`initialize` has not been called.
        """
        if self._conn is None:
            raise AuditStorageError("Audit storage not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Open the connection and create the schema. Idempotent."""
        if self._conn is not None:
            return

        if self._db_path != ":memory:":
            db_file = Path(self._db_path).expanduser()
            db_file.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(db_file), check_same_thread=False)
        else:
            self._conn = sqlite3.connect(":memory:", check_same_thread=False)

        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._ensure_schema()
        logger.info("Audit storage initialized: %s", self._db_path)

    def _ensure_schema(self) -> None:
        conn = self.connection
        conn.executescript(_SCHEMA_V1)
        current_version = self.get_schema_version()
        if current_version < SCHEMA_VERSION:
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
            conn.commit()
            logger.info("Audit schema updated from version %d to %d", current_version, SCHEMA_VERSION)

    def get_schema_version(self) -> int:
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] if row[0] is not None else 0

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.info("Audit storage closed")

    def __enter__(self) -> SQLiteAuditStorage:
        self.initialize()
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # ---------------------------------------------------------------
    # Write
    # ---------------------------------------------------------------

    def save(self, entry: CalculationLogEntry) -> None:
        metadata_json = (
            json.dumps(entry.metadata, separators=(",", ":")) if entry.metadata else None
        )
        with self._lock:
            conn = self.connection
            try:
                conn.execute(
                    """INSERT INTO calculation_log
                       (id, timestamp, calculation_type, input_hash, input_json,
                        output_json, duration_ms, version, metadata_json)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    (
                        entry.id,
                        entry.timestamp,
                        entry.calculation_type,
                        entry.input_hash,
                        json.dumps(entry.input, separators=(",", ":")),
                        json.dumps(entry.output, separators=(",", ":")),
                        entry.duration_ms,
                        entry.version,
                        metadata_json,
                    ),
                )
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                logger.exception("Failed to persist calculation log entry %s", entry.id)
                raise

    def clear(self) -> None:
        with self._lock:
            self.connection.execute("DELETE FROM calculation_log")
            self.connection.commit()

    # ---------------------------------------------------------------
    # Read
    # ---------------------------------------------------------------

    def _query(self, where: str = "", params: tuple = (), limit: int | None = None) -> list[CalculationLogEntry]:
        from compass.core.audit.logger import CalculationLogEntry

        query = f"SELECT * FROM calculation_log{where} ORDER BY rowid DESC"
        if limit is not None:
            query += " LIMIT ?"
            params = (*params, limit)
        with self._lock:
            rows = self.connection.execute(query, params).fetchall()
        return [
            CalculationLogEntry(
                id=row["id"],
                calculation_type=row["calculation_type"],
                input=json.loads(row["input_json"]),
                output=json.loads(row["output_json"]),
                input_hash=row["input_hash"],
                duration_ms=row["duration_ms"],
                version=row["version"],
                timestamp=row["timestamp"],
                metadata=json.loads(row["metadata_json"]) if row["metadata_json"] else {},
            )
            for row in rows
        ]

    def get_all(self) -> list[CalculationLogEntry]:
        return self._query()

    def get_by_id(self, entry_id: str) -> CalculationLogEntry | None:
        rows = self._query(" WHERE id = ?", (entry_id,), limit=1)
        return rows[0] if rows else None

    def get_by_hash(self, input_hash: str) -> list[CalculationLogEntry]:
        return self._query(" WHERE input_hash = ?", (input_hash,))

    def get_by_type(self, calculation_type: str) -> list[CalculationLogEntry]:
        return self._query(" WHERE calculation_type = ?", (calculation_type,))

    def get_recent(self, limit: int) -> list[CalculationLogEntry]:
        if limit <= 0:
            return []
        return self._query(limit=limit)

    def count(self) -> int:
        with self._lock:
            row = self.connection.execute("SELECT COUNT(*) FROM calculation_log").fetchone()
        return row[0]
