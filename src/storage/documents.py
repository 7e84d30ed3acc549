"""
Document store backed by SQLite.

Stores JSON documents addressed by (collection, key) and supports the
operations the schedule layouts need:
- point get/set by key
- atomic per-document read-modify-write (update)
- key prefix and key range scans

There are no multi-document transactions; every call opens its own
connection so the store can be shared between the API threadpool and
collection runs.
"""

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterator

from src.utils import logger
from src.utils.exceptions import StoreError
from src.config import settings


Document = dict[str, Any]
Mutator = Callable[[Document | None], Document]

# Upper bound for prefix scans; keys are ASCII
_KEY_CEILING = "\uffff"


CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,
    key TEXT NOT NULL,
    data TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    PRIMARY KEY (collection, key)
)
"""

SELECT_DOCUMENT_SQL = "SELECT data FROM documents WHERE collection = ? AND key = ?"

UPSERT_DOCUMENT_SQL = """
INSERT INTO documents (collection, key, data, updated_at)
VALUES (?, ?, ?, ?)
ON CONFLICT (collection, key) DO UPDATE SET
    data = excluded.data,
    updated_at = excluded.updated_at
"""

SELECT_RANGE_SQL = """
SELECT key, data FROM documents
WHERE collection = ? AND key >= ? AND key < ?
ORDER BY key
"""

SELECT_KEYS_SQL = "SELECT key FROM documents WHERE collection = ? ORDER BY key"


class DocumentStore:
    """
    SQLite document store.

    Each public method maps sqlite3 failures to StoreError so callers only
    deal with the service's own exception hierarchy.
    """

    def __init__(self, db_path: str | Path | None = None, busy_timeout: float | None = None):
        """
        Initialize the store.

        Args:
            db_path: Path to the SQLite file (defaults to settings)
            busy_timeout: Seconds to wait for the write lock
        """
        self.db_path = Path(db_path) if db_path else settings.storage.full_path
        self.busy_timeout = busy_timeout or settings.storage.busy_timeout_seconds
        self._ensure_database()

    def _ensure_database(self) -> None:
        """Ensure database file and table exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self._connect() as conn:
                conn.execute("PRAGMA journal_mode=WAL")
                conn.execute(CREATE_TABLE_SQL)
        except sqlite3.Error as e:
            raise StoreError(f"Failed to initialize document store at {self.db_path}: {e}")

        logger.info(f"Document store initialized at {self.db_path}")

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        # Autocommit mode; transactions are opened explicitly where needed
        conn = sqlite3.connect(str(self.db_path), timeout=self.busy_timeout, isolation_level=None)
        try:
            yield conn
        finally:
            conn.close()

    def get(self, collection: str, key: str) -> Document | None:
        """Get a document by key, or None if absent."""
        try:
            with self._connect() as conn:
                row = conn.execute(SELECT_DOCUMENT_SQL, (collection, key)).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read {collection}/{key}: {e}")
        return json.loads(row[0]) if row else None

    def set(self, collection: str, key: str, data: Document) -> None:
        """Create or replace a document."""
        try:
            with self._connect() as conn:
                conn.execute(
                    UPSERT_DOCUMENT_SQL,
                    (collection, key, json.dumps(data), _now()),
                )
        except sqlite3.Error as e:
            raise StoreError(f"Failed to write {collection}/{key}: {e}")

    def update(self, collection: str, key: str, mutator: Mutator) -> Document:
        """
        Atomically read, transform and write back one document.

        The mutator receives the current document (None if absent) and
        returns the new one. The write lock is held for the whole cycle, so
        concurrent updates of the same key are serialized.

        Returns:
            The document as written
        """
        try:
            with self._connect() as conn:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    row = conn.execute(SELECT_DOCUMENT_SQL, (collection, key)).fetchone()
                    current = json.loads(row[0]) if row else None
                    updated = mutator(current)
                    conn.execute(
                        UPSERT_DOCUMENT_SQL,
                        (collection, key, json.dumps(updated), _now()),
                    )
                    conn.execute("COMMIT")
                except BaseException:
                    if conn.in_transaction:
                        conn.execute("ROLLBACK")
                    raise
        except sqlite3.Error as e:
            raise StoreError(f"Failed to update {collection}/{key}: {e}")

        return updated

    def query_range(self, collection: str, start: str, end: str) -> list[tuple[str, Document]]:
        """Documents with start <= key < end, ordered by key."""
        try:
            with self._connect() as conn:
                rows = conn.execute(SELECT_RANGE_SQL, (collection, start, end)).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to scan {collection} [{start}, {end}): {e}")
        return [(key, json.loads(data)) for key, data in rows]

    def query_prefix(self, collection: str, prefix: str) -> list[tuple[str, Document]]:
        """Documents whose key starts with prefix, ordered by key."""
        return self.query_range(collection, prefix, prefix + _KEY_CEILING)

    def list_keys(self, collection: str) -> list[str]:
        try:
            with self._connect() as conn:
                rows = conn.execute(SELECT_KEYS_SQL, (collection,)).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to list keys of {collection}: {e}")
        return [row[0] for row in rows]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_document_store() -> DocumentStore:
    """Create a document store with default settings."""
    return DocumentStore()


__all__ = ["Document", "DocumentStore", "create_document_store"]
