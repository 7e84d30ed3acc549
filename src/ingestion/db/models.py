"""
Database models for monthly collection runs.

Uses SQLite to track each collect-month run and its totals.
"""

import sqlite3
from contextlib import closing
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import NamedTuple

from src.utils import logger
from src.utils.exceptions import IngestionRecordError
from src.config import settings


class CollectionStatus(str, Enum):
    """Status of a collection run."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    PARTIAL = "partial"  # Some days skipped after provider/store errors
    FAILED = "failed"


class CollectionRun(NamedTuple):
    """Record of a single collect-month run."""
    id: int | None
    created_at: datetime
    departure_iata: str
    month: str
    status: CollectionStatus
    total_saved: int
    total_days: int
    total_api_calls: int
    error_message: str | None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "createdAt": self.created_at.isoformat(),
            "departureIata": self.departure_iata,
            "month": self.month,
            "status": self.status.value,
            "totalSaved": self.total_saved,
            "totalDays": self.total_days,
            "totalApiCalls": self.total_api_calls,
            "errorMessage": self.error_message,
        }


# SQL statements
CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS collection_runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at TEXT NOT NULL,
    departure_iata TEXT NOT NULL,
    month TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'pending',
    total_saved INTEGER NOT NULL DEFAULT 0,
    total_days INTEGER NOT NULL DEFAULT 0,
    total_api_calls INTEGER NOT NULL DEFAULT 0,
    error_message TEXT
)
"""

CREATE_INDEX_SQL = """
CREATE INDEX IF NOT EXISTS idx_runs_created_at ON collection_runs(created_at);
CREATE INDEX IF NOT EXISTS idx_runs_airport_month ON collection_runs(departure_iata, month);
"""

INSERT_RUN_SQL = """
INSERT INTO collection_runs
    (created_at, departure_iata, month, status, total_saved, total_days, total_api_calls, error_message)
VALUES
    (?, ?, ?, ?, 0, 0, 0, NULL)
"""

UPDATE_RUN_SQL = """
UPDATE collection_runs
SET status = ?, total_saved = ?, total_days = ?, total_api_calls = ?, error_message = ?
WHERE id = ?
"""

SELECT_BY_ID_SQL = "SELECT * FROM collection_runs WHERE id = ?"

SELECT_LATEST_SQL = """
SELECT * FROM collection_runs
ORDER BY created_at DESC, id DESC
LIMIT ?
"""

SELECT_BY_MONTH_SQL = """
SELECT * FROM collection_runs
WHERE departure_iata = ? AND month = ?
ORDER BY created_at DESC, id DESC
"""


def _row_to_run(row: tuple) -> CollectionRun:
    """Convert database row to CollectionRun."""
    return CollectionRun(
        id=row[0],
        created_at=datetime.fromisoformat(row[1]),
        departure_iata=row[2],
        month=row[3],
        status=CollectionStatus(row[4]),
        total_saved=row[5],
        total_days=row[6],
        total_api_calls=row[7],
        error_message=row[8],
    )


class CollectionRunRepository:
    """
    Repository for collection runs in SQLite.

    Tracks each run with:
    - Airport and month collected
    - Status (in progress, success, partial, failed)
    - Records saved, days completed and provider calls made
    - Error summary for skipped days
    """

    def __init__(self, db_path: str | Path | None = None):
        """
        Initialize the repository.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path) if db_path else settings.database.full_path
        self._ensure_database()

    def _ensure_database(self) -> None:
        """Ensure database and tables exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with closing(self._get_connection()) as conn, conn:
                cursor = conn.cursor()
                cursor.execute(CREATE_TABLE_SQL)
                cursor.executescript(CREATE_INDEX_SQL)
        except sqlite3.Error as e:
            raise IngestionRecordError(f"Failed to initialize run database at {self.db_path}: {e}")

        logger.info(f"Run database initialized at {self.db_path}")

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection."""
        return sqlite3.connect(str(self.db_path))

    def create_run(
        self,
        departure_iata: str,
        month: str,
        status: CollectionStatus = CollectionStatus.IN_PROGRESS,
    ) -> CollectionRun:
        """
        Create a new collection run.

        Args:
            departure_iata: Airport being collected
            month: Month being collected, YYYY-MM
            status: Initial status

        Returns:
            Created CollectionRun with assigned ID
        """
        created_at = datetime.now(timezone.utc)

        try:
            with closing(self._get_connection()) as conn, conn:
                cursor = conn.cursor()
                cursor.execute(
                    INSERT_RUN_SQL,
                    (created_at.isoformat(), departure_iata, month, status.value),
                )
                run_id = cursor.lastrowid
        except sqlite3.Error as e:
            raise IngestionRecordError(f"Failed to create collection run: {e}")

        logger.debug(f"Created collection run with ID: {run_id}")
        return CollectionRun(
            id=run_id,
            created_at=created_at,
            departure_iata=departure_iata,
            month=month,
            status=status,
            total_saved=0,
            total_days=0,
            total_api_calls=0,
            error_message=None,
        )

    def finish_run(
        self,
        run_id: int,
        status: CollectionStatus,
        total_saved: int,
        total_days: int,
        total_api_calls: int,
        error_message: str | None = None,
    ) -> CollectionRun | None:
        """
        Store the final totals of a run.

        Returns:
            Updated CollectionRun or None if not found
        """
        try:
            with closing(self._get_connection()) as conn, conn:
                conn.execute(
                    UPDATE_RUN_SQL,
                    (status.value, total_saved, total_days, total_api_calls, error_message, run_id),
                )
        except sqlite3.Error as e:
            raise IngestionRecordError(f"Failed to update collection run {run_id}: {e}")

        logger.debug(f"Updated collection run {run_id} with status: {status.value}")
        return self.get_by_id(run_id)

    def get_by_id(self, run_id: int) -> CollectionRun | None:
        """Get a run by ID."""
        with closing(self._get_connection()) as conn:
            row = conn.execute(SELECT_BY_ID_SQL, (run_id,)).fetchone()

        return _row_to_run(row) if row else None

    def get_latest(self, limit: int = 50) -> list[CollectionRun]:
        """Get the most recent runs."""
        with closing(self._get_connection()) as conn:
            rows = conn.execute(SELECT_LATEST_SQL, (limit,)).fetchall()

        return [_row_to_run(row) for row in rows]

    def get_by_month(self, departure_iata: str, month: str) -> list[CollectionRun]:
        """Get all runs for one airport and month."""
        with closing(self._get_connection()) as conn:
            rows = conn.execute(SELECT_BY_MONTH_SQL, (departure_iata, month)).fetchall()

        return [_row_to_run(row) for row in rows]


def create_repository() -> CollectionRunRepository:
    """Create a new repository with default settings."""
    return CollectionRunRepository()


__all__ = [
    "CollectionStatus",
    "CollectionRun",
    "CollectionRunRepository",
    "create_repository",
]
