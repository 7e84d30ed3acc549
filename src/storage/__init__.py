"""
Schedule storage.

- DocumentStore: SQLite-backed JSON documents with prefix/range scans
- DateLayout / RouteMonthLayout: the two physical layouts
- ScheduleStore: writes both layouts and serves queries
"""

from src.storage.documents import DocumentStore, create_document_store
from src.storage.layouts import ScheduleLayout, DateLayout, RouteMonthLayout
from src.storage.store import ScheduleStore, create_store

__all__ = [
    "DocumentStore",
    "create_document_store",
    "ScheduleLayout",
    "DateLayout",
    "RouteMonthLayout",
    "ScheduleStore",
    "create_store",
]
