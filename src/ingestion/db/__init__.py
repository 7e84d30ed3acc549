"""Database module for collection run tracking."""

from src.ingestion.db.models import (
    CollectionStatus,
    CollectionRun,
    CollectionRunRepository,
    create_repository,
)

__all__ = [
    "CollectionStatus",
    "CollectionRun",
    "CollectionRunRepository",
    "create_repository",
]
