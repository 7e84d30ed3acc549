"""
Ingestion service for flight schedules from AeroDataBox.

This module provides:
- AeroDataBox client that collects one airport/date/half-day unit
- SQLite repository for tracking monthly collection runs
- Monthly collector that walks every unit of a month

One-time run:
    from src.ingestion import run_collect_month
    summary = run_collect_month("ICN", "2024-02")

Configuration (environment variables):
    PROVIDER_API_KEY: RapidAPI key for AeroDataBox
    COLLECTION_INTRA_DAY_DELAY_SECONDS: Pause between the two units of a day (default: 2)
    COLLECTION_INTER_DAY_DELAY_SECONDS: Pause between days (default: 3)
    COLLECTION_TRACKED_AIRPORTS: Far-end airports to keep (default: Philippine airports)
"""

from src.ingestion.components import (
    ScheduleClient,
    create_client,
)
from src.ingestion.db import (
    CollectionStatus,
    CollectionRun,
    CollectionRunRepository,
    create_repository,
)
from src.ingestion.jobs import (
    UnitState,
    CollectionSummary,
    MonthlyCollector,
    create_collector,
    run_collect_month,
)

__all__ = [
    # Components
    "ScheduleClient",
    "create_client",
    # Database
    "CollectionStatus",
    "CollectionRun",
    "CollectionRunRepository",
    "create_repository",
    # Jobs
    "UnitState",
    "CollectionSummary",
    "MonthlyCollector",
    "create_collector",
    "run_collect_month",
]
