"""Jobs module for the ingestion service."""

from src.ingestion.jobs.collect_month import (
    UnitState,
    CollectionUnit,
    CollectionSummary,
    MonthlyCollector,
    create_collector,
    run_collect_month,
)

__all__ = [
    "UnitState",
    "CollectionUnit",
    "CollectionSummary",
    "MonthlyCollector",
    "create_collector",
    "run_collect_month",
]
