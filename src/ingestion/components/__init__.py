"""Components for schedule ingestion: provider client and payload mapper."""

from src.ingestion.components.client import ScheduleClient, create_client
from src.ingestion.components.mapper import map_entry, map_payload

__all__ = [
    "ScheduleClient",
    "create_client",
    "map_entry",
    "map_payload",
]
