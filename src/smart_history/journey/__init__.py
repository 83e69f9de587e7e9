"""Daily browsing journey: storage, aggregation and retention."""

from smart_history.journey.aggregator import JourneyAggregator
from smart_history.journey.models import (
    DailySummary,
    DomainGroup,
    JourneyData,
    PageRecord,
    PageView,
)
from smart_history.journey.retention import RetentionScheduler, next_reset_instant, prune_archives
from smart_history.journey.storage import KeyValueStore, MemoryKeyValueStore, SQLiteKeyValueStore
from smart_history.journey.store import JourneyStore

__all__ = [
    "JourneyAggregator",
    "DailySummary",
    "DomainGroup",
    "JourneyData",
    "PageRecord",
    "PageView",
    "RetentionScheduler",
    "next_reset_instant",
    "prune_archives",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SQLiteKeyValueStore",
    "JourneyStore",
]
