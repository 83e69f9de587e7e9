"""Daily reset: archive yesterday's bucket and keep a bounded archive."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

from smart_history.journey.grouping import day_key
from smart_history.journey.models import DayBucket
from smart_history.journey.store import JourneyStore

logger = logging.getLogger(__name__)

DEFAULT_RESET_HOUR = 6
DEFAULT_RETENTION_DAYS = 7
RESET_INTERVAL = timedelta(days=1)


class SchedulerState(str, Enum):
    IDLE = "idle"
    RESETTING = "resetting"


def next_reset_instant(now: datetime, reset_hour: int = DEFAULT_RESET_HOUR) -> datetime:
    """The next ``reset_hour``:00 local time strictly after ``now``."""
    candidate = now.replace(hour=reset_hour, minute=0, second=0, microsecond=0)
    if now >= candidate:
        candidate += timedelta(days=1)
    return candidate


def prune_archives(archived: dict[str, DayBucket], keep: int = DEFAULT_RETENTION_DAYS) -> list[str]:
    """Drop all but the ``keep`` latest day keys in place. Returns the removed keys."""
    days = sorted(archived)
    removed = days[: max(0, len(days) - keep)]
    for day in removed:
        del archived[day]
    return removed


class RetentionScheduler:
    """Runs the daily reset against the journey store.

    The first ``maybe_reset`` after construction resets immediately if the
    reset hour has already passed today; later calls reset once per elapsed
    24-hour period.

    Args:
        store: Journey persistence.
        reset_hour: Local hour at which a new day starts.
        retention_days: Number of archived days to keep.
        clock: Returns the current local time.
    """

    def __init__(
        self,
        store: JourneyStore,
        reset_hour: int = DEFAULT_RESET_HOUR,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self._store = store
        self.reset_hour = reset_hour
        self.retention_days = retention_days
        self._clock = clock
        self._state = SchedulerState.IDLE
        self._next_fire: datetime | None = None
        self._task: asyncio.Task | None = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def next_fire(self) -> datetime | None:
        return self._next_fire

    async def maybe_reset(self, now: datetime | None = None) -> bool:
        """Reset if one is due. Returns whether a reset ran."""
        now = now or self._clock()
        if self._state is SchedulerState.RESETTING:
            return False

        if self._next_fire is None:
            self._next_fire = next_reset_instant(now, self.reset_hour)
            if now.hour < self.reset_hour:
                return False
        elif now < self._next_fire:
            return False
        else:
            while self._next_fire <= now:
                self._next_fire += RESET_INTERVAL

        await self.reset(now)
        return True

    async def reset(self, now: datetime) -> None:
        self._state = SchedulerState.RESETTING
        try:
            yesterday = day_key(now - timedelta(days=1))
            data = await self._store.get()
            bucket = data.visited_pages.pop(yesterday, None)
            if bucket is not None:
                data.archived_days[yesterday] = bucket
                logger.info("Archived %d pages from %s", len(bucket), yesterday)
            removed = prune_archives(data.archived_days, self.retention_days)
            if removed:
                logger.info("Pruned archived days: %s", ", ".join(removed))
            await self._store.put(data)
        finally:
            self._state = SchedulerState.IDLE

    async def run(self) -> None:
        """Reset on schedule for as long as the task lives."""
        while True:
            try:
                await self.maybe_reset()
            except Exception:
                logger.exception("Daily reset failed")
            delay = (self._next_fire - self._clock()).total_seconds()
            await asyncio.sleep(max(delay, 0.0))

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run())
        return self._task

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
