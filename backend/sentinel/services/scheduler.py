"""Wall-clock scheduler for the periodic report cycle."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable
from zoneinfo import ZoneInfo

from sentinel.bot_config import ScheduleConfig

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[object]]


@dataclass(frozen=True)
class Schedule:
    """Fire at hour:minute local time, on one weekday or every day."""

    hour: int = 9
    minute: int = 0
    weekday: int | None = 0  # 0 = Monday, None = daily
    timezone: str = "UTC"

    @classmethod
    def from_config(cls, config: ScheduleConfig) -> "Schedule":
        return cls(
            hour=config.hour,
            minute=config.minute,
            weekday=config.weekday,
            timezone=config.timezone,
        )

    def next_run(self, after: datetime) -> datetime:
        """First fire time strictly after `after` (aware datetime)."""
        local = after.astimezone(ZoneInfo(self.timezone))
        candidate = local.replace(hour=self.hour, minute=self.minute, second=0, microsecond=0)
        step = timedelta(days=1)

        if self.weekday is not None:
            candidate += timedelta(days=(self.weekday - candidate.weekday()) % 7)
            step = timedelta(days=7)

        while _resolve(candidate) <= after:
            candidate += step
        return _resolve(candidate)

    def describe(self) -> str:
        day = "daily" if self.weekday is None else f"weekday {self.weekday}"
        return f"{day} at {self.hour:02d}:{self.minute:02d} {self.timezone}"


class Scheduler:
    """Run a job at each scheduled time until stopped.

    The job is awaited before the next fire time is computed, so runs
    never overlap.
    """

    def __init__(self, schedule: Schedule, job: Job):
        self.schedule = schedule
        self.job = job

    async def run(self, stop: asyncio.Event) -> None:
        logger.info("Scheduler started: %s", self.schedule.describe())

        while not stop.is_set():
            now = datetime.now(timezone.utc)
            next_run = self.schedule.next_run(now)
            delay = (next_run - now).total_seconds()
            logger.info("Next report at %s", next_run.isoformat())

            try:
                await asyncio.wait_for(stop.wait(), timeout=max(delay, 0))
                break  # stop was set
            except asyncio.TimeoutError:
                pass

            try:
                await self.job()
            except Exception:
                logger.exception("Scheduled job failed")

        logger.info("Scheduler stopped")


def _resolve(moment: datetime) -> datetime:
    """Map a wall time skipped by a DST jump onto the real clock."""
    return moment.astimezone(timezone.utc).astimezone(moment.tzinfo)
