# Airwatch: scheduled air quality alerts and on-demand checks
# Copyright (C) 2025 Ruaraidh Dobson, South London Scientific

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Cron scheduling for the broadcast job.

A thin wrapper over APScheduler's BackgroundScheduler exposing add/start/stop.
Jobs run on APScheduler's worker threads, so the scheduler and the command
listener never block each other.

Cron expressions may have five fields (standard crontab) or six, where the
extra leading field is seconds:

    "0 8,12,18 * * *"     08:00, 12:00 and 18:00
    "0 0 8,12,18 * * *"   the same, with an explicit seconds field

Note: numeric day-of-week values follow APScheduler (0 = Monday), not
crontab (0 = Sunday). Prefer names such as "mon-fri".
"""

from logging import getLogger
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

logger = getLogger(__name__)

# Seconds a firing may be late (e.g. after a suspend) and still run
MISFIRE_GRACE_TIME = 300


def build_trigger(expression: str, timezone: str = "UTC") -> CronTrigger:
    """
    Build a CronTrigger from a five- or six-field cron expression.

    Raises:
        ValueError: If the expression has the wrong number of fields or an
            invalid field
    """
    fields = expression.split()

    if len(fields) == 5:
        return CronTrigger.from_crontab(expression, timezone=timezone)

    if len(fields) == 6:
        second, minute, hour, day, month, day_of_week = fields
        return CronTrigger(
            second=second,
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=day_of_week,
            timezone=timezone,
        )

    raise ValueError(
        f"Cron expression must have 5 or 6 fields, got {len(fields)}: {expression!r}"
    )


class CronScheduler:
    """
    Run zero-argument callbacks on cron schedules.

    Each job runs at most once at a time; firings missed while a run is in
    progress are coalesced into one.

    Args:
        timezone: Time zone the cron expressions are interpreted in
    """

    def __init__(self, timezone: str = "UTC"):
        self.timezone = timezone
        self._scheduler = BackgroundScheduler(timezone=timezone)

    def add(self, expression: str, callback: Callable[[], object], name: str | None = None) -> str:
        """
        Schedule a callback.

        Returns:
            str: The job id

        Raises:
            ValueError: If the cron expression is invalid
        """
        trigger = build_trigger(expression, self.timezone)
        job = self._scheduler.add_job(
            callback,
            trigger,
            name=name or getattr(callback, "__name__", None),
            max_instances=1,
            coalesce=True,
            misfire_grace_time=MISFIRE_GRACE_TIME,
        )
        logger.info(f"Scheduled {job.name} at '{expression}' ({self.timezone})")
        return job.id

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        self._scheduler.start()
        logger.info("Scheduler started")

    def stop(self, wait: bool = True) -> None:
        """Stop firing jobs. With wait=True, a job in progress is allowed to finish."""
        if self._scheduler.running:
            self._scheduler.shutdown(wait=wait)
            logger.info("Scheduler stopped")
