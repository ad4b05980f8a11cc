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
Application wiring.

Builds one pipeline (repository, gateway, use cases) from a Config and runs
the two triggers against it: the cron scheduler for broadcasts and the
command listener for chat queries. Both share the same instances.
"""

import signal
import threading
from dataclasses import dataclass
from datetime import datetime
from logging import getLogger
from typing import Callable

from . import sources  # noqa: F401  registers the built-in data sources
from .config import Config
from .exceptions import ConfigError
from .decorators import with_logging
from .dispatch import BatchReport, CommandHandler, broadcast
from .listener import CommandListener
from .registry import create_repository
from .scheduler import CronScheduler
from .telegram import TelegramGateway
from .types import AirQualityRepository, Location
from .use_cases import CheckAirQuality, NotifyAirQuality

logger = getLogger(__name__)


@dataclass(frozen=True)
class Pipeline:
    """Everything both triggers share. Immutable once built."""

    config: Config
    checker: CheckAirQuality
    notifier: NotifyAirQuality
    gateway: TelegramGateway
    locations: tuple[Location, ...]

    def command_handler(self) -> CommandHandler:
        return CommandHandler(
            self.checker,
            self.notifier,
            self.gateway,
            self.locations,
            default_state=self.config.state,
            default_country=self.config.country,
        )

    def broadcast_job(self) -> Callable[[], BatchReport]:
        """Return the zero-argument callback the scheduler runs."""
        tz = self.config.tzinfo()

        @with_logging("airwatch.jobs")
        def run_broadcast() -> BatchReport:
            return broadcast(
                self.checker,
                self.notifier,
                self.locations,
                self.config.telegram_channel,
                clock=lambda: datetime.now(tz),
            )

        return run_broadcast


def build_pipeline(
    config: Config,
    repository: AirQualityRepository | None = None,
    gateway: TelegramGateway | None = None,
) -> Pipeline:
    """
    Build the shared pipeline.

    Args:
        config: Runtime configuration
        repository: Override the configured data source
        gateway: Override the Telegram gateway

    Raises:
        ConfigError: If the configured data source is unknown or lacks its key
    """
    if repository is None:
        try:
            repository = create_repository(config.source, api_key=config.iqair_api_key)
        except ValueError as e:
            raise ConfigError(str(e)) from e
    if gateway is None:
        gateway = TelegramGateway(config.telegram_token)

    return Pipeline(
        config=config,
        checker=CheckAirQuality(repository, country=config.country),
        notifier=NotifyAirQuality(gateway),
        gateway=gateway,
        locations=config.locations,
    )


def serve(pipeline: Pipeline, stop_event: threading.Event | None = None) -> None:
    """
    Run the scheduler and the command listener until stopped.

    Stops on SIGINT/SIGTERM (when called from the main thread) or when
    stop_event is set. Work in progress is allowed to finish.
    """
    config = pipeline.config
    stop_event = stop_event or threading.Event()

    logger.info("Starting Air Quality Notifier")
    logger.info(f"Monitoring {len(pipeline.locations)} locations")
    for location in pipeline.locations:
        logger.info(f"  - {location.display_name()}")
    logger.info(f"Schedule: {config.cron_schedule} ({config.timezone})")

    scheduler = CronScheduler(timezone=config.timezone)
    scheduler.add(config.cron_schedule, pipeline.broadcast_job(), name="broadcast")
    listener = CommandListener(pipeline.gateway, pipeline.command_handler())

    if threading.current_thread() is threading.main_thread():
        for signum in (signal.SIGINT, signal.SIGTERM):
            signal.signal(signum, lambda *_: stop_event.set())

    scheduler.start()
    listener.start()
    logger.info("Worker started successfully")

    try:
        stop_event.wait()
    finally:
        logger.info("Shutting down gracefully")
        listener.stop()
        scheduler.stop()
