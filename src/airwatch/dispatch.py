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
Dispatch surface: the two triggers that drive the pipeline.

broadcast() is what the scheduler runs: check and notify every configured
location in order, logging failures and carrying on. CommandHandler answers
chat commands one at a time and replies to the requesting chat.

Both only read the shared CheckAirQuality/NotifyAirQuality instances and the
configured location tuple, so they can run at the same time on different
threads.
"""

from dataclasses import dataclass, field
from datetime import datetime
from logging import getLogger
from typing import Callable, Sequence

from .exceptions import AirwatchError, LookupFailed, SendFailed
from .locations import resolve_location
from .types import Location, NotificationGateway
from .use_cases import CheckAirQuality, NotifyAirQuality, escape_markdown

logger = getLogger(__name__)

HELP_TEXT = (
    "คำสั่งที่ใช้ได้:\n"
    "/help - แสดงคำสั่งทั้งหมด\n"
    "/pm25 - ดูคุณภาพอากาศทุกพื้นที่\n"
    "/check - ดูคุณภาพอากาศ เช่น /check Ban Suan"
)

CHECK_USAGE_TEXT = "กรุณาระบุชื่อเมือง เช่น /check Ban Suan"


@dataclass
class BatchReport:
    """Outcome of one pass over a set of locations."""

    delivered: list[Location] = field(default_factory=list)
    failures: list[tuple[Location, Exception]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def broadcast(
    checker: CheckAirQuality,
    notifier: NotifyAirQuality,
    locations: Sequence[Location],
    channel_id: str,
    clock: Callable[[], datetime] = datetime.now,
) -> BatchReport:
    """
    Check and notify every location, in order.

    A failure for one location is logged and does not stop the rest.

    Args:
        checker: Shared CheckAirQuality
        notifier: Shared NotifyAirQuality
        locations: Configured locations
        channel_id: Broadcast channel
        clock: Returns the timestamp attached to each message

    Returns:
        BatchReport: Which locations were delivered and which failed
    """
    report = BatchReport()

    for location in locations:
        try:
            data = checker.execute(location)
        except AirwatchError as e:
            logger.error(f"Failed to check air quality for {location.name}: {e}")
            report.failures.append((location, e))
            continue

        logger.info(
            f"Air quality checked: {data.location.display_name()} "
            f"PM2.5={data.pm25} AQI={data.aqi}"
        )

        try:
            notifier.execute(channel_id, data, timestamp=clock())
        except SendFailed as e:
            logger.error(f"Failed to send notification for {location.name}: {e}")
            report.failures.append((location, e))
            continue

        report.delivered.append(location)

    logger.info(
        f"Broadcast to {channel_id} finished: {len(report.delivered)} delivered, "
        f"{len(report.failures)} failed"
    )
    return report


def parse_command(text: str) -> tuple[str, str]:
    """
    Split a chat message into (command, argument).

    The command is lower-cased with its leading slash and any @botname
    suffix removed. Text that is not a command gives an empty command.

    Example:
        >>> parse_command("/check@AirBot Ban Suan")
        ('check', 'Ban Suan')
    """
    text = text.strip()
    if not text.startswith("/"):
        return "", text

    head, _, argument = text.partition(" ")
    command = head[1:].split("@", 1)[0].lower()
    return command, argument.strip()


class CommandHandler:
    """
    Answer chat commands.

    Commands:
        /help: list commands
        /pm25: check every configured location
        /check <place or lat,lon>: check one location

    Args:
        checker: Shared CheckAirQuality
        notifier: Shared NotifyAirQuality
        gateway: Gateway used for plain replies (help, usage, errors)
        locations: Configured locations for /pm25
        default_state: State used to resolve /check arguments
        default_country: Country used to resolve /check arguments
    """

    def __init__(
        self,
        checker: CheckAirQuality,
        notifier: NotifyAirQuality,
        gateway: NotificationGateway,
        locations: Sequence[Location],
        default_state: str,
        default_country: str,
    ):
        self.checker = checker
        self.notifier = notifier
        self.gateway = gateway
        self.locations = tuple(locations)
        self.default_state = default_state
        self.default_country = default_country

    def handle(self, chat_id: str, text: str) -> None:
        """Handle one inbound message. Pipeline errors are replied to, not raised."""
        command, argument = parse_command(text)
        logger.info(f"Command from {chat_id}: /{command} {argument}".rstrip())

        if command == "pm25":
            self.check_all(chat_id)
        elif command == "check":
            if not argument:
                self.reply(chat_id, CHECK_USAGE_TEXT)
            else:
                location = resolve_location(
                    argument, self.default_state, self.default_country
                )
                self.check(chat_id, location)
        else:
            # /help and anything unrecognised
            self.reply(chat_id, HELP_TEXT)

    def check_all(self, chat_id: str) -> None:
        for location in self.locations:
            self.check(chat_id, location)

    def check(self, chat_id: str, location: Location) -> None:
        try:
            data = self.checker.execute(location)
        except AirwatchError as e:
            logger.error(f"Failed to check air quality for {location.name}: {e}")
            status = e.status if isinstance(e, LookupFailed) else str(e)
            self.reply(
                chat_id,
                f"❌ ไม่สามารถดึงข้อมูล {escape_markdown(location.name)} ได้: "
                f"{escape_markdown(status)}",
            )
            return

        try:
            self.notifier.execute(chat_id, data)
        except SendFailed as e:
            logger.error(f"Failed to send message to {chat_id}: {e}")

    def reply(self, chat_id: str, text: str) -> None:
        try:
            self.gateway.send(chat_id, text)
        except SendFailed as e:
            logger.error(f"Failed to send reply to {chat_id}: {e}")
