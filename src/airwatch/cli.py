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
Command-line entry point.

    airwatch run                       scheduler + chat listener until Ctrl-C
    airwatch broadcast                 one broadcast to the configured channel now
    airwatch check "Ban Suan"          print one reading
    airwatch check 13.46,101.09 --send @channel
"""

import argparse
import logging
import sys
from logging import getLogger

from .app import build_pipeline, serve
from .config import Config
from .exceptions import AirwatchError
from .locations import resolve_location
from .use_cases import format_message

logger = getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="airwatch", description="Air quality alerts over Telegram"
    )
    parser.add_argument("--env-file", help="Path to a .env file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Overrides LOG_LEVEL",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("run", help="Run the scheduler and the chat listener")
    subparsers.add_parser("broadcast", help="Broadcast all locations once")

    check = subparsers.add_parser("check", help="Check one location")
    check.add_argument("location", help='Place name or "latitude,longitude"')
    check.add_argument("--send", metavar="CHAT_ID", help="Send instead of printing")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Printing a single reading needs no Telegram credentials
    required = ("IQAIR_API_KEY",)
    if args.command != "check" or args.send:
        required = ("IQAIR_API_KEY", "TELEGRAM_TOKEN")
    if args.command in ("run", "broadcast"):
        required += ("TELEGRAM_CHANNEL",)

    try:
        config = Config.from_env(required=required, dotenv_path=args.env_file)
        pipeline = build_pipeline(config)
    except AirwatchError as e:
        print(f"airwatch: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(level=args.log_level or config.log_level, format=LOG_FORMAT)

    if args.command == "run":
        serve(pipeline)
        return 0

    if args.command == "broadcast":
        report = pipeline.broadcast_job()()
        return 0 if report.ok else 1

    location = resolve_location(args.location, config.state, config.country)
    try:
        data = pipeline.checker.execute(location)
        if args.send:
            pipeline.notifier.execute(args.send, data)
        else:
            print(format_message(data))
    except AirwatchError as e:
        logger.error(str(e))
        return 1
    return 0
