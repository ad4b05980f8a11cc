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
Chat command listener.

Long-polls the Telegram gateway on a background thread and hands each
command to a CommandHandler running on a small thread pool, so a slow check
for one chat does not hold up the others.

The listener can be started and stopped independently of the scheduler.
Stopping it lets commands already being handled finish.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from logging import getLogger

import requests

from .dispatch import CommandHandler
from .telegram import TelegramGateway

logger = getLogger(__name__)


def extract_command(update: dict) -> tuple[str, str] | None:
    """
    Return (chat_id, text) for a message update carrying a command.

    Updates without a message, without text, or whose text is not a slash
    command give None.
    """
    message = update.get("message")
    if not isinstance(message, dict):
        return None

    text = message.get("text")
    chat = message.get("chat") or {}
    if not text or not text.startswith("/") or "id" not in chat:
        return None

    return str(chat["id"]), text


def _log_failure(future: Future) -> None:
    error = future.exception()
    if error is not None:
        logger.error(f"Command handler failed: {error}", exc_info=error)


class CommandListener:
    """
    Poll for chat commands and dispatch them.

    Args:
        gateway: Gateway providing get_updates()
        handler: Handler answering each command
        max_workers: Commands handled at the same time
        error_backoff: Seconds to wait after a polling error
    """

    def __init__(
        self,
        gateway: TelegramGateway,
        handler: CommandHandler,
        max_workers: int = 4,
        error_backoff: float = 5.0,
    ):
        self.gateway = gateway
        self.handler = handler
        self.max_workers = max_workers
        self.error_backoff = error_backoff
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._executor: ThreadPoolExecutor | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            raise RuntimeError("Listener is already running")

        self._stop_event.clear()
        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="airwatch-command"
        )
        # Daemon: a poll in progress may hold the thread for the full poll timeout
        self._thread = threading.Thread(
            target=self.run, name="airwatch-listener", daemon=True
        )
        self._thread.start()
        logger.info("Command listener started")

    def stop(self, wait: bool = True) -> None:
        """Stop polling. With wait=True, commands in progress finish first."""
        self._stop_event.set()
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
        logger.info("Command listener stopped")

    def run(self) -> None:
        """Poll until stop() is called."""
        offset = None
        while not self._stop_event.is_set():
            try:
                offset = self.poll_once(offset)
            except requests.exceptions.RequestException as e:
                logger.error(
                    f"Polling for commands failed ({type(e).__name__}), "
                    f"retrying in {self.error_backoff}s"
                )
            except Exception as e:
                logger.error(
                    f"Unexpected error while polling for commands: {e}, "
                    f"retrying in {self.error_backoff}s",
                    exc_info=True,
                )
            else:
                continue
            self._stop_event.wait(self.error_backoff)

    def poll_once(self, offset: int | None = None) -> int | None:
        """
        Fetch one batch of updates and dispatch the commands in it.

        Returns:
            int | None: Offset for the next poll
        """
        updates = self.gateway.get_updates(offset)

        for update in updates:
            if self._stop_event.is_set():
                break

            update_id = update.get("update_id") if isinstance(update, dict) else None
            if not isinstance(update_id, int):
                logger.warning(f"Skipping update without an id: {update!r}")
                continue
            offset = update_id + 1

            command = extract_command(update)
            if command is not None:
                self._dispatch(*command)

        return offset

    def _dispatch(self, chat_id: str, text: str) -> None:
        executor = self._executor
        if executor is None:
            # Not started: handle inline (used by one-shot callers and tests)
            self.handler.handle(chat_id, text)
            return

        try:
            future = executor.submit(self.handler.handle, chat_id, text)
        except RuntimeError:
            # Executor shut down between the stop check and the submit
            logger.warning(f"Dropped command from {chat_id}: listener stopping")
            return
        future.add_done_callback(_log_failure)
