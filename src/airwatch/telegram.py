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
Telegram Bot API gateway.

Implements NotificationGateway over sendMessage, and exposes getUpdates long
polling for the command listener. Only plain HTTP is used; there is no
dependency on a bot framework.

API Documentation: https://core.telegram.org/bots/api
"""

from logging import getLogger

import requests

from .decorators import retry_polling
from .exceptions import SendFailed

logger = getLogger(__name__)

API_BASE = "https://api.telegram.org"

# Network timeout for sendMessage, in seconds
DEFAULT_TIMEOUT = 30

# How long getUpdates may hold the connection open waiting for messages
POLL_TIMEOUT = 30


class TelegramGateway:
    """
    Send messages and poll for updates through the Telegram Bot API.

    The gateway holds no mutable state, so one instance can be shared by the
    scheduler and the command listener.

    Args:
        token: Bot token from @BotFather
        parse_mode: Telegram parse mode for outgoing text ("Markdown" by
            default, None for plain text)
        timeout: sendMessage timeout in seconds
        base_url: API root, overridable for testing
    """

    def __init__(
        self,
        token: str,
        parse_mode: str | None = "Markdown",
        timeout: float = DEFAULT_TIMEOUT,
        base_url: str = API_BASE,
    ):
        self.token = token
        self.parse_mode = parse_mode
        self.timeout = timeout
        self.base_url = base_url

    def _url(self, method: str) -> str:
        return f"{self.base_url}/bot{self.token}/{method}"

    def send(self, channel_id: str, text: str) -> None:
        """
        Send a text message.

        Args:
            channel_id: Chat id or @channel username
            text: Message body

        Raises:
            SendFailed: On transport errors or when Telegram rejects the message
        """
        body = {"chat_id": channel_id, "text": text}
        if self.parse_mode:
            body["parse_mode"] = self.parse_mode

        try:
            response = requests.post(
                self._url("sendMessage"), json=body, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            # The exception text contains the URL, and with it the token
            raise SendFailed(channel_id, type(e).__name__) from e

        try:
            payload = response.json()
        except ValueError:
            payload = {}

        if not response.ok or not payload.get("ok"):
            status = payload.get("description") or f"HTTP {response.status_code}"
            raise SendFailed(channel_id, status)

        logger.debug(f"Sent {len(text)} characters to {channel_id}")

    @retry_polling
    def get_updates(self, offset: int | None = None, poll_timeout: int = POLL_TIMEOUT) -> list[dict]:
        """
        Long-poll for new updates.

        Network errors and 5xx responses are retried with backoff; anything
        else (bad token, another poller holding the bot) is raised.

        Args:
            offset: First update id to return; earlier updates are confirmed
            poll_timeout: Seconds Telegram may wait before answering

        Returns:
            list[dict]: Update objects, possibly empty

        Raises:
            requests.exceptions.RequestException: Once retries are exhausted
        """
        params = {"timeout": poll_timeout, "allowed_updates": '["message"]'}
        if offset is not None:
            params["offset"] = offset

        response = requests.get(
            self._url("getUpdates"), params=params, timeout=poll_timeout + 10
        )
        response.raise_for_status()

        payload = response.json()
        return payload.get("result", [])
