"""Telegram notification adapter.

Notifications are queued and sent by a single worker so that dispatch never
waits on the Telegram API. Each subscription gets a small sink that formats
the message for its chat and hands it to the shared notifier.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence, Tuple

from telethon import errors

from adapters.notification_formatting import format_notification
from core.config import NotificationConfig
from core.filters import matched_filters
from core.models import ChatMessage

LOGGER = logging.getLogger(__name__)

# Our format names mapped to Telethon parse modes.
_PARSE_MODES = {"html": "html", "markdown": "md"}


class TelegramChatNotifier:
    """Downstream notifier sending queued texts to Telegram chats."""

    def __init__(self, client, config: NotificationConfig) -> None:
        if config.format not in _PARSE_MODES:
            raise ValueError(f"Unsupported notification format: {config.format}")
        self._client = client
        self._parse_mode = _PARSE_MODES[config.format]
        self._queue: "asyncio.Queue[Tuple[str, str]]" = asyncio.Queue(maxsize=config.queue_size)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def notify(self, chat_key: str, text: str) -> None:
        """Queue a notification without waiting for delivery."""

        try:
            self._queue.put_nowait((chat_key, text))
        except asyncio.QueueFull:
            LOGGER.warning("Notification queue full, dropping message for %s", chat_key)

    async def send(self, chat_key: str, text: str) -> None:
        """Send one notification right away."""

        await self._client.send_message(
            int(chat_key),
            text,
            parse_mode=self._parse_mode,
            link_preview=False,
        )

    async def run(self) -> None:
        """Drain the queue forever; cancel the task to stop."""

        while True:
            chat_key, text = await self._queue.get()
            try:
                await self.send(chat_key, text)
            except errors.RPCError as exc:
                # Blocked bots, deleted chats and similar are per-chat problems.
                LOGGER.warning("Telegram refused notification for %s: %s", chat_key, exc)
            except Exception:
                LOGGER.exception("Failed to send notification to %s", chat_key)
            finally:
                self._queue.task_done()

    async def drain(self) -> None:
        """Wait until every queued notification has been handled."""

        await self._queue.join()


class TelegramChatSink:
    """NotificationSink delivering matches to one Telegram chat."""

    def __init__(
        self,
        notifier: TelegramChatNotifier,
        chat_key: str,
        filters: Sequence[str],
        config: NotificationConfig,
    ) -> None:
        self._notifier = notifier
        self._chat_key = chat_key
        self._filters = tuple(filters)
        self._config = config

    @property
    def chat_key(self) -> str:
        return self._chat_key

    def deliver(self, message: ChatMessage) -> None:
        hits = matched_filters(message.text, self._filters)
        text = format_notification(message, hits, self._config.snippet_chars, self._config.format)
        self._notifier.notify(self._chat_key, text)
