"""Telegram bot command front end.

Handlers only translate between Telethon events and the core command and
service layer; all parsing and reply texts live in core.commands.
"""

from __future__ import annotations

import logging

from telethon import events, functions, types

from core.commands import (
    BOT_COMMANDS,
    HELP_TEXT,
    NO_FILTERS_TEXT,
    WELCOME_TEXT,
    CommandError,
    format_subscribed,
    format_subscription_list,
    format_unsubscribed,
    parse_subscribe,
    parse_unsubscribe,
)
from core.service import SubscriptionService

LOGGER = logging.getLogger(__name__)


def _command_pattern(name: str) -> str:
    return rf"(?i)^/{name}(?:@\w+)?(?:\s|$)"


def handle_command(service: SubscriptionService, chat_key: str, text: str) -> str:
    """Run one command for a chat and return the reply text."""

    command = text.strip().split(" ", 1)[0].lstrip("/").split("@", 1)[0].lower()
    if command == "start":
        return WELCOME_TEXT
    if command == "help":
        return HELP_TEXT
    if command == "list":
        return format_subscription_list(service.list(chat_key))
    try:
        if command == "subscribe":
            channel, filters = parse_subscribe(text)
            record = service.subscribe(chat_key, channel, filters)
            if record is None:
                raise CommandError(NO_FILTERS_TEXT)
            return format_subscribed(record.channel, record.filters)
        if command == "unsubscribe":
            channel = parse_unsubscribe(text)
            service.unsubscribe(chat_key, channel)
            return format_unsubscribed(channel)
    except CommandError as exc:
        return str(exc)
    return HELP_TEXT


def register_command_handlers(client, service: SubscriptionService) -> None:
    """Attach one Telethon handler per bot command."""

    async def _reply(event) -> None:
        try:
            reply = handle_command(service, str(event.chat_id), event.raw_text or "")
            await event.reply(reply)
        except Exception:
            LOGGER.exception("Error while handling command from %s", event.chat_id)

    for name in ("start", "help", "list", "subscribe", "unsubscribe"):
        client.add_event_handler(_reply, events.NewMessage(pattern=_command_pattern(name)))


async def publish_bot_commands(client) -> None:
    """Publish the command menu shown by Telegram clients."""

    await client(
        functions.bots.SetBotCommandsRequest(
            scope=types.BotCommandScopeDefault(),
            lang_code="",
            commands=[types.BotCommand(command=name, description=text) for name, text in BOT_COMMANDS],
        )
    )
