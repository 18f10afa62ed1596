"""Application entry point for the twitchbuzz bot."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from typing import Optional

from art import tprint
from dotenv import load_dotenv

import settings
from adapters.sqlite_storage import SQLiteStorage
from adapters.telegram_commands import publish_bot_commands, register_command_handlers
from adapters.telegram_notifier import TelegramChatNotifier, TelegramChatSink
from adapters.twitch_irc import TwitchChatClient
from client import bot_token, build_client
from core.config import NotificationConfig, TwitchConfig
from core.registry import SubscriptionRegistry
from core.service import SubscriptionService
from log_setup import configure_logging

NAME = "TWITCHBUZZ"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _configure_logging() -> None:
    # Secrets to redact come from .env, so load it before building handlers.
    load_dotenv()
    configure_logging(settings.LOGGING, settings.PROJECT_ROOT)


def _twitch_config() -> TwitchConfig:
    load_dotenv()
    return TwitchConfig(
        host=settings.TWITCH_HOST,
        port=settings.TWITCH_PORT,
        use_tls=settings.TWITCH_TLS,
        reconnect_delay=settings.TWITCH_RECONNECT_DELAY,
        read_timeout=settings.TWITCH_READ_TIMEOUT,
        nickname=os.getenv("TWITCH_NICK") or None,
        oauth_token=os.getenv("TWITCH_OAUTH") or None,
    )


def _notification_config() -> NotificationConfig:
    return NotificationConfig(
        snippet_chars=settings.SNIPPET_CHARS,
        format=settings.NOTIFICATION_FORMAT,
        queue_size=settings.NOTIFICATION_QUEUE_SIZE,
    )


async def _serve(
    client,
    twitch: TwitchChatClient,
    notifier: TelegramChatNotifier,
    registry: SubscriptionRegistry,
) -> None:
    """Run the chat reader and notifier alongside the bot until it disconnects."""

    await publish_bot_commands(client)
    tasks = [
        asyncio.create_task(twitch.run_forever()),
        asyncio.create_task(notifier.run()),
    ]
    try:
        await client.run_until_disconnected()
    finally:
        registry.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await twitch.close()


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting twitchbuzz")

    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()

    notification_config = _notification_config()
    twitch = TwitchChatClient(_twitch_config())
    registry = SubscriptionRegistry(twitch)
    # Twitch messages go straight into the registry; it filters and fans out.
    twitch.on_message(registry.dispatch)

    client = build_client()
    notifier = TelegramChatNotifier(client, notification_config)

    def sink_factory(chat_key: str, filters: tuple[str, ...]) -> TelegramChatSink:
        return TelegramChatSink(notifier, chat_key, filters, notification_config)

    service = SubscriptionService(registry, storage, sink_factory)
    service.restore()
    logger.info("Listening on %s channels", len(registry.channels()))

    register_command_handlers(client, service)

    # Explicit lifecycle management makes start/shutdown behavior obvious.
    client.start(bot_token=bot_token())
    logger.info("Bot connected. Waiting for commands and chat messages...")
    client.loop.run_until_complete(_serve(client, twitch, notifier, registry))


def _list() -> None:
    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()
    records = storage.list_subscriptions()
    if not records:
        print("No subscriptions stored.")
        return
    for record in records:
        print(f"{record.key} | {record.channel} | {', '.join(record.filters)}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="twitchbuzz")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the bot")
    subparsers.add_parser("list", help="Print stored subscriptions and exit")

    args = parser.parse_args(argv)
    if args.command == "list":
        _list()
        return
    _run()


if __name__ == "__main__":
    main()
