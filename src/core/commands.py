"""Bot command parsing and reply texts.

Parsing is kept free of any Telegram types so the same commands could be
served by another chat front end.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Tuple

from core.filters import normalize_filters
from core.models import SubscriptionRecord

COMMANDS_TEXT = (
    "Commands available:\n"
    "/list\n"
    "/subscribe <channel> <filters>\n"
    "/unsubscribe <channel>\n"
    "\n"
    "Filters are comma separated and case insensitive."
)
HELP_TEXT = COMMANDS_TEXT
WELCOME_TEXT = f"Welcome to TwitchBuzzBot!\n\n{COMMANDS_TEXT}"
NO_FILTERS_TEXT = "Please specify at least one filter."

# Shown in the Telegram command menu.
BOT_COMMANDS = [
    ("list", "List your subscriptions"),
    ("subscribe", "Subscribe to a channel"),
    ("unsubscribe", "Unsubscribe from a channel"),
    ("help", "Show this help message"),
]

_URL_PREFIX = re.compile(r"^(?:https?://)?(?:www\.|m\.)?twitch\.tv/", re.IGNORECASE)


class CommandError(ValueError):
    """Raised for malformed commands; the message is the user-facing reply."""


def normalize_channel(raw: str) -> str:
    """Turn ``#Name``, ``twitch.tv/name`` or a full URL into a channel login."""

    value = _URL_PREFIX.sub("", raw.strip())
    value = value.lstrip("#").split("/", 1)[0]
    return value.strip().lower()


def _split_command(text: str) -> Tuple[str, str]:
    """Split ``/cmd@Bot rest`` into (``cmd``, ``rest``)."""

    head, _, rest = text.strip().partition(" ")
    command = head.lstrip("/").split("@", 1)[0].lower()
    return command, rest.strip()


def parse_subscribe(text: str) -> Tuple[str, List[str]]:
    """Parse ``/subscribe <channel> <filter>, <filter>...``."""

    _, rest = _split_command(text)
    raw_channel, _, raw_filters = rest.partition(" ")
    channel = normalize_channel(raw_channel)
    if not channel:
        raise CommandError("Please specify a channel to subscribe to.")
    filters = normalize_filters(raw_filters)
    if not filters:
        raise CommandError(NO_FILTERS_TEXT)
    return channel, filters


def parse_unsubscribe(text: str) -> str:
    """Parse ``/unsubscribe <channel>``."""

    _, rest = _split_command(text)
    channel = normalize_channel(rest.split(" ", 1)[0]) if rest else ""
    if not channel:
        raise CommandError("Please specify a channel to unsubscribe from.")
    return channel


def format_subscribed(channel: str, filters: Iterable[str]) -> str:
    lines = "\n".join(f"- {f}" for f in filters)
    return f"Subscribed to {channel} with filters:\n{lines}"


def format_unsubscribed(channel: str) -> str:
    return f"Unsubscribed from {channel}"


def format_subscription_list(records: Iterable[SubscriptionRecord]) -> str:
    """Render a chat's subscriptions for the /list command."""

    lines = [f"twitch.tv/{r.channel}: {', '.join(r.filters)}" for r in records]
    if not lines:
        return "You have no subscriptions.\nAdd one using /subscribe <channel> <filters>"
    body = "\n".join(lines)
    return f"Your subscriptions:\n{body}\n\nRemove one using /unsubscribe <channel>"
