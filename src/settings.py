"""Static configuration for twitchbuzz.

All user-editable settings (Twitch connection, notifications, storage,
logging) live in a single JSON file for quick edits without touching Python.
Secrets stay in the environment.
"""

import json
import os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.path.join(PROJECT_ROOT, "config.json")


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Twitch chat connection. TLS on 6697 is the default; 6667 is plain text.
_twitch = _CONFIG.get("twitch", {})
TWITCH_HOST = _twitch.get("host", "irc.chat.twitch.tv")
TWITCH_TLS = bool(_twitch.get("tls", True))
TWITCH_PORT = int(_twitch.get("port", 6697 if TWITCH_TLS else 6667))
TWITCH_RECONNECT_DELAY = float(_twitch.get("reconnect_delay_seconds", 5))
# Reconnect when the server has been silent this long (must exceed the PING interval).
TWITCH_READ_TIMEOUT = float(_twitch.get("read_timeout_seconds", 420))

# Notification settings used by the Telegram sink.
# - SNIPPET_CHARS: how much of the chat message is quoted
# - NOTIFICATION_FORMAT: "html" or "markdown"
# - NOTIFICATION_QUEUE_SIZE: pending notifications before new ones are dropped
_notifications = _CONFIG.get("notifications", {})
SNIPPET_CHARS = int(_notifications.get("snippet_chars", 400))
NOTIFICATION_FORMAT = _notifications.get("format", "html")
NOTIFICATION_QUEUE_SIZE = int(_notifications.get("queue_size", 1000))

# Where to store the SQLite database, relative paths resolve from the project root.
_storage = _CONFIG.get("storage", {})
DB_PATH = _storage.get("db_path", "db/db.sqlite")
if not os.path.isabs(DB_PATH):
    DB_PATH = os.path.join(PROJECT_ROOT, DB_PATH)

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
