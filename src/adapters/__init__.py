"""Integration adapters: Twitch chat, Telegram bot, SQLite storage."""
