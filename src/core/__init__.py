"""Core domain package for twitchbuzz.

Core contains subscription routing, filter matching, and command parsing
without any Twitch, Telegram or storage-specific code, keeping the routing
logic portable.
"""
