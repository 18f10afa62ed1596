"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class TwitchConfig:
    """Connection settings for the Twitch chat transport."""

    host: str
    port: int
    use_tls: bool
    reconnect_delay: float
    nickname: Optional[str] = None
    oauth_token: Optional[str] = None
    read_timeout: float = 420.0


@dataclass(frozen=True)
class NotificationConfig:
    """Notification formatting settings consumed by notifier adapters."""

    snippet_chars: int
    format: str = "html"
    queue_size: int = 1000
