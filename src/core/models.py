"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Optional, Tuple

if TYPE_CHECKING:
    from core.ports import NotificationSink


@dataclass(frozen=True)
class ChatMessage:
    """One inbound chat message, tagged by the channel it was sent in."""

    channel: str
    sender_display_name: str
    text: str
    message_id: Optional[str] = None
    sent_at: Optional[datetime] = None


@dataclass(frozen=True)
class Subscription:
    """A live registry entry: one subscriber listening on one channel."""

    channel: str
    key: str
    filters: Tuple[str, ...]
    sink: "NotificationSink"


@dataclass(frozen=True)
class SubscriptionRecord:
    """Persisted representation of a subscription (without its sink)."""

    key: str
    channel: str
    filters: Tuple[str, ...]
