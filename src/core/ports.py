"""Ports (interfaces) used by the core.

Ports define the minimal contracts for the chat transport, notification and
storage adapters so that the registry can be reused with different backends.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from core.models import ChatMessage, SubscriptionRecord


class UpstreamTransport(Protocol):
    """Channel membership operations required by the registry.

    Both calls are fire-and-forget: they must not block.
    """

    def join(self, channel: str) -> None:
        ...

    def part(self, channel: str) -> None:
        ...


class NotificationSink(Protocol):
    """Delivery capability attached to each subscription."""

    def deliver(self, message: ChatMessage) -> None:
        ...


class SubscriptionStore(Protocol):
    """Persistence operations used by the subscription service."""

    def save_subscription(self, record: SubscriptionRecord) -> None:
        ...

    def delete_subscription(self, key: str, channel: str) -> bool:
        ...

    def list_subscriptions(self, key: Optional[str] = None) -> List[SubscriptionRecord]:
        ...
