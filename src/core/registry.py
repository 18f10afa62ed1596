"""Channel subscription registry.

The registry owns the channel -> subscriptions mapping, drives channel
membership on the upstream transport, and dispatches inbound messages to
every subscription whose filters match. A channel is joined exactly while it
has at least one subscription.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, List, Sequence, Union

from core.filters import matches, usable_filters
from core.models import ChatMessage, Subscription
from core.ports import NotificationSink, UpstreamTransport

LOGGER = logging.getLogger(__name__)

Channels = Union[str, Iterable[str]]


def _as_channel_list(channels: Channels) -> List[str]:
    if isinstance(channels, str):
        channels = [channels]
    # Keep first-seen order and drop blanks so one call never joins twice.
    result: List[str] = []
    for channel in channels:
        if channel and channel not in result:
            result.append(channel)
    return result


class SubscriptionRegistry:
    """In-memory routing table from channels to keyed subscriptions."""

    def __init__(self, transport: UpstreamTransport) -> None:
        self._transport = transport
        # Per channel, subscriptions are keyed by subscriber key; dict order
        # gives a deterministic dispatch order.
        self._channels: Dict[str, Dict[str, Subscription]] = {}
        self._lock = threading.Lock()

    def subscribe(
        self,
        channels: Channels,
        key: str,
        filters: Sequence[str],
        sink: NotificationSink,
    ) -> None:
        """Register ``key`` on each channel, joining channels on first use.

        Subscribing again with the same key replaces the earlier filters and
        sink for that channel.
        """

        channel_list = _as_channel_list(channels)
        filter_tuple = tuple(usable_filters(filters))
        if not channel_list or not filter_tuple:
            LOGGER.debug("Ignoring subscribe for %s with no channels or filters", key)
            return

        with self._lock:
            for channel in channel_list:
                subscriptions = self._channels.get(channel)
                if subscriptions is None:
                    try:
                        self._transport.join(channel)
                    except Exception:
                        LOGGER.exception("Failed to join %s, skipping subscription for %s", channel, key)
                        continue
                    subscriptions = self._channels[channel] = {}
                    LOGGER.info("Joined %s", channel)
                elif key in subscriptions:
                    LOGGER.info("Replacing filters for %s on %s", key, channel)
                subscriptions[key] = Subscription(
                    channel=channel,
                    key=key,
                    filters=filter_tuple,
                    sink=sink,
                )

    def unsubscribe(self, channels: Channels, key: str) -> None:
        """Remove ``key`` from each channel, leaving channels that empty out."""

        with self._lock:
            for channel in _as_channel_list(channels):
                subscriptions = self._channels.get(channel)
                if not subscriptions or key not in subscriptions:
                    continue
                del subscriptions[key]
                if subscriptions:
                    continue
                del self._channels[channel]
                self._part(channel)

    def dispatch(self, message: ChatMessage) -> int:
        """Deliver ``message`` to every matching subscription on its channel.

        Returns the number of successful deliveries. Sinks are called outside
        the lock; a failing sink is logged and skipped.
        """

        with self._lock:
            subscriptions = self._channels.get(message.channel)
            if not subscriptions:
                return 0
            snapshot = list(subscriptions.values())

        delivered = 0
        for subscription in snapshot:
            if not matches(message.text, subscription.filters):
                continue
            try:
                subscription.sink.deliver(message)
            except Exception:
                LOGGER.exception(
                    "Delivery to %s failed for message on %s",
                    subscription.key,
                    message.channel,
                )
                continue
            delivered += 1
        return delivered

    def clear(self) -> None:
        """Drop every subscription and leave all joined channels."""

        with self._lock:
            channels = list(self._channels)
            self._channels.clear()
            for channel in channels:
                self._part(channel)

    def channels(self) -> List[str]:
        """Return the channels that currently have subscriptions."""

        with self._lock:
            return list(self._channels)

    def is_joined(self, channel: str) -> bool:
        with self._lock:
            return channel in self._channels

    def subscriptions(self, channel: str) -> List[Subscription]:
        """Return a copy of the channel's subscriptions in registration order."""

        with self._lock:
            return list(self._channels.get(channel, {}).values())

    def subscription_count(self, channel: str) -> int:
        with self._lock:
            return len(self._channels.get(channel, {}))

    def channels_for(self, key: str) -> List[str]:
        """Return every channel ``key`` is subscribed to."""

        with self._lock:
            return [channel for channel, subs in self._channels.items() if key in subs]

    def _part(self, channel: str) -> None:
        # Called with the lock held; the entry is already gone either way.
        try:
            self._transport.part(channel)
        except Exception:
            LOGGER.exception("Failed to part %s", channel)
            return
        LOGGER.info("Left %s", channel)
