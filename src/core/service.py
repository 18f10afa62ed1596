"""Subscription service.

This module is integration-agnostic. It keeps the persisted subscriptions and
the in-memory registry in step, relying only on the store port and a sink
factory supplied by the app layer.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Tuple, Union

from core.commands import normalize_channel
from core.filters import normalize_filters
from core.models import SubscriptionRecord
from core.ports import NotificationSink, SubscriptionStore
from core.registry import SubscriptionRegistry

LOGGER = logging.getLogger(__name__)

SinkFactory = Callable[[str, Tuple[str, ...]], NotificationSink]


class SubscriptionService:
    """Orchestrates persistence and routing for subscribe/unsubscribe."""

    def __init__(
        self,
        registry: SubscriptionRegistry,
        store: SubscriptionStore,
        sink_factory: SinkFactory,
    ) -> None:
        self._registry = registry
        self._store = store
        self._sink_factory = sink_factory

    def restore(self) -> int:
        """Replay every stored subscription into the registry."""

        records = self._store.list_subscriptions()
        for record in records:
            self._register(record)
        LOGGER.info("Restored %s subscriptions", len(records))
        return len(records)

    def subscribe(
        self,
        key: str,
        channel: str,
        filters: Union[str, Iterable[str]],
    ) -> Optional[SubscriptionRecord]:
        """Persist and register a subscription, replacing any earlier one.

        Returns None when the channel or the filters normalize to nothing.
        """

        channel = normalize_channel(channel)
        normalized = tuple(normalize_filters(filters))
        if not channel or not normalized:
            return None

        record = SubscriptionRecord(key=key, channel=channel, filters=normalized)
        # Store first so a crash between the two steps is fixed by the next restore.
        self._store.save_subscription(record)
        self._register(record)
        LOGGER.info("%s subscribed to %s (%s filters)", key, channel, len(normalized))
        return record

    def unsubscribe(self, key: str, channel: str) -> bool:
        """Remove a subscription; returns whether one was stored."""

        channel = normalize_channel(channel)
        if not channel:
            return False
        removed = self._store.delete_subscription(key, channel)
        self._registry.unsubscribe(channel, key)
        if removed:
            LOGGER.info("%s unsubscribed from %s", key, channel)
        return removed

    def list(self, key: str) -> List[SubscriptionRecord]:
        return self._store.list_subscriptions(key)

    def _register(self, record: SubscriptionRecord) -> None:
        sink = self._sink_factory(record.key, record.filters)
        self._registry.subscribe(record.channel, record.key, record.filters, sink)
