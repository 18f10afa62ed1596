from __future__ import annotations

from typing import Optional

from core.models import ChatMessage, SubscriptionRecord


class FakeTransport:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.joined: set[str] = set()

    def join(self, channel: str) -> None:
        self.calls.append(("join", channel))
        self.joined.add(channel)

    def part(self, channel: str) -> None:
        self.calls.append(("part", channel))
        self.joined.discard(channel)


class FakeSink:
    def __init__(self, name: str = "sink", log: "list[tuple[str, ChatMessage]] | None" = None) -> None:
        self.name = name
        self.received: list[ChatMessage] = []
        self._log = log

    def deliver(self, message: ChatMessage) -> None:
        self.received.append(message)
        if self._log is not None:
            self._log.append((self.name, message))


class ExplodingSink:
    def deliver(self, message: ChatMessage) -> None:
        raise RuntimeError("boom")


class FakeStore:
    def __init__(self) -> None:
        self.rows: dict[tuple[str, str], SubscriptionRecord] = {}

    def save_subscription(self, record: SubscriptionRecord) -> None:
        self.rows[(record.key, record.channel)] = record

    def delete_subscription(self, key: str, channel: str) -> bool:
        return self.rows.pop((key, channel), None) is not None

    def list_subscriptions(self, key: Optional[str] = None) -> list[SubscriptionRecord]:
        return [r for r in self.rows.values() if key is None or r.key == key]


def make_message(channel: str, text: str, sender: str = "Viewer") -> ChatMessage:
    return ChatMessage(channel=channel, sender_display_name=sender, text=text)
