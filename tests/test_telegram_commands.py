from __future__ import annotations

from adapters.telegram_commands import handle_command
from core.registry import SubscriptionRegistry
from core.service import SubscriptionService

from fakes import FakeSink, FakeStore, FakeTransport


def _service() -> tuple[SubscriptionService, FakeTransport]:
    transport = FakeTransport()
    service = SubscriptionService(
        SubscriptionRegistry(transport),
        FakeStore(),
        lambda key, filters: FakeSink(key),
    )
    return service, transport


def test_subscribe_list_unsubscribe_flow() -> None:
    service, transport = _service()

    reply = handle_command(service, "42", "/subscribe XQC drops, Giveaway")
    assert reply == "Subscribed to xqc with filters:\n- drops\n- giveaway"
    assert transport.joined == {"xqc"}

    assert "twitch.tv/xqc: drops, giveaway" in handle_command(service, "42", "/list")
    assert handle_command(service, "7", "/list").startswith("You have no subscriptions.")

    assert handle_command(service, "42", "/unsubscribe xqc") == "Unsubscribed from xqc"
    assert transport.joined == set()


def test_malformed_commands_reply_with_hint() -> None:
    service, transport = _service()

    assert handle_command(service, "42", "/subscribe") == "Please specify a channel to subscribe to."
    assert handle_command(service, "42", "/subscribe xqc") == "Please specify at least one filter."
    assert handle_command(service, "42", "/unsubscribe") == "Please specify a channel to unsubscribe from."
    assert transport.calls == []


def test_start_and_help_texts() -> None:
    service, _ = _service()

    assert handle_command(service, "42", "/start").startswith("Welcome to TwitchBuzzBot!")
    assert handle_command(service, "42", "/help@BuzzBot").startswith("Commands available:")


def test_subscribe_reply_reports_rejected_subscription() -> None:
    transport = FakeTransport()

    class RejectingService(SubscriptionService):
        def subscribe(self, key, channel, filters):
            return None

    service = RejectingService(
        SubscriptionRegistry(transport),
        FakeStore(),
        lambda key, filters: FakeSink(key),
    )

    reply = handle_command(service, "42", "/subscribe xqc drops")

    assert reply == "Please specify at least one filter."
    assert transport.calls == []
