from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from adapters.twitch_irc import TwitchChatClient, message_from_privmsg, parse_irc_line
from core.config import TwitchConfig

PRIVMSG = (
    "@badge-info=;display-name=Some\\sOne;id=abc-123;tmi-sent-ts=1704067200000 "
    ":someone!someone@someone.tmi.twitch.tv PRIVMSG #xqc :free drops :) here\r\n"
)


class DummyWriter:
    def __init__(self) -> None:
        self.lines: list[str] = []

    def write(self, data: bytes) -> None:
        self.lines.append(data.decode("utf-8").rstrip("\r\n"))


def _client() -> tuple[TwitchChatClient, DummyWriter]:
    client = TwitchChatClient(
        TwitchConfig(host="localhost", port=6667, use_tls=False, reconnect_delay=0)
    )
    writer = DummyWriter()
    client._writer = writer
    return client, writer


def test_parse_irc_line_with_tags_prefix_and_trailing() -> None:
    line = parse_irc_line(PRIVMSG)

    assert line.command == "PRIVMSG"
    assert line.params == ["#xqc", "free drops :) here"]
    assert line.nick == "someone"
    assert line.tags["display-name"] == "Some One"
    assert line.tags["badge-info"] == ""


def test_parse_irc_line_without_prefix() -> None:
    line = parse_irc_line("PING :tmi.twitch.tv")
    assert line.command == "PING"
    assert line.params == ["tmi.twitch.tv"]
    assert line.prefix is None


def test_message_from_privmsg() -> None:
    message = message_from_privmsg(parse_irc_line(PRIVMSG))

    assert message is not None
    assert message.channel == "xqc"
    assert message.sender_display_name == "Some One"
    assert message.text == "free drops :) here"
    assert message.message_id == "abc-123"
    assert message.sent_at == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_message_from_privmsg_strips_action_and_falls_back_to_nick() -> None:
    raw = ":viewer!viewer@viewer.tmi.twitch.tv PRIVMSG #chan :\x01ACTION waves\x01"
    message = message_from_privmsg(parse_irc_line(raw))

    assert message is not None
    assert message.text == "waves"
    assert message.sender_display_name == "viewer"


def test_message_from_non_privmsg_is_none() -> None:
    assert message_from_privmsg(parse_irc_line(":tmi.twitch.tv 001 justinfan1 :Welcome")) is None


def test_join_before_ready_is_deferred_until_welcome() -> None:
    client, writer = _client()
    client.join("alpha")
    client.join("beta")
    client.join("alpha")
    assert writer.lines == []

    client.handle_line(":tmi.twitch.tv 001 justinfan1 :Welcome, GLHF!")

    assert client.is_ready
    assert writer.lines == ["JOIN #alpha", "JOIN #beta"]


def test_join_and_part_when_ready_are_sent_immediately() -> None:
    client, writer = _client()
    client.handle_line(":tmi.twitch.tv 001 justinfan1 :Welcome")

    client.join("alpha")
    client.part("alpha")
    client.part("alpha")

    assert writer.lines == ["JOIN #alpha", "PART #alpha"]
    assert client.channels == []


def test_ping_is_answered() -> None:
    client, writer = _client()
    assert client.handle_line("PING :tmi.twitch.tv") is True
    assert writer.lines == ["PONG :tmi.twitch.tv"]


def test_reconnect_request_stops_reading() -> None:
    client, _ = _client()
    assert client.handle_line(":tmi.twitch.tv RECONNECT") is False


def test_privmsg_reaches_handlers_and_failures_are_isolated() -> None:
    client, _ = _client()
    received = []

    @client.on_message
    def broken(message) -> None:
        raise RuntimeError("boom")

    client.on_message(received.append)

    client.handle_line(PRIVMSG)

    assert [m.text for m in received] == ["free drops :) here"]


class SilentReader:
    async def readline(self) -> bytes:
        await asyncio.sleep(3600)
        return b""


class ScriptedReader:
    def __init__(self, lines: list[bytes]) -> None:
        self._lines = list(lines)

    async def readline(self) -> bytes:
        return self._lines.pop(0) if self._lines else b""


def test_silent_connection_times_out_as_connection_error() -> None:
    client = TwitchChatClient(
        TwitchConfig(host="localhost", port=6667, use_tls=False, reconnect_delay=0, read_timeout=0.01)
    )

    with pytest.raises(ConnectionError, match="No data from server"):
        asyncio.run(client._read_loop(SilentReader()))


def test_read_loop_returns_on_reconnect_request() -> None:
    client = TwitchChatClient(
        TwitchConfig(host="localhost", port=6667, use_tls=False, reconnect_delay=0, read_timeout=1)
    )
    reader = ScriptedReader([b":tmi.twitch.tv RECONNECT\r\n"])

    asyncio.run(client._read_loop(reader))
