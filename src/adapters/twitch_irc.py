"""Twitch chat transport over IRC.

Twitch chat speaks plain IRC with IRCv3 tags. This adapter keeps the set of
channels the registry wants, joins them whenever a connection comes up, and
turns PRIVMSG lines into core ChatMessage objects. Reconnection lives here;
the registry is never told about connectivity changes.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from core.config import TwitchConfig
from core.models import ChatMessage

LOGGER = logging.getLogger(__name__)

MessageHandler = Callable[[ChatMessage], object]

_TAG_ESCAPES = {":": ";", "s": " ", "\\": "\\", "r": "\r", "n": "\n"}
_ACTION_PREFIX = "\x01ACTION "


@dataclass(frozen=True)
class IrcLine:
    """One parsed IRC line."""

    command: str
    params: List[str] = field(default_factory=list)
    prefix: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)

    @property
    def nick(self) -> Optional[str]:
        if not self.prefix:
            return None
        return self.prefix.split("!", 1)[0]


def _unescape_tag_value(value: str) -> str:
    out: List[str] = []
    chars = iter(value)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = next(chars, "")
        out.append(_TAG_ESCAPES.get(nxt, nxt))
    return "".join(out)


def parse_irc_line(raw: str) -> IrcLine:
    """Parse ``[@tags] [:prefix] COMMAND params... [:trailing]``."""

    line = raw.rstrip("\r\n")
    tags: Dict[str, str] = {}
    if line.startswith("@"):
        tag_part, _, line = line[1:].partition(" ")
        for item in tag_part.split(";"):
            if not item:
                continue
            name, _, value = item.partition("=")
            tags[name] = _unescape_tag_value(value)

    prefix = None
    line = line.lstrip(" ")
    if line.startswith(":"):
        prefix, _, line = line[1:].partition(" ")

    trailing = None
    if " :" in line:
        line, _, trailing = line.partition(" :")
    elif line.startswith(":"):
        line, trailing = "", line[1:]
    parts = line.split()
    command = parts[0].upper() if parts else ""
    params = parts[1:]
    if trailing is not None:
        params.append(trailing)
    return IrcLine(command=command, params=params, prefix=prefix, tags=tags)


def message_from_privmsg(line: IrcLine) -> Optional[ChatMessage]:
    """Build a ChatMessage from a PRIVMSG line, or None if it is not one."""

    if line.command != "PRIVMSG" or len(line.params) < 2:
        return None

    channel = line.params[0].lstrip("#")
    text = line.params[1]
    # /me messages arrive wrapped in CTCP ACTION framing.
    if text.startswith(_ACTION_PREFIX):
        text = text[len(_ACTION_PREFIX):].rstrip("\x01")

    display_name = line.tags.get("display-name") or line.nick or ""

    sent_at = None
    raw_ts = line.tags.get("tmi-sent-ts")
    if raw_ts and raw_ts.isdigit():
        sent_at = datetime.fromtimestamp(int(raw_ts) / 1000, tz=timezone.utc)

    return ChatMessage(
        channel=channel,
        sender_display_name=display_name,
        text=text,
        message_id=line.tags.get("id") or None,
        sent_at=sent_at,
    )


class TwitchChatClient:
    """Asyncio IRC client implementing the UpstreamTransport port."""

    def __init__(self, config: TwitchConfig) -> None:
        self._config = config
        self._channels: List[str] = []
        self._handlers: List[MessageHandler] = []
        self._writer: Optional[asyncio.StreamWriter] = None
        self._ready = False
        self._closing = False

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def channels(self) -> List[str]:
        return list(self._channels)

    def on_message(self, handler: MessageHandler) -> MessageHandler:
        """Register a handler for inbound chat messages (usable as decorator)."""

        self._handlers.append(handler)
        return handler

    def join(self, channel: str) -> None:
        if channel in self._channels:
            return
        self._channels.append(channel)
        if self._ready:
            self._send(f"JOIN #{channel}")

    def part(self, channel: str) -> None:
        if channel not in self._channels:
            return
        self._channels.remove(channel)
        if self._ready:
            self._send(f"PART #{channel}")

    def _send(self, line: str) -> None:
        if self._writer is None:
            return
        # StreamWriter.write only buffers, so join/part never block callers.
        self._writer.write(f"{line}\r\n".encode("utf-8"))

    def _credentials(self) -> tuple[str, str]:
        if self._config.oauth_token and self._config.nickname:
            token = self._config.oauth_token
            if not token.startswith("oauth:"):
                token = f"oauth:{token}"
            return self._config.nickname.lower(), token
        # Anonymous read-only login.
        return f"justinfan{random.randint(10000, 99999)}", "SCHMOOPIIE"

    async def _connect(self) -> asyncio.StreamReader:
        reader, writer = await asyncio.open_connection(
            self._config.host,
            self._config.port,
            ssl=self._config.use_tls or None,
        )
        self._writer = writer
        nick, password = self._credentials()
        self._send("CAP REQ :twitch.tv/tags twitch.tv/commands")
        self._send(f"PASS {password}")
        self._send(f"NICK {nick}")
        await writer.drain()
        return reader

    def _on_ready(self) -> None:
        self._ready = True
        LOGGER.info("Successfully connected to chat")
        for channel in self._channels:
            self._send(f"JOIN #{channel}")

    def _emit(self, message: ChatMessage) -> None:
        for handler in list(self._handlers):
            try:
                handler(message)
            except Exception:
                LOGGER.exception("Message handler failed for #%s", message.channel)

    def handle_line(self, raw: str) -> bool:
        """Process one raw line; returns False when Twitch asks us to reconnect."""

        line = parse_irc_line(raw)
        if line.command == "PING":
            token = line.params[-1] if line.params else "tmi.twitch.tv"
            self._send(f"PONG :{token}")
        elif line.command == "001":
            self._on_ready()
        elif line.command == "PRIVMSG":
            message = message_from_privmsg(line)
            if message is not None:
                self._emit(message)
        elif line.command == "RECONNECT":
            LOGGER.info("Server requested reconnect")
            return False
        elif line.command == "NOTICE":
            LOGGER.warning("Chat notice: %s", line.params[-1] if line.params else "")
        return True

    async def _read_loop(self, reader: asyncio.StreamReader) -> None:
        while True:
            # Twitch pings roughly every five minutes; silence past the timeout
            # means a half-open connection.
            try:
                raw = await asyncio.wait_for(reader.readline(), timeout=self._config.read_timeout)
            except asyncio.TimeoutError as exc:
                raise ConnectionError(
                    f"No data from server for {self._config.read_timeout:g}s"
                ) from exc
            if not raw:
                raise ConnectionError("Connection closed by server")
            if not self.handle_line(raw.decode("utf-8", errors="replace")):
                return
            if self._writer is not None:
                await self._writer.drain()

    async def _disconnect(self) -> None:
        self._ready = False
        writer, self._writer = self._writer, None
        if writer is None:
            return
        writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionError, OSError):
            pass

    async def run_forever(self) -> None:
        """Connect and keep reading, reconnecting after failures until closed."""

        while not self._closing:
            error: Optional[BaseException] = None
            try:
                reader = await self._connect()
                await self._read_loop(reader)
            except asyncio.CancelledError:
                await self._disconnect()
                raise
            except (ConnectionError, OSError, asyncio.IncompleteReadError) as exc:
                error = exc
            await self._disconnect()
            if self._closing:
                break
            if error is not None:
                LOGGER.error("Client closed due to error: %s", error)
            else:
                LOGGER.info("Client closed, reconnecting")
            await asyncio.sleep(self._config.reconnect_delay)

    async def close(self) -> None:
        self._closing = True
        await self._disconnect()
