"""Shared notification formatting helpers.

Keeping formatting here prevents drift between sinks and keeps messages
consistent regardless of parse mode.
"""

from __future__ import annotations

import html
from typing import Sequence

from core.models import ChatMessage

CHANNEL_URL = "https://twitch.tv/{channel}"


def _snippet(text: str, snippet_chars: int) -> str:
    clipped = text[:snippet_chars].strip()
    if len(text) > snippet_chars:
        clipped += "…"
    return clipped


def _format_markdown(message: ChatMessage, hits: Sequence[str], snippet: str) -> str:
    """Create the Markdown notification body."""

    def escape_md(value: str) -> str:
        for ch in r"*_[`":
            value = value.replace(ch, f"\\{ch}")
        return value

    sender = escape_md(message.sender_display_name)
    channel = escape_md(message.channel)
    lines = [
        f"**{sender}** just sent a message at twitch.tv/{channel} that matches one of your filters:",
        "",
        escape_md(snippet),
    ]
    if hits:
        lines.extend(["", f"**Why:** {escape_md(', '.join(hits))}"])
    if message.sent_at is not None:
        timestamp = message.sent_at.astimezone().strftime("%H:%M:%S %d-%m-%Y")
        lines.append(f"[{timestamp}]")
    return "\n".join(lines)


def _format_html(message: ChatMessage, hits: Sequence[str], snippet: str) -> str:
    """Create the HTML notification body."""

    sender = html.escape(message.sender_display_name)
    link = html.escape(CHANNEL_URL.format(channel=message.channel))
    channel = html.escape(message.channel)
    parts = [
        f"<b>{sender}</b> just sent a message at "
        f"<a href=\"{link}\">twitch.tv/{channel}</a> that matches one of your filters:",
        "",
        html.escape(snippet),
    ]
    if hits:
        parts.extend(["", f"<b>Why:</b> {html.escape(', '.join(hits))}"])
    if message.sent_at is not None:
        timestamp = message.sent_at.astimezone().strftime("%H:%M:%S %d-%m-%Y")
        parts.append(f"<i>[{html.escape(timestamp)}]</i>")
    return "\n".join(parts)


def format_notification(
    message: ChatMessage,
    hits: Sequence[str],
    snippet_chars: int,
    mode: str,
) -> str:
    """Return the notification formatted for the requested mode."""

    snippet = _snippet(message.text, snippet_chars)
    if mode == "markdown":
        return _format_markdown(message, hits, snippet)
    if mode == "html":
        return _format_html(message, hits, snippet)
    raise ValueError(f"Unsupported notification format: {mode}")
