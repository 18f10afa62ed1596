"""Keyword filter matching (core domain)."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Union


def matched_filters(text: str, filters: Sequence[str]) -> List[str]:
    """Return the filters contained in ``text``, in filter order.

    Filters are expected to be lowercase already; only the text is lowered
    here, so the case of a filter is fixed when it is registered.
    """

    lowered = text.lower()
    return [f for f in filters if _usable(f) and f in lowered]


def matches(text: str, filters: Sequence[str]) -> bool:
    """Return True if at least one filter is a substring of ``text``.

    An empty filter list never matches, and blank filters are skipped.
    """

    lowered = text.lower()
    return any(_usable(f) and f in lowered for f in filters)


def _usable(value: str) -> bool:
    # "" is a substring of everything.
    return bool(value and value.strip())


def usable_filters(filters: Iterable[str]) -> List[str]:
    """Drop blank filters, keeping order."""

    return [f for f in filters if _usable(f)]


def normalize_filters(raw: Union[str, Iterable[str]]) -> List[str]:
    """Normalize user-provided filters.

    Accepts comma separated text or an iterable of strings. Entries are
    stripped and lowercased; empties and repeats are dropped.
    """

    parts = raw.split(",") if isinstance(raw, str) else raw
    normalized: List[str] = []
    for part in parts:
        value = part.strip().lower()
        if value and value not in normalized:
            normalized.append(value)
    return normalized
