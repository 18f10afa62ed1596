from __future__ import annotations

from core.filters import matched_filters, matches, normalize_filters


def test_match_is_case_insensitive_on_text() -> None:
    assert matches("this has FOO in it", ["foo"])
    assert not matches("no match here", ["foo"])


def test_match_is_substring_containment() -> None:
    assert matches("foobar", ["oba"])
    assert matches("Giveaway starts NOW", ["nothing", "give"])


def test_empty_filters_never_match() -> None:
    assert not matches("anything at all", [])
    assert not matches("", [])


def test_filters_are_not_lowered_by_matcher() -> None:
    # Filter case is fixed at registration time.
    assert not matches("foo", ["FOO"])


def test_matched_filters_keeps_filter_order() -> None:
    assert matched_filters("Baz then BAR", ["bar", "qux", "baz"]) == ["bar", "baz"]


def test_normalize_filters_from_text() -> None:
    assert normalize_filters(" Drops, GIVEAWAY ,, drops,  ") == ["drops", "giveaway"]


def test_normalize_filters_from_iterable() -> None:
    assert normalize_filters(["A", " b ", ""]) == ["a", "b"]
    assert normalize_filters([]) == []


def test_blank_filters_never_match() -> None:
    assert matches("x", [""]) is False
    assert matches("x y", ["  "]) is False
    assert matches("xyz", ["", "y"]) is True
    assert matched_filters("xyz", ["", " ", "y"]) == ["y"]
