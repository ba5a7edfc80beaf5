from __future__ import annotations

import pytest

from editblocks.matching.similarity import levenshtein_distance, levenshtein_ratio, string_similarity


@pytest.mark.parametrize(
    ("left", "right", "expected"),
    [
        ("", "", 0),
        ("abc", "abc", 0),
        ("kitten", "sitting", 3),
        ("", "abc", 3),
        ("flaw", "lawn", 2),
    ],
)
def test_levenshtein_distance(left: str, right: str, expected: int) -> None:
    assert levenshtein_distance(left, right) == expected
    assert levenshtein_distance(right, left) == expected


def test_levenshtein_ratio_bounds() -> None:
    assert levenshtein_ratio("", "") == 1.0
    assert levenshtein_ratio("abc", "xyz") == 0.0
    assert levenshtein_ratio("abcd", "abce") == pytest.approx(0.75)


def test_string_similarity_rewards_whitespace_only_differences() -> None:
    assert string_similarity("x = 1", "x = 1") == 1.0
    assert string_similarity("    x = 1", "x = 1") == pytest.approx(0.95)
    assert string_similarity("x=1", "x = 1") == pytest.approx(0.9)


def test_string_similarity_for_unrelated_lines_is_low() -> None:
    assert string_similarity("def handler(request):", "}") < 0.2
