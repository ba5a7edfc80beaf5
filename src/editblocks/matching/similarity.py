"""Line similarity scoring used by the fuzzy matcher."""

from __future__ import annotations

from functools import lru_cache

_SPACING_TABLE = str.maketrans("", "", " \t")


def levenshtein_distance(left: str, right: str) -> int:
    """Return the edit distance between ``left`` and ``right``."""
    if left == right:
        return 0
    if len(left) < len(right):
        left, right = right, left
    if not right:
        return len(left)

    previous = list(range(len(right) + 1))
    for i, left_char in enumerate(left, start=1):
        current = [i]
        for j, right_char in enumerate(right, start=1):
            cost = 0 if left_char == right_char else 1
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + cost,
                )
            )
        previous = current
    return previous[-1]


def levenshtein_ratio(left: str, right: str) -> float:
    """Similarity in ``[0, 1]``: one minus distance over the longer length."""
    longest = max(len(left), len(right))
    if longest == 0:
        return 1.0
    return 1.0 - levenshtein_distance(left, right) / longest


@lru_cache(maxsize=65536)
def string_similarity(left: str, right: str) -> float:
    """Score how alike two lines are, forgiving whitespace differences.

    The result is the best of several measures: trimmed equality (0.95),
    equality once spaces and tabs are removed (0.9), the plain Levenshtein
    ratio, and a weighted blend favouring the whitespace-free ratio.
    """
    if left == right:
        return 1.0

    scores = [0.0]
    if left.strip() == right.strip():
        scores.append(0.95)

    left_compact = left.translate(_SPACING_TABLE)
    right_compact = right.translate(_SPACING_TABLE)
    if left_compact == right_compact:
        scores.append(0.9)

    plain = levenshtein_ratio(left, right)
    scores.append(plain)
    compact = levenshtein_ratio(left_compact, right_compact)
    scores.append(0.4 * plain + 0.6 * compact)

    return max(scores)


__all__ = ["levenshtein_distance", "levenshtein_ratio", "string_similarity"]
