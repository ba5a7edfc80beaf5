"""Grow ambiguous matches until each one identifies a single location."""

from __future__ import annotations

from typing import List, Sequence

from ..config import DEFAULT_MATCH_OPTIONS, MatchOptions
from .finder import Match, find_acceptable_match


def _grow(match: Match, target_lines: Sequence[str], rate: int) -> Match:
    start = max(0, match.index - rate)
    end = min(len(target_lines), match.index + len(match.lines) + rate)
    return Match(
        index=start,
        lines=tuple(target_lines[start:end]),
        score=match.score,
        high_score_ratio=match.high_score_ratio,
        successful=match.successful,
    )


def is_unambiguous(
    lines: Sequence[str],
    target_lines: Sequence[str],
    options: MatchOptions = DEFAULT_MATCH_OPTIONS,
) -> bool:
    """True when ``lines`` has at most one acceptable match in the whole target."""
    _, acceptable = find_acceptable_match(lines, target_lines, options=options)
    return len(acceptable) <= 1


def expand_until_unambiguous(
    matches: Sequence[Match],
    target_lines: Sequence[str],
    options: MatchOptions = DEFAULT_MATCH_OPTIONS,
) -> List[Match]:
    """Expand each match symmetrically until its content matches only itself.

    Every match is grown one more step once unique so the surrounding context
    is easier to read.  Growth stops at the file boundaries.
    """
    rate = max(1, options.expand_rate)
    expanded: List[Match] = []
    for match in matches:
        current = match
        while len(current.lines) < len(target_lines) and not is_unambiguous(
            current.lines, target_lines, options
        ):
            current = _grow(current, target_lines, rate)
        expanded.append(_grow(current, target_lines, rate))
    return expanded


__all__ = ["expand_until_unambiguous", "is_unambiguous"]
