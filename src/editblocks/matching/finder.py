"""Locate the old lines of an edit block inside drifted file content.

The search works in two stages.  First an *anchor* line of the old lines is
looked up in the target (exact, then trimmed, then fuzzy equality).  Each
anchor is then grown into a full alignment, scoring every old line against
the target while tolerating whitespace-only and comment-only lines that exist
on one side only.  Candidates are ranked by their average per-line score and
accepted only when nearly every scored line is a high-confidence match.

All functions here are pure: they never touch the filesystem and they return
owned snapshots of the matched lines.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..config import DEFAULT_MATCH_OPTIONS, MatchOptions
from ..schema import FileRange
from .similarity import string_similarity

_WHITESPACE_OR_ENDING_DELIMITER = re.compile(r"^[\s})\]]*$")
_WHITESPACE = re.compile(r"^\s*$")
# Only line comments in `//` and `#` languages are recognised.
_COMMENT = re.compile(r"^\s*(//|#).*$")


def is_whitespace_or_ending_delimiter(line: str) -> bool:
    return _WHITESPACE_OR_ENDING_DELIMITER.match(line) is not None


def is_whitespace(line: str) -> bool:
    return _WHITESPACE.match(line) is not None


def is_comment(line: str) -> bool:
    return _COMMENT.match(line) is not None


def is_whitespace_or_comment(line: str) -> bool:
    return is_whitespace(line) or is_comment(line)


@dataclass(frozen=True, slots=True)
class Match:
    """Candidate alignment of old lines against target lines."""

    index: int
    lines: Tuple[str, ...] = ()
    score: float = 0.0
    high_score_ratio: float = 0.0
    successful: bool = False
    failed_to_match: Tuple[str, ...] = ()
    found_instead: Tuple[str, ...] = ()

    @property
    def start_line(self) -> int:
        """1-based first line of the matched span."""
        return self.index + 1

    @property
    def end_line(self) -> int:
        """1-based last line of the matched span (inclusive)."""
        return self.index + len(self.lines)

    def is_acceptable(self, options: MatchOptions = DEFAULT_MATCH_OPTIONS) -> bool:
        return self.successful and self.high_score_ratio > options.min_high_score_ratio


@dataclass(frozen=True, slots=True)
class _Anchor:
    index: int
    score: float


def starting_line_index(lines: Sequence[str]) -> int:
    """Index of the first old line that is not blank or closing delimiters only."""
    index = 0
    while index < len(lines) - 1 and is_whitespace_or_ending_delimiter(lines[index]):
        index += 1
    return index


def _visible(anchor: _Anchor, span: int, visible_ranges: Sequence[FileRange], options: MatchOptions) -> bool:
    for visible in visible_ranges:
        # Lines drift as other edits land, so allow a small margin on each side.
        margin = min((visible.end_line - visible.start_line) // 8, options.visibility_margin)
        start_index = visible.start_line - 1 - margin
        end_index = visible.end_line - 1 + margin
        if start_index <= anchor.index and anchor.index + span - 1 <= end_index:
            return True
    return False


def find_potential_matches(
    old_lines: Sequence[str],
    target_lines: Sequence[str],
    starting_index: int,
    *,
    visible_ranges: Sequence[FileRange] | None = None,
    options: MatchOptions = DEFAULT_MATCH_OPTIONS,
) -> List[_Anchor]:
    """Return anchors in ``target_lines`` for ``old_lines[starting_index]``."""
    if not old_lines:
        return []
    starting_line = old_lines[starting_index]

    anchors = [_Anchor(idx, 1.0) for idx, line in enumerate(target_lines) if line == starting_line]

    if not anchors:
        trimmed = starting_line.strip()
        anchors = [
            _Anchor(idx, options.exact_trimmed_score)
            for idx, line in enumerate(target_lines)
            if line.strip() == trimmed
        ]

    if not anchors:
        for idx, line in enumerate(target_lines):
            score = string_similarity(line, starting_line)
            if score >= options.similarity_threshold:
                anchors.append(_Anchor(idx, score))

    if visible_ranges is not None:
        anchors = [
            anchor
            for anchor in anchors
            if _visible(anchor, len(old_lines), visible_ranges, options)
        ]

    return anchors


def _align(
    anchor: _Anchor,
    old_lines: Sequence[str],
    target_lines: Sequence[str],
    starting_index: int,
    skipped_old_lines: int,
    options: MatchOptions,
) -> Match:
    """Grow ``anchor`` into a scored alignment of all old lines."""
    # Back up over blank/closing-delimiter target lines the anchor search skipped.
    offset = 0
    while (
        offset < starting_index
        and 0 < anchor.index - offset - 1 < len(target_lines)
        and is_whitespace_or_ending_delimiter(target_lines[anchor.index - offset - 1])
    ):
        offset += 1
    adjusted_index = anchor.index - offset

    successful = True
    total_score = 0.0
    high_score_lines = 0
    scored_lines = 0
    matched: List[str] = []
    failed_to_match: List[str] = []
    found_instead: List[str] = []

    old_offset = 0
    target_offset = 0
    i = 0
    while i + old_offset < len(old_lines):
        old_line = old_lines[i + old_offset]
        target_index = adjusted_index + i + target_offset
        if target_index >= len(target_lines):
            if is_whitespace_or_comment(old_line):
                i += 1
                continue
            successful = False
            break
        target_line = target_lines[target_index]
        score = string_similarity(target_line, old_line)

        if score < options.similarity_threshold:
            # Tolerate blank or comment lines present on one side only.
            if (is_whitespace_or_comment(target_line) and not is_whitespace_or_comment(old_line)) or (
                is_whitespace(target_line) and not is_whitespace(old_line)
            ):
                matched.append(target_line)
                target_offset += 1
                continue
            if (is_whitespace_or_comment(old_line) and not is_whitespace_or_comment(target_line)) or (
                is_whitespace(old_line) and not is_whitespace(target_line)
            ):
                old_offset += 1
                continue
            if scored_lines == 0 and skipped_old_lines > 0:
                # Leading old lines that the anchor search already gave up on.
                old_offset += 1
                continue

        matched.append(target_line)
        scored_lines += 1
        if score > options.high_score_threshold:
            high_score_lines += 1
        else:
            failed_to_match.append(old_line)
            found_instead.append(target_line)
        total_score += score
        i += 1

    if successful:
        # Skipped lines stay in the denominator so candidates compare fairly.
        denominator = scored_lines + skipped_old_lines
    else:
        denominator = len(old_lines)
    if denominator:
        high_score_ratio = high_score_lines / denominator
        average = total_score / denominator
    else:
        high_score_ratio = 0.0
        average = 0.0

    return Match(
        index=adjusted_index,
        lines=tuple(matched),
        score=average,
        high_score_ratio=high_score_ratio,
        successful=successful,
        failed_to_match=tuple(failed_to_match),
        found_instead=tuple(found_instead),
    )


def is_better_match(candidate: Match, best: Match | None) -> bool:
    if best is None:
        return True
    if candidate.successful and candidate.score > best.score:
        return True
    if not best.successful and candidate.successful:
        return True
    return not best.successful and candidate.score > best.score


def find_closest_match(
    old_lines: Sequence[str],
    target_lines: Sequence[str],
    *,
    visible_ranges: Sequence[FileRange] | None = None,
    options: MatchOptions = DEFAULT_MATCH_OPTIONS,
) -> Tuple[Match | None, List[Match]]:
    """Return the best candidate (if any) together with every candidate found.

    ``visible_ranges`` restricts anchors to the given (already merged) ranges;
    ``None`` searches the whole target, which is how transcript snippets are
    matched.
    """
    if not old_lines:
        return None, []

    starting_index = starting_line_index(old_lines)
    anchors = find_potential_matches(
        old_lines,
        target_lines,
        starting_index,
        visible_ranges=visible_ranges,
        options=options,
    )

    skipped_old_lines = 0
    if not anchors and starting_index + 1 < len(old_lines):
        skipped_old_lines = 1
        starting_index = starting_index + 1 + starting_line_index(old_lines[starting_index + 1 :])
        anchors = find_potential_matches(
            old_lines,
            target_lines,
            starting_index,
            visible_ranges=visible_ranges,
            options=options,
        )

    best: Match | None = None
    candidates: List[Match] = []
    for anchor in anchors:
        candidate = _align(anchor, old_lines, target_lines, starting_index, skipped_old_lines, options)
        candidates.append(candidate)
        if is_better_match(candidate, best):
            best = candidate

    return best, candidates


def find_acceptable_match(
    old_lines: Sequence[str],
    target_lines: Sequence[str],
    *,
    visible_ranges: Sequence[FileRange] | None = None,
    options: MatchOptions = DEFAULT_MATCH_OPTIONS,
) -> Tuple[Match | None, List[Match]]:
    """Like :func:`find_closest_match` but only returns acceptable candidates.

    When the best candidate does not clear ``options.min_high_score_ratio``
    the result is ``(None, [])``.
    """
    best, candidates = find_closest_match(
        old_lines,
        target_lines,
        visible_ranges=visible_ranges,
        options=options,
    )
    if best is None or not best.is_acceptable(options):
        return None, []
    return best, [candidate for candidate in candidates if candidate.is_acceptable(options)]


__all__ = [
    "Match",
    "find_acceptable_match",
    "find_closest_match",
    "find_potential_matches",
    "is_better_match",
    "is_comment",
    "is_whitespace",
    "is_whitespace_or_comment",
    "is_whitespace_or_ending_delimiter",
    "starting_line_index",
]
