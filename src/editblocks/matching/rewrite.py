"""Rewrite file content by replacing the matched old lines of an edit block."""

from __future__ import annotations

from typing import Any, Mapping, Sequence, Tuple

from ..config import DEFAULT_MATCH_OPTIONS, MatchOptions
from ..schema import EditBlock
from ..tools.symbols import SymbolLookup
from .disambiguate import expand_until_unambiguous
from .finder import Match, find_acceptable_match, find_closest_match
from .visibility import resolve_visible_ranges


class EditBlockError(RuntimeError):
    """Raised when an edit block cannot be applied to file content."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = dict(details or {})


class UnsupportedEditError(EditBlockError):
    """Raised for edit blocks whose shape is not supported."""


class NoMatchFoundError(EditBlockError):
    """Raised when no location clears the acceptance threshold."""

    def __init__(
        self,
        message: str,
        *,
        failed_to_match: Sequence[str] = (),
        found_instead: Sequence[str] = (),
    ) -> None:
        super().__init__(
            message,
            details={"failed_to_match": list(failed_to_match), "found_instead": list(found_instead)},
        )
        self.failed_to_match: Tuple[str, ...] = tuple(failed_to_match)
        self.found_instead: Tuple[str, ...] = tuple(found_instead)


class MultipleMatchesError(EditBlockError):
    """Raised when more than one acceptable location exists."""

    def __init__(self, message: str, *, matches: Sequence[Match]) -> None:
        super().__init__(
            message,
            details={"matches": [(match.start_line, match.end_line) for match in matches]},
        )
        self.matches: Tuple[Match, ...] = tuple(matches)


MULTIPLE_MATCHES_MESSAGE = (
    "Multiple matches found for the given edit block old lines, but expected only one match. "
    "Here are the matches with sufficient additional context from the current state of the file "
    "to disambiguate. Provide the edit block again with the specific full expanded context:\n\n{matches}"
)


def first_lines(lines: Sequence[str], limit: int) -> str:
    return "\n".join(lines[:limit])


def describe_unmatched(match: Match | None, options: MatchOptions, *, found_label: str = "found these lines") -> str:
    """Diagnostic suffix listing the lines a near miss failed on."""
    if match is None or not match.failed_to_match:
        return ""
    extra = f"\nFailed to match these lines:\n\n{first_lines(match.failed_to_match, options.max_diagnostic_lines)}\n"
    if match.found_instead:
        extra += f"\nInstead, {found_label}:\n\n{first_lines(match.found_instead, options.max_diagnostic_lines)}\n"
    return extra


def format_match_region(file_path: str, match: Match) -> str:
    body = "\n".join(match.lines)
    return f"File: {file_path}\nLines: {match.start_line}-{match.end_line}\n```\n{body}\n```"


def update_contents(
    block: EditBlock,
    original_contents: str,
    *,
    options: MatchOptions = DEFAULT_MATCH_OPTIONS,
    symbol_lookup: SymbolLookup | None = None,
) -> str:
    """Return ``original_contents`` with the block's old lines replaced.

    Candidates are first restricted to the block's visible ranges.  When none
    of those is acceptable a single whole-file search decides instead.  The
    block itself is never modified.
    """
    if not block.old_lines:
        raise UnsupportedEditError(
            f"Edit block for {block.file_path} has no old lines; updates require old lines to locate the change."
        )

    original_lines = original_contents.split("\n")
    visible_ranges = resolve_visible_ranges(block, symbol_lookup)

    best, acceptable = find_acceptable_match(
        block.old_lines,
        original_lines,
        visible_ranges=visible_ranges,
        options=options,
    )
    if not acceptable and visible_ranges is not None:
        best, acceptable = find_acceptable_match(block.old_lines, original_lines, options=options)

    if len(acceptable) > 1:
        expanded = expand_until_unambiguous(acceptable, original_lines, options)
        regions = "\n\n".join(format_match_region(block.file_path, match) for match in expanded)
        raise MultipleMatchesError(MULTIPLE_MATCHES_MESSAGE.format(matches=regions), matches=expanded)

    if best is None:
        closest, _ = find_closest_match(block.old_lines, original_lines, options=options)
        old_text = "\n".join(block.old_lines)
        raise NoMatchFoundError(
            f"no good match found for the following edit block old lines:\n\n{old_text}\n"
            f"{describe_unmatched(closest, options)}",
            failed_to_match=closest.failed_to_match[: options.max_diagnostic_lines] if closest else (),
            found_instead=closest.found_instead[: options.max_diagnostic_lines] if closest else (),
        )

    end_index = best.index + len(best.lines)
    updated = [*original_lines[: best.index], *block.new_lines, *original_lines[end_index:]]
    return "\n".join(updated)


__all__ = [
    "EditBlockError",
    "MULTIPLE_MATCHES_MESSAGE",
    "MultipleMatchesError",
    "NoMatchFoundError",
    "UnsupportedEditError",
    "describe_unmatched",
    "first_lines",
    "format_match_region",
    "update_contents",
]
