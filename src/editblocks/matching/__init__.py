"""Fuzzy location of edit block old lines within file content."""

from .disambiguate import expand_until_unambiguous
from .finder import Match, find_acceptable_match, find_closest_match
from .rewrite import EditBlockError, MultipleMatchesError, NoMatchFoundError, UnsupportedEditError, update_contents
from .similarity import string_similarity
from .visibility import LineEdit, line_edits_from_diff, merge_ranges, shift_visible_ranges

__all__ = [
    "EditBlockError",
    "LineEdit",
    "Match",
    "MultipleMatchesError",
    "NoMatchFoundError",
    "UnsupportedEditError",
    "expand_until_unambiguous",
    "find_acceptable_match",
    "find_closest_match",
    "line_edits_from_diff",
    "merge_ranges",
    "shift_visible_ranges",
    "string_similarity",
    "update_contents",
]
