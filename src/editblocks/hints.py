"""Advice attached to edits whose post-apply checks failed."""

from __future__ import annotations

from typing import Sequence

from .schema import ApplyEditBlockReport, EditType
from .tools.checks import SYNTAX_ERROR

_DELIMITERS = (
    ("(", ")", "parentheses"),
    ("{", "}", "braces"),
    ("[", "]", "square brackets"),
)


def count_unbalanced(lines: Sequence[str], opening: str, closing: str) -> int:
    """Net count of ``opening`` minus ``closing`` across ``lines``."""
    return sum(line.count(opening) - line.count(closing) for line in lines)


def fix_check_hint(report: ApplyEditBlockReport) -> str:
    block = report.original_edit_block
    hint = ""

    balance_issue = False
    for opening, closing, label in _DELIMITERS:
        old = count_unbalanced(block.old_lines, opening, closing)
        new = count_unbalanced(block.new_lines, opening, closing)
        if old != new:
            balance_issue = True
            hint += (
                f"The net number of unbalanced {label} should be the same in the new lines vs old lines. "
                f"But there are {old} unbalanced {label} in the old lines and {new} in the new lines.\n"
            )

    if balance_issue:
        hint += (
            "Balance all the parentheses, braces, and square brackets within the old lines section - "
            "keep going until closing any delimiters opened. Do the same for the new lines section.\n"
        )

    if block.edit_type == EditType.UPDATE and len(block.old_lines) <= 3:
        hint += "Make sure to add enough context in the old lines, more than just 2 or 3 lines, at least 5 if available.\n"

    if not hint:
        message = report.check_result.message if report.check_result else ""
        if SYNTAX_ERROR in message:
            hint = (
                "Ensure the replacement of old lines with new lines results in good syntax, "
                "and make sure to do something different than what failed.\n"
            )
        else:
            hint = "Just make sure to do something different than what failed.\n"
    return hint


__all__ = ["count_unbalanced", "fix_check_hint"]
