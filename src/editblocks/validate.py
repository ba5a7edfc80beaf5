"""Reject edit blocks whose old lines were never shown to their author."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import List, Tuple

from .apply import apply_edit_blocks
from .config import DEFAULT_MATCH_OPTIONS, ApplySettings, MatchOptions
from .matching.finder import Match, find_acceptable_match, find_closest_match, is_better_match
from .matching.rewrite import describe_unmatched
from .schema import ApplyEditBlockReport, BlockState, EditBlock
from .tools.lsp import LSPClient
from .tools.symbols import SymbolLookup
from .tools.vcs import GitRepository
from .tools.workspace import Workspace

_LINE_SPLIT = re.compile(r"\r?\n")
_DIAGNOSTIC_SCORE = 0.2

_NOT_IN_CONTEXT = """
No code context was found that matches the edit block's old lines, which are repeated here:

{old_lines}
{extra}

Make sure the old lines are present in the code context before writing an edit block."""


def _invalid_report(block: EditBlock, closest: Match | None, options: MatchOptions) -> ApplyEditBlockReport:
    extra = ""
    if closest is not None and closest.score > _DIAGNOSTIC_SCORE:
        extra = describe_unmatched(
            closest,
            options,
            found_label="found these lines in the closest match in the code context",
        )
    return ApplyEditBlockReport(
        original_edit_block=block,
        did_apply=False,
        state=BlockState.APPLY_FAILED,
        error=_NOT_IN_CONTEXT.format(old_lines="\n".join(block.old_lines), extra=extra),
    )


def validate_edit_blocks(
    blocks: Sequence[EditBlock],
    options: MatchOptions = DEFAULT_MATCH_OPTIONS,
) -> Tuple[List[EditBlock], List[ApplyEditBlockReport]]:
    """Split ``blocks`` into those matching their visible code and failure reports.

    Blocks without old lines (creates, appends) are always valid.
    """
    valid: List[EditBlock] = []
    invalid: List[ApplyEditBlockReport] = []
    for block in blocks:
        if not block.old_lines:
            valid.append(block)
            continue

        closest: Match | None = None
        found = False
        for code_block in block.visible_code_blocks:
            code_lines = _LINE_SPLIT.split(code_block.code)
            _, acceptable = find_acceptable_match(block.old_lines, code_lines, options=options)
            if acceptable:
                found = True
                break
            candidate, _ = find_closest_match(block.old_lines, code_lines, options=options)
            if candidate is not None and is_better_match(candidate, closest):
                closest = candidate

        if found:
            valid.append(block)
        else:
            invalid.append(_invalid_report(block, closest, options))
    return valid, invalid


def validate_and_apply_edit_blocks(
    blocks: Sequence[EditBlock],
    *,
    workspace: Workspace,
    settings: ApplySettings | None = None,
    vcs: GitRepository | None = None,
    lsp: LSPClient | None = None,
    symbol_lookup: SymbolLookup | None = None,
) -> List[ApplyEditBlockReport]:
    """Apply the blocks that pass validation; return all reports by sequence number."""
    settings = settings or ApplySettings()
    valid, invalid = validate_edit_blocks(blocks, settings.matching)
    reports = apply_edit_blocks(
        valid,
        workspace=workspace,
        settings=settings,
        vcs=vcs,
        lsp=lsp,
        symbol_lookup=symbol_lookup,
    )
    merged = [*reports, *invalid]
    merged.sort(key=lambda report: report.original_edit_block.sequence_number)
    return merged


__all__ = ["validate_and_apply_edit_blocks", "validate_edit_blocks"]
