"""Visible file ranges: merging, symbol reacquisition and line-shift tracking.

Visible ranges record which parts of a file were shown to whoever proposed an
edit.  They are used to pick the intended occurrence of repeated text, so they
must follow the file as earlier edits insert or remove lines.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from ..schema import CodeBlock, EditBlock, FileRange
from ..tools.symbols import SymbolLookup, SymbolLookupError

LOGGER = logging.getLogger(__name__)

_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


def merge_ranges(file_path: str, ranges: Iterable[FileRange]) -> List[FileRange]:
    """Merge overlapping or adjacent ranges for ``file_path`` into a minimal set."""
    relevant = sorted(
        (item for item in ranges if item.file_path == file_path),
        key=lambda item: item.start_line,
    )
    merged: List[FileRange] = []
    for item in relevant:
        if merged and merged[-1].end_line >= item.start_line - 1:
            last = merged[-1]
            merged[-1] = FileRange(
                file_path=file_path,
                start_line=last.start_line,
                end_line=max(last.end_line, item.end_line),
            )
        else:
            merged.append(item.model_copy())
    return merged


def code_blocks_to_merged_ranges(file_path: str, code_blocks: Iterable[CodeBlock]) -> List[FileRange]:
    """Visible ranges for ``file_path`` derived from non-synthetic code blocks."""
    return merge_ranges(
        file_path,
        (
            FileRange(file_path=block.file_path, start_line=block.start_line, end_line=block.end_line)
            for block in code_blocks
            if not block.is_synthetic
        ),
    )


def resolve_visible_ranges(
    block: EditBlock,
    symbol_lookup: SymbolLookup | None = None,
) -> Optional[List[FileRange]]:
    """Merged visible ranges for ``block``, refreshed with current symbol spans.

    Symbols referenced by the block's visible code blocks are looked up again
    because the code may have moved since it was shown.  Lookup failures are
    logged and the static ranges are used as-is.
    """
    if block.visible_file_ranges is None:
        return None

    merged = merge_ranges(block.file_path, block.visible_file_ranges)
    if symbol_lookup is None or not block.absolute_file_path:
        return merged

    reacquired: List[FileRange] = []
    for code_block in block.visible_code_blocks:
        if not code_block.symbol or code_block.file_path != block.file_path:
            continue
        try:
            spans = symbol_lookup(block.absolute_file_path, code_block.symbol)
        except (SymbolLookupError, OSError) as error:
            LOGGER.warning(
                "Failed to re-resolve symbol %s in %s: %s",
                code_block.symbol,
                block.file_path,
                error,
            )
            continue
        reacquired.extend(
            FileRange(file_path=block.file_path, start_line=span.start_line, end_line=span.end_line)
            for span in spans
        )

    if not reacquired:
        return merged
    return merge_ranges(block.file_path, [*merged, *reacquired])


@dataclass(frozen=True, slots=True)
class LineEdit:
    """Contiguous run of added/removed lines, in pre-edit line numbers."""

    start_line: int
    removed: int = 0
    added: int = 0

    @property
    def delta(self) -> int:
        return self.added - self.removed


def line_edits_from_diff(diff: str) -> List[LineEdit]:
    """One :class:`LineEdit` per consecutive run of ``+``/``-`` lines in ``diff``."""
    edits: List[LineEdit] = []
    if not diff:
        return edits

    old_line = 0
    old_remaining = 0
    new_remaining = 0
    run: Optional[List[int]] = None  # [start_line, removed, added]

    def flush() -> None:
        nonlocal run
        if run is not None:
            edits.append(LineEdit(start_line=run[0], removed=run[1], added=run[2]))
            run = None

    for raw in diff.splitlines():
        header = _HUNK_HEADER.match(raw)
        if header:
            flush()
            start = int(header.group(1))
            old_remaining = int(header.group(2)) if header.group(2) is not None else 1
            new_remaining = int(header.group(4)) if header.group(4) is not None else 1
            # A zero-length old side names the line *after which* text is inserted.
            old_line = start if old_remaining else start + 1
            continue
        if old_remaining <= 0 and new_remaining <= 0:
            flush()
            continue
        if raw.startswith("\\"):
            continue
        if raw.startswith("+"):
            if run is None:
                run = [old_line, 0, 0]
            run[2] += 1
            new_remaining -= 1
        elif raw.startswith("-"):
            if run is None:
                run = [old_line, 0, 0]
            run[1] += 1
            old_line += 1
            old_remaining -= 1
        else:
            flush()
            old_line += 1
            old_remaining -= 1
            new_remaining -= 1
    flush()
    return edits


def translate_line(line: int, edits: Sequence[LineEdit], *, end: bool = False) -> int:
    """Map a pre-edit line number to its post-edit position.

    Lines inside a removed run collapse onto the replacement: range starts
    snap to its first line and range ends to its last.
    """
    shift = 0
    for edit in edits:
        if line >= edit.start_line + edit.removed:
            shift += edit.delta
        elif line >= edit.start_line:
            inside = max(edit.added, 1) - 1 if end else 0
            return edit.start_line + shift + inside
    return line + shift


def shift_range(file_range: FileRange, edits: Sequence[LineEdit]) -> FileRange:
    start = translate_line(file_range.start_line, edits)
    end = max(start, translate_line(file_range.end_line, edits, end=True))
    return FileRange(file_path=file_range.file_path, start_line=start, end_line=end)


def shift_visible_ranges(
    blocks: Sequence[EditBlock],
    file_path: str,
    edits: Sequence[LineEdit],
) -> List[EditBlock]:
    """Return ``blocks`` with the visible ranges of ``file_path`` blocks translated.

    Blocks for other files are returned untouched; affected blocks are copies.
    """
    if not edits:
        return list(blocks)
    ordered = sorted(edits, key=lambda edit: edit.start_line)
    shifted: List[EditBlock] = []
    for block in blocks:
        if block.file_path != file_path or block.visible_file_ranges is None:
            shifted.append(block)
            continue
        ranges = [
            shift_range(item, ordered) if item.file_path == file_path else item
            for item in block.visible_file_ranges
        ]
        shifted.append(block.model_copy(update={"visible_file_ranges": ranges}))
    return shifted


__all__ = [
    "LineEdit",
    "code_blocks_to_merged_ranges",
    "line_edits_from_diff",
    "merge_ranges",
    "resolve_visible_ranges",
    "shift_range",
    "shift_visible_ranges",
    "translate_line",
]
