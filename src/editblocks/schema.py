"""Typed records exchanged between the edit block matcher and the orchestrator."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RecordModel(BaseModel):
    """Base Pydantic model with strict field handling."""

    model_config = ConfigDict(extra="forbid", frozen=False)


class EditType(str, Enum):
    """Kinds of change an edit block can describe."""

    CREATE = "create"
    UPDATE = "update"
    APPEND = "append"
    DELETE = "delete"


class BlockState(str, Enum):
    """States an edit block passes through while it is being applied."""

    APPLYING = "applying"
    APPLY_FAILED = "apply_failed"
    APPLIED = "applied"
    CHECKING = "checking"
    CHECK_PASSED = "check_passed"
    CHECK_FAILED = "check_failed"
    STAGED = "staged"
    RESTORED = "restored"
    DONE = "done"


class FileRange(RecordModel):
    """1-based inclusive line span within a file."""

    file_path: str
    start_line: int
    end_line: int


class CodeBlock(RecordModel):
    """Snippet of code previously shown to whoever proposed an edit.

    ``start_line``/``end_line`` are ``-1`` for synthetic snippets that were not
    read from a file (for example the old lines of an earlier edit block).
    """

    file_path: str
    code: str
    start_line: int = -1
    end_line: int = -1
    symbol: str = ""

    @property
    def is_synthetic(self) -> bool:
        return self.start_line == -1 or self.end_line == -1


class EditBlock(RecordModel):
    """Proposed change to a single file."""

    file_path: str
    absolute_file_path: str = Field(default="", exclude=True)
    old_lines: List[str] = Field(default_factory=list)
    new_lines: List[str] = Field(default_factory=list)
    edit_type: EditType = EditType.UPDATE
    sequence_number: int = 0
    # None: the whole file was visible. Empty list: nothing was visible.
    visible_file_ranges: Optional[List[FileRange]] = None
    visible_code_blocks: List[CodeBlock] = Field(default_factory=list)


class CheckResult(RecordModel):
    """Outcome of the post-edit verification commands."""

    success: bool
    message: str = ""


class AutofixResult(RecordModel):
    """Summary of the LSP code-action autofix for a single document."""

    applied_edits: List[str] = Field(default_factory=list)
    failed_edits: List[str] = Field(default_factory=list)
    skipped: bool = False


class ApplyEditBlockReport(RecordModel):
    """Per-block outcome returned by :func:`editblocks.apply.apply_edit_blocks`."""

    original_edit_block: EditBlock
    did_apply: bool = False
    error: str = ""
    state: BlockState = BlockState.APPLYING
    autofix_result: Optional[AutofixResult] = None
    autofix_error: str = ""
    check_result: Optional[CheckResult] = None
    # Diff recorded before autofixes ran.
    initial_diff: str = ""
    # Diff recorded after autofixes ran; kept even when the edit was restored.
    final_diff: str = ""


__all__ = [
    "ApplyEditBlockReport",
    "AutofixResult",
    "BlockState",
    "CheckResult",
    "CodeBlock",
    "EditBlock",
    "EditType",
    "FileRange",
    "RecordModel",
]
