"""Apply edit blocks to a working directory, optionally verifying each one.

Blocks are processed strictly in order.  Each block moves through a small
state machine recorded on its report::

    applying -> apply_failed
    applying -> applied -> done                                  (checks off)
    applying -> applied -> checking -> check_passed -> staged -> done
    applying -> applied -> checking -> check_failed -> restored
    applying -> applied -> checking -> check_passed -> restored    (staging failed)

A failing block never stops the batch.  After a block lands, the visible
ranges of later blocks for the same file are shifted by the line edits in
its final diff so they keep pointing at the code that was shown.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Callable, Dict, List

from .config import ApplySettings, MatchOptions
from .hints import fix_check_hint
from .matching.rewrite import EditBlockError, update_contents
from .matching.visibility import line_edits_from_diff, shift_visible_ranges
from .schema import ApplyEditBlockReport, BlockState, CheckResult, EditBlock, EditType
from .telemetry import emit_event
from .tools.autofix import autofix_file
from .tools.checks import CheckFileOutput, check_file
from .tools.diffs import unified_diff
from .tools.lsp import LSPClient, LSPError
from .tools.symbols import SymbolLookup
from .tools.vcs import GitError, GitRepository
from .tools.workspace import Workspace, WorkspaceError

LOGGER = logging.getLogger(__name__)


class ApplyError(EditBlockError):
    """Raised when a block cannot be written (missing/existing file, I/O failure)."""


@dataclass(slots=True)
class _Applied:
    """File content on either side of a structural edit."""

    before: str
    after: str
    existed: bool


# ---------------------------------------------------------------- per type
def apply_create(workspace: Workspace, block: EditBlock) -> _Applied:
    if workspace.exists(block.file_path):
        raise ApplyError(f"file already exists: {block.file_path}")
    contents = "\n".join(block.new_lines)
    if contents.endswith("\n"):
        contents = contents[:-1]
    try:
        workspace.write_text(block.file_path, contents, create_parents=True)
    except OSError as error:
        raise ApplyError(f"failed to create new file {block.file_path}: {error}") from error
    return _Applied(before="", after=contents, existed=False)


def _read_existing(workspace: Workspace, file_path: str) -> str:
    try:
        return workspace.read_text(file_path)
    except OSError as error:
        raise ApplyError(f"failed to read file {file_path}: {error}") from error


def apply_update(
    workspace: Workspace,
    block: EditBlock,
    *,
    options: MatchOptions,
    symbol_lookup: SymbolLookup | None = None,
) -> _Applied:
    original = _read_existing(workspace, block.file_path)
    if not block.absolute_file_path:
        block = block.model_copy(update={"absolute_file_path": str(workspace.path(block.file_path))})
    modified = update_contents(block, original, options=options, symbol_lookup=symbol_lookup)
    try:
        workspace.write_text(block.file_path, modified)
    except OSError as error:
        raise ApplyError(f"Failed to write modified content to file {block.file_path}: {error}") from error
    return _Applied(before=original, after=modified, existed=True)


def apply_append(workspace: Workspace, block: EditBlock) -> _Applied:
    original = _read_existing(workspace, block.file_path)
    updated = original
    if updated and not updated.endswith("\n"):
        updated += "\n"
    updated += "\n".join(block.new_lines)
    try:
        workspace.write_text(block.file_path, updated)
    except OSError as error:
        raise ApplyError(f"failed to append new lines to end of file {block.file_path}: {error}") from error
    return _Applied(before=original, after=updated, existed=True)


def apply_delete(workspace: Workspace, block: EditBlock) -> _Applied:
    if not workspace.exists(block.file_path):
        raise ApplyError(f"File does not exist: {block.file_path}")
    original = _read_existing(workspace, block.file_path)
    try:
        workspace.remove(block.file_path)
    except OSError as error:
        raise ApplyError(f"Failed to delete file: {block.file_path}: {error}") from error
    return _Applied(before=original, after="", existed=True)


# ------------------------------------------------------------- orchestration
class _BlockRunner:
    """Carries the collaborators shared by every block in one batch."""

    def __init__(
        self,
        workspace: Workspace,
        settings: ApplySettings,
        vcs: GitRepository | None,
        lsp: LSPClient | None,
        symbol_lookup: SymbolLookup | None,
    ) -> None:
        self.workspace = workspace
        self.settings = settings
        self.vcs = vcs
        self.lsp = lsp
        self.symbol_lookup = symbol_lookup
        self._appliers: Dict[EditType, Callable[[EditBlock], _Applied]] = {
            EditType.CREATE: lambda block: apply_create(workspace, block),
            EditType.UPDATE: lambda block: apply_update(
                workspace, block, options=settings.matching, symbol_lookup=symbol_lookup
            ),
            EditType.APPEND: lambda block: apply_append(workspace, block),
            EditType.DELETE: lambda block: apply_delete(workspace, block),
        }

    def _transition(self, report: ApplyEditBlockReport, state: BlockState) -> None:
        report.state = state
        block = report.original_edit_block
        emit_event(
            "edit_block_state",
            file_path=block.file_path,
            edit_type=block.edit_type,
            sequence_number=block.sequence_number,
            state=state,
            did_apply=report.did_apply,
            error=report.error or None,
        )

    def run(self, block: EditBlock) -> ApplyEditBlockReport:
        report = ApplyEditBlockReport(original_edit_block=block)
        self._transition(report, BlockState.APPLYING)

        applier = self._appliers.get(block.edit_type)
        if applier is None:
            report.error = f"Unknown edit type: {block.edit_type}"
            self._transition(report, BlockState.APPLY_FAILED)
            return report

        try:
            applied = applier(block)
        except ApplyError as error:
            report.error = str(error)
            self._transition(report, BlockState.APPLY_FAILED)
            return report
        except EditBlockError as error:
            report.error = f"Failed to apply edit block for file {block.file_path}: {error}"
            self._transition(report, BlockState.APPLY_FAILED)
            return report
        except (WorkspaceError, OSError) as error:
            report.error = str(error)
            self._transition(report, BlockState.APPLY_FAILED)
            return report

        report.did_apply = True
        path_a = "" if block.edit_type == EditType.CREATE else block.file_path
        path_b = "" if block.edit_type == EditType.DELETE else block.file_path
        report.initial_diff = unified_diff(path_a, applied.before, path_b, applied.after)
        self._transition(report, BlockState.APPLIED)

        current = applied.after
        if block.edit_type != EditType.DELETE:
            report.autofix_result, report.autofix_error = autofix_file(
                self.workspace,
                block.file_path,
                self.settings.autofix_commands,
                self.lsp,
            )
            if self.workspace.exists(block.file_path):
                current = self.workspace.read_text(block.file_path)
        report.final_diff = unified_diff(path_a, applied.before, path_b, current)

        if not self.settings.check_edits:
            self._transition(report, BlockState.DONE)
            return report

        self._check(report, applied)
        return report

    # ------------------------------------------------------------- checks
    def _check(self, report: ApplyEditBlockReport, applied: _Applied) -> None:
        vcs = self.vcs
        if vcs is None:
            raise GitError("Checked edits require a git repository")
        block = report.original_edit_block
        self._transition(report, BlockState.CHECKING)

        # A deleted file has nothing left to check, so only the deletion is staged.
        if block.edit_type != EditType.DELETE:
            output = self._run_checks(block.file_path)
            report.check_result = CheckResult(success=output.all_passed, message=output.output)
            if not output.all_passed:
                report.did_apply = False
                self._transition(report, BlockState.CHECK_FAILED)
                hint = fix_check_hint(report)
                self._roll_back(report, applied, f"Checks failed: {report.check_result.message}\nHint: {hint}")
                return
            self._transition(report, BlockState.CHECK_PASSED)

        try:
            vcs.add(block.file_path)
        except GitError as error:
            report.did_apply = False
            self._roll_back(report, applied, f"Failed to stage file {block.file_path}: {error}")
            return
        self._transition(report, BlockState.STAGED)
        self._transition(report, BlockState.DONE)

    def _run_checks(self, file_path: str) -> CheckFileOutput:
        try:
            return check_file(self.workspace, file_path, self.settings.check_commands)
        except (OSError, WorkspaceError) as error:
            return CheckFileOutput(all_passed=False, output=f"failed to check file {file_path}: {error}\n")

    def _roll_back(self, report: ApplyEditBlockReport, applied: _Applied, message: str) -> None:
        """Put the pre-edit content back; a failed restore still ends the block."""
        file_path = report.original_edit_block.file_path
        try:
            self._restore(file_path, applied)
        except (WorkspaceError, OSError) as error:
            report.error = f"{message}\nFailure when checking/staging/restoring file: {error}"
            self._transition(report, BlockState.DONE)
            return
        report.error = message
        self._transition(report, BlockState.RESTORED)

    def _restore(self, file_path: str, applied: _Applied) -> None:
        if not applied.existed:
            if self.workspace.exists(file_path):
                self.workspace.remove(file_path)
            return
        self.workspace.write_text(file_path, applied.before)

    # ------------------------------------------------------------ followups
    def notify(self, block: EditBlock) -> None:
        if self.lsp is None or block.edit_type == EditType.DELETE:
            return
        try:
            self.lsp.notify_file_changed(block.file_path, block.edit_type)
        except (LSPError, OSError) as error:
            LOGGER.warning("Failed to notify LSP server of file change for %s: %s", block.file_path, error)


def apply_edit_blocks(
    blocks: Sequence[EditBlock],
    *,
    workspace: Workspace,
    settings: ApplySettings | None = None,
    vcs: GitRepository | None = None,
    lsp: LSPClient | None = None,
    symbol_lookup: SymbolLookup | None = None,
) -> List[ApplyEditBlockReport]:
    """Apply ``blocks`` in order and return one report per block, in the same order.

    When ``settings.check_edits`` is set a git repository is required; it is
    discovered from the workspace root when ``vcs`` is not given.
    """
    settings = settings or ApplySettings()
    if settings.check_edits and vcs is None:
        vcs = GitRepository.discover(workspace.root)

    runner = _BlockRunner(workspace, settings, vcs, lsp, symbol_lookup)
    pending: List[EditBlock] = list(blocks)
    reports: List[ApplyEditBlockReport] = []

    for index in range(len(pending)):
        block = pending[index]
        report = runner.run(block)
        reports.append(report)
        if not report.did_apply:
            continue
        edits = line_edits_from_diff(report.final_diff)
        pending[index + 1 :] = shift_visible_ranges(pending[index + 1 :], block.file_path, edits)
        runner.notify(block)

    return reports


__all__ = [
    "ApplyError",
    "apply_append",
    "apply_create",
    "apply_delete",
    "apply_edit_blocks",
    "apply_update",
]
