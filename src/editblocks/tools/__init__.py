"""Collaborators the edit block orchestrator drives: files, git, checks, autofix."""

from .autofix import autofix_file, run_autofix_commands
from .checks import SYNTAX_ERROR, CheckFileOutput, check_file, check_file_validity
from .diffs import unified_diff
from .lsp import LSPClient, LSPError
from .symbols import LibcstSymbolLookup, SymbolLookup, SymbolLookupError, SymbolSpan
from .vcs import GitError, GitRepository
from .workspace import CommandOutput, Workspace, WorkspaceError

__all__ = [
    "CheckFileOutput",
    "CommandOutput",
    "GitError",
    "GitRepository",
    "LSPClient",
    "LSPError",
    "LibcstSymbolLookup",
    "SYNTAX_ERROR",
    "SymbolLookup",
    "SymbolLookupError",
    "SymbolSpan",
    "Workspace",
    "WorkspaceError",
    "autofix_file",
    "check_file",
    "check_file_validity",
    "run_autofix_commands",
    "unified_diff",
]
