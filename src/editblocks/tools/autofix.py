"""Best-effort automatic fixes run after an edit lands on disk."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Optional, Tuple

from ..config import CommandConfig
from ..schema import AutofixResult
from .lsp import LSPClient, LSPError, document_uri
from .workspace import Workspace, WorkspaceError

LOGGER = logging.getLogger(__name__)


def run_autofix_commands(workspace: Workspace, file_path: str, commands: Sequence[CommandConfig]) -> str:
    """Run shell autofixers for ``file_path``; return the output of failures."""
    parts: list[str] = []
    for command in commands:
        shell_command = command.render(file_path)
        try:
            output = workspace.run_command(shell_command, working_dir=command.working_dir)
        except (OSError, WorkspaceError) as error:
            parts.append(f"failed to run autofix command '{command.command}': {error}\n")
            continue
        if not output.succeeded:
            LOGGER.warning("Autofix command failed for %s: %s", file_path, shell_command)
            parts.append(f"autofix command: {command.command}\n")
            parts.append(f"{output.stdout}\n{output.stderr}")
    return "".join(parts)


def autofix_file(
    workspace: Workspace,
    file_path: str,
    commands: Sequence[CommandConfig],
    lsp: LSPClient | None = None,
) -> Tuple[Optional[AutofixResult], str]:
    """Run command and language-server autofixes.

    Returns the language-server result (``skipped`` when no client is
    configured) and the accumulated error text.  Nothing here raises for an
    autofix failure.
    """
    error = run_autofix_commands(workspace, file_path, commands)
    if lsp is None:
        return AutofixResult(skipped=True), error

    try:
        result = lsp.autofix(document_uri(workspace.root, file_path))
    except (LSPError, OSError) as exc:
        LOGGER.warning("LSP autofix failed for %s: %s", file_path, exc)
        return None, error + f"\nLSP autofix error: {exc}"
    return result, error


__all__ = ["autofix_file", "run_autofix_commands"]
