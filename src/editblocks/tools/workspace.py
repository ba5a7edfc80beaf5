"""Working-directory abstraction: file access and shell commands under a root."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path


class WorkspaceError(RuntimeError):
    """Raised when a path or command falls outside what the workspace allows."""


@dataclass(slots=True)
class CommandOutput:
    """Result of running a shell command inside the workspace."""

    command: str
    exit_status: int
    stdout: str
    stderr: str

    @property
    def succeeded(self) -> bool:
        return self.exit_status == 0


class Workspace:
    """Files and commands relative to a single working directory.

    Content is read and written as UTF-8 bytes so line endings survive a
    read/modify/write cycle untouched.  Bytes that are not valid UTF-8 are
    carried as surrogate escapes and written back unchanged.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()

    def path(self, relative: str | Path) -> Path:
        """Resolve ``relative`` against the root, rejecting escapes."""
        candidate = Path(relative)
        if candidate.is_absolute():
            raise WorkspaceError(f"Absolute paths are not permitted: {candidate}")
        parts = list(candidate.parts)
        if any(part == ".." for part in parts):
            raise WorkspaceError(f"Path escaping detected: {candidate}")
        if parts and parts[0] == ".git":
            raise WorkspaceError("Edits may not target the .git directory.")
        return self.root / candidate

    def exists(self, relative: str | Path) -> bool:
        return self.path(relative).exists()

    def read_text(self, relative: str | Path) -> str:
        return self.path(relative).read_bytes().decode("utf-8", errors="surrogateescape")

    def write_text(self, relative: str | Path, content: str, *, create_parents: bool = False) -> None:
        target = self.path(relative)
        if create_parents:
            target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content.encode("utf-8", errors="surrogateescape"))

    def remove(self, relative: str | Path) -> None:
        self.path(relative).unlink()

    def run_command(self, command: str, *, working_dir: str = "") -> CommandOutput:
        """Run ``command`` through ``sh -c`` from ``working_dir`` (root-relative)."""
        cwd = self.path(working_dir) if working_dir else self.root
        process = subprocess.run(  # noqa: S603  # command is sourced from repository config
            ["/usr/bin/env", "sh", "-c", command],
            cwd=cwd,
            capture_output=True,
            text=False,
            check=False,
        )
        stdout = process.stdout.decode("utf-8", errors="replace") if process.stdout else ""
        stderr = process.stderr.decode("utf-8", errors="replace") if process.stderr else ""
        return CommandOutput(command=command, exit_status=process.returncode, stdout=stdout, stderr=stderr)


__all__ = ["CommandOutput", "Workspace", "WorkspaceError"]
