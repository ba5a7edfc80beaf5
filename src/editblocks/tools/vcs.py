"""Minimal git helpers
The helpers below provide just enough structure to stage
individual paths while edit blocks are applied and verified.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Sequence


class GitError(RuntimeError):
    """Raised when a git command fails or the repository cannot be used."""


class GitRepository:
    """Lightweight wrapper around ``git`` commands."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()
        if not (self.root / ".git").exists():
            raise GitError(f"Not a git repository: {self.root}")

    @classmethod
    def discover(cls, start: Path | str | None = None) -> "GitRepository":
        """Locate the nearest git repository starting from ``start``."""

        path = Path(start or Path.cwd()).resolve()
        for candidate in (path, *path.parents):
            if (candidate / ".git").exists():
                return cls(candidate)
        raise GitError(f"Unable to locate a git repository from {path}")

    @classmethod
    def initialise(cls, root: Path | str, *, commit: bool = True) -> "GitRepository":
        """Initialise a git repository at ``root``, optionally committing its files."""

        path = Path(root).resolve()
        path.mkdir(parents=True, exist_ok=True)
        repo = cls.__new__(cls)
        repo.root = path
        repo._run_git(["init"])

        def _ensure_config(key: str, value: str) -> None:
            probe = repo._run_git(["config", "--get", key], check=False)
            if probe.returncode != 0 or not probe.stdout.strip():
                repo._run_git(["config", key, value])

        _ensure_config("user.email", "editblocks@example.com")
        _ensure_config("user.name", "Edit Blocks")

        if commit:
            repo._run_git(["add", "--all"])
            repo._run_git(["commit", "--allow-empty", "-m", "Initial commit"])
        return repo

    # ------------------------------------------------------------------ git IO
    def _run_git(self, args: Sequence[str], *, check: bool = True) -> subprocess.CompletedProcess[str]:
        command = ["git", *args]
        process = subprocess.run(
            command,
            cwd=self.root,
            capture_output=True,
            text=False,
            check=False,
        )
        stdout = process.stdout.decode("utf-8", errors="replace") if process.stdout else ""
        stderr = process.stderr.decode("utf-8", errors="replace") if process.stderr else ""
        result = subprocess.CompletedProcess(process.args, process.returncode, stdout, stderr)
        if check and result.returncode != 0:
            message = result.stderr.strip() or result.stdout.strip() or "unknown git error"
            raise GitError(f"git {' '.join(args)} failed: {message}")
        return result

    # ------------------------------------------------------------- repo status
    def staged_paths(self) -> List[Path]:
        """Return the paths with changes staged in the index."""

        result = self._run_git(["diff", "--cached", "--name-only", "-z"], check=True)
        return [Path(entry) for entry in result.stdout.split("\0") if entry]

    # ------------------------------------------------------------ index updates
    def add(self, *paths: str) -> None:
        """Stage ``paths``, including deletions."""

        self._run_git(["add", "--all", "--", *paths], check=True)


__all__ = ["GitError", "GitRepository"]
