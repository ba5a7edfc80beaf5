from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from editblocks.tools.vcs import GitRepository  # noqa: E402
from editblocks.tools.workspace import Workspace  # noqa: E402


@dataclass(slots=True)
class GitWorkspace:
    """Fixture payload: a committed git repository plus its workspace view."""

    root: Path
    repo: GitRepository
    workspace: Workspace

    def read(self, relative: str) -> str:
        return (self.root / relative).read_bytes().decode("utf-8")


def _write_files(root: Path, files: Mapping[str, str]) -> None:
    for relative, content in files.items():
        target = root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content.encode("utf-8"))


@pytest.fixture()
def git_workspace(tmp_path: Path) -> GitWorkspace:
    """Create a small committed git repository used by integration tests."""

    root = tmp_path / "repo"
    root.mkdir()
    _write_files(
        root,
        {
            "notes.txt": "line1\nline2\nline3\nline4\n",
            "pkg/calc.py": "def add(left, right):\n    return left + right\n",
            "data/settings.json": '{"debug": false}\n',
        },
    )
    repo = GitRepository.initialise(root)
    return GitWorkspace(root=root, repo=repo, workspace=Workspace(root))
