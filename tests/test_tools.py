from __future__ import annotations

from pathlib import Path

import pytest

from editblocks.tools.diffs import unified_diff
from editblocks.tools.vcs import GitError, GitRepository
from editblocks.tools.workspace import Workspace, WorkspaceError


def test_workspace_rejects_escaping_paths(tmp_path: Path) -> None:
    workspace = Workspace(tmp_path)

    with pytest.raises(WorkspaceError):
        workspace.path("/etc/passwd")
    with pytest.raises(WorkspaceError):
        workspace.path("a/../../b")
    with pytest.raises(WorkspaceError):
        workspace.path(".git/config")
    assert workspace.path("a/b.txt") == tmp_path.resolve() / "a" / "b.txt"


def test_workspace_round_trips_bytes(tmp_path: Path) -> None:
    workspace = Workspace(tmp_path)

    workspace.write_text("dir/crlf.txt", "a\r\nb\r\n", create_parents=True)

    assert (tmp_path / "dir" / "crlf.txt").read_bytes() == b"a\r\nb\r\n"
    assert workspace.read_text("dir/crlf.txt") == "a\r\nb\r\n"
    workspace.remove("dir/crlf.txt")
    assert not workspace.exists("dir/crlf.txt")


def test_workspace_keeps_undecodable_bytes(tmp_path: Path) -> None:
    (tmp_path / "latin.txt").write_bytes(b"caf\xe9\n")
    workspace = Workspace(tmp_path)

    text = workspace.read_text("latin.txt")
    workspace.write_text("latin.txt", text + "more\n")

    assert (tmp_path / "latin.txt").read_bytes() == b"caf\xe9\nmore\n"


def test_workspace_runs_shell_commands(tmp_path: Path) -> None:
    output = Workspace(tmp_path).run_command("echo out; echo err >&2; exit 4")

    assert output.exit_status == 4
    assert not output.succeeded
    assert output.stdout == "out\n"
    assert output.stderr == "err\n"


def test_unified_diff_shapes() -> None:
    assert unified_diff("a.txt", "same\n", "a.txt", "same\n") == ""

    created = unified_diff("", "", "new.txt", "one\ntwo\n")
    assert created == "--- /dev/null\n+++ b/new.txt\n@@ -0,0 +1,2 @@\n+one\n+two\n"

    changed = unified_diff("a.txt", "one\ntwo", "a.txt", "one\nthree")
    assert changed == (
        "--- a/a.txt\n+++ b/a.txt\n@@ -1,2 +1,2 @@\n one\n-two\n\\ No newline at end of file\n"
        "+three\n\\ No newline at end of file\n"
    )


def test_git_repository_requires_git_dir(tmp_path: Path) -> None:
    with pytest.raises(GitError):
        GitRepository(tmp_path)


def test_git_repository_stages_paths(git_workspace) -> None:
    repo = git_workspace.repo
    root = git_workspace.root

    (root / "notes.txt").write_text("changed\n", encoding="utf-8")
    (root / "fresh.txt").write_text("hello\n", encoding="utf-8")
    assert repo.staged_paths() == []

    repo.add("fresh.txt")
    assert [path.as_posix() for path in repo.staged_paths()] == ["fresh.txt"]

    (root / "fresh.txt").unlink()
    repo.add("fresh.txt", "notes.txt")
    assert [path.as_posix() for path in repo.staged_paths()] == ["notes.txt"]


def test_git_repository_discover(git_workspace) -> None:
    nested = git_workspace.root / "pkg"

    assert GitRepository.discover(nested).root == git_workspace.root.resolve()
