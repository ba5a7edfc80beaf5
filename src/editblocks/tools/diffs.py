"""Unified diffs between two in-memory file versions."""

from __future__ import annotations

import difflib
from typing import List

_NO_NEWLINE = "\\ No newline at end of file\n"


def _side(path: str, prefix: str) -> str:
    return f"{prefix}/{path}" if path else "/dev/null"


def unified_diff(path_a: str, content_a: str, path_b: str, content_b: str, *, context: int = 3) -> str:
    """Return a git-style unified diff from ``content_a`` to ``content_b``.

    An empty path stands for ``/dev/null`` (file creation or deletion).
    Returns an empty string when the contents are identical.
    """
    if content_a == content_b:
        return ""

    old_lines = content_a.splitlines(keepends=True)
    new_lines = content_b.splitlines(keepends=True)

    output: List[str] = []
    for line in difflib.unified_diff(
        old_lines,
        new_lines,
        fromfile=_side(path_a, "a"),
        tofile=_side(path_b, "b"),
        n=context,
    ):
        if line.startswith(("---", "+++")) and not line.endswith("\n"):
            line += "\n"
        if not line.endswith("\n"):
            output.append(line + "\n")
            output.append(_NO_NEWLINE)
            continue
        output.append(line)
    return "".join(output)


__all__ = ["unified_diff"]
