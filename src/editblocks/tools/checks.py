"""Post-edit verification of a single file.

Configured check commands run through the workspace shell with ``{file}``
substituted.  A small set of built-in validity checks then guards against
edits that leave a file syntactically broken, for the file types we can
parse without extra tooling.
"""

from __future__ import annotations

import ast
import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Callable, Dict, Tuple

import yaml

from ..config import CommandConfig
from .workspace import Workspace, WorkspaceError

LOGGER = logging.getLogger(__name__)

SYNTAX_ERROR = "Syntax error(s)"
FILE_VALIDITY_CHECK = "file_validity"


@dataclass(slots=True)
class CheckFileOutput:
    """Combined outcome of every check run against one file."""

    check_passed: Dict[str, bool] = field(default_factory=dict)
    all_passed: bool = True
    output: str = ""


def _check_python(source: str) -> Tuple[bool, str]:
    try:
        ast.parse(source)
    except SyntaxError as error:
        location = f"line {error.lineno}" if error.lineno else "unknown line"
        return False, f"{SYNTAX_ERROR}: {error.msg} ({location})"
    except ValueError as error:
        # NUL bytes and undecodable bytes surface as ValueError.
        return False, f"{SYNTAX_ERROR}: {error}"
    return True, ""


def _check_json(source: str) -> Tuple[bool, str]:
    try:
        json.loads(source)
    except json.JSONDecodeError as error:
        return False, f"{SYNTAX_ERROR}: {error.msg} (line {error.lineno})"
    return True, ""


def _check_yaml(source: str) -> Tuple[bool, str]:
    try:
        list(yaml.safe_load_all(source))
    except yaml.YAMLError as error:
        return False, f"{SYNTAX_ERROR}: {error}"
    return True, ""


_VALIDATORS: Dict[str, Callable[[str], Tuple[bool, str]]] = {
    ".py": _check_python,
    ".pyi": _check_python,
    ".json": _check_json,
    ".yaml": _check_yaml,
    ".yml": _check_yaml,
}


def check_file_validity(workspace: Workspace, file_path: str) -> Tuple[bool, str]:
    """Return ``(valid, message)`` for the built-in checks of ``file_path``.

    Files whose type has no built-in validator pass with a warning message.
    """
    suffix = PurePosixPath(file_path).suffix.lower()
    validator = _VALIDATORS.get(suffix)
    if validator is None:
        return True, f"Warning: no built-in validity check for {file_path}"
    source = workspace.read_text(file_path)
    if not source.strip():
        return False, "File is blank"
    return validator(source)


def check_file(workspace: Workspace, file_path: str, check_commands: Sequence[CommandConfig]) -> CheckFileOutput:
    """Run ``check_commands`` and the built-in validity checks for ``file_path``."""
    result = CheckFileOutput()
    parts: list[str] = []

    for command in check_commands:
        shell_command = command.render(file_path)
        try:
            output = workspace.run_command(shell_command, working_dir=command.working_dir)
        except (OSError, WorkspaceError) as error:
            parts.append(f"failed to run check command '{command.command}': {error}\n")
            result.all_passed = False
            result.check_passed[command.command] = False
            continue

        parts.append(f"check command: {command.command}\n")
        if output.succeeded:
            parts.append("check passed: true\n")
            result.check_passed[command.command] = True
        else:
            LOGGER.debug("Check command failed for %s: %s", file_path, shell_command)
            parts.append("check passed: false\n")
            parts.append(f"{output.stdout}\n{output.stderr}")
            result.all_passed = False
            result.check_passed[command.command] = False

    valid, message = check_file_validity(workspace, file_path)
    if not valid:
        parts.append(f"errors found when checking file validity: {message}\n")
        result.all_passed = False
    result.check_passed[FILE_VALIDITY_CHECK] = valid

    result.output = "".join(parts)
    return result


__all__ = [
    "CheckFileOutput",
    "FILE_VALIDITY_CHECK",
    "SYNTAX_ERROR",
    "check_file",
    "check_file_validity",
]
