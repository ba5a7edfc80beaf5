"""CLI commands for applying and validating edit blocks."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

import typer
import yaml
from pydantic import ValidationError

from .apply import apply_edit_blocks
from .config import ApplySettings, ConfigError, load_settings
from .schema import ApplyEditBlockReport, EditBlock
from .tools.symbols import LibcstSymbolLookup
from .tools.vcs import GitError
from .tools.workspace import Workspace
from .validate import validate_and_apply_edit_blocks, validate_edit_blocks

APP_HELP = "Apply fuzzy-matched edit blocks to a repository."
DEFAULT_CONFIG_NAME = "editblocks.yaml"

app = typer.Typer(help=APP_HELP)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def load_edit_blocks(blocks_path: Path) -> List[EditBlock]:
    """Load a JSON or YAML list of edit blocks from disk."""
    if not blocks_path.exists():
        raise typer.BadParameter(f"Edit block file not found: {blocks_path}")

    try:
        with blocks_path.open("r", encoding="utf-8") as handle:
            data: Any = yaml.safe_load(handle) or []
    except yaml.YAMLError as error:
        typer.echo(f"Failed to parse edit blocks: {error}")
        raise typer.Exit(code=1) from error

    if isinstance(data, dict):
        data = data.get("edit_blocks", [])
    if not isinstance(data, list):
        typer.echo("Edit blocks must be a list (or a mapping with an 'edit_blocks' list).")
        raise typer.Exit(code=1)

    try:
        return [EditBlock.model_validate(entry) for entry in data]
    except ValidationError as error:
        typer.echo(f"Invalid edit block: {error}")
        raise typer.Exit(code=1) from error


def _load_settings(repo_root: Path, config: Optional[str], check: Optional[bool]) -> ApplySettings:
    config_path = Path(config) if config else repo_root / DEFAULT_CONFIG_NAME
    try:
        settings = load_settings(config_path)
    except ConfigError as error:
        typer.echo(f"Failed to load settings: {error}")
        raise typer.Exit(code=1) from error
    if check is not None:
        settings = settings.model_copy(update={"check_edits": check})
    return settings


def _echo_reports(reports: List[ApplyEditBlockReport], as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps([report.model_dump(mode="json") for report in reports], indent=2))
        return
    for report in reports:
        block = report.original_edit_block
        status = "applied" if report.did_apply and not report.error else "failed"
        typer.echo(f"- [{block.sequence_number}] {block.edit_type.value} {block.file_path}: {status}")
        if report.error:
            for line in report.error.strip().splitlines():
                typer.echo(f"    {line}")
        if report.autofix_error.strip():
            typer.echo(f"    autofix: {report.autofix_error.strip().splitlines()[0]}")


@app.command()
def apply(
    blocks: Path = typer.Argument(..., help="JSON or YAML file holding the edit blocks."),
    repo: Path = typer.Option(Path("."), "--repo", "-r", help="Repository the edits apply to."),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Settings file (defaults to {DEFAULT_CONFIG_NAME} in the repository).",
    ),
    check: Optional[bool] = typer.Option(
        None,
        "--check/--no-check",
        help="Verify each edit, staging it on success and restoring it on failure.",
    ),
    validate_first: bool = typer.Option(
        False,
        "--validate/--no-validate",
        help="Reject blocks whose old lines are absent from their visible code blocks.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the full reports as JSON."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Apply edit blocks in order and report the outcome of each."""
    _configure_logging(verbose)
    repo_root = repo.resolve()
    edit_blocks = load_edit_blocks(blocks)
    settings = _load_settings(repo_root, config, check)
    workspace = Workspace(repo_root)

    runner = validate_and_apply_edit_blocks if validate_first else apply_edit_blocks
    try:
        reports = runner(
            edit_blocks,
            workspace=workspace,
            settings=settings,
            symbol_lookup=LibcstSymbolLookup(),
        )
    except GitError as error:
        typer.echo(f"Git repository required for checked edits: {error}")
        raise typer.Exit(code=1) from error

    _echo_reports(reports, as_json)
    if any(not report.did_apply or report.error for report in reports):
        raise typer.Exit(code=1)


@app.command()
def validate(
    blocks: Path = typer.Argument(..., help="JSON or YAML file holding the edit blocks."),
    as_json: bool = typer.Option(False, "--json", help="Print the rejection reports as JSON."),
) -> None:
    """Check edit blocks against their visible code blocks without touching any file."""
    edit_blocks = load_edit_blocks(blocks)
    valid, invalid = validate_edit_blocks(edit_blocks)
    if as_json:
        typer.echo(json.dumps([report.model_dump(mode="json") for report in invalid], indent=2))
    else:
        typer.echo(f"{len(valid)} valid, {len(invalid)} rejected.")
        for report in invalid:
            block = report.original_edit_block
            typer.echo(f"- [{block.sequence_number}] {block.file_path}")
    if invalid:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
