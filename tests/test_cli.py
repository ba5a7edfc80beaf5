from __future__ import annotations

import json
from pathlib import Path

import yaml
from typer.testing import CliRunner

from editblocks.cli import app

runner = CliRunner()


def _write_blocks(path: Path, blocks: list[dict]) -> Path:
    path.write_text(json.dumps(blocks), encoding="utf-8")
    return path


def test_apply_reports_success(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / "notes.txt").write_text("line1\nline2\n", encoding="utf-8")
    blocks = _write_blocks(
        tmp_path / "blocks.json",
        [{"file_path": "notes.txt", "old_lines": ["line2"], "new_lines": ["LINE2"], "sequence_number": 1}],
    )

    result = runner.invoke(app, ["apply", str(blocks), "--repo", str(repo)])

    assert result.exit_code == 0, result.output
    assert "- [1] update notes.txt: applied" in result.output
    assert (repo / "notes.txt").read_text(encoding="utf-8") == "line1\nLINE2\n"


def test_apply_exits_non_zero_on_failure_and_prints_json(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    blocks = _write_blocks(
        tmp_path / "blocks.json",
        [{"file_path": "absent.txt", "edit_type": "delete"}],
    )

    result = runner.invoke(app, ["apply", str(blocks), "--repo", str(repo), "--json"])

    assert result.exit_code == 1
    [report] = json.loads(result.output)
    assert report["did_apply"] is False
    assert report["error"] == "File does not exist: absent.txt"
    assert report["state"] == "apply_failed"


def test_apply_reads_yaml_blocks_and_settings(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    repo.mkdir()
    (repo / "editblocks.yaml").write_text(
        yaml.safe_dump({"edits": {"autofix_commands": ["printf 'tail' >> {file}"]}}),
        encoding="utf-8",
    )
    blocks = tmp_path / "blocks.yaml"
    blocks.write_text(
        yaml.safe_dump({"edit_blocks": [{"file_path": "out.txt", "edit_type": "create", "new_lines": ["head", ""]}]}),
        encoding="utf-8",
    )

    result = runner.invoke(app, ["apply", str(blocks), "--repo", str(repo)])

    assert result.exit_code == 0, result.output
    assert (repo / "out.txt").read_text(encoding="utf-8") == "headtail"


def test_apply_rejects_invalid_blocks(tmp_path: Path) -> None:
    blocks = _write_blocks(tmp_path / "blocks.json", [{"file_path": "a.txt", "edit_type": "rename"}])

    result = runner.invoke(app, ["apply", str(blocks), "--repo", str(tmp_path)])

    assert result.exit_code == 1
    assert "Invalid edit block" in result.output


def test_checked_apply_outside_git_fails(tmp_path: Path) -> None:
    repo = tmp_path / "plain"
    repo.mkdir()
    blocks = _write_blocks(tmp_path / "blocks.json", [{"file_path": "a.txt", "edit_type": "create", "new_lines": ["x"]}])

    result = runner.invoke(app, ["apply", str(blocks), "--repo", str(repo), "--check"])

    assert result.exit_code == 1
    assert "Git repository required" in result.output
    assert not (repo / "a.txt").exists()


def test_validate_command_lists_rejections(tmp_path: Path) -> None:
    blocks = _write_blocks(
        tmp_path / "blocks.json",
        [
            {
                "file_path": "a.py",
                "old_lines": ["return 1"],
                "new_lines": ["return 2"],
                "sequence_number": 4,
                "visible_code_blocks": [{"file_path": "a.py", "code": "x = 0"}],
            },
            {"file_path": "b.py", "edit_type": "create", "new_lines": ["y = 1"]},
        ],
    )

    result = runner.invoke(app, ["validate", str(blocks)])

    assert result.exit_code == 1
    assert "1 valid, 1 rejected." in result.output
    assert "- [4] a.py" in result.output
