from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from editblocks.config import ApplySettings, CommandConfig, ConfigError, load_settings, settings_from_mapping


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "absent.yaml")

    assert settings == ApplySettings()
    assert settings.matching.min_high_score_ratio == 0.95
    assert load_settings(None) == ApplySettings()


def test_commands_accept_strings_and_mappings() -> None:
    settings = settings_from_mapping(
        {
            "edits": {
                "check_edits": True,
                "check_commands": ["ruff check {file}", {"cmd": ["mypy", "{file}"], "working_dir": "src"}],
                "autofix_commands": "ruff format {file}",
            }
        }
    )

    assert settings.check_edits
    assert settings.check_commands == [
        CommandConfig(command="ruff check {file}"),
        CommandConfig(command="mypy {file}", working_dir="src"),
    ]
    assert settings.autofix_commands == [CommandConfig(command="ruff format {file}")]
    assert settings.check_commands[1].render("pkg/a.py") == "mypy pkg/a.py"


def test_matching_overrides_are_validated(tmp_path: Path) -> None:
    path = tmp_path / "editblocks.yaml"
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump({"edits": {"matching": {"similarity_threshold": 0.8, "visibility_margin": 2}}}, handle)

    settings = load_settings(path)

    assert settings.matching.similarity_threshold == 0.8
    assert settings.matching.visibility_margin == 2
    assert settings.matching.high_score_threshold == 0.925


@pytest.mark.parametrize(
    "payload",
    [
        {"edits": ["not", "a", "mapping"]},
        {"edits": {"check_commands": [42]}},
        {"edits": {"matching": {"unknown_knob": 1}}},
        {"edits": {"matching": "strict"}},
    ],
)
def test_invalid_sections_raise(payload: dict) -> None:
    with pytest.raises(ConfigError):
        settings_from_mapping(payload)


def test_non_mapping_document_raises(tmp_path: Path) -> None:
    path = tmp_path / "editblocks.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(path)


def test_unparsable_yaml_raises(tmp_path: Path) -> None:
    path = tmp_path / "editblocks.yaml"
    path.write_text("edits: [\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(path)
