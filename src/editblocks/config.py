"""Settings for matching and applying edit blocks, loaded from YAML."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, List

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ConfigError(ValueError):
    """Raised when the settings file cannot be interpreted."""


class MatchOptions(BaseModel):
    """Tunable constants used by the fuzzy matcher.

    Passed explicitly through every matching call so independent callers
    never share mutable state.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    # Per-line similarity required for an anchor or for a line to count as aligned.
    similarity_threshold: float = 0.85
    # Per-line similarity above which a line counts as a high-confidence match.
    high_score_threshold: float = 0.925
    # A candidate is acceptable only when its high-confidence ratio exceeds this.
    min_high_score_ratio: float = 0.95
    exact_trimmed_score: float = 0.999
    # Upper bound for the per-side margin around a visible range.
    visibility_margin: int = 5
    expand_rate: int = 1
    max_diagnostic_lines: int = 5


DEFAULT_MATCH_OPTIONS = MatchOptions()


class CommandConfig(BaseModel):
    """Shell command template; ``{file}`` expands to the edited path."""

    model_config = ConfigDict(extra="forbid")

    command: str
    working_dir: str = ""

    def render(self, file_path: str) -> str:
        return self.command.replace("{file}", file_path)


class ApplySettings(BaseModel):
    """Everything the orchestrator needs beyond the edit blocks themselves."""

    model_config = ConfigDict(extra="forbid")

    check_edits: bool = False
    check_commands: List[CommandConfig] = Field(default_factory=list)
    autofix_commands: List[CommandConfig] = Field(default_factory=list)
    matching: MatchOptions = Field(default_factory=MatchOptions)


def _normalise_commands(raw: Any, key: str) -> List[dict[str, str]]:
    """Expand string or mapping entries into command payloads."""
    if raw is None:
        return []
    if isinstance(raw, (str, Mapping)):
        raw = [raw]
    commands: List[dict[str, str]] = []
    for entry in raw:
        if isinstance(entry, str):
            if entry.strip():
                commands.append({"command": entry.strip()})
            continue
        if isinstance(entry, Mapping):
            command = entry.get("command") or entry.get("cmd")
            if isinstance(command, (list, tuple)):
                command = " ".join(str(part) for part in command)
            if not isinstance(command, str) or not command.strip():
                continue
            payload = {"command": command.strip()}
            working_dir = entry.get("working_dir")
            if isinstance(working_dir, str) and working_dir.strip():
                payload["working_dir"] = working_dir.strip()
            commands.append(payload)
            continue
        raise ConfigError(f"Unsupported {key} entry: {entry!r}")
    return commands


def settings_from_mapping(config: Mapping[str, Any]) -> ApplySettings:
    """Build :class:`ApplySettings` from the ``edits`` section of a config mapping."""
    section = config.get("edits") or {}
    if not isinstance(section, Mapping):
        raise ConfigError("The 'edits' section must be a mapping.")

    payload: dict[str, Any] = {
        "check_edits": bool(section.get("check_edits", False)),
        "check_commands": _normalise_commands(section.get("check_commands"), "check_commands"),
        "autofix_commands": _normalise_commands(section.get("autofix_commands"), "autofix_commands"),
    }
    matching = section.get("matching")
    if matching is not None:
        if not isinstance(matching, Mapping):
            raise ConfigError("The 'edits.matching' section must be a mapping.")
        payload["matching"] = dict(matching)

    try:
        return ApplySettings.model_validate(payload)
    except ValidationError as error:
        raise ConfigError(f"Invalid edit settings: {error}") from error


def load_settings(config_path: Path | str | None) -> ApplySettings:
    """Read settings from ``config_path``; a missing file yields defaults."""
    if config_path is None:
        return ApplySettings()
    path = Path(config_path)
    if not path.exists():
        return ApplySettings()
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as error:
        raise ConfigError(f"Failed to parse config {path}: {error}") from error
    if not isinstance(data, Mapping):
        raise ConfigError("Configuration must be a mapping at the top level.")
    return settings_from_mapping(data)


__all__ = [
    "ApplySettings",
    "CommandConfig",
    "ConfigError",
    "DEFAULT_MATCH_OPTIONS",
    "MatchOptions",
    "load_settings",
    "settings_from_mapping",
]
