"""Apply fuzzy-matched edit blocks to files, verifying and staging each one."""

from .apply import ApplyError, apply_edit_blocks
from .config import ApplySettings, ConfigError, MatchOptions, load_settings
from .schema import ApplyEditBlockReport, BlockState, CodeBlock, EditBlock, EditType, FileRange
from .validate import validate_and_apply_edit_blocks, validate_edit_blocks

__version__ = "0.1.0"

__all__ = [
    "ApplyEditBlockReport",
    "ApplyError",
    "ApplySettings",
    "BlockState",
    "CodeBlock",
    "ConfigError",
    "EditBlock",
    "EditType",
    "FileRange",
    "MatchOptions",
    "apply_edit_blocks",
    "load_settings",
    "validate_and_apply_edit_blocks",
    "validate_edit_blocks",
]
