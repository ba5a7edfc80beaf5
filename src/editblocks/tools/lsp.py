"""Language-server collaborator used for autofixes and save notifications."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ..schema import AutofixResult, EditType


class LSPError(RuntimeError):
    """Raised by language-server clients when a request fails."""


class LSPClient(Protocol):
    """Subset of language-server behaviour the orchestrator relies on."""

    def autofix(self, document_uri: str) -> AutofixResult:
        """Apply the server's preferred code actions to ``document_uri``."""

    def notify_file_changed(self, file_path: str, edit_type: EditType) -> None:
        """Tell the server a file was written (open, change, save, close)."""


def document_uri(root: Path, file_path: str) -> str:
    return (root / file_path).resolve().as_uri()


__all__ = ["LSPClient", "LSPError", "document_uri"]
