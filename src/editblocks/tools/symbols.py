"""Resolve symbol names to their current line spans using libcst metadata."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol

import libcst as cst
from libcst import metadata


class SymbolLookupError(RuntimeError):
    """Raised when a symbol cannot be resolved in a file."""


@dataclass(frozen=True)
class SymbolSpan:
    """1-based inclusive line span of a symbol definition."""

    name: str
    qualified_name: str
    kind: str
    start_line: int
    end_line: int


class SymbolLookup(Protocol):
    """Callable returning the current definitions of ``symbol`` in a file."""

    def __call__(self, absolute_path: str, symbol: str) -> List[SymbolSpan]: ...


class _SymbolCollector(cst.CSTVisitor):
    """Collect class and function definitions along with their line spans."""

    METADATA_DEPENDENCIES = (
        metadata.PositionProvider,
        metadata.QualifiedNameProvider,
    )

    def __init__(self) -> None:
        self._class_stack: List[str] = []
        self.spans: List[SymbolSpan] = []

    def visit_ClassDef(self, node: cst.ClassDef) -> None:
        self._record(node, node.name.value, "class")
        self._class_stack.append(node.name.value)

    def leave_ClassDef(self, original_node: cst.ClassDef) -> None:
        if self._class_stack:
            self._class_stack.pop()

    def visit_FunctionDef(self, node: cst.FunctionDef) -> None:
        kind = "method" if self._class_stack else "function"
        self._record(node, node.name.value, kind)

    def _record(self, node: cst.CSTNode, name: str, kind: str) -> None:
        display_name = ".".join([*self._class_stack, name])
        code_range = self.get_metadata(metadata.PositionProvider, node)
        self.spans.append(
            SymbolSpan(
                name=display_name,
                qualified_name=self._qualified_name(node) or display_name,
                kind=kind,
                start_line=code_range.start.line,
                end_line=code_range.end.line,
            )
        )

    def _qualified_name(self, node: cst.CSTNode) -> Optional[str]:
        qualified_names = self.get_metadata(metadata.QualifiedNameProvider, node, default=None)
        if not qualified_names:
            return None
        for qualified in qualified_names:
            if qualified.source is metadata.QualifiedNameSource.LOCAL:
                return qualified.name
        return next(iter(qualified_names)).name


def collect_symbols(source: str) -> List[SymbolSpan]:
    """Return every class/function definition found in ``source``."""
    try:
        module = cst.parse_module(source)
    except cst.ParserSyntaxError as error:
        raise SymbolLookupError(f"Unable to parse source: {error}") from error
    wrapper = metadata.MetadataWrapper(module)
    collector = _SymbolCollector()
    wrapper.visit(collector)
    return collector.spans


class LibcstSymbolLookup:
    """Symbol lookup for Python sources.

    A symbol matches on its bare name, its dotted display name
    (``Class.method``) or as a suffix of its qualified name.
    """

    def __call__(self, absolute_path: str, symbol: str) -> List[SymbolSpan]:
        path = Path(absolute_path)
        if path.suffix not in {".py", ".pyi"}:
            raise SymbolLookupError(f"Symbol lookup is not supported for {path.name}")
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as error:
            raise SymbolLookupError(f"Failed to read {path}: {error}") from error

        wanted = symbol.strip()
        results: List[SymbolSpan] = []
        for span in collect_symbols(source):
            bare = span.name.rsplit(".", 1)[-1]
            if wanted in (span.name, bare) or span.qualified_name.endswith(f".{wanted}"):
                results.append(span)
        return results


__all__ = [
    "LibcstSymbolLookup",
    "SymbolLookup",
    "SymbolLookupError",
    "SymbolSpan",
    "collect_symbols",
]
