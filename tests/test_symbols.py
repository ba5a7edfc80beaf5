from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from editblocks.tools.symbols import LibcstSymbolLookup, SymbolLookupError, collect_symbols

SOURCE = textwrap.dedent(
    """
    import os


    def helper(value):
        return value * 2


    class Service:
        def run(self):
            return helper(1)

        def stop(self):
            pass
    """
).lstrip()


def test_collect_symbols_records_kinds_and_lines() -> None:
    spans = {span.name: span for span in collect_symbols(SOURCE)}

    assert set(spans) == {"helper", "Service", "Service.run", "Service.stop"}
    assert spans["helper"].kind == "function"
    assert spans["Service"].kind == "class"
    assert spans["Service.run"].kind == "method"
    assert spans["helper"].start_line == 4
    assert spans["Service"].start_line == 8
    assert spans["Service.run"].start_line == 9
    assert spans["Service.stop"].start_line == 12
    assert spans["Service"].end_line >= 13


def test_lookup_matches_bare_and_dotted_names(tmp_path: Path) -> None:
    path = tmp_path / "service.py"
    path.write_text(SOURCE, encoding="utf-8")
    lookup = LibcstSymbolLookup()

    assert [span.name for span in lookup(str(path), "run")] == ["Service.run"]
    assert [span.name for span in lookup(str(path), "Service.stop")] == ["Service.stop"]
    assert lookup(str(path), "missing") == []


def test_lookup_rejects_unsupported_files(tmp_path: Path) -> None:
    text_file = tmp_path / "notes.txt"
    text_file.write_text("hello", encoding="utf-8")
    broken = tmp_path / "broken.py"
    broken.write_text("def f(:\n", encoding="utf-8")
    lookup = LibcstSymbolLookup()

    with pytest.raises(SymbolLookupError):
        lookup(str(text_file), "hello")
    with pytest.raises(SymbolLookupError):
        lookup(str(broken), "f")
    with pytest.raises(SymbolLookupError):
        lookup(str(tmp_path / "absent.py"), "f")
