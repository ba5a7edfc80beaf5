from __future__ import annotations

from editblocks.config import MatchOptions
from editblocks.matching.disambiguate import expand_until_unambiguous, is_unambiguous
from editblocks.matching.finder import Match


def test_is_unambiguous() -> None:
    target = ["a", "1", "x", "1"]

    assert not is_unambiguous(["1"], target)
    assert is_unambiguous(["a", "1"], target)
    assert is_unambiguous(["missing"], target)


def test_expansion_grows_one_extra_step() -> None:
    target = "a\n1\nx\ny\nz\nb\n1".split("\n")
    matches = [Match(index=1, lines=("1",), successful=True), Match(index=6, lines=("1",), successful=True)]

    expanded = expand_until_unambiguous(matches, target)

    assert [(match.index, match.lines) for match in expanded] == [
        (0, ("a", "1", "x", "y")),
        (4, ("z", "b", "1")),
    ]


def test_expansion_terminates_when_file_is_all_duplicates() -> None:
    target = ["same", "same"]
    matches = [Match(index=0, lines=("same",), successful=True), Match(index=1, lines=("same",), successful=True)]

    expanded = expand_until_unambiguous(matches, target)

    assert all(match.lines == ("same", "same") for match in expanded)


def test_expand_rate_controls_growth() -> None:
    target = [str(number) for number in range(10)] + ["dup"] + [str(number) for number in range(10, 20)] + ["dup"]
    matches = [Match(index=10, lines=("dup",), successful=True)]

    expanded = expand_until_unambiguous(matches, target, MatchOptions(expand_rate=2))

    assert expanded[0].index == 6
    assert expanded[0].lines == tuple(target[6:15])
