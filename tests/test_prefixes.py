from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "scripts"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))

import common_prefix  # noqa: E402
from users_api.domain.prefixes import longest_common_prefix  # noqa: E402


@pytest.mark.parametrize(
    "words, expected",
    [
        (["flower", "flow", "flight"], "fl"),
        (["dog", "racecar", "car"], ""),
        (["interspecies", "interstellar", "interstate"], "inters"),
        (["alone"], "alone"),
        (["", "abc"], ""),
        (["same", "same"], "same"),
        ([], ""),
    ],
)
def test_longest_common_prefix(words, expected):
    assert longest_common_prefix(words) == expected


def test_input_is_not_reordered():
    words = ["flower", "flight", "flow"]
    longest_common_prefix(words)

    assert words == ["flower", "flight", "flow"]


def test_accepts_any_iterable():
    assert longest_common_prefix(word for word in ("prefix", "preface")) == "pref"


def test_command_line(capsys):
    assert common_prefix.main(["flower", "flow", "flight"]) == 0

    assert capsys.readouterr().out == "fl\n"
