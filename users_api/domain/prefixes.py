"""String helpers: longest common prefix of a list of words."""
from __future__ import annotations

from typing import Iterable


def longest_common_prefix(strings: Iterable[str]) -> str:
    """Return the longest prefix shared by every string.

    Only the lexicographically smallest and largest strings need comparing:
    any prefix they share is shared by everything sorted between them.
    """
    words = list(strings)
    if not words:
        return ""
    first, last = min(words), max(words)
    size = 0
    for left, right in zip(first, last):
        if left != right:
            break
        size += 1
    return first[:size]
