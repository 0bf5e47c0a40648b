#!/usr/bin/env python3
"""
Print the longest common prefix of the given words.

Usage:
  python scripts/common_prefix.py flower flow flight
"""
from __future__ import annotations

import argparse
import sys
from typing import Sequence

from users_api.domain.prefixes import longest_common_prefix


def main(argv: Sequence[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Longest common prefix of a list of words")
    ap.add_argument("words", nargs="*", help="Words to compare (default: one per line from stdin)")
    args = ap.parse_args(argv)

    words = args.words or [line.rstrip("\n") for line in sys.stdin]
    print(longest_common_prefix(words))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
