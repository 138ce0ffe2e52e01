"""Levenshtein edit distance."""

import numpy as np


def edit_distance(str1: str | None, str2: str | None) -> int:
    """Minimum number of single-character edits turning str1 into str2.

    Insertions, deletions and substitutions each cost 1. Missing strings are
    treated as empty.

    The table is filled one row at a time. Substitution and deletion costs
    for a row are computed as vectors; the insertion chain along the row is
    resolved with a running minimum, since
    ``row[j] = min(row[j], row[j-1] + 1)`` unrolls to
    ``j + min(row[k] - k for k <= j)``.
    """
    a = str1 or ""
    b = str2 or ""

    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    b_chars = np.array(list(b))
    index = np.arange(len(b) + 1)
    previous = index.copy()

    for i, char in enumerate(a, start=1):
        cost = (b_chars != char).astype(np.int64)
        row = np.empty_like(previous)
        row[0] = i
        row[1:] = np.minimum(previous[1:] + 1, previous[:-1] + cost)
        previous = np.minimum.accumulate(row - index) + index

    return int(previous[-1])


def distance_similarity(str1: str | None, str2: str | None) -> float:
    """Edit distance rescaled to 0-100, 100 meaning identical."""
    a = str1 or ""
    b = str2 or ""
    longest = max(len(a), len(b))
    if longest == 0:
        return 0.0
    return max(0.0, (1 - edit_distance(a, b) / longest) * 100)
