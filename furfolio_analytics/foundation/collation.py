"""Locale-aware string ordering used for deterministic tie-breaks.

Rankings that tie on an amount fall back to comparing display names the way
a user expects a list to be sorted: case and accents are ignored and runs of
digits compare by numeric value, so "Groom 2" sorts before "Groom 10".
"""

from __future__ import annotations

import re
import unicodedata
from typing import Callable

_DIGIT_RUN = re.compile(r"(\d+)")

SortKey = Callable[[str], tuple]


def standard_sort_key(text: str) -> tuple:
    """Return a sort key approximating a localized standard comparison.

    Examples
    --------
    >>> sorted(["item 10", "Item 2", "élan", "Ezra"], key=standard_sort_key)
    ['élan', 'Ezra', 'Item 2', 'item 10']
    """
    decomposed = unicodedata.normalize("NFKD", text)
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()

    parts: list[tuple[int, int | str]] = []
    for chunk in _DIGIT_RUN.split(folded):
        if not chunk:
            continue
        if chunk.isdigit():
            parts.append((0, int(chunk)))
        else:
            parts.append((1, chunk))
    # The raw text keeps the key total when two names fold to the same value.
    return (tuple(parts), text)
