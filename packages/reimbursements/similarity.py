"""Near-duplicate detection between transaction names.

A candidate is treated as a duplicate of the reference when both hold:

- the candidate name contains the reference's first word; and
- the bigram similarity score between the two names is strictly greater than
  :data:`SIMILARITY_THRESHOLD`.

The score is the Sørensen–Dice coefficient over character bigrams, computed
with whitespace removed; it is symmetric and bounded to ``[0, 1]``.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable

from .models import Transaction

SIMILARITY_THRESHOLD = 0.8

_WS_RE = re.compile(r"\s+")


def _bigrams(s: str) -> Counter[str]:
    return Counter(s[i : i + 2] for i in range(len(s) - 1))


def compare_two_strings(first: str, second: str) -> float:
    """Return the Dice coefficient of ``first`` and ``second`` in ``[0, 1]``."""

    a = _WS_RE.sub("", first)
    b = _WS_RE.sub("", second)
    if a == b:
        return 1.0
    if len(a) < 2 or len(b) < 2:
        return 0.0
    shared = sum((_bigrams(a) & _bigrams(b)).values())
    return (2.0 * shared) / (len(a) + len(b) - 2)


def first_word(name: str) -> str:
    """Return the first whitespace-delimited token of ``name`` (whole string if none)."""
    tokens = name.split()
    return tokens[0] if tokens else name


def is_similar(
    reference: Transaction,
    candidate: Transaction,
    *,
    threshold: float = SIMILARITY_THRESHOLD,
) -> bool:
    if first_word(reference.name) not in candidate.name:
        return False
    return compare_two_strings(candidate.name, reference.name) > threshold


def find_similar(
    reference: Transaction,
    pool: Iterable[Transaction],
    *,
    threshold: float = SIMILARITY_THRESHOLD,
) -> list[Transaction]:
    """Return the members of ``pool`` that are near-duplicates of ``reference``.

    ``pool`` is not mutated and result order follows ``pool``. The reference
    must already be removed from ``pool``; otherwise it matches itself.
    """
    return [tx for tx in pool if is_similar(reference, tx, threshold=threshold)]


__all__ = [
    "SIMILARITY_THRESHOLD",
    "compare_two_strings",
    "first_word",
    "is_similar",
    "find_similar",
]
