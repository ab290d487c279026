"""String normalisation and edit-distance similarity."""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lowercase, trim and collapse runs of whitespace to a single space."""
    return _WHITESPACE.sub(" ", text.lower().strip())


def levenshtein_distance(s1: str, s2: str) -> int:
    """Classic edit distance with unit costs for insert, delete and substitute.

    Keeps only two rows of the DP table, sized by the shorter string.
    """
    if s1 == s2:
        return 0
    if len(s1) < len(s2):
        s1, s2 = s2, s1
    if not s2:
        return len(s1)

    previous_row = list(range(len(s2) + 1))
    current_row = [0] * (len(s2) + 1)

    for i, c1 in enumerate(s1):
        current_row[0] = i + 1
        for j, c2 in enumerate(s2):
            cost = 0 if c1 == c2 else 1
            current_row[j + 1] = min(
                current_row[j] + 1,  # insertion
                previous_row[j + 1] + 1,  # deletion
                previous_row[j] + cost,  # substitution
            )
        previous_row, current_row = current_row, previous_row

    return previous_row[len(s2)]


def similarity(s1: str, s2: str) -> float:
    """Normalised Levenshtein similarity in [0.0, 1.0]; 1.0 means identical."""
    if s1 == s2:
        return 1.0
    if not s1 or not s2:
        return 0.0

    distance = levenshtein_distance(s1, s2)
    return 1.0 - distance / max(len(s1), len(s2))
