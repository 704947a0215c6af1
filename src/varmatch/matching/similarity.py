"""Normalized edit-distance similarity between names."""

from __future__ import annotations

from .normalizer import normalize


def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance with unit insert/delete/substitute costs."""
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(min(
                    previous[j - 1] + 1,
                    current[j - 1] + 1,
                    previous[j] + 1,
                ))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Return a similarity score in [0, 1] for two names.

    Both names are normalized first. Identical keys score 1.0; otherwise the
    score is the share of the longer key that survives the edit distance.
    Two names that both normalize to the empty string are treated as equal.
    """
    s1 = normalize(a)
    s2 = normalize(b)

    if s1 == s2:
        return 1.0

    longer, shorter = (s1, s2) if len(s1) >= len(s2) else (s2, s1)
    if not longer:
        return 1.0

    distance = levenshtein_distance(longer, shorter)
    return (len(longer) - distance) / len(longer)
