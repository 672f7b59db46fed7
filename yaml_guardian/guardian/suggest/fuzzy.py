"""Edit-distance matching for misspelled keys and type names."""

from __future__ import annotations

from collections.abc import Iterable


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance with unit insert/delete/substitute costs."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def rank_candidates(target: str, candidates: Iterable[str]) -> list[tuple[str, int]]:
    """Case-insensitive distances, closest first; ties keep candidate order."""
    t = target.lower()
    scored = [(c, levenshtein(t, c.lower())) for c in candidates]
    return sorted(scored, key=lambda pair: pair[1])


def best_match(target: str, candidates: Iterable[str]) -> str | None:
    """Return the closest candidate, or None when there are no candidates."""
    ranked = rank_candidates(target, candidates)
    return ranked[0][0] if ranked else None
