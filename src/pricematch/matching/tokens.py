"""Découpage en mots et n-grammes de caractères."""

from __future__ import annotations

from collections.abc import Iterable

NGRAM_SIZE = 3


def tokenize(normalized: str) -> list[str]:
    """Découpe une chaîne normalisée en mots (les jetons vides sont ignorés)."""
    if not isinstance(normalized, str):
        return []
    return [t for t in normalized.split() if t]


def char_ngrams(tokens: Iterable[str], n: int = NGRAM_SIZE) -> set[str]:
    """
    Ensemble des n-grammes de caractères de chaque mot.

    Un mot plus court que n compte comme un n-gramme à lui seul, pour que
    "ea" ou "4x8" restent comparables.
    """
    grams: set[str] = set()
    for token in tokens:
        if len(token) <= n:
            grams.add(token)
            continue
        grams.update(token[i : i + n] for i in range(len(token) - n + 1))
    return grams
