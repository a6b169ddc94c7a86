"""Filtrage et classement des candidats."""

from __future__ import annotations

from collections.abc import Iterable

from pricematch.matching.schema import MatchCandidate, MatchOptions


def _sort_key(candidate: MatchCandidate) -> tuple[float, str]:
    name = candidate.item.name if isinstance(candidate.item.name, str) else ""
    return (-candidate.score, name.casefold())


def rank(scored: Iterable[MatchCandidate], options: MatchOptions | None = None) -> list[MatchCandidate]:
    """
    Garde les candidats au-dessus du seuil, triés et tronqués.

    Tri par score décroissant puis par nom (insensible à la casse) croissant ;
    le tri étant stable, deux noms identiques gardent l'ordre du catalogue.

    Args:
        scored: Candidats déjà scorés.
        options: max_results et min_score (valeurs par défaut si None).

    Returns:
        Au plus max_results candidats, tous avec score >= min_score.
    """
    opts = MatchOptions.coerce(options)
    if opts.max_results <= 0:
        return []
    kept = [c for c in scored if c.score >= opts.min_score]
    kept.sort(key=_sort_key)
    return kept[: opts.max_results]
