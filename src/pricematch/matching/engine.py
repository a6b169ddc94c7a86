"""Moteur de rapprochement : ligne de devis → candidats du catalogue de prix."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pricematch.matching.ranker import rank
from pricematch.matching.schema import MatchCandidate, MatchOptions, PriceListItem
from pricematch.matching.scorers import CatalogEntry, prepare_entry, prepare_query, score_prepared


def prepare_catalog(price_list: Any) -> list[CatalogEntry]:
    """
    Normalise le catalogue une fois pour toutes les lignes d'un même appel.

    Les entrées inutilisables (nom vide, prix invalide, type inattendu) sont ignorées.
    """
    if isinstance(price_list, (str, bytes)) or not isinstance(price_list, Iterable):
        return []
    entries: list[CatalogEntry] = []
    for raw in price_list:
        entry = prepare_entry(raw)
        if entry is not None:
            entries.append(entry)
    return entries


def score_catalog(name: Any, unit: Any, entries: list[CatalogEntry]) -> list[MatchCandidate]:
    """
    Score de chaque entrée pour la ligne donnée, dans l'ordre du catalogue.

    Une entrée de score 0 n'est jamais candidate, même avec min_score <= 0.
    """
    query = prepare_query(name, unit)
    if query is None:
        return []
    scored: list[MatchCandidate] = []
    for entry in entries:
        sc = score_prepared(query, entry)
        if sc > 0:
            scored.append(MatchCandidate(item=entry.item, score=sc))
    return scored


def match_catalog(
    name: Any,
    unit: Any,
    entries: list[CatalogEntry],
    options: MatchOptions | None = None,
) -> list[MatchCandidate]:
    """Comme get_price_match_candidates, sur un catalogue déjà préparé."""
    return rank(score_catalog(name, unit, entries), options)


def get_price_match_candidates(
    name: str,
    unit: str | None,
    price_list: list[PriceListItem],
    options: MatchOptions | dict[str, Any] | None = None,
) -> list[MatchCandidate]:
    """
    Propose les entrées du catalogue les plus proches d'une ligne de devis.

    Fonction pure : aucune I/O, aucun état, ne lève jamais d'exception. Le pire
    résultat possible est une liste vide (nom vide, catalogue vide, aucun
    candidat au-dessus du seuil, max_results <= 0).

    Args:
        name: Libellé de la ligne (souvent issu d'une transcription vocale).
        unit: Unité de la ligne, ou None (pas de contrainte).
        price_list: Catalogue (PriceListItem ou objets JSON {name, price, unit?, aliases?}).
        options: max_results (défaut 3) et min_score (défaut 0.5).

    Returns:
        Au plus max_results candidats, score décroissant puis nom croissant.
    """
    opts = MatchOptions.coerce(options)
    if opts.max_results <= 0:
        return []
    entries = prepare_catalog(price_list)
    if not entries:
        return []
    return match_catalog(name, unit, entries, opts)
