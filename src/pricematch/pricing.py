"""Remplissage des prix manquants d'un devis depuis le catalogue."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from pricematch.config import DEFAULT_ACCEPT_SCORE
from pricematch.matching.engine import prepare_catalog, score_catalog
from pricematch.matching.ranker import rank
from pricematch.matching.schema import MatchCandidate, MatchOptions, PriceListItem, as_finite_float
from pricematch.matching.scorers import CatalogEntry


@dataclass
class QuoteItem:
    """Ligne de devis."""

    name: str
    qty: float = 1.0
    unit: str = ""
    price: float | None = None
    line_total: float | None = None


@dataclass
class ApplySavedPricesResult:
    items: list[QuoteItem]
    matched_count: int


def needs_price(price: Any) -> bool:
    """Prix absent, non numérique, non fini ou <= 0."""
    number = as_finite_float(price)
    return number is None or number <= 0


def best_match_in_catalog(
    name: Any,
    unit: Any,
    entries: list[CatalogEntry],
    accept_score: float = DEFAULT_ACCEPT_SCORE,
) -> MatchCandidate | None:
    best = rank(score_catalog(name, unit, entries), MatchOptions(max_results=1, min_score=accept_score))
    return best[0] if best else None


def find_best_match(
    name: str,
    unit: str | None,
    price_list: list[PriceListItem],
    accept_score: float = DEFAULT_ACCEPT_SCORE,
) -> MatchCandidate | None:
    """
    Meilleur candidat du catalogue, s'il atteint le seuil d'acceptation.

    Returns:
        Le candidat le mieux classé, ou None si aucun n'atteint accept_score.
    """
    return best_match_in_catalog(name, unit, prepare_catalog(price_list), accept_score)


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _qty(value: Any) -> float:
    number = as_finite_float(value)
    return 0.0 if number is None else number


def apply_match(item: QuoteItem, match: PriceListItem, *, fill_empty_unit: bool = True) -> QuoteItem:
    """Copie le prix (et l'unité si la ligne n'en a pas) ; recalcule le total de ligne."""
    unit = item.unit
    if fill_empty_unit and _is_blank(item.unit) and match.unit:
        unit = match.unit
    return replace(
        item,
        unit=unit,
        price=match.price,
        line_total=_qty(item.qty) * _qty(match.price),
    )


def apply_saved_prices_to_items(
    items: list[QuoteItem],
    price_list: list[PriceListItem],
    *,
    only_missing_price: bool = True,
    fill_empty_unit: bool = True,
    accept_score: float = DEFAULT_ACCEPT_SCORE,
) -> ApplySavedPricesResult:
    """
    Remplit les prix des lignes de devis à partir du catalogue.

    Les lignes sans nom, ou déjà chiffrées quand only_missing_price est vrai,
    sont renvoyées telles quelles. Les lignes d'entrée ne sont jamais modifiées :
    une ligne rapprochée est une copie.

    Args:
        items: Lignes du devis.
        price_list: Catalogue de prix.
        only_missing_price: Ne traiter que les lignes sans prix valide (> 0).
        fill_empty_unit: Reprendre l'unité du catalogue si la ligne n'en a pas.
        accept_score: Score minimal pour accepter automatiquement un candidat.

    Returns:
        ApplySavedPricesResult(items, matched_count).
    """
    if not items:
        return ApplySavedPricesResult(items=list(items or []), matched_count=0)
    entries = prepare_catalog(price_list)
    if not entries:
        return ApplySavedPricesResult(items=list(items), matched_count=0)

    matched_count = 0
    out: list[QuoteItem] = []
    for item in items:
        should_match = not only_missing_price or needs_price(item.price)
        if not should_match or _is_blank(item.name):
            out.append(item)
            continue
        match = best_match_in_catalog(item.name, item.unit, entries, accept_score)
        if match is None:
            out.append(item)
            continue
        matched_count += 1
        out.append(apply_match(item, match.item, fill_empty_unit=fill_empty_unit))

    return ApplySavedPricesResult(items=out, matched_count=matched_count)
