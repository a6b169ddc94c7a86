"""Schémas et types pour le matching."""

from __future__ import annotations

import math
import numbers
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

DEFAULT_MAX_RESULTS = 3
DEFAULT_MIN_SCORE = 0.5


def is_number(value: Any) -> bool:
    """Nombre réel (int, float, numpy, Decimal) ; les booléens sont refusés."""
    return not isinstance(value, bool) and isinstance(value, (numbers.Real, Decimal))


def as_finite_float(value: Any) -> float | None:
    """Valeur en float si c'est un nombre fini, sinon None (y compris entier trop grand pour un float)."""
    if not is_number(value):
        return None
    try:
        number = float(value)
    except (OverflowError, ValueError, TypeError):
        return None
    return number if math.isfinite(number) else None


def is_valid_price(value: Any) -> bool:
    """Prix utilisable : nombre fini >= 0 (les booléens sont refusés)."""
    number = as_finite_float(value)
    return number is not None and number >= 0


@dataclass
class PriceListItem:
    """Une entrée du catalogue de prix de l'utilisateur."""

    name: str
    price: float
    unit: str | None = None
    aliases: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> PriceListItem | None:
        """
        Construit une entrée depuis un objet JSON ({name, price, unit?, aliases?}).

        Returns:
            None si le nom est vide ou le prix n'est pas un nombre fini >= 0.
        """
        name = d.get("name")
        price = d.get("price")
        if not isinstance(name, str) or not name.strip() or not is_valid_price(price):
            return None
        unit = d.get("unit")
        aliases = d.get("aliases")
        return cls(
            name=name,
            price=price,
            unit=unit if isinstance(unit, str) and unit.strip() else None,
            aliases=[a for a in aliases if isinstance(a, str)] if isinstance(aliases, (list, tuple)) else [],
        )


@dataclass
class MatchQuery:
    """Ligne de devis à rapprocher du catalogue."""

    name: str
    unit: str | None = None


@dataclass
class MatchCandidate:
    """Un candidat du catalogue pour une ligne de devis."""

    item: PriceListItem
    score: float  # 0-1, 1 = égalité exacte après normalisation

    def __repr__(self) -> str:
        return f"MatchCandidate(item={self.item.name!r}, score={self.score:.3f})"


@dataclass
class MatchOptions:
    """Bornes appliquées au classement : nombre de résultats et score minimal."""

    max_results: int = DEFAULT_MAX_RESULTS
    min_score: float = DEFAULT_MIN_SCORE

    @classmethod
    def coerce(cls, options: Any) -> MatchOptions:
        """
        Options utilisables quelle que soit l'entrée (None, dict, MatchOptions).

        Une valeur absente ou non numérique reprend la valeur par défaut ;
        max_results négatif est ramené à 0 ; un min_score entier trop grand
        pour un float devient +/- l'infini.
        """
        if isinstance(options, MatchOptions):
            raw_max, raw_min = options.max_results, options.min_score
        elif isinstance(options, Mapping):
            raw_max = options.get("max_results", DEFAULT_MAX_RESULTS)
            raw_min = options.get("min_score", DEFAULT_MIN_SCORE)
        else:
            raw_max, raw_min = DEFAULT_MAX_RESULTS, DEFAULT_MIN_SCORE

        if is_number(raw_max) and isinstance(raw_max, numbers.Integral):
            max_results = max(int(raw_max), 0)
        else:
            max_float = as_finite_float(raw_max)
            max_results = DEFAULT_MAX_RESULTS if max_float is None else max(int(max_float), 0)

        min_score = DEFAULT_MIN_SCORE
        if is_number(raw_min):
            try:
                min_score = float(raw_min)
            except OverflowError:
                # Entier trop grand pour un float : tout filtrer, ou ne rien filtrer
                min_score = math.inf if raw_min > 0 else -math.inf
            except (ValueError, TypeError):
                min_score = DEFAULT_MIN_SCORE
            if math.isnan(min_score):
                min_score = DEFAULT_MIN_SCORE

        return cls(max_results=max_results, min_score=min_score)


@dataclass
class ItemMatchResult:
    """Résultat du rapprochement pour une ligne de devis."""

    row_id: int
    name: str
    unit: str | None
    candidates: list[MatchCandidate]
    best_score: float
    status: str  # matched, unmatched, priced, empty
    chosen: PriceListItem | None = None
    explanation: str = ""
