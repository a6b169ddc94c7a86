"""Calcul du score de similarité entre une ligne de devis et une entrée du catalogue."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from rapidfuzz.distance import Levenshtein

from pricematch.matching.schema import MatchQuery, PriceListItem, is_valid_price
from pricematch.matching.tokens import char_ngrams, tokenize
from pricematch.normalize import normalize, normalize_unit, singularize, sort_tokens

# Pondération du score lexical
TOKEN_WEIGHT = 0.6
EDIT_WEIGHT = 0.4
# Les n-grammes ne servent que de repli : ils ne doivent pas égaler des mots identiques
NGRAM_DAMPING = 0.9
# Plancher quand les mots d'un côté sont tous présents de l'autre côté
CONTAINMENT_SCORE = 0.9
CONTAINMENT_STEP = 0.02
CONTAINMENT_MAX_EXTRA = 5
CONTAINMENT_MIN_LEN = 3
# Seule l'égalité exacte (nom ou alias) atteint 1
NEAR_EXACT_CEILING = 0.99
UNIT_MISMATCH_PENALTY = 0.85


@dataclass(frozen=True)
class SearchKey:
    """Forme comparable d'un libellé : texte normalisé, mots, n-grammes."""

    text: str
    tokens: frozenset[str]
    grams: frozenset[str]

    @classmethod
    def from_text(cls, text: str) -> SearchKey:
        tokens = tokenize(text)
        return cls(text=text, tokens=frozenset(tokens), grams=frozenset(char_ngrams(tokens)))


@dataclass(frozen=True)
class PreparedQuery:
    text: str
    unit: str | None
    keys: tuple[SearchKey, ...]


@dataclass(frozen=True)
class CatalogEntry:
    """Entrée du catalogue avec ses clés de recherche pré-calculées."""

    item: PriceListItem
    names: frozenset[str]  # nom et alias normalisés
    unit: str | None
    keys: tuple[SearchKey, ...]


def _clamp01(value: float) -> float:
    if value < 0:
        return 0.0
    if value > 1:
        return 1.0
    return value


def search_variants(text: str) -> list[str]:
    """Texte normalisé, mots triés, forme au singulier (sans doublons, ordre conservé)."""
    variants: list[str] = []
    for variant in (text, sort_tokens(text), singularize(text)):
        if variant and variant not in variants:
            variants.append(variant)
    return variants


def _build_keys(texts: Iterable[str]) -> tuple[SearchKey, ...]:
    seen: list[str] = []
    for text in texts:
        for variant in search_variants(text):
            if variant not in seen:
                seen.append(variant)
    return tuple(SearchKey.from_text(v) for v in seen)


def prepare_query(name: Any, unit: Any = None) -> PreparedQuery | None:
    """Normalise la requête ; None si le nom est vide après normalisation."""
    text = normalize(name)
    if not text:
        return None
    return PreparedQuery(text=text, unit=normalize_unit(unit), keys=_build_keys([text]))


def prepare_entry(raw: Any) -> CatalogEntry | None:
    """
    Prépare une entrée du catalogue (PriceListItem ou objet JSON).

    Returns:
        None si l'entrée est inutilisable (nom vide, prix absent, négatif ou non fini).
    """
    if isinstance(raw, Mapping):
        item = PriceListItem.from_dict(raw)
    elif isinstance(raw, PriceListItem):
        item = raw
    else:
        return None
    if item is None or not is_valid_price(item.price):
        return None

    aliases = item.aliases if isinstance(item.aliases, (list, tuple)) else []
    names = [normalize(item.name)] + [normalize(a) for a in aliases]
    names = [n for n in names if n]
    if not names:
        return None
    return CatalogEntry(
        item=item,
        names=frozenset(names),
        unit=normalize_unit(item.unit),
        keys=_build_keys(names),
    )


def token_overlap(a: SearchKey, b: SearchKey) -> float:
    """Jaccard sur les mots, avec repli sur le Jaccard des trigrammes (fautes de frappe)."""
    union = a.tokens | b.tokens
    words = len(a.tokens & b.tokens) / len(union) if union else 0.0
    gram_union = a.grams | b.grams
    grams = len(a.grams & b.grams) / len(gram_union) if gram_union else 0.0
    return max(words, NGRAM_DAMPING * grams)


def edit_similarity(a: str, b: str) -> float:
    """1 - distance de Levenshtein / longueur de la plus longue chaîne."""
    if not a and not b:
        return 1.0
    return float(Levenshtein.normalized_similarity(a, b))


def lexical_score(a: SearchKey, b: SearchKey) -> float:
    """
    Score lexical (0-1) entre deux clés, avant ajustement d'unité.

    0.6 × recouvrement de mots + 0.4 × similarité d'édition. Si tous les mots
    d'un côté figurent de l'autre côté, le score vaut au moins
    0.9 - 0.02 par mot en trop (5 au plus).
    """
    if a.text == b.text:
        return 1.0
    if not a.text or not b.text:
        return 0.0

    combined = TOKEN_WEIGHT * token_overlap(a, b) + EDIT_WEIGHT * edit_similarity(a.text, b.text)

    shorter = min(len(a.text), len(b.text))
    if shorter >= CONTAINMENT_MIN_LEN and (a.tokens <= b.tokens or b.tokens <= a.tokens):
        extra = min(len(a.tokens ^ b.tokens), CONTAINMENT_MAX_EXTRA)
        combined = max(combined, CONTAINMENT_SCORE - CONTAINMENT_STEP * extra)

    return _clamp01(combined)


def unit_factor(query_unit: str | None, entry_unit: str | None) -> float:
    """Pénalité douce : seules deux unités renseignées et différentes pénalisent."""
    if not query_unit or not entry_unit or query_unit == entry_unit:
        return 1.0
    return UNIT_MISMATCH_PENALTY


def score_prepared(query: PreparedQuery, entry: CatalogEntry) -> float:
    best = 0.0
    for query_key in query.keys:
        for entry_key in entry.keys:
            best = max(best, lexical_score(query_key, entry_key))
    if query.text not in entry.names:
        best = min(best, NEAR_EXACT_CEILING)
    return _clamp01(best * unit_factor(query.unit, entry.unit))


def score(query: MatchQuery, candidate: PriceListItem) -> float:
    """
    Score (0-1) d'une entrée du catalogue pour une ligne de devis.

    Args:
        query: Ligne de devis (nom, unité optionnelle).
        candidate: Entrée du catalogue.

    Returns:
        1.0 pour une égalité exacte après normalisation, 0.0 si rien de comparable.
    """
    if not isinstance(query, MatchQuery):
        return 0.0
    prepared = prepare_query(query.name, query.unit)
    entry = prepare_entry(candidate)
    if prepared is None or entry is None:
        return 0.0
    return score_prepared(prepared, entry)
