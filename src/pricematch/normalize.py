"""Normalisation de texte, d'unités et variantes de recherche."""

from __future__ import annotations

import re
import unicodedata
from typing import Any

# Toute suite de caractères non alphanumériques (ponctuation, "_", séparateurs)
_NON_ALNUM_RE = re.compile(r"[\W_]+")
_ASCII_WORD_RE = re.compile(r"^[a-z]+$")

UNIT_ALIASES: dict[str, str] = {
    "ea": "each",
    "each": "each",
    "piece": "each",
    "pieces": "each",
    "pc": "each",
    "pcs": "each",
    "unit": "each",
    "units": "each",
    "hr": "hour",
    "hrs": "hour",
    "hour": "hour",
    "hours": "hour",
    "m": "meter",
    "meter": "meter",
    "meters": "meter",
    "metre": "meter",
    "metres": "meter",
    "ft": "foot",
    "foot": "foot",
    "feet": "foot",
    "sqm": "sqm",
    "m2": "sqm",
    "sqmeter": "sqm",
    "sqmeters": "sqm",
    "squaremeter": "sqm",
    "squaremeters": "sqm",
    "l": "liter",
    "lt": "liter",
    "liter": "liter",
    "liters": "liter",
    "litre": "liter",
    "litres": "liter",
    "kg": "kg",
    "kilo": "kg",
    "kilos": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
}


def _remove_diacritics(s: str) -> str:
    """Retire les diacritiques (accents) d'une chaîne."""
    nfkd = unicodedata.normalize("NFKD", s)
    return "".join(c for c in nfkd if unicodedata.category(c) != "Mn")


def normalize(raw: Any) -> str:
    """
    Normalise un libellé pour comparaison.

    Minuscules, décomposition NFKD sans diacritiques, ponctuation remplacée par
    un espace, espaces multiples → espace simple, strip. Lettres de tout
    alphabet et chiffres sont conservés.

    Args:
        raw: Valeur à normaliser. Tout ce qui n'est pas une str donne "".

    Returns:
        Chaîne normalisée (éventuellement vide).
    """
    if not isinstance(raw, str):
        return ""
    text = _remove_diacritics(raw.lower())
    text = _NON_ALNUM_RE.sub(" ", text)
    return " ".join(text.split())


def normalize_unit(raw: Any) -> str | None:
    """Forme canonique d'une unité ("ea", "pcs" → "each", "m²" → "sqm"), ou None si vide."""
    text = normalize(raw).replace(" ", "")
    if not text:
        return None
    return UNIT_ALIASES.get(text, text)


def sort_tokens(text: str) -> str:
    """Mots triés par ordre alphabétique ("wall paint" → "paint wall")."""
    return " ".join(sorted(text.split()))


def _singular_word(token: str) -> str:
    if len(token) <= 3 or not _ASCII_WORD_RE.match(token):
        return token
    if token.endswith("ies"):
        return token[:-3] + "y"
    if token.endswith(("sses", "ches", "shes", "xes", "zes")):
        return token[:-2]
    if token.endswith("ss"):
        return token
    if token.endswith("s"):
        return token[:-1]
    return token


def singularize(text: str) -> str:
    """
    Ramène au singulier les mots anglais ASCII de plus de 3 lettres.

    "outlets" → "outlet", "boxes" → "box", "batteries" → "battery".
    Les mots courts, non ASCII ou contenant des chiffres sont laissés tels quels.
    """
    return " ".join(_singular_word(t) for t in text.split())
