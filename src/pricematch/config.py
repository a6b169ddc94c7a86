"""Configuration et chargement du fichier config JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pricematch.matching.schema import DEFAULT_MAX_RESULTS, DEFAULT_MIN_SCORE, MatchOptions

DEFAULT_ACCEPT_SCORE = 0.62


class PriceMatchError(Exception):
    """Exception de base pour pricematch."""


class ConfigError(PriceMatchError, ValueError):
    """Erreur de validation de la configuration."""


class ConfigFileError(PriceMatchError):
    """Erreur de chargement du fichier de configuration (fichier absent, JSON invalide)."""


def _require_col(d: dict[str, Any], key: str, default: str) -> str:
    val = d.get(key, default)
    if not isinstance(val, str) or not val.strip():
        raise ConfigError(f"{key} doit être un nom de colonne non vide (got {val!r})")
    return val


def _score(d: dict[str, Any], key: str, default: float) -> float:
    try:
        val = float(d.get(key, default))
    except (TypeError, ValueError, OverflowError) as e:
        raise ConfigError(f"{key} doit être un nombre (got {d.get(key)!r})") from e
    if not 0 <= val <= 1:
        raise ConfigError(f"{key} doit être entre 0 et 1 (got {val})")
    return val


def _flag(d: dict[str, Any], key: str, default: bool) -> bool:
    val = d.get(key, default)
    if not isinstance(val, bool):
        raise ConfigError(f"{key} doit être un booléen true/false (got {val!r})")
    return val


@dataclass
class PriceColumns:
    """Colonnes du tableur catalogue de prix."""

    name_col: str = "name"
    price_col: str = "price"
    unit_col: str = "unit"
    aliases_col: str = "aliases"
    alias_separator: str = "|"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PriceColumns:
        separator = d.get("alias_separator", "|")
        if not isinstance(separator, str) or not separator:
            raise ConfigError(f"alias_separator doit être une chaîne non vide (got {separator!r})")
        return cls(
            name_col=_require_col(d, "name_col", "name"),
            price_col=_require_col(d, "price_col", "price"),
            unit_col=_require_col(d, "unit_col", "unit"),
            aliases_col=_require_col(d, "aliases_col", "aliases"),
            alias_separator=separator,
        )


@dataclass
class QuoteColumns:
    """Colonnes du tableur devis (lignes à chiffrer)."""

    name_col: str = "name"
    qty_col: str = "qty"
    unit_col: str = "unit"
    price_col: str = "price"
    line_total_col: str = "line_total"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> QuoteColumns:
        return cls(
            name_col=_require_col(d, "name_col", "name"),
            qty_col=_require_col(d, "qty_col", "qty"),
            unit_col=_require_col(d, "unit_col", "unit"),
            price_col=_require_col(d, "price_col", "price"),
            line_total_col=_require_col(d, "line_total_col", "line_total"),
        )


@dataclass
class Config:
    """Configuration principale de pricematch."""

    price_list_file: str = ""
    price_list_sheet: str | None = None  # None = première feuille
    quote_file: str = ""
    quote_sheet: str | None = None

    price_columns: PriceColumns = field(default_factory=PriceColumns)
    quote_columns: QuoteColumns = field(default_factory=QuoteColumns)

    max_results: int = DEFAULT_MAX_RESULTS
    min_score: float = DEFAULT_MIN_SCORE
    accept_score: float = DEFAULT_ACCEPT_SCORE
    only_missing_price: bool = True
    fill_empty_unit: bool = True

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Config:
        price_list_file = d.get("price_list_file", "")
        quote_file = d.get("quote_file", "")
        if not price_list_file:
            raise ConfigError("price_list_file requis")

        price_columns = d.get("price_columns", {})
        quote_columns = d.get("quote_columns", {})
        if not isinstance(price_columns, dict):
            raise ConfigError("price_columns doit être un objet JSON")
        if not isinstance(quote_columns, dict):
            raise ConfigError("quote_columns doit être un objet JSON")

        try:
            max_results = int(d.get("max_results", DEFAULT_MAX_RESULTS))
        except (TypeError, ValueError, OverflowError) as e:
            raise ConfigError(f"max_results doit être un entier (got {d.get('max_results')!r})") from e
        if max_results < 0:
            raise ConfigError(f"max_results doit être >= 0 (got {max_results})")

        return cls(
            price_list_file=price_list_file,
            price_list_sheet=d.get("price_list_sheet"),
            quote_file=quote_file,
            quote_sheet=d.get("quote_sheet"),
            price_columns=PriceColumns.from_dict(price_columns),
            quote_columns=QuoteColumns.from_dict(quote_columns),
            max_results=max_results,
            min_score=_score(d, "min_score", DEFAULT_MIN_SCORE),
            accept_score=_score(d, "accept_score", DEFAULT_ACCEPT_SCORE),
            only_missing_price=_flag(d, "only_missing_price", True),
            fill_empty_unit=_flag(d, "fill_empty_unit", True),
        )

    @classmethod
    def load(cls, path: str | Path) -> Config:
        """
        Charge la configuration depuis un fichier JSON.

        Raises:
            ConfigFileError: Si le fichier est absent ou le JSON invalide.
            ConfigError: Si la configuration est invalide.
        """
        path = Path(path).resolve()
        if not path.exists():
            raise ConfigFileError(f"Fichier de configuration introuvable: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                d = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigFileError(f"JSON invalide dans {path}: {e}") from e
        except OSError as e:
            raise ConfigFileError(f"Impossible de lire {path}: {e}") from e

        if not isinstance(d, dict):
            raise ConfigFileError(f"Fichier de configuration invalide: {path} doit contenir un objet JSON")

        config = cls.from_dict(d)
        config.resolve_paths(path.parent)
        return config

    def resolve_paths(self, base_dir: Path) -> None:
        """
        Résout les chemins relatifs par rapport au répertoire de base (ex. dossier du fichier config).

        Modifie price_list_file et quote_file en place.
        """
        base = Path(base_dir)
        if self.price_list_file and not Path(self.price_list_file).is_absolute():
            self.price_list_file = str((base / self.price_list_file).resolve())
        if self.quote_file and not Path(self.quote_file).is_absolute():
            self.quote_file = str((base / self.quote_file).resolve())

    def match_options(self) -> MatchOptions:
        return MatchOptions(max_results=self.max_results, min_score=self.min_score)
