"""Génération du rapport et onglet REPORT."""

from __future__ import annotations

from datetime import datetime

import pandas as pd

from pricematch import __version__
from pricematch.config import Config
from pricematch.matching.schema import ItemMatchResult


def _counts(results: list[ItemMatchResult]) -> dict[str, int]:
    return {
        "nb_items": len(results),
        "nb_matched": sum(1 for r in results if r.status == "matched"),
        "nb_unmatched": sum(1 for r in results if r.status == "unmatched"),
        "nb_with_suggestions": sum(1 for r in results if r.status == "unmatched" and r.candidates),
        "nb_already_priced": sum(1 for r in results if r.status == "priced"),
        "nb_empty_name": sum(1 for r in results if r.status == "empty"),
    }


def build_report_df(results: list[ItemMatchResult], config: Config) -> pd.DataFrame:
    """
    Construit le DataFrame pour l'onglet REPORT.

    Contient : nb lignes, nb chiffrées, nb sans correspondance (dont avec suggestions),
    nb déjà chiffrées, nb sans libellé, paramètres, horodatage, version.
    """
    rows: list[tuple[str, object]] = [("Metric", "Value")]
    rows.extend(_counts(results).items())
    rows.extend(
        [
            ("", ""),
            ("Parameters", ""),
            ("max_results", config.max_results),
            ("min_score", config.min_score),
            ("accept_score", config.accept_score),
            ("only_missing_price", config.only_missing_price),
            ("fill_empty_unit", config.fill_empty_unit),
            ("", ""),
            ("price_list_file", config.price_list_file),
            ("quote_file", config.quote_file),
            ("", ""),
            ("timestamp", datetime.now().isoformat()),
            ("version", __version__),
        ]
    )
    return pd.DataFrame(rows, columns=["Key", "Value"])


def print_report_console(results: list[ItemMatchResult], config: Config) -> None:
    """Affiche un résumé du rapport en console."""
    counts = _counts(results)
    print("\n=== pricematch Report ===")
    print(f"  Lignes devis:        {counts['nb_items']}")
    print(f"  Chiffrées:           {counts['nb_matched']}")
    print(f"  Sans correspondance: {counts['nb_unmatched']}")
    print(f"    dont suggestions:  {counts['nb_with_suggestions']}")
    print(f"  Déjà chiffrées:      {counts['nb_already_priced']}")
    print(f"  Sans libellé:        {counts['nb_empty_name']}")
    print(f"  Seuil acceptation:   {config.accept_score}")
    print(f"  Version:             {__version__}")
    print(f"  Timestamp:           {datetime.now().isoformat()}")
    print("=========================\n")
