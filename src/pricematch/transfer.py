"""Report des prix du catalogue vers le tableur devis."""

from __future__ import annotations

import logging

import pandas as pd

from pricematch.config import Config
from pricematch.io_excel import SpreadsheetFileError, is_empty_cell, parse_number
from pricematch.matching.engine import prepare_catalog, score_catalog
from pricematch.matching.ranker import rank
from pricematch.matching.schema import ItemMatchResult, MatchOptions, PriceListItem
from pricematch.pricing import QuoteItem, apply_match, needs_price

logger = logging.getLogger(__name__)


def _cell_text(row: pd.Series, col: str) -> str:
    if col not in row.index or is_empty_cell(row[col]):
        return ""
    return str(row[col]).strip()


def apply_prices_to_frame(
    df_quote: pd.DataFrame,
    price_list: list[PriceListItem],
    config: Config,
) -> tuple[pd.DataFrame, list[ItemMatchResult]]:
    """
    Complète les prix du devis à partir du catalogue.

    Args:
        df_quote: DataFrame devis (copie, non modifié).
        price_list: Catalogue de prix.
        config: Colonnes du devis, seuils et options de remplissage.

    Returns:
        (DataFrame enrichi, un ItemMatchResult par ligne du devis).

    Raises:
        SpreadsheetFileError: Si la colonne des libellés est absente du devis.
    """
    cols = config.quote_columns
    if cols.name_col not in df_quote.columns:
        raise SpreadsheetFileError(f"Colonne '{cols.name_col}' absente du devis")

    out = df_quote.copy()
    for col in (cols.unit_col, cols.price_col, cols.line_total_col):
        if col not in out.columns:
            out[col] = pd.NA
        out[col] = out[col].astype(object)
    unit_idx = out.columns.get_loc(cols.unit_col)
    price_idx = out.columns.get_loc(cols.price_col)
    total_idx = out.columns.get_loc(cols.line_total_col)

    entries = prepare_catalog(price_list)
    options = config.match_options()
    results: list[ItemMatchResult] = []

    for pos in range(len(out)):
        row = out.iloc[pos]
        name = _cell_text(row, cols.name_col)
        unit = _cell_text(row, cols.unit_col)
        price = parse_number(row[cols.price_col])

        if not name:
            results.append(ItemMatchResult(pos, name, unit or None, [], 0.0, "empty", explanation="Empty name"))
            continue
        if config.only_missing_price and not needs_price(price):
            results.append(
                ItemMatchResult(pos, name, unit or None, [], 0.0, "priced", explanation="Already priced")
            )
            continue

        scored = score_catalog(name, unit, entries)
        candidates = rank(scored, options)
        accepted = rank(scored, MatchOptions(max_results=1, min_score=config.accept_score))
        best = accepted[0] if accepted else None
        best_score = best.score if best else (candidates[0].score if candidates else 0.0)

        if best is None:
            explanation = (
                f"Below accept_score (score={best_score:.2f})" if candidates else "No candidate above min_score"
            )
            results.append(ItemMatchResult(pos, name, unit or None, candidates, best_score, "unmatched", None, explanation))
            logger.debug("Ligne %d '%s' : pas de correspondance (%s)", pos, name, explanation)
            continue

        qty = parse_number(row[cols.qty_col]) if cols.qty_col in row.index else None
        filled = apply_match(
            QuoteItem(name=name, qty=qty or 0.0, unit=unit, price=price),
            best.item,
            fill_empty_unit=config.fill_empty_unit,
        )
        if filled.unit and filled.unit != unit:
            out.iat[pos, unit_idx] = filled.unit
        out.iat[pos, price_idx] = filled.price
        out.iat[pos, total_idx] = filled.line_total

        results.append(
            ItemMatchResult(
                pos,
                name,
                unit or None,
                candidates,
                best.score,
                "matched",
                best.item,
                f"Matched '{best.item.name}' score={best.score:.2f}",
            )
        )
        logger.debug("Ligne %d '%s' → '%s' (%.2f)", pos, name, best.item.name, best.score)

    n_matched = sum(1 for r in results if r.status == "matched")
    logger.info("%d/%d lignes chiffrées depuis le catalogue", n_matched, len(results))
    return out, results


def build_mapping_csv(results: list[ItemMatchResult], output_path: str) -> None:
    """
    Génère mapping.csv : row_id, name, status, score, matched_name, matched_price, suggestions, explanation.
    """
    rows = []
    for r in results:
        rows.append(
            {
                "row_id": r.row_id,
                "name": r.name,
                "status": r.status,
                "score": round(r.best_score, 4),
                "matched_name": r.chosen.name if r.chosen is not None else "",
                "matched_price": r.chosen.price if r.chosen is not None else "",
                "suggestions": " | ".join(f"{c.item.name} ({c.score:.2f})" for c in r.candidates),
                "explanation": r.explanation,
            }
        )
    df = pd.DataFrame(
        rows,
        columns=["row_id", "name", "status", "score", "matched_name", "matched_price", "suggestions", "explanation"],
    )
    df.to_csv(output_path, index=False, encoding="utf-8")
