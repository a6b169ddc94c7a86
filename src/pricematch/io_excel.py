"""I/O tableurs : chargement du catalogue et du devis, sauvegarde (Excel, ODS, CSV, JSON)."""

from __future__ import annotations

import csv
import json
import logging
import math
import re
from pathlib import Path
from typing import Any

import pandas as pd

from pricematch.config import PriceColumns, PriceMatchError
from pricematch.matching.schema import PriceListItem, as_finite_float, is_number

logger = logging.getLogger(__name__)

SUPPORTED_INPUT_EXTENSIONS = (".xlsx", ".xls", ".ods", ".csv")

_PRICE_JUNK_RE = re.compile(r"[^\d,.\-]")


class SpreadsheetFileError(PriceMatchError):
    """Erreur de chargement d'un fichier (fichier absent, feuille ou colonne inexistante)."""


def _get_engine(path: Path) -> str | None:
    """Retourne le moteur pandas selon l'extension, ou None pour auto."""
    suffix = path.suffix.lower()
    if suffix == ".xlsx":
        return "openpyxl"
    if suffix == ".xls":
        return "xlrd"
    if suffix in (".ods", ".odt"):
        return "odf"
    return None


def _is_csv(path: Path) -> bool:
    return path.suffix.lower() == ".csv"


def _detect_csv_delimiter(path: Path, encoding: str) -> str | None:
    try:
        with path.open("r", encoding=encoding, errors="replace") as f:
            sample_lines: list[str] = []
            for line in f:
                if line.strip() == "":
                    continue
                sample_lines.append(line)
                if len(sample_lines) >= 5:
                    break
    except OSError:
        return None
    if not sample_lines:
        return None
    sample = "".join(sample_lines)
    try:
        return csv.Sniffer().sniff(sample, delimiters=[",", ";", "\t", "|"]).delimiter
    except csv.Error:
        first = sample_lines[0]
        counts = {d: first.count(d) for d in [",", ";", "\t", "|"]}
        best = max(counts, key=lambda d: counts[d])
        return best if counts[best] > 0 else None


def _read_csv(path: Path) -> pd.DataFrame:
    for encoding in ("utf-8", "latin-1"):
        delimiter = _detect_csv_delimiter(path, encoding) or ","
        try:
            return pd.read_csv(path, dtype=str, encoding=encoding, sep=delimiter)
        except UnicodeDecodeError:
            logger.debug("Encodage %s refusé pour %s, nouvel essai", encoding, path)
            continue
        except pd.errors.ParserError:
            logger.warning("CSV irrégulier %s : lignes invalides ignorées", path)
            try:
                return pd.read_csv(
                    path,
                    dtype=str,
                    encoding=encoding,
                    sep=delimiter,
                    engine="python",
                    on_bad_lines="warn",
                )
            except Exception as e:
                raise SpreadsheetFileError(f"Erreur CSV {path}: {e}. Vérifiez le séparateur.") from e
        except Exception as e:
            raise SpreadsheetFileError(f"Erreur CSV {path}: {e}") from e
    raise SpreadsheetFileError(f"Encodage non reconnu pour {path}")


def _open_workbook(path: Path) -> pd.ExcelFile:
    try:
        engine = _get_engine(path)
        return pd.ExcelFile(path, engine=engine) if engine else pd.ExcelFile(path)
    except ImportError as e:
        ext = path.suffix.lower()
        if ext == ".xls":
            raise SpreadsheetFileError("Format .xls requis: pip install xlrd") from e
        if ext in (".ods", ".odt"):
            raise SpreadsheetFileError("Format ODS requis: pip install odfpy") from e
        raise SpreadsheetFileError(f"Impossible de lire {path}: {e}") from e
    except Exception as e:
        raise SpreadsheetFileError(f"Impossible de lire le fichier {path}: {e}") from e


def list_sheets(filepath: str | Path) -> list[str]:
    """
    Liste les noms des feuilles d'un fichier tableur.

    Un CSV compte pour une seule feuille.

    Raises:
        SpreadsheetFileError: Si le fichier est absent ou illisible.
    """
    path = Path(filepath)
    if not path.exists():
        raise SpreadsheetFileError(f"Fichier introuvable: {path}")
    if _is_csv(path):
        return ["(données)"]
    with _open_workbook(path) as xl:
        return [str(s) for s in xl.sheet_names]


def load_sheet(filepath: str | Path, sheet_name: str | None = None) -> pd.DataFrame:
    """
    Charge une feuille dans un DataFrame en préservant le texte (dtype=str).

    Args:
        filepath: Chemin vers le fichier (.xlsx, .xls, .ods, .csv).
        sheet_name: Nom de la feuille (None = première). Ignoré pour CSV.

    Raises:
        SpreadsheetFileError: Si le fichier est absent, illisible ou si la feuille n'existe pas.
    """
    path = Path(filepath)
    if not path.exists():
        raise SpreadsheetFileError(f"Fichier introuvable: {path}")
    if _is_csv(path):
        return _read_csv(path)

    with _open_workbook(path) as xl:
        sheets = [str(s) for s in xl.sheet_names]
        if sheet_name is None:
            sheet_name = sheets[0]
        elif sheet_name not in sheets:
            raise SpreadsheetFileError(
                f"Feuille '{sheet_name}' introuvable dans {path}. Feuilles: {', '.join(sheets)}"
            )
        try:
            return pd.read_excel(xl, sheet_name=sheet_name, dtype=str)
        except Exception as e:
            raise SpreadsheetFileError(f"Erreur feuille '{sheet_name}' dans {path}: {e}") from e


def save_xlsx(filepath: str | Path, dataframes: dict[str, pd.DataFrame], *, index: bool = False) -> None:
    """Sauvegarde plusieurs DataFrames dans un fichier xlsx (une feuille par DataFrame)."""
    with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
        for sheet_name, df in dataframes.items():
            # Excel limite les noms de feuille à 31 caractères
            df.to_excel(writer, sheet_name=str(sheet_name)[:31], index=index)


def is_empty_cell(val: Any) -> bool:
    if val is None:
        return True
    try:
        if pd.isna(val):
            return True
    except (TypeError, ValueError):
        return False
    return isinstance(val, str) and val.strip() == ""


def parse_number(val: Any) -> float | None:
    """
    Convertit une cellule en nombre : "35", "35,50", "1 200.00", "1.200,50", "$45".

    Returns:
        None si la cellule est vide ou ne contient pas de nombre.
    """
    if is_empty_cell(val) or isinstance(val, bool):
        return None
    if is_number(val):
        return as_finite_float(val)

    text = _PRICE_JUNK_RE.sub("", str(val))
    if not text or not any(c.isdigit() for c in text):
        return None
    if "," in text and "." in text:
        # Le dernier séparateur rencontré est le séparateur décimal
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif "," in text:
        text = text.replace(",", ".") if text.count(",") == 1 else text.replace(",", "")
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _load_price_list_json(path: Path) -> list[PriceListItem]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SpreadsheetFileError(f"JSON invalide dans {path}: {e}") from e
    except OSError as e:
        raise SpreadsheetFileError(f"Impossible de lire {path}: {e}") from e
    if isinstance(data, dict):
        data = data.get("items", data.get("price_list"))
    if not isinstance(data, list):
        raise SpreadsheetFileError(f"Catalogue invalide: {path} doit contenir une liste d'objets")

    items: list[PriceListItem] = []
    for i, raw in enumerate(data):
        item = PriceListItem.from_dict(raw) if isinstance(raw, dict) else None
        if item is None:
            logger.warning("Entrée %d ignorée dans %s (nom ou prix invalide)", i, path)
            continue
        items.append(item)
    return items


def price_list_from_frame(df: pd.DataFrame, columns: PriceColumns) -> list[PriceListItem]:
    """
    Construit le catalogue depuis un DataFrame.

    Les lignes sans nom ou au prix illisible/négatif sont ignorées (avec un avertissement).

    Raises:
        SpreadsheetFileError: Si la colonne nom ou prix est absente.
    """
    missing = [c for c in (columns.name_col, columns.price_col) if c not in df.columns]
    if missing:
        raise SpreadsheetFileError(f"Colonnes absentes du catalogue: {', '.join(missing)}")
    has_unit = columns.unit_col in df.columns
    has_aliases = columns.aliases_col in df.columns

    items: list[PriceListItem] = []
    for idx, row in df.iterrows():
        name = row[columns.name_col]
        price = parse_number(row[columns.price_col])
        if is_empty_cell(name) or price is None or price < 0:
            logger.warning("Ligne %s ignorée (nom ou prix invalide): %r / %r", idx, name, row[columns.price_col])
            continue
        unit = row[columns.unit_col] if has_unit and not is_empty_cell(row[columns.unit_col]) else None
        aliases: list[str] = []
        if has_aliases and not is_empty_cell(row[columns.aliases_col]):
            aliases = [a.strip() for a in str(row[columns.aliases_col]).split(columns.alias_separator) if a.strip()]
        items.append(
            PriceListItem(
                name=str(name).strip(),
                price=price,
                unit=str(unit).strip() if unit is not None else None,
                aliases=aliases,
            )
        )
    return items


def load_price_list(
    filepath: str | Path,
    sheet_name: str | None = None,
    columns: PriceColumns | None = None,
) -> list[PriceListItem]:
    """
    Charge le catalogue de prix depuis un tableur ou un fichier JSON.

    Le JSON attendu est une liste d'objets {name, price, unit?, aliases?}
    (ou un objet avec une clé "items").

    Raises:
        SpreadsheetFileError: Fichier absent, illisible, ou colonnes requises absentes.
    """
    path = Path(filepath)
    if not path.exists():
        raise SpreadsheetFileError(f"Fichier introuvable: {path}")
    if path.suffix.lower() == ".json":
        items = _load_price_list_json(path)
    else:
        items = price_list_from_frame(load_sheet(path, sheet_name), columns or PriceColumns())
    logger.info("Catalogue chargé: %d entrées depuis %s", len(items), path)
    return items
