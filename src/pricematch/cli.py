"""Interface en ligne de commande pricematch."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pricematch import __version__
from pricematch.config import Config, PriceColumns, PriceMatchError
from pricematch.io_excel import list_sheets, load_price_list, load_sheet, save_xlsx
from pricematch.matching.engine import get_price_match_candidates
from pricematch.matching.schema import MatchOptions
from pricematch.report import build_report_df, print_report_console
from pricematch.transfer import apply_prices_to_frame, build_mapping_csv

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def cmd_list_sheets(filepath: str) -> int:
    """Liste les feuilles d'un fichier tableur."""
    sheets = list_sheets(filepath)
    print(f"Feuilles dans {filepath}:")
    for s in sheets:
        print(f"  - {s}")
    return 0


def cmd_match(
    name: str,
    price_list_path: str,
    *,
    unit: str | None = None,
    sheet: str | None = None,
    max_results: int | None = None,
    min_score: float | None = None,
    config_path: str | None = None,
) -> int:
    """Affiche les candidats du catalogue pour un libellé."""
    config = Config.load(config_path) if config_path else None
    columns = config.price_columns if config else PriceColumns()
    options = config.match_options() if config else MatchOptions()
    if max_results is not None:
        options.max_results = max_results
    if min_score is not None:
        options.min_score = min_score

    price_list = load_price_list(price_list_path, sheet, columns)
    candidates = get_price_match_candidates(name, unit, price_list, options)

    if not candidates:
        print(f"Aucun candidat pour '{name}' (min_score={options.min_score}).")
        return 0
    print(f"Candidats pour '{name}'" + (f" [{unit}]" if unit else "") + ":")
    for i, c in enumerate(candidates):
        unit_str = f" / {c.item.unit}" if c.item.unit else ""
        print(f"  [{i + 1}] {c.item.name} - {c.item.price:.2f}{unit_str} (score={c.score:.3f})")
    return 0


def cmd_run(
    config_path: str,
    output_path: str | None,
    *,
    dry_run: bool = False,
    mapping_path: str | None = None,
) -> int:
    """Exécute le chiffrage du devis depuis le catalogue."""
    config = Config.load(config_path)
    if not config.quote_file:
        print("Erreur: quote_file requis dans la configuration.", file=sys.stderr)
        return 1

    price_list = load_price_list(config.price_list_file, config.price_list_sheet, config.price_columns)
    df_quote = load_sheet(config.quote_file, config.quote_sheet)
    df_out, results = apply_prices_to_frame(df_quote, price_list, config)

    # --mapping prime s'il est fourni
    map_path = (
        Path(mapping_path)
        if mapping_path
        else (Path(output_path).parent / "mapping.csv" if output_path else Path(config_path).parent / "mapping.csv")
    )
    build_mapping_csv(results, str(map_path))
    print(f"Mapping écrit: {map_path}")

    print_report_console(results, config)

    if dry_run:
        print("Mode dry-run: pas d'écriture du fichier de sortie.")
        return 0

    if not output_path:
        print("Erreur: --output requis en mode non dry-run.", file=sys.stderr)
        return 1

    save_xlsx(output_path, {"Quote": df_out, "REPORT": build_report_df(results, config)})
    print(f"Fichier de sortie: {output_path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="pricematch",
        description="Suggestions de prix depuis un catalogue pour les lignes de devis",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Journalisation détaillée")

    subparsers = parser.add_subparsers(dest="command", help="Commandes")

    p_list = subparsers.add_parser("list-sheets", help="Lister les feuilles d'un tableur")
    p_list.add_argument("file", help="Fichier xlsx/ods/csv")

    p_match = subparsers.add_parser("match", help="Chercher un libellé dans le catalogue")
    p_match.add_argument("name", help="Libellé de la ligne de devis")
    p_match.add_argument("--price-list", "-p", required=True, help="Catalogue (xlsx, ods, csv ou json)")
    p_match.add_argument("--sheet", "-s", help="Feuille du catalogue")
    p_match.add_argument("--unit", "-u", help="Unité de la ligne")
    p_match.add_argument("--max-results", "-n", type=int, help="Nombre maximal de candidats")
    p_match.add_argument("--min-score", type=float, help="Score minimal (0-1)")
    p_match.add_argument("--config", "-c", help="Fichier config JSON (colonnes, seuils)")

    p_run = subparsers.add_parser("run", help="Chiffrer un devis depuis le catalogue")
    p_run.add_argument("--config", "-c", required=True, help="Fichier config JSON")
    p_run.add_argument("--output", "-o", help="Fichier xlsx de sortie")
    p_run.add_argument("--dry-run", action="store_true", help="Ne pas écrire le fichier de sortie")
    p_run.add_argument("--mapping", "-m", help="Chemin pour mapping.csv")

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        if args.command == "list-sheets":
            return cmd_list_sheets(args.file)

        if args.command == "match":
            return cmd_match(
                args.name,
                args.price_list,
                unit=args.unit,
                sheet=args.sheet,
                max_results=args.max_results,
                min_score=args.min_score,
                config_path=args.config,
            )

        if args.command == "run":
            if not args.dry_run and not args.output:
                parser.error("--output requis sauf en --dry-run")
            return cmd_run(
                args.config,
                args.output,
                dry_run=args.dry_run,
                mapping_path=args.mapping,
            )
    except PriceMatchError as e:
        logger.debug("Commande %s interrompue", args.command, exc_info=True)
        print(f"Erreur: {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
