"""Tests du module I/O tableurs."""

import json
from decimal import Decimal
from pathlib import Path

import pandas as pd
import pytest

from pricematch.config import PriceColumns
from pricematch.io_excel import list_sheets, load_price_list, load_sheet, parse_number, save_xlsx
from pricematch.matching.schema import PriceListItem


def test_list_sheets(tmp_path: Path) -> None:
    path = tmp_path / "test.xlsx"
    with pd.ExcelWriter(path, engine="openpyxl") as w:
        pd.DataFrame({"a": [1]}).to_excel(w, sheet_name="Feuille1", index=False)
        pd.DataFrame({"x": [1]}).to_excel(w, sheet_name="Feuille2", index=False)
    assert list_sheets(path) == ["Feuille1", "Feuille2"]


def test_list_sheets_csv(tmp_path: Path) -> None:
    path = tmp_path / "prices.csv"
    path.write_text("name,price\nOutlet,10\n", encoding="utf-8")
    assert list_sheets(path) == ["(données)"]


def test_load_sheet_default_first(tmp_path: Path) -> None:
    path = tmp_path / "test.xlsx"
    pd.DataFrame({"col": ["a", "b"]}).to_excel(path, index=False, engine="openpyxl")
    df = load_sheet(path)
    assert len(df) == 2
    assert "col" in df.columns


def test_load_sheet_csv_semicolon(tmp_path: Path) -> None:
    path = tmp_path / "prices.csv"
    path.write_text("name;price\nOutlet;10,50\nLabor;60\n", encoding="utf-8")
    df = load_sheet(path)
    assert list(df.columns) == ["name", "price"]
    assert df.iloc[0]["price"] == "10,50"


def test_save_xlsx(tmp_path: Path) -> None:
    path = tmp_path / "out.xlsx"
    save_xlsx(path, {"Sheet1": pd.DataFrame({"a": [1]}), "Sheet2": pd.DataFrame({"b": [2]})})
    xl = pd.ExcelFile(path, engine="openpyxl")
    assert "Sheet1" in xl.sheet_names
    assert "Sheet2" in xl.sheet_names
    xl.close()


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("35", 35.0),
        ("35,50", 35.5),
        ("1 200.00", 1200.0),
        ("1.200,50", 1200.5),
        ("1,200.50", 1200.5),
        ("$45", 45.0),
        (12, 12.0),
        ("", None),
        (None, None),
        ("n/a", None),
        (float("nan"), None),
        (10**400, None),
        (Decimal("19.90"), 19.9),
        (True, None),
    ],
)
def test_parse_number(raw: object, expected: float | None) -> None:
    assert parse_number(raw) == expected


def test_load_price_list_xlsx(tmp_path: Path) -> None:
    path = tmp_path / "prices.xlsx"
    pd.DataFrame(
        {
            "name": ["Outlet Installation", "Drywall Sheet 4x8", "", "Broken"],
            "price": ["45", "35,00", "10", "abc"],
            "unit": ["ea", None, "ea", "ea"],
            "aliases": ["socket install|plug install", None, None, None],
        }
    ).to_excel(path, index=False, engine="openpyxl")
    items = load_price_list(path)
    assert items == [
        PriceListItem("Outlet Installation", 45.0, "ea", ["socket install", "plug install"]),
        PriceListItem("Drywall Sheet 4x8", 35.0, None, []),
    ]


def test_load_price_list_custom_columns(tmp_path: Path) -> None:
    path = tmp_path / "catalogue.csv"
    path.write_text("Article;Prix;Unité\nPeinture murale;30;l\n", encoding="utf-8")
    columns = PriceColumns(name_col="Article", price_col="Prix", unit_col="Unité")
    items = load_price_list(path, columns=columns)
    assert items == [PriceListItem("Peinture murale", 30.0, "l", [])]


def test_load_price_list_json(tmp_path: Path) -> None:
    path = tmp_path / "prices.json"
    path.write_text(
        json.dumps(
            {
                "items": [
                    {"name": "Labor", "price": 60, "unit": "hr"},
                    {"name": "Free", "price": -1},
                    {"name": "Fan", "price": 120, "aliases": ["ceiling fan"]},
                ]
            }
        ),
        encoding="utf-8",
    )
    items = load_price_list(path)
    assert [i.name for i in items] == ["Labor", "Fan"]
    assert items[1].aliases == ["ceiling fan"]


def test_load_price_list_json_huge_price_skipped(tmp_path: Path) -> None:
    """Un prix entier démesuré est ignoré comme un prix invalide."""
    path = tmp_path / "prices.json"
    path.write_text('[{"name": "Labor", "price": 1' + "0" * 400 + '}, {"name": "Fan", "price": 120}]', encoding="utf-8")
    items = load_price_list(path)
    assert [i.name for i in items] == ["Fan"]
