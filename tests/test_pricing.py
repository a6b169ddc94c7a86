"""Tests du remplissage des prix depuis le catalogue."""

from decimal import Decimal

import pytest

from pricematch.matching.schema import PriceListItem
from pricematch.pricing import QuoteItem, apply_saved_prices_to_items, find_best_match, needs_price


@pytest.fixture
def price_list() -> list[PriceListItem]:
    return [
        PriceListItem("Outlet Installation", 45, "ea"),
        PriceListItem("Interior Wall Paint", 30, "l"),
        PriceListItem("Labor", 60, "hr"),
    ]


def test_needs_price() -> None:
    assert needs_price(None)
    assert needs_price(0)
    assert needs_price(-3)
    assert needs_price(float("nan"))
    assert needs_price("12")
    assert not needs_price(12.5)
    assert needs_price(10**400)
    assert needs_price(True)
    assert not needs_price(Decimal("12.50"))


def test_find_best_match(price_list: list[PriceListItem]) -> None:
    match = find_best_match("outlet instalation", None, price_list)
    assert match is not None
    assert match.item.name == "Outlet Installation"


def test_find_best_match_below_accept_score(price_list: list[PriceListItem]) -> None:
    assert find_best_match("roof shingles", None, price_list) is None
    assert find_best_match("outlet instalation", None, price_list, accept_score=0.95) is None


def test_apply_fills_missing_price_and_unit(price_list: list[PriceListItem]) -> None:
    items = [QuoteItem("outlet installation", qty=3, unit="", price=None)]
    result = apply_saved_prices_to_items(items, price_list)
    assert result.matched_count == 1
    filled = result.items[0]
    assert filled.price == 45
    assert filled.unit == "ea"
    assert filled.line_total == 135
    # La ligne d'origine n'est pas modifiée
    assert items[0].price is None
    assert items[0].unit == ""


def test_apply_keeps_existing_unit(price_list: list[PriceListItem]) -> None:
    items = [QuoteItem("labor", qty=2, unit="hours", price=0)]
    result = apply_saved_prices_to_items(items, price_list)
    assert result.items[0].unit == "hours"
    assert result.items[0].price == 60
    assert result.items[0].line_total == 120


def test_apply_fill_empty_unit_disabled(price_list: list[PriceListItem]) -> None:
    items = [QuoteItem("labor", qty=1, unit="", price=None)]
    result = apply_saved_prices_to_items(items, price_list, fill_empty_unit=False)
    assert result.items[0].unit == ""
    assert result.items[0].price == 60


def test_apply_skips_priced_items(price_list: list[PriceListItem]) -> None:
    priced = QuoteItem("labor", qty=1, unit="hr", price=75, line_total=75)
    result = apply_saved_prices_to_items([priced], price_list)
    assert result.matched_count == 0
    assert result.items[0] is priced


def test_apply_overwrites_when_not_only_missing(price_list: list[PriceListItem]) -> None:
    priced = QuoteItem("labor", qty=1, unit="hr", price=75, line_total=75)
    result = apply_saved_prices_to_items([priced], price_list, only_missing_price=False)
    assert result.matched_count == 1
    assert result.items[0].price == 60


def test_apply_skips_blank_names_and_unmatched(price_list: list[PriceListItem]) -> None:
    blank = QuoteItem("  ", qty=1)
    unknown = QuoteItem("roof shingles", qty=1)
    result = apply_saved_prices_to_items([blank, unknown], price_list)
    assert result.matched_count == 0
    assert result.items == [blank, unknown]


def test_apply_empty_inputs(price_list: list[PriceListItem]) -> None:
    assert apply_saved_prices_to_items([], price_list).matched_count == 0
    items = [QuoteItem("labor")]
    result = apply_saved_prices_to_items(items, [])
    assert result.matched_count == 0
    assert result.items == items


def test_apply_decimal_price_and_invalid_qty() -> None:
    price_list = [PriceListItem("Floor Tiles", Decimal("25.50"), "sqm")]  # type: ignore[arg-type]
    items = [
        QuoteItem("floor tiles", qty=2, unit="sqm"),
        QuoteItem("floor tiles", qty=10**400, unit="sqm"),  # type: ignore[arg-type]
    ]
    result = apply_saved_prices_to_items(items, price_list)
    assert result.matched_count == 2
    assert result.items[0].price == Decimal("25.50")
    assert result.items[0].line_total == pytest.approx(51.0)
    # Quantité inexploitable : total à 0
    assert result.items[1].line_total == 0.0
