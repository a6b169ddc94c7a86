"""Tests de normalisation."""

from pricematch.normalize import normalize, normalize_unit, singularize, sort_tokens


def test_normalize_basic() -> None:
    # Espaces multiples → espace simple, lower, strip
    assert normalize("  Hello  World  ") == "hello world"
    assert normalize("a\t\n  b") == "a b"
    assert normalize("  ") == ""


def test_normalize_punctuation() -> None:
    assert normalize("Paint, wall - interior (2 coats).") == "paint wall interior 2 coats"
    assert normalize("drywall_sheet/4x8") == "drywall sheet 4x8"


def test_normalize_diacritics() -> None:
    assert normalize("Café") == "cafe"
    assert normalize(" naïve ") == "naive"
    assert normalize("Plâtre Rénové") == "platre renove"


def test_normalize_keeps_non_latin_letters() -> None:
    assert normalize("צבע קיר") == "צבע קיר"
    assert normalize("طلاء, جدار") == "طلاء جدار"


def test_normalize_non_string() -> None:
    assert normalize(None) == ""
    assert normalize(42) == ""
    assert normalize(["paint"]) == ""


def test_normalize_unit_aliases() -> None:
    assert normalize_unit("ea") == "each"
    assert normalize_unit("PCS") == "each"
    assert normalize_unit("Hrs") == "hour"
    assert normalize_unit("sq m") == "sqm"
    assert normalize_unit("m²") == "sqm"
    assert normalize_unit("Litres") == "liter"


def test_normalize_unit_unknown_and_empty() -> None:
    assert normalize_unit("bag") == "bag"
    assert normalize_unit("") is None
    assert normalize_unit("  ") is None
    assert normalize_unit(None) is None


def test_sort_tokens() -> None:
    assert sort_tokens("wall paint interior") == "interior paint wall"
    assert sort_tokens("") == ""


def test_singularize() -> None:
    assert singularize("outlets") == "outlet"
    assert singularize("junction boxes") == "junction box"
    assert singularize("batteries") == "battery"
    assert singularize("floor tiles") == "floor tile"
    assert singularize("glass") == "glass"


def test_singularize_leaves_short_and_mixed_words() -> None:
    assert singularize("bus") == "bus"
    assert singularize("2x4s") == "2x4s"
