"""Tests du classement des candidats."""

from pricematch.matching.ranker import rank
from pricematch.matching.schema import MatchCandidate, MatchOptions, PriceListItem


def _cand(name: str, sc: float) -> MatchCandidate:
    return MatchCandidate(PriceListItem(name, 1.0), sc)


def test_rank_filters_below_min_score() -> None:
    out = rank([_cand("a", 0.4), _cand("b", 0.6)], MatchOptions(max_results=5, min_score=0.5))
    assert [c.item.name for c in out] == ["b"]


def test_rank_sorts_by_score_then_name_case_insensitive() -> None:
    scored = [_cand("beta", 0.7), _cand("Alpha", 0.7), _cand("gamma", 0.9), _cand("alpha2", 0.7)]
    out = rank(scored, MatchOptions(max_results=10, min_score=0.0))
    assert [c.item.name for c in out] == ["gamma", "Alpha", "alpha2", "beta"]


def test_rank_truncates() -> None:
    scored = [_cand(f"item{i}", 0.5 + i / 100) for i in range(10)]
    out = rank(scored, MatchOptions(max_results=3, min_score=0.0))
    assert [c.item.name for c in out] == ["item9", "item8", "item7"]


def test_rank_zero_or_negative_max_results() -> None:
    scored = [_cand("a", 0.9)]
    assert rank(scored, MatchOptions(max_results=0, min_score=0.0)) == []
    assert rank(scored, MatchOptions(max_results=-2, min_score=0.0)) == []


def test_rank_empty_and_defaults() -> None:
    assert rank([], None) == []
    # Défauts : max_results=3, min_score=0.5
    out = rank([_cand(str(i), 0.6) for i in range(5)] + [_cand("low", 0.49)], None)
    assert len(out) == 3
    assert all(c.score >= 0.5 for c in out)


def test_rank_does_not_mutate_input() -> None:
    scored = [_cand("b", 0.6), _cand("a", 0.9)]
    rank(scored, MatchOptions(max_results=1, min_score=0.0))
    assert [c.item.name for c in scored] == ["b", "a"]


def test_options_coerce() -> None:
    assert MatchOptions.coerce(None) == MatchOptions(3, 0.5)
    assert MatchOptions.coerce({"max_results": 5}) == MatchOptions(5, 0.5)
    assert MatchOptions.coerce({"max_results": "5", "min_score": None}) == MatchOptions(3, 0.5)
    assert MatchOptions.coerce({"max_results": -1, "min_score": float("nan")}) == MatchOptions(0, 0.5)
    assert MatchOptions.coerce(MatchOptions(2.7, 0.8)) == MatchOptions(2, 0.8)  # type: ignore[arg-type]


def test_options_coerce_huge_integers() -> None:
    """Un entier trop grand pour un float ne lève pas d'OverflowError."""
    huge = 10**400
    assert MatchOptions.coerce({"max_results": huge}).max_results == huge
    assert MatchOptions.coerce({"min_score": huge}).min_score == float("inf")
    assert MatchOptions.coerce({"min_score": -huge}).min_score == float("-inf")
    assert MatchOptions.coerce({"max_results": float("inf")}) == MatchOptions(3, 0.5)
    out = rank([_cand("a", 0.9)], MatchOptions.coerce({"max_results": huge, "min_score": huge}))
    assert out == []
