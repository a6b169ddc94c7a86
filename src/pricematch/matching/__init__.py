"""Module de matching catalogue de prix."""

from pricematch.matching.engine import get_price_match_candidates, prepare_catalog
from pricematch.matching.ranker import rank
from pricematch.matching.schema import (
    ItemMatchResult,
    MatchCandidate,
    MatchOptions,
    MatchQuery,
    PriceListItem,
)
from pricematch.matching.scorers import score

__all__ = [
    "ItemMatchResult",
    "MatchCandidate",
    "MatchOptions",
    "MatchQuery",
    "PriceListItem",
    "get_price_match_candidates",
    "prepare_catalog",
    "rank",
    "score",
]
