"""pricematch - Suggestions de prix depuis un catalogue pour les lignes de devis."""

from pricematch.config import ConfigError, ConfigFileError, PriceMatchError
from pricematch.io_excel import SpreadsheetFileError
from pricematch.matching import (
    MatchCandidate,
    MatchOptions,
    MatchQuery,
    PriceListItem,
    get_price_match_candidates,
)

__all__ = [
    "__version__",
    "PriceMatchError",
    "ConfigError",
    "ConfigFileError",
    "SpreadsheetFileError",
    "MatchCandidate",
    "MatchOptions",
    "MatchQuery",
    "PriceListItem",
    "get_price_match_candidates",
]

__version__ = "0.1.0"
