"""Typo-tolerant, accent-insensitive search over the BDA Italian food catalog."""

from .services.consolidation_service import canonical_merge_name, dedupe_entries
from .services.ranking_service import ContainmentStrategy, FuzzyStrategy, rank_query_against_tokens
from .services.search_service import FoodSearchEngine
from .utils.data_loader import (
    DatasetError,
    DatasetFormatError,
    DatasetUnavailableError,
    FoodRecord,
    NotLoadedError,
    Per100,
)
from .utils.normalizer import normalize_text, tokenize
from .utils.similarity import levenshtein, token_match_score

__version__ = "0.1.0"

__all__ = [
    "ContainmentStrategy",
    "DatasetError",
    "DatasetFormatError",
    "DatasetUnavailableError",
    "FoodRecord",
    "FoodSearchEngine",
    "FuzzyStrategy",
    "NotLoadedError",
    "Per100",
    "canonical_merge_name",
    "dedupe_entries",
    "levenshtein",
    "normalize_text",
    "rank_query_against_tokens",
    "token_match_score",
    "tokenize",
]
