"""
Utilities package for BDA Food Search.

This package exposes:
- lexicon: versioned stopword / descriptor tables
- normalizer: text folding, tokenization, Italian collation key
- similarity: edit distance and token match scoring
- data_loader: food records, dataset I/O and error types
- validators: record / dataset validation
"""

from . import data_loader, lexicon, normalizer, similarity, validators  # noqa: F401
