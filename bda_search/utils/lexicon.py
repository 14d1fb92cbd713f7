# bda_search/utils/lexicon.py
"""
Closed word lists used by tokenization and duplicate detection.

Bump LEXICON_VERSION whenever any table below changes: consolidated
datasets built with a different version may group entries differently.
"""
from __future__ import annotations

from typing import FrozenSet

LEXICON_VERSION = "2024.1"

# Articles, articulated prepositions, prepositions and conjunctions dropped
# by stopword-aware tokenization.
IT_STOPWORDS: FrozenSet[str] = frozenset({
    "a", "ad", "al", "allo", "ai", "agli", "all", "agl", "alla", "alle",
    "da", "dal", "dallo", "dai", "dagli", "dall", "dalla", "dalle",
    "di", "del", "dello", "dei", "degli", "dell", "della", "delle",
    "in", "nel", "nello", "nei", "negli", "nell", "nella", "nelle",
    "con", "su", "per", "tra", "fra",
    "e", "ed", "o", "od",
})

# Grammatical words removed from a name before grouping duplicates.
MERGE_PREPOSITIONS: FrozenSet[str] = frozenset({
    "di", "del", "della", "dello", "dei", "delle",
    "al", "alla", "alle",
    "con", "senza",
})

# State / origin / processing adjectives that must not block a merge.
MERGE_DESCRIPTORS: FrozenSet[str] = frozenset({
    "crudo", "cruda",
    "fresco", "fresca", "freschi", "fresche",
    "pastorizzato", "pastorizzata",
    "biologico", "biologica",
    "nostrano", "nostrana",
    "intero", "intera",
})

# "cotto al vapore" / "cotta al vapore" collapse to one marker token.
STEAMED_PATTERN = r"\b(?:cotto|cotta)\s+al\s+vapore\b"
STEAMED_MARKER = "vapore"
