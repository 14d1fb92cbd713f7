# bda_search/utils/normalizer.py
from __future__ import annotations

import re
import unicodedata
from typing import Iterable, List, Tuple

from .lexicon import IT_STOPWORDS

_NOT_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_SPACES_RE = re.compile(r"\s+")


def strip_diacritics(text: str) -> str:
    """
    Decompose to base letters plus combining marks (NFD) and drop the marks.
    "però" -> "pero", "È" -> "E".
    """
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_text(value) -> str:
    """
    Lowercase, fold diacritics, turn anything outside [a-z0-9 whitespace]
    into a space, collapse whitespace and trim. Idempotent.
    None is treated as the empty string.
    """
    text = "" if value is None else str(value)
    text = strip_diacritics(text.lower())
    text = _NOT_ALNUM_RE.sub(" ", text)
    return _SPACES_RE.sub(" ", text).strip()


def tokenize(value, remove_stopwords: bool = False) -> List[str]:
    """
    Split normalized text into words, in order. Duplicates are kept.
    With remove_stopwords, Italian articles/prepositions/conjunctions go.
    """
    normalized = normalize_text(value)
    if not normalized:
        return []
    words = normalized.split(" ")
    if remove_stopwords:
        return [w for w in words if w not in IT_STOPWORDS]
    return words


def unique_tokens(texts: Iterable[str]) -> Tuple[str, ...]:
    """Union of tokens over several texts, first-seen order."""
    seen: dict = {}
    for text in texts:
        for tok in tokenize(text):
            seen.setdefault(tok, None)
    return tuple(seen)


def italian_sort_key(name) -> Tuple[str, str, str]:
    """
    Collation key approximating Italian locale ordering:
      1. letters compared without accents or case ("Àncora" ~ "ancora"),
      2. then unaccented before accented,
      3. then lowercase before uppercase.
    """
    text = "" if name is None else str(name)
    primary = strip_diacritics(text).casefold()
    secondary = text.casefold()
    tertiary = text.swapcase()
    return primary, secondary, tertiary
