# bda_search/services/ranking_service.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..utils.data_loader import FoodRecord
from ..utils.lexicon import IT_STOPWORDS
from ..utils.normalizer import italian_sort_key, tokenize, unique_tokens
from ..utils.similarity import token_match_score


@dataclass(frozen=True)
class IndexedEntry:
    """Union of the tokens of one record's name and aliases."""
    idx: int
    tokens: Tuple[str, ...]
    content_tokens: Tuple[str, ...] = field(default=())

    @classmethod
    def from_record(cls, idx: int, record: FoodRecord) -> "IndexedEntry":
        tokens = unique_tokens(record.texts())
        content = tuple(t for t in tokens if t not in IT_STOPWORDS)
        return cls(idx=idx, tokens=tokens, content_tokens=content or tokens)


def build_index(records: Sequence[FoodRecord]) -> Tuple[IndexedEntry, ...]:
    return tuple(IndexedEntry.from_record(i, r) for i, r in enumerate(records))


def rank_query_against_tokens(query_tokens: Sequence[str], tokens: Sequence[str]) -> Optional[float]:
    """
    Mean of each query token's best token_match_score over the candidate.
    None when either side is empty or some query token matches nothing:
    every query token must match, there is no partial credit.
    """
    if not query_tokens or not tokens:
        return None
    total = 0.0
    for q in query_tokens:
        best = max(token_match_score(q, t) for t in tokens)
        if best <= 0:
            return None
        total += best
    return total / len(query_tokens)


def containment_score(query_tokens: Sequence[str], tokens: Sequence[str]) -> Optional[int]:
    """
    Per query token: 2 for an exact token, 1 when either contains the other.
    None as soon as one query token finds neither. Sum over query tokens.
    """
    if not query_tokens or not tokens:
        return None
    score = 0
    for q in query_tokens:
        best = 0
        for t in tokens:
            if t == q:
                best = 2
                break
            if q in t or t in q:
                best = 1
        if not best:
            return None
        score += best
    return score


class RankingStrategy:
    """
    Base for ranking strategies. Subclasses decide how a query is tokenized
    and how one indexed entry is scored; ordering is shared:
    score desc, then Italian-collated name asc.
    """

    name = "base"

    def query_tokens(self, query: str) -> List[str]:
        return tokenize(query)

    def score(self, query_tokens: Sequence[str], entry: IndexedEntry) -> Optional[float]:
        raise NotImplementedError

    def rank(
        self,
        query: str,
        records: Sequence[FoodRecord],
        index: Sequence[IndexedEntry],
    ) -> List[Tuple[float, FoodRecord]]:
        q_tokens = self.query_tokens(query)
        if not q_tokens:
            return []

        ranked: List[Tuple[float, FoodRecord]] = []
        for entry in index:
            score = self.score(q_tokens, entry)
            if score is not None:
                ranked.append((score, records[entry.idx]))

        ranked.sort(key=lambda x: (-x[0], italian_sort_key(x[1].name)))
        return ranked


class ContainmentStrategy(RankingStrategy):
    """Coarse bulk-catalog search: discrete {2, 1} scores summed."""

    name = "containment"

    def score(self, query_tokens: Sequence[str], entry: IndexedEntry) -> Optional[float]:
        return containment_score(query_tokens, entry.tokens)


class FuzzyStrategy(RankingStrategy):
    """
    Precision-oriented search: graded, typo-tolerant token matching with
    mean aggregation. Stopwords are ignored on both sides so that
    "pasta di semola" is not carried by "di"; a query made only of
    stopwords keeps all its tokens.
    """

    name = "fuzzy"

    def query_tokens(self, query: str) -> List[str]:
        return tokenize(query, remove_stopwords=True) or tokenize(query)

    def score(self, query_tokens: Sequence[str], entry: IndexedEntry) -> Optional[float]:
        candidate = entry.content_tokens
        if any(q in IT_STOPWORDS for q in query_tokens):
            candidate = entry.tokens
        return rank_query_against_tokens(query_tokens, candidate)


STRATEGIES: Dict[str, type] = {
    ContainmentStrategy.name: ContainmentStrategy,
    FuzzyStrategy.name: FuzzyStrategy,
}


def get_strategy(name: str) -> RankingStrategy:
    key = (name or "").strip().lower()
    if key not in STRATEGIES:
        raise ValueError(f"unknown ranking strategy {name!r}; expected one of {sorted(STRATEGIES)}")
    return STRATEGIES[key]()
