# bda_search/utils/similarity.py
from __future__ import annotations

# Tunables
PREFIX_SCORE = 0.95
SUBSTRING_SCORE = 0.9
FUZZY_THRESHOLD = 0.86
PREFIX_MIN_LEN = 3
SUBSTRING_MIN_LEN = 4


def levenshtein(a: str, b: str) -> int:
    """Classic edit distance (insert/delete/substitute, cost 1 each)."""
    if not a:
        return len(b)
    if not b:
        return len(a)

    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        curr = [i] + [0] * len(b)
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            curr[j] = min(
                prev[j] + 1,         # deletion
                curr[j - 1] + 1,     # insertion
                prev[j - 1] + cost,  # substitution
            )
        prev = curr
    return prev[-1]


def similarity_score(a: str, b: str) -> float:
    """1 - distance / longest length, in [0, 1]."""
    longest = max(len(a), len(b), 1)
    return 1.0 - levenshtein(a, b) / longest


def token_match_score(query_token: str, token: str) -> float:
    """
    Graded confidence that two normalized tokens refer to the same word.

      1.0   identical
      0.95  prefix of each other (shortest >= 3 chars)
      0.9   substring of each other (shortest >= 4 chars)
      sim   edit-distance similarity when sim >= 0.86
      0.0   otherwise

    The length gates keep short words like "di" or "al" from matching on
    raw edit distance. Symmetric in its arguments.
    """
    if not query_token or not token:
        return 0.0
    if query_token == token:
        return 1.0

    shortest = min(len(query_token), len(token))
    if shortest >= PREFIX_MIN_LEN and (
        token.startswith(query_token) or query_token.startswith(token)
    ):
        return PREFIX_SCORE
    if shortest >= SUBSTRING_MIN_LEN and (query_token in token or token in query_token):
        return SUBSTRING_SCORE

    sim = similarity_score(query_token, token)
    return sim if sim >= FUZZY_THRESHOLD else 0.0
