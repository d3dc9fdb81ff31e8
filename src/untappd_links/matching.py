"""
Fuzzy matching of user-typed beer names against Untappd catalogue names.

Scores fall into three tiers so a weaker tier can never outrank a stronger one:

- exact match after normalization: 1.0
- one name contains the other: 0.92
- bag-of-words token overlap: at most 0.89
"""

import re

EXACT_SCORE = 1.0
CONTAINMENT_SCORE = 0.92
OVERLAP_CAP = 0.89

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize_search_text(value: str | None) -> str:
    """Lower-case and collapse every non-alphanumeric run into one space."""
    if value is None:
        return ""
    return _NON_ALNUM.sub(" ", str(value).lower()).strip()


def tokenize(value: str) -> set[str]:
    """Split normalized text into a set of tokens."""
    return {token for token in value.split(" ") if token}


def score_candidate(query: str | None, candidate_name: str | None) -> float:
    """
    Score how well a catalogue name matches the user's query.

    Args:
        query: Beer name as typed by the user
        candidate_name: Name returned by the catalogue

    Returns:
        Score in [0, 1]
    """
    q = normalize_search_text(query)
    c = normalize_search_text(candidate_name)
    if not q or not c:
        return 0.0
    if q == c:
        return EXACT_SCORE
    if q in c or c in q:
        return CONTAINMENT_SCORE

    q_tokens = tokenize(q)
    c_tokens = tokenize(c)
    if not q_tokens or not c_tokens:
        return 0.0

    overlap = len(q_tokens & c_tokens)
    if not overlap:
        return 0.0

    ratio = overlap / max(len(q_tokens), len(c_tokens))
    return round(min(ratio * OVERLAP_CAP, OVERLAP_CAP), 3)
