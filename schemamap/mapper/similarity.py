"""Field name similarity heuristics."""
from typing import List, NamedTuple, Optional, Sequence

# Shared tokens that suggest two fields describe the same concept
DOMAIN_KEYWORDS = (
    "id",
    "name",
    "email",
    "phone",
    "address",
    "date",
    "time",
    "user",
    "customer",
    "order",
)

EXACT_SCORE = 1.0
CONTAINS_SCORE = 0.8
KEYWORD_SCORE = 0.6


class FieldMatch(NamedTuple):
    field: str
    score: float


def normalize_field_name(name: str) -> str:
    """Lowercase a field name and drop ``_`` and ``-`` separators."""
    return (name or "").lower().replace("_", "").replace("-", "")


def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance (insert, delete, substitute all cost 1)."""
    if len(a) < len(b):
        a, b = b, a

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, 1):
        current = [i]
        for j, char_b in enumerate(b, 1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(
                    current[j - 1] + 1,
                    previous[j] + 1,
                    previous[j - 1] + cost,
                )
            )
        previous = current

    return previous[-1]


def similarity(a: str, b: str) -> float:
    """
    Score how likely two field names refer to the same concept.

    Rules are tried in order and the first one that applies wins:

    1. normalized names equal -> 1.0
    2. one normalized name contains the other -> 0.8
    3. both contain the same domain keyword -> 0.6
    4. normalized Levenshtein similarity

    Args:
        a: First field name
        b: Second field name

    Returns:
        float: Score in [0, 1]
    """
    a_norm = normalize_field_name(a)
    b_norm = normalize_field_name(b)

    if not a_norm or not b_norm:
        return 1.0 if not a and not b else 0.0

    if a_norm == b_norm:
        return EXACT_SCORE

    if a_norm in b_norm or b_norm in a_norm:
        return CONTAINS_SCORE

    for keyword in DOMAIN_KEYWORDS:
        if keyword in a_norm and keyword in b_norm:
            return KEYWORD_SCORE

    distance = levenshtein_distance(a_norm, b_norm)
    return max(0.0, 1.0 - distance / max(len(a_norm), len(b_norm)))


def best_match(field: str, candidates: Sequence[str]) -> Optional[FieldMatch]:
    """
    Find the highest scoring candidate for a field.

    Ties keep the earliest candidate. Returns None when there are no candidates.
    """
    best: Optional[FieldMatch] = None

    for candidate in candidates:
        score = similarity(field, candidate)
        if best is None or score > best.score:
            best = FieldMatch(candidate, score)

    return best


def find_similar_fields(token: str, candidates: Sequence[str], limit: int = 3) -> List[str]:
    """
    Collect "did you mean" candidates for an unresolved field token.

    A candidate qualifies when either lowercase spelling contains the other
    or the edit distance between them is at most 2. Vocabulary order is kept.
    """
    token_lower = (token or "").lower()
    if not token_lower:
        return []

    similar = []
    for candidate in candidates:
        candidate_lower = candidate.lower()
        if (
            token_lower in candidate_lower
            or candidate_lower in token_lower
            or levenshtein_distance(token_lower, candidate_lower) <= 2
        ):
            if candidate not in similar:
                similar.append(candidate)
        if len(similar) >= limit:
            break

    return similar


def find_field_mentions(text: str, fields: Sequence[str]) -> List[str]:
    """Return the fields whose name appears in the text (case-insensitive)."""
    text_lower = (text or "").lower()
    mentions = []

    for name in fields:
        if name and name.lower() in text_lower and name not in mentions:
            mentions.append(name)

    return mentions
