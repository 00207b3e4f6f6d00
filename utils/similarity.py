"""
Edit-distance string similarity.
"""

from rapidfuzz.distance import Levenshtein

from utils.text_utils import normalize_text

CONTAINMENT_SCORE = 0.85


def similarity(a: str, b: str, containment_score: float = CONTAINMENT_SCORE) -> float:
    """
    Similarity of two strings in [0, 1].

    1. Either empty → 0
    2. Equal after normalization → 1
    3. One contains the other → containment_score (fixed, length-independent)
    4. Otherwise 1 - levenshtein(a, b) / max(len(a), len(b)) with unit costs

    Symmetric in a and b.
    """
    if not a or not b:
        return 0.0

    s1 = normalize_text(a)
    s2 = normalize_text(b)
    if not s1 or not s2:
        return 0.0

    if s1 == s2:
        return 1.0

    if s1 in s2 or s2 in s1:
        return containment_score

    distance = Levenshtein.distance(s1, s2)
    return 1 - distance / max(len(s1), len(s2))
