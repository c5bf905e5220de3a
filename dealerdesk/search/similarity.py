"""
Typo-tolerant string similarity based on Levenshtein edit distance
"""

from typing import List, Optional, Tuple


def levenshtein_distance(str1: str, str2: str) -> int:
    """
    Minimum number of single-character insertions, deletions and
    substitutions needed to turn str1 into str2.

    Exact dynamic-programming computation; only the previous row of the
    table is kept.
    """
    if str1 == str2:
        return 0
    if not str1:
        return len(str2)
    if not str2:
        return len(str1)

    previous = list(range(len(str2) + 1))
    for i, char1 in enumerate(str1, start=1):
        current = [i]
        for j, char2 in enumerate(str2, start=1):
            if char1 == char2:
                current.append(previous[j - 1])
            else:
                current.append(min(
                    previous[j] + 1,      # deletion
                    current[j - 1] + 1,   # insertion
                    previous[j - 1] + 1   # substitution
                ))
        previous = current

    return previous[-1]


def calculate_similarity(str1: Optional[str], str2: Optional[str]) -> float:
    """
    Similarity score between two strings, 0.0 to 1.0 where 1.0 is identical.

    Comparison is case-insensitive and ignores surrounding whitespace. An
    empty string is never similar to anything.
    """
    s1 = (str1 or "").lower().strip()
    s2 = (str2 or "").lower().strip()

    if not s1 or not s2:
        return 0.0

    if s1 == s2:
        return 1.0

    distance = levenshtein_distance(s1, s2)
    return 1.0 - distance / max(len(s1), len(s2))


def is_similar(str1: Optional[str], str2: Optional[str], threshold: float = 0.6) -> bool:
    """Check if two strings are similar enough (at or above threshold)"""
    return calculate_similarity(str1, str2) >= threshold


def find_fuzzy_matches(
    search_term: str,
    candidates: List[str],
    threshold: float = 0.6,
    max_results: int = 50
) -> List[Tuple[str, float]]:
    """
    Find best matches in a list of strings

    Args:
        search_term: The search term
        candidates: Candidate strings to score
        threshold: Minimum similarity to keep a candidate
        max_results: Maximum number of results to return

    Returns:
        (candidate, similarity) pairs, highest similarity first
    """
    if not search_term or not candidates:
        return []

    results = []
    for candidate in candidates:
        if not candidate:
            continue

        similarity = calculate_similarity(search_term, candidate)
        if similarity >= threshold:
            results.append((candidate, similarity))

    results.sort(key=lambda item: item[1], reverse=True)
    return results[:max_results]
