"""Term-frequency cosine similarity between token sequences."""
import math
from collections import Counter
from typing import Iterable, Mapping


def term_frequency(tokens: Iterable[str]) -> Counter:
    """Count occurrences of each token."""
    return Counter(tokens)


def cosine_similarity_vectors(freq1: Mapping[str, int], freq2: Mapping[str, int]) -> float:
    """
    Cosine similarity of two term-frequency vectors.

    Args:
        freq1: Token counts of the first document
        freq2: Token counts of the second document

    Returns:
        Score in [0, 1]; 0.0 when either vector has zero magnitude
    """
    squared1 = sum(count * count for count in freq1.values())
    squared2 = sum(count * count for count in freq2.values())
    if squared1 == 0 or squared2 == 0:
        return 0.0

    # Terms missing from either side contribute nothing to the dot product
    smaller, larger = (freq1, freq2) if len(freq1) <= len(freq2) else (freq2, freq1)
    dot_product = sum(count * larger.get(term, 0) for term, count in smaller.items())

    # sqrt(a * b) instead of sqrt(a) * sqrt(b) keeps score(A, A) exactly 1.0
    score = dot_product / math.sqrt(squared1 * squared2)
    return min(1.0, max(0.0, score))


def cosine_similarity(tokens1: Iterable[str], tokens2: Iterable[str]) -> float:
    """Cosine similarity of two token sequences."""
    return cosine_similarity_vectors(term_frequency(tokens1), term_frequency(tokens2))
