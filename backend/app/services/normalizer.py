"""Text normalization into comparable tokens."""
import re
from typing import AbstractSet, List

from app.utils.stopwords import ENGLISH_STOPWORDS

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9\s]")


def normalize(text: str, stopwords: AbstractSet[str] = ENGLISH_STOPWORDS) -> List[str]:
    """
    Convert raw text into an ordered list of normalized tokens.

    Text is lowercased, every character outside ``[a-z0-9]`` and whitespace is
    deleted, the result is split on whitespace and stopwords are dropped.

    Args:
        text: Raw extracted text
        stopwords: Tokens to remove

    Returns:
        List of tokens in document order
    """
    if not text:
        return []
    text = _NON_ALPHANUMERIC.sub("", text.lower())
    return [token for token in text.split() if token not in stopwords]


class Normalizer:
    """Normalizer bound to a fixed stopword set."""

    def __init__(self, stopwords: AbstractSet[str] = ENGLISH_STOPWORDS):
        self.stopwords = frozenset(stopwords)

    def normalize(self, text: str) -> List[str]:
        return normalize(text, self.stopwords)
