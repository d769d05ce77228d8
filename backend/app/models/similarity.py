"""Similarity result models and comparison configuration."""
from dataclasses import dataclass, field
from typing import FrozenSet, List, Tuple

from app.utils.stopwords import get_stopwords, resolve_language

GLOBAL_SIGNALS = ("vector", "overlap")


def format_percentage(value: float) -> str:
    """Format a ratio in [0, 1] as a percentage string with two decimals."""
    return f"{value * 100:.2f}"


@dataclass(frozen=True)
class SimilarityConfig:
    """
    Parameters shared by the normalizer, scorer and overlap detector.

    Attributes:
        vector_threshold: Minimum cosine score for a pair to be reported
        chunk_threshold: Minimum bigram similarity for a chunk match
        stopword_language: Language of the stopword set
        extra_stopwords: Additional stopwords on top of the language set
        detect_overlaps: Whether to search for matching chunks
        global_signal: Signal averaged into the global similarity ("vector" or "overlap")
    """

    vector_threshold: float = 0.2
    chunk_threshold: float = 0.7
    stopword_language: str = "en"
    extra_stopwords: Tuple[str, ...] = ()
    detect_overlaps: bool = True
    global_signal: str = "vector"

    def __post_init__(self):
        for name in ("vector_threshold", "chunk_threshold"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")
        if self.global_signal not in GLOBAL_SIGNALS:
            raise ValueError(
                f"global_signal must be one of {', '.join(GLOBAL_SIGNALS)}, got {self.global_signal!r}"
            )
        resolve_language(self.stopword_language)

    @property
    def stopwords(self) -> FrozenSet[str]:
        return get_stopwords(self.stopword_language, self.extra_stopwords)


@dataclass(frozen=True)
class MatchingChunk:
    """A pair of similar chunks, one from each document."""

    text1: str
    text2: str
    chunk_index1: int
    chunk_index2: int
    line_number1: int
    line_number2: int
    ratio: float

    @property
    def percentage(self) -> str:
        return format_percentage(self.ratio)


@dataclass
class SimilarityPair:
    """Comparison result for two documents of a batch (index1 < index2)."""

    index1: int
    index2: int
    document1: str
    document2: str
    score: float
    matching_chunks: List[MatchingChunk] = field(default_factory=list)
    overlap_ratio: float = 0.0

    @property
    def percentage(self) -> str:
        return format_percentage(self.score)

    @property
    def overlap_percentage(self) -> str:
        return format_percentage(self.overlap_ratio)


@dataclass
class BatchReport:
    """All reported pairs of a batch plus the aggregate similarity."""

    pairs: List[SimilarityPair]
    global_similarity: float
    documents_compared: int
    pairs_compared: int

    @property
    def global_percentage(self) -> str:
        return format_percentage(self.global_similarity)
