"""Line-level overlap detection between two documents."""
import re
from collections import Counter, defaultdict
from typing import Dict, List, Sequence, Set

from app.models.document import TextChunk
from app.models.similarity import MatchingChunk
from app.utils.text_cleaner import normalize_line_breaks

_WHITESPACE = re.compile(r"\s+")


def split_chunks(text: str) -> List[TextChunk]:
    """
    Split raw text into non-empty, trimmed lines.

    Args:
        text: Raw document text

    Returns:
        List of TextChunk objects with their 1-based source line numbers
    """
    if not text:
        return []

    chunks = []
    for line_number, line in enumerate(normalize_line_breaks(text).split("\n"), 1):
        stripped = line.strip()
        if stripped:
            chunks.append(TextChunk(text=stripped, index=len(chunks), line_number=line_number))
    return chunks


def _compact(text: str) -> str:
    return _WHITESPACE.sub("", text)


def _bigrams(compact: str) -> Counter:
    return Counter(compact[i:i + 2] for i in range(len(compact) - 1))


def _dice(compact1: str, bigrams1: Counter, compact2: str, bigrams2: Counter) -> float:
    if compact1 == compact2:
        return 1.0
    if len(compact1) < 2 or len(compact2) < 2:
        return 0.0
    shared = sum((bigrams1 & bigrams2).values())
    return 2.0 * shared / (len(compact1) + len(compact2) - 2)


def bigram_similarity(first: str, second: str) -> float:
    """
    Sørensen–Dice coefficient over the character bigrams of two strings.

    Whitespace is ignored. Identical strings score 1.0; strings shorter than
    two characters that differ score 0.0.
    """
    compact1, compact2 = _compact(first), _compact(second)
    return _dice(compact1, _bigrams(compact1), compact2, _bigrams(compact2))


class _ChunkProfile:
    """Precomputed comparison data for one chunk."""

    __slots__ = ("chunk", "compact", "bigrams", "size")

    def __init__(self, chunk: TextChunk):
        self.chunk = chunk
        self.compact = _compact(chunk.text)
        self.bigrams = _bigrams(self.compact)
        self.size = max(len(self.compact) - 1, 0)


class ChunkOverlapDetector:
    """Finds chunk pairs whose bigram similarity meets a threshold."""

    def __init__(self, threshold: float = 0.7):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be between 0 and 1, got {threshold}")
        self.threshold = threshold

    def find_matches(
        self, chunks1: Sequence[TextChunk], chunks2: Sequence[TextChunk]
    ) -> List[MatchingChunk]:
        """
        Compare every chunk of the first document with every chunk of the second.

        Pairs that share no bigram, or whose bigram counts cannot reach the
        threshold, are skipped without changing the result.

        Args:
            chunks1: Chunks of the first document
            chunks2: Chunks of the second document

        Returns:
            Matches ordered by first chunk index, then second chunk index
        """
        if not chunks1 or not chunks2:
            return []

        profiles1 = [_ChunkProfile(chunk) for chunk in chunks1]
        profiles2 = [_ChunkProfile(chunk) for chunk in chunks2]
        index = self._build_index(profiles2) if self.threshold > 0 else None

        matches = []
        for profile1 in profiles1:
            if index is None:
                candidates = range(len(profiles2))
            else:
                candidates = sorted(self._candidates(profile1, index))

            for position in candidates:
                profile2 = profiles2[position]
                if index is not None and not self._reachable(profile1, profile2):
                    continue
                ratio = _dice(profile1.compact, profile1.bigrams, profile2.compact, profile2.bigrams)
                if ratio >= self.threshold:
                    matches.append(
                        MatchingChunk(
                            text1=profile1.chunk.text,
                            text2=profile2.chunk.text,
                            chunk_index1=profile1.chunk.index,
                            chunk_index2=profile2.chunk.index,
                            line_number1=profile1.chunk.line_number,
                            line_number2=profile2.chunk.line_number,
                            ratio=ratio,
                        )
                    )
        return matches

    @staticmethod
    def _build_index(profiles: Sequence[_ChunkProfile]) -> Dict[str, Set[int]]:
        index: Dict[str, Set[int]] = defaultdict(set)
        for position, profile in enumerate(profiles):
            # Exact text key covers single-character chunks, which have no bigrams
            index["=" + profile.compact].add(position)
            for bigram in profile.bigrams:
                index[bigram].add(position)
        return index

    @staticmethod
    def _candidates(profile: _ChunkProfile, index: Dict[str, Set[int]]) -> Set[int]:
        candidates = set(index.get("=" + profile.compact, ()))
        for bigram in profile.bigrams:
            candidates |= index.get(bigram, set())
        return candidates

    def _reachable(self, profile1: _ChunkProfile, profile2: _ChunkProfile) -> bool:
        if profile1.compact == profile2.compact:
            return True
        total = profile1.size + profile2.size
        if total == 0:
            return False
        return 2.0 * min(profile1.size, profile2.size) / total >= self.threshold
