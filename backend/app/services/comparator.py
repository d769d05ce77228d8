"""Pairwise comparison of a batch of extracted documents."""
from itertools import combinations
from typing import Iterable, List, Optional, Sequence, Tuple

from app.exceptions import InsufficientDocumentsError
from app.models.document import Document
from app.models.similarity import BatchReport, SimilarityConfig, SimilarityPair
from app.services.chunk_overlap import ChunkOverlapDetector, split_chunks
from app.services.normalizer import Normalizer
from app.services.vector_similarity import cosine_similarity_vectors, term_frequency
from app.utils.logger import logger


def build_document(name: str, raw_text: str, normalizer: Normalizer) -> Document:
    """Create a Document with its tokens and chunks derived from raw text."""
    return Document(
        name=name,
        raw_text=raw_text,
        tokens=tuple(normalizer.normalize(raw_text)),
        chunks=tuple(split_chunks(raw_text)),
    )


class PairwiseComparator:
    """Compares every document pair of a batch and builds a BatchReport."""

    def __init__(self, config: Optional[SimilarityConfig] = None):
        """
        Initialize comparator.

        Args:
            config: Thresholds, stopword language and aggregate settings
        """
        self.config = config or SimilarityConfig()
        self.normalizer = Normalizer(self.config.stopwords)
        self.detector = ChunkOverlapDetector(self.config.chunk_threshold)

    def build_documents(self, texts: Iterable[Tuple[str, str]]) -> List[Document]:
        return [build_document(name, text, self.normalizer) for name, text in texts]

    def compare(self, documents: Sequence[Document]) -> BatchReport:
        """
        Compare all unordered document pairs.

        Args:
            documents: Documents in upload order

        Returns:
            BatchReport with the pairs whose cosine score meets the vector threshold

        Raises:
            InsufficientDocumentsError: If fewer than two documents are given
        """
        if len(documents) < 2:
            raise InsufficientDocumentsError(
                f"At least two documents are required, got {len(documents)}"
            )

        vectors = [term_frequency(document.tokens) for document in documents]
        pairs: List[SimilarityPair] = []
        pairs_compared = 0

        for i, j in combinations(range(len(documents)), 2):
            pairs_compared += 1
            score = cosine_similarity_vectors(vectors[i], vectors[j])
            if score < self.config.vector_threshold:
                continue

            pair = SimilarityPair(
                index1=i,
                index2=j,
                document1=documents[i].name,
                document2=documents[j].name,
                score=score,
            )
            if self.config.detect_overlaps:
                pair.matching_chunks = self.detector.find_matches(
                    documents[i].chunks, documents[j].chunks
                )
                pair.overlap_ratio = self._overlap_ratio(
                    len(pair.matching_chunks), documents[i], documents[j]
                )
            pairs.append(pair)

            logger.debug(
                f"Pair flagged: {pair.document1} <-> {pair.document2} ({pair.percentage}%)",
                extra={"similarity_score": score},
            )

        return BatchReport(
            pairs=pairs,
            global_similarity=self._global_similarity(pairs),
            documents_compared=len(documents),
            pairs_compared=pairs_compared,
        )

    def compare_texts(self, texts: Iterable[Tuple[str, str]]) -> BatchReport:
        """Build documents from (name, text) tuples and compare them."""
        return self.compare(self.build_documents(texts))

    @staticmethod
    def _overlap_ratio(matches: int, document1: Document, document2: Document) -> float:
        largest = max(document1.chunk_count, document2.chunk_count)
        if largest == 0:
            return 0.0
        # One chunk may match several chunks of the other document
        return min(1.0, matches / largest)

    def _global_similarity(self, pairs: Sequence[SimilarityPair]) -> float:
        # No reported pairs means nothing in the batch is similar
        if not pairs:
            return 0.0
        if self.config.global_signal == "overlap":
            values = [pair.overlap_ratio for pair in pairs]
        else:
            values = [pair.score for pair in pairs]
        return sum(values) / len(values)


def compare_texts(
    texts: Iterable[Tuple[str, str]], config: Optional[SimilarityConfig] = None
) -> BatchReport:
    """Compare (name, text) tuples with a one-off comparator."""
    return PairwiseComparator(config).compare_texts(texts)
