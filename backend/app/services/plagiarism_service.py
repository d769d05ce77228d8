"""Plagiarism check service: batch validation, extraction and comparison."""
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from opentelemetry import trace

from app.exceptions import DocumentProcessingError, ExtractionError
from app.models.similarity import BatchReport, SimilarityPair
from app.services.comparator import PairwiseComparator
from app.services.document_processor import DocumentProcessor, get_file_type
from app.utils.logger import logger
from app.utils.metrics import (
    BATCH_DURATION_SECONDS,
    BATCHES_TOTAL,
    DOCUMENTS_EXTRACTED_TOTAL,
    PAIRS_FLAGGED_TOTAL,
)
from app.utils.tracer import batch_span
from app.validators import validate_batch, validate_document_count, validate_upload_metadata

RESULT_MESSAGE = "Plagiarism check complete."


class PlagiarismService:
    """Service for checking a batch of documents against each other."""

    def __init__(self, document_processor: DocumentProcessor, settings: Any):
        """
        Initialize plagiarism service.

        Args:
            document_processor: Text extraction service
            settings: Application settings (limits, thresholds, worker count)
        """
        self.document_processor = document_processor
        self.settings = settings
        self.comparator = PairwiseComparator(settings.similarity_config())

    def precheck_uploads(self, uploads: Sequence[Tuple[str, Optional[int]]]) -> None:
        """
        Reject a batch from its upload metadata before the file bodies are read.

        Args:
            uploads: (filename, size in bytes) tuples; size is None when unknown
        """
        with self._tracked("plagiarism.precheck_uploads", len(uploads)):
            validate_upload_metadata(uploads, self.settings)

    def check_plagiarism(self, files: Sequence[Tuple[str, bytes]]) -> Dict[str, Any]:
        """
        Extract every uploaded file and compare all pairs.

        Args:
            files: (filename, content) tuples in upload order

        Returns:
            Dict with the message, reported pairs and global similarity

        Raises:
            Various document processing exceptions; no partial result is returned
        """
        start_time = time.time()

        with self._tracked("plagiarism.check_batch", len(files)) as span:
            validate_batch(files, self.settings)
            texts = self._extract_all(files)
            report = self.comparator.compare_texts(texts)
            span.set_attribute("plagiarism.pairs_flagged", len(report.pairs))

        return self._compile_result(report, time.time() - start_time)

    def compare_texts(self, texts: Sequence[Tuple[str, str]]) -> Dict[str, Any]:
        """
        Compare already extracted texts.

        Args:
            texts: (name, text) tuples in request order

        Returns:
            Same structure as ``check_plagiarism``
        """
        start_time = time.time()

        with self._tracked("plagiarism.compare_texts", len(texts)) as span:
            validate_document_count(len(texts), self.settings.max_files)
            report = self.comparator.compare_texts(texts)
            span.set_attribute("plagiarism.pairs_flagged", len(report.pairs))

        return self._compile_result(report, time.time() - start_time)

    @contextmanager
    def _tracked(self, span_name: str, documents: int) -> Iterator[trace.Span]:
        """Run one batch step inside a span, counting and logging its failures."""
        with batch_span(span_name, documents) as span:
            try:
                yield span
            except DocumentProcessingError as e:
                BATCHES_TOTAL.labels(outcome=e.error_code).inc()
                logger.warning(
                    f"Plagiarism check rejected: {str(e)}",
                    extra={"documents_count": documents, "error_code": e.error_code},
                )
                raise
            except Exception:
                BATCHES_TOTAL.labels(outcome="InternalError").inc()
                logger.error("Plagiarism check failed unexpectedly", exc_info=True)
                raise

    def _extract_all(self, files: Sequence[Tuple[str, bytes]]) -> List[Tuple[str, str]]:
        """Extract all files, concurrently when more than one worker is configured."""
        workers = min(len(files), max(1, self.settings.extraction_workers))

        if workers == 1:
            texts = [self._extract_one(filename, content) for filename, content in files]
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                # map() yields in submission order and re-raises the first failure
                texts = list(executor.map(lambda item: self._extract_one(*item), files))

        return [(filename, text) for (filename, _), text in zip(files, texts)]

    def _extract_one(self, filename: str, content: bytes) -> str:
        try:
            text = self.document_processor.extract(content, filename)
        except DocumentProcessingError:
            raise
        except Exception as e:
            logger.error(f"Extraction failed for {filename}: {str(e)}", exc_info=True)
            raise ExtractionError(f"Failed to extract text from {filename}: {str(e)}") from e

        DOCUMENTS_EXTRACTED_TOTAL.labels(file_type=get_file_type(filename)).inc()
        return text

    def _compile_result(self, report: BatchReport, processing_time: float) -> Dict[str, Any]:
        """Compile final result."""
        BATCHES_TOTAL.labels(outcome="success").inc()
        BATCH_DURATION_SECONDS.observe(processing_time)
        PAIRS_FLAGGED_TOTAL.inc(len(report.pairs))

        logger.info(
            f"Plagiarism check complete: {len(report.pairs)} of {report.pairs_compared} pairs flagged",
            extra={
                "documents_count": report.documents_compared,
                "pairs_compared": report.pairs_compared,
                "pairs_flagged": len(report.pairs),
                "processing_time_seconds": processing_time,
            },
        )

        return {
            "message": RESULT_MESSAGE,
            "plagiarism_results": [self._pair_to_dict(pair) for pair in report.pairs],
            "global_similarity": report.global_percentage,
            "documents_compared": report.documents_compared,
            "pairs_compared": report.pairs_compared,
            "processing_time_seconds": processing_time,
        }

    def _pair_to_dict(self, pair: SimilarityPair) -> Dict[str, Any]:
        result = {
            "document1": pair.document1,
            "document2": pair.document2,
            "similarity_percentage": pair.percentage,
            "overlap_percentage": None,
            "similar_sections": None,
        }
        if self.comparator.config.detect_overlaps:
            result["overlap_percentage"] = pair.overlap_percentage
            result["similar_sections"] = [
                {
                    "text_document1": match.text1,
                    "text_document2": match.text2,
                    "chunk_index1": match.chunk_index1,
                    "chunk_index2": match.chunk_index2,
                    "line_document1": match.line_number1,
                    "line_document2": match.line_number2,
                    "similarity": match.percentage,
                }
                for match in pair.matching_chunks
            ]
        return result
