"""Tests for service modules."""
import os
from unittest.mock import MagicMock, Mock, patch

import pytest
from prometheus_client import REGISTRY

from app.exceptions import (
    ExtractionError,
    FileSizeExceededError,
    FileTypeNotSupportedError,
    InsufficientDocumentsError,
    TooManyDocumentsError,
)
from app.main import Settings
from app.services.document_processor import (
    DocumentProcessor,
    extract_text_from_docx,
    extract_text_from_file,
    get_file_type,
)
from app.services.plagiarism_service import PlagiarismService
from app.utils.text_cleaner import clean_text


class TestTextCleaner:
    """Tests for extracted text cleaning."""

    def test_clean_text_keeps_lines(self):
        """Test that cleaning collapses spaces but keeps every line."""
        dirty_text = "This   has    multiple\tspaces\r\n\n\n\n  and newlines\x00"
        cleaned = clean_text(dirty_text)
        assert cleaned == "This has multiple spaces\n\n\n\nand newlines"

    def test_clean_text_keeps_leading_blank_lines(self):
        """Test that leading blank lines survive so line numbers stay aligned."""
        cleaned = clean_text("\n\n  Intro\n\n\nBody  text\n\n")
        assert cleaned.split("\n") == ["", "", "Intro", "", "", "Body text"]

    def test_clean_text_empty(self):
        """Test empty input."""
        assert clean_text("") == ""


class TestDocumentProcessor:
    """Tests for DocumentProcessor."""

    @pytest.mark.parametrize(
        "filename,expected",
        [("a.pdf", "pdf"), ("B.DOCX", "docx"), ("notes.txt", "txt")],
    )
    def test_get_file_type(self, filename, expected):
        """Test file type detection by extension."""
        assert get_file_type(filename) == expected

    @pytest.mark.parametrize("filename", ["essay.rtf", "essay.doc", "README", ""])
    def test_unsupported_file_type(self, filename):
        """Test that unknown extensions are rejected."""
        with pytest.raises(FileTypeNotSupportedError):
            get_file_type(filename)

    def test_extract_txt(self, temp_dir):
        """Test text extraction from a TXT upload."""
        processor = DocumentProcessor(upload_dir=temp_dir)
        text = processor.extract("First  line\r\nSecond line\n".encode("utf-8"), "doc.txt")

        assert text == "First line\nSecond line"
        assert os.listdir(temp_dir) == []

    def test_extract_txt_ignores_invalid_bytes(self, temp_dir):
        """Test that undecodable bytes are skipped."""
        processor = DocumentProcessor(upload_dir=temp_dir)
        assert processor.extract(b"caf\xff\xfe ok", "doc.txt") == "caf ok"

    def test_extract_dispatches_on_saved_file(self, temp_dir):
        """Test that uploads go through the generic file extractor on the temp copy."""
        processor = DocumentProcessor(upload_dir=temp_dir)
        with patch(
            "app.services.document_processor.extract_text_from_file",
            wraps=extract_text_from_file,
        ) as mock_extract:
            assert processor.extract(b"Some text", "Notes.TXT") == "Some text"

        (path,), _ = mock_extract.call_args
        assert path.endswith(".TXT")
        assert os.listdir(temp_dir) == []

    def test_extract_docx(self, temp_dir, docx_bytes):
        """Test DOCX extraction of paragraphs and table cells."""
        path = os.path.join(temp_dir, "doc.docx")
        with open(path, "wb") as f:
            f.write(docx_bytes(["First paragraph", "", "Second paragraph"], cells=["Cell text"]))

        assert extract_text_from_docx(path) == "First paragraph\nSecond paragraph\nCell text"
        assert extract_text_from_file(path) == "First paragraph\nSecond paragraph\nCell text"

    def test_corrupted_pdf(self, temp_dir):
        """Test that an unreadable PDF raises ExtractionError and leaves no temp file."""
        processor = DocumentProcessor(upload_dir=temp_dir)
        with pytest.raises(ExtractionError) as exc_info:
            processor.extract(b"this is not a pdf", "broken.pdf")

        assert exc_info.value.__cause__ is not None
        assert os.listdir(temp_dir) == []

    def test_corrupted_docx(self, temp_dir):
        """Test that an unreadable DOCX raises ExtractionError."""
        processor = DocumentProcessor(upload_dir=temp_dir)
        with pytest.raises(ExtractionError):
            processor.extract(b"PK not really a zip", "broken.docx")

    def test_extract_pdf(self, temp_dir):
        """Test PDF extraction joins page text."""
        page1, page2 = Mock(), Mock()
        page1.extract_text.return_value = "Page one   text"
        page2.extract_text.return_value = None
        pdf = MagicMock()
        pdf.pages = [page1, page2]
        pdf.__enter__.return_value = pdf
        pdf.__exit__.return_value = False

        processor = DocumentProcessor(upload_dir=temp_dir)
        with patch("app.services.document_processor.pdfplumber.open", return_value=pdf):
            assert processor.extract(b"%PDF-1.4", "doc.pdf") == "Page one text"


class TestPlagiarismService:
    """Tests for PlagiarismService."""

    @pytest.fixture
    def processor(self):
        processor = Mock(spec=DocumentProcessor)
        processor.extract = Mock(side_effect=lambda content, filename: content.decode("utf-8"))
        return processor

    def test_check_plagiarism(self, processor, settings):
        """Test a full batch with one similar pair."""
        service = PlagiarismService(processor, settings)
        result = service.check_plagiarism(
            [
                ("a.txt", b"The cat sat on the mat.\nA sunny day."),
                ("b.txt", b"The cat sat on the mat!\nA rainy night."),
                ("c.txt", b"Quantum physics"),
            ]
        )

        assert result["message"] == "Plagiarism check complete."
        assert result["documents_compared"] == 3
        assert result["pairs_compared"] == 3
        assert len(result["plagiarism_results"]) == 1

        pair = result["plagiarism_results"][0]
        assert (pair["document1"], pair["document2"]) == ("a.txt", "b.txt")
        assert pair["similar_sections"][0]["text_document1"] == "The cat sat on the mat."
        assert pair["similar_sections"][0]["line_document2"] == 1
        assert result["global_similarity"] == pair["similarity_percentage"]

    def test_single_document_not_extracted(self, processor, settings):
        """Test that a single document is rejected before extraction."""
        service = PlagiarismService(processor, settings)
        with pytest.raises(InsufficientDocumentsError):
            service.check_plagiarism([("a.txt", b"text")])
        processor.extract.assert_not_called()

    def test_unsupported_format_not_extracted(self, processor, settings):
        """Test that one unsupported file aborts the batch before extraction."""
        service = PlagiarismService(processor, settings)
        with pytest.raises(FileTypeNotSupportedError):
            service.check_plagiarism([("a.txt", b"text"), ("b.rtf", b"{\\rtf1 text}")])
        processor.extract.assert_not_called()

    def test_too_many_documents(self, processor, settings):
        """Test the per-batch document limit."""
        service = PlagiarismService(processor, settings)
        files = [(f"doc{i}.txt", b"text") for i in range(settings.max_files + 1)]
        with pytest.raises(TooManyDocumentsError):
            service.check_plagiarism(files)

    def test_file_too_large(self, processor, temp_dir):
        """Test the per-file size limit."""
        service = PlagiarismService(processor, Settings(upload_dir=temp_dir, max_file_size_mb=0))
        with pytest.raises(FileSizeExceededError):
            service.check_plagiarism([("a.txt", b"text"), ("b.txt", b"text")])

    def test_extraction_failure_aborts_batch(self, processor, settings):
        """Test that one failing document aborts the whole batch."""

        def extract(content, filename):
            if filename == "b.pdf":
                raise ExtractionError("Failed to process PDF file")
            return content.decode("utf-8")

        processor.extract.side_effect = extract
        service = PlagiarismService(processor, settings)
        with pytest.raises(ExtractionError):
            service.check_plagiarism([("a.txt", b"text"), ("b.pdf", b"%PDF"), ("c.txt", b"text")])

    def test_unexpected_extraction_error_is_wrapped(self, processor, settings):
        """Test that unexpected extractor errors keep their cause."""
        processor.extract.side_effect = RuntimeError("disk full")
        service = PlagiarismService(processor, settings)
        with pytest.raises(ExtractionError) as exc_info:
            service.check_plagiarism([("a.txt", b"text"), ("b.txt", b"text")])
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_concurrent_extraction_keeps_order(self, processor, temp_dir):
        """Test that parallel extraction reports documents in upload order."""
        settings = Settings(upload_dir=temp_dir, extraction_workers=4, vector_threshold=0.0)
        service = PlagiarismService(processor, settings)
        files = [(f"doc{i}.txt", f"shared text {i}".encode("utf-8")) for i in range(4)]

        result = service.check_plagiarism(files)

        names = [(pair["document1"], pair["document2"]) for pair in result["plagiarism_results"]]
        assert names[0] == ("doc0.txt", "doc1.txt")
        assert names[-1] == ("doc2.txt", "doc3.txt")
        assert processor.extract.call_count == 4

    def test_overlaps_disabled(self, processor, temp_dir):
        """Test that similar sections are omitted when overlap detection is off."""
        settings = Settings(upload_dir=temp_dir, detect_overlaps=False)
        service = PlagiarismService(processor, settings)
        result = service.check_plagiarism([("a.txt", b"same text"), ("b.txt", b"same text")])

        pair = result["plagiarism_results"][0]
        assert pair["similar_sections"] is None
        assert pair["overlap_percentage"] is None

    def test_compare_texts(self, processor, settings):
        """Test comparing already extracted text."""
        service = PlagiarismService(processor, settings)
        result = service.compare_texts([("a", "the cat sat"), ("b", "the cat sat")])

        assert result["plagiarism_results"][0]["similarity_percentage"] == "100.00"
        processor.extract.assert_not_called()

    def test_compare_texts_requires_two(self, processor, settings):
        """Test that a single text is rejected."""
        service = PlagiarismService(processor, settings)
        with pytest.raises(InsufficientDocumentsError):
            service.compare_texts([("a", "text")])

    def test_compare_texts_rejection_is_counted(self, processor, settings):
        """Test that rejected text comparisons show up in the batch counter."""
        labels = {"outcome": "InsufficientDocuments"}
        before = REGISTRY.get_sample_value("plagiarism_batches_total", labels) or 0.0

        service = PlagiarismService(processor, settings)
        with pytest.raises(InsufficientDocumentsError):
            service.compare_texts([("a", "text")])

        assert REGISTRY.get_sample_value("plagiarism_batches_total", labels) == before + 1

    def test_line_numbers_follow_uploaded_file(self, temp_dir, settings):
        """Test that reported lines count the blank lines of the uploaded file."""
        service = PlagiarismService(DocumentProcessor(upload_dir=temp_dir), settings)
        result = service.check_plagiarism(
            [
                ("a.txt", b"\n\nIntro paragraph here\n\n\n\nThe cat sat on the mat today."),
                ("b.txt", b"The cat sat on the mat today."),
            ]
        )

        sections = result["plagiarism_results"][0]["similar_sections"]
        assert len(sections) == 1
        assert sections[0]["text_document1"] == "The cat sat on the mat today."
        assert sections[0]["line_document1"] == 7
        assert sections[0]["line_document2"] == 1

    def test_precheck_uploads_rejects_too_many(self, processor, settings):
        """Test that upload metadata alone is enough to reject a large batch."""
        service = PlagiarismService(processor, settings)
        uploads = [(f"doc{i}.txt", None) for i in range(settings.max_files + 1)]
        with pytest.raises(TooManyDocumentsError):
            service.precheck_uploads(uploads)

    def test_precheck_uploads_rejects_declared_size(self, processor, temp_dir):
        """Test that a declared size above the limit is rejected."""
        service = PlagiarismService(processor, Settings(upload_dir=temp_dir, max_file_size_mb=1))
        with pytest.raises(FileSizeExceededError):
            service.precheck_uploads([("a.txt", 10), ("b.txt", 2 * 1024 * 1024)])

    def test_precheck_uploads_allows_unknown_size(self, processor, settings):
        """Test that missing sizes are left for the full batch check."""
        service = PlagiarismService(processor, settings)
        service.precheck_uploads([("a.txt", None), ("b.pdf", None)])


class TestSettings:
    """Tests for Settings."""

    def test_similarity_config(self, temp_dir):
        """Test building the comparison configuration."""
        settings = Settings(
            upload_dir=temp_dir,
            vector_threshold=0.5,
            chunk_threshold=0.8,
            extra_stopwords="lorem, ipsum ,",
            global_similarity_signal="overlap",
        )
        config = settings.similarity_config()

        assert config.vector_threshold == 0.5
        assert config.chunk_threshold == 0.8
        assert config.extra_stopwords == ("lorem", "ipsum")
        assert config.global_signal == "overlap"
        assert "lorem" in config.stopwords

    def test_invalid_language(self, temp_dir):
        """Test that an unknown stopword language is rejected."""
        with pytest.raises(ValueError):
            Settings(upload_dir=temp_dir, stopword_language="xx").similarity_config()
