"""Pytest configuration and fixtures."""
import io
import shutil
import tempfile

import pytest
from docx import Document as DocxDocument

from app.main import Settings
from app.models.similarity import SimilarityConfig


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = tempfile.mkdtemp()
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def settings(temp_dir):
    """Application settings pointing at a temporary upload directory."""
    return Settings(upload_dir=temp_dir, extraction_workers=1, tracing_enabled=False)


@pytest.fixture
def similarity_config():
    """Default comparison configuration."""
    return SimilarityConfig()


@pytest.fixture
def sample_texts():
    """Three documents where only the first two are alike."""
    return [
        ("essay1.txt", "The cat sat on the mat with a hat.\nIt was a sunny day in the park."),
        ("essay2.txt", "The cat sat on the mat wearing a hat.\nIt was a sunny day in the park!"),
        ("physics.txt", "Quantum physics describes subatomic particles.\nEnergy levels are discrete."),
    ]


@pytest.fixture
def docx_bytes():
    """Build a DOCX file in memory with a paragraph and a table."""

    def _build(paragraphs, cells=()):
        doc = DocxDocument()
        for paragraph in paragraphs:
            doc.add_paragraph(paragraph)
        if cells:
            table = doc.add_table(rows=1, cols=len(cells))
            for cell, text in zip(table.rows[0].cells, cells):
                cell.text = text
        buffer = io.BytesIO()
        doc.save(buffer)
        return buffer.getvalue()

    return _build
