"""Upload batch validation utilities."""
from pathlib import Path
from typing import Any, Optional, Sequence, Tuple

from app.exceptions import (
    FileSizeExceededError,
    FileTypeNotSupportedError,
    InsufficientDocumentsError,
    TooManyDocumentsError,
)
from app.services.document_processor import SUPPORTED_EXTENSIONS


class DocumentValidator:
    """Checks applied to every uploaded document before extraction."""

    SUPPORTED_EXTENSIONS = list(SUPPORTED_EXTENSIONS)

    @classmethod
    def validate_file_type(cls, filename: str) -> str:
        """Validate file type and return clean extension."""
        if not filename:
            raise FileTypeNotSupportedError("File name is required.")

        extension = Path(filename).suffix.lower()
        if extension not in cls.SUPPORTED_EXTENSIONS:
            raise FileTypeNotSupportedError(
                f"Unsupported file type for {filename!r}. "
                f"Supported formats: {', '.join(cls.SUPPORTED_EXTENSIONS)}"
            )

        return extension

    @classmethod
    def validate_file_size(cls, filename: str, file_size_bytes: int, max_size_mb: float) -> None:
        """Validate file size."""
        file_size_mb = file_size_bytes / (1024 * 1024)
        if file_size_mb > max_size_mb:
            raise FileSizeExceededError(
                f"File {filename!r} ({file_size_mb:.2f} MB) exceeds maximum allowed size ({max_size_mb} MB)."
            )


def validate_document_count(count: int, max_files: int) -> None:
    """
    Validate the number of documents in a batch.

    Raises:
        InsufficientDocumentsError: If fewer than two documents are given
        TooManyDocumentsError: If more than ``max_files`` documents are given
    """
    if count < 2:
        raise InsufficientDocumentsError("At least two files are required")
    if count > max_files:
        raise TooManyDocumentsError(f"At most {max_files} files can be compared at once, got {count}")


def validate_batch(files: Sequence[Tuple[str, bytes]], settings: Any) -> None:
    """
    Validate a whole upload batch before any extraction happens.

    Args:
        files: (filename, content) tuples in upload order
        settings: Application settings with ``max_files`` and ``max_file_size_mb``

    Raises:
        Various validation errors
    """
    validate_document_count(len(files), settings.max_files)

    for filename, content in files:
        DocumentValidator.validate_file_type(filename)
        DocumentValidator.validate_file_size(filename, len(content), settings.max_file_size_mb)


def validate_upload_metadata(uploads: Sequence[Tuple[str, Optional[int]]], settings: Any) -> None:
    """
    Validate a batch from upload metadata, before any file body is read.

    Args:
        uploads: (filename, size in bytes) tuples; size is None when unknown
        settings: Application settings with ``max_files`` and ``max_file_size_mb``

    Raises:
        Various validation errors
    """
    validate_document_count(len(uploads), settings.max_files)

    for filename, size in uploads:
        DocumentValidator.validate_file_type(filename)
        if size is not None:
            DocumentValidator.validate_file_size(filename, size, settings.max_file_size_mb)
