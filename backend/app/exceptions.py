"""Custom exception classes for plagiarism checking."""


class DocumentProcessingError(Exception):
    """Base exception for document processing errors."""

    error_code = "InternalError"
    status_code = 500


class ValidationError(DocumentProcessingError):
    """Raised when a batch or one of its documents fails validation."""

    error_code = "ValidationError"
    status_code = 400


class InsufficientDocumentsError(ValidationError):
    """Raised when fewer than two documents are supplied."""

    error_code = "InsufficientDocuments"


class TooManyDocumentsError(ValidationError):
    """Raised when a batch holds more documents than allowed."""

    error_code = "TooManyDocuments"


class FileTypeNotSupportedError(ValidationError):
    """Raised when an unsupported file type is encountered."""

    error_code = "UnsupportedFormat"


class FileSizeExceededError(ValidationError):
    """Raised when file size exceeds the maximum allowed."""

    error_code = "FileSizeExceeded"


class ProcessingError(DocumentProcessingError):
    """Raised when document processing fails."""
    pass


class ExtractionError(ProcessingError):
    """Raised when text extraction from document fails."""

    error_code = "ExtractionFailure"
    status_code = 400


class ServiceUnavailableError(DocumentProcessingError):
    """Raised when required services are not available."""

    error_code = "ServiceUnavailable"
    status_code = 503
