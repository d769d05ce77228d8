"""Document text extraction for PDF, DOCX, and TXT files."""
import os
from pathlib import Path
from tempfile import NamedTemporaryFile

from app.utils.logger import logger
from app.utils.text_cleaner import clean_text
from app.exceptions import ExtractionError, FileTypeNotSupportedError, ServiceUnavailableError

try:
    import pdfplumber
    PDFPLUMBER_AVAILABLE = True
except ImportError:
    PDFPLUMBER_AVAILABLE = False
    logger.warning("pdfplumber is not available. PDF processing will not work.")

try:
    from docx import Document as DocxDocument
    DOCX_AVAILABLE = True
except ImportError:
    DOCX_AVAILABLE = False
    logger.warning("python-docx is not available. DOCX processing will not work.")


SUPPORTED_EXTENSIONS = {
    '.pdf': 'pdf',
    '.docx': 'docx',
    '.txt': 'txt',
}


def get_file_type(filename: str) -> str:
    """
    Determine file type based on file extension.

    Raises:
        FileTypeNotSupportedError: If the extension has no extractor
    """
    extension = Path(filename or "").suffix.lower()
    file_type = SUPPORTED_EXTENSIONS.get(extension)
    if file_type is None:
        raise FileTypeNotSupportedError(
            f"Unsupported file type for {filename!r}: {extension or 'no extension'}. "
            f"Supported: {', '.join(SUPPORTED_EXTENSIONS)}"
        )
    return file_type


def extract_text_from_pdf(file_path: str) -> str:
    """
    Extract text from PDF using pdfplumber.

    Args:
        file_path: Path to PDF file

    Returns:
        Text of all pages, one page after another

    Raises:
        ServiceUnavailableError: If pdfplumber is not available
        ExtractionError: If PDF processing fails
    """
    if not PDFPLUMBER_AVAILABLE:
        raise ServiceUnavailableError("pdfplumber is not available. Please install pdfplumber.")

    try:
        with pdfplumber.open(file_path) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        logger.error(f"Error opening PDF file {file_path}: {str(e)}")
        raise ExtractionError(f"Failed to process PDF file: {str(e)}") from e

    return clean_text("\n".join(pages))


def extract_text_from_docx(file_path: str) -> str:
    """
    Extract text from DOCX file.

    Paragraphs come first, followed by the text of table cells.

    Raises:
        ServiceUnavailableError: If python-docx is not available
        ExtractionError: If DOCX processing fails
    """
    if not DOCX_AVAILABLE:
        raise ServiceUnavailableError("python-docx is not available. Please install python-docx.")

    try:
        doc = DocxDocument(file_path)
        full_text = [paragraph.text for paragraph in doc.paragraphs if paragraph.text.strip()]

        for table in doc.tables:
            for row in table.rows:
                for cell in row.cells:
                    if cell.text.strip():
                        full_text.append(cell.text)

    except Exception as e:
        logger.error(f"Error processing DOCX file {file_path}: {str(e)}")
        raise ExtractionError(f"Failed to process DOCX file: {str(e)}") from e

    return clean_text("\n".join(full_text))


def extract_text_from_txt(file_path: str) -> str:
    """
    Extract text from TXT file.

    Raises:
        ExtractionError: If file reading fails
    """
    try:
        with open(file_path, 'r', encoding='utf-8', errors='ignore') as f:
            text = f.read()
    except OSError as e:
        logger.error(f"Error reading TXT file {file_path}: {str(e)}")
        raise ExtractionError(f"Failed to process TXT file: {str(e)}") from e

    return clean_text(text)


EXTRACTORS = {
    'pdf': extract_text_from_pdf,
    'docx': extract_text_from_docx,
    'txt': extract_text_from_txt,
}


def extract_text_from_file(file_path: str) -> str:
    """Extract text from any supported file type."""
    return EXTRACTORS[get_file_type(file_path)](file_path)


class DocumentProcessor:
    """Turns uploaded file bytes into plain text via a temporary file."""

    def __init__(self, upload_dir: str = "./uploads"):
        """
        Initialize document processor.

        Args:
            upload_dir: Directory for temporary file storage
        """
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"DocumentProcessor initialized (upload dir: {self.upload_dir})")

    def extract(self, file_content: bytes, filename: str) -> str:
        """
        Extract text from uploaded file content.

        Args:
            file_content: Raw file content as bytes
            filename: Original filename, used to pick the extractor

        Returns:
            Cleaned document text

        Raises:
            FileTypeNotSupportedError: If the file type is not supported
            ExtractionError: If extraction fails
        """
        # Reject unsupported types before anything is written to disk
        get_file_type(filename)
        tmp_file_path = self._save_temporary_file(file_content, filename)

        try:
            text = extract_text_from_file(tmp_file_path)
        finally:
            self._remove_temporary_file(tmp_file_path)

        logger.info(
            f"Extracted {len(text):,} characters from {filename}",
            extra={"document_name": filename},
        )
        return text

    def _save_temporary_file(self, file_content: bytes, filename: str) -> str:
        """Save uploaded file to temporary location."""
        file_extension = Path(filename).suffix or '.tmp'

        with NamedTemporaryFile(delete=False, suffix=file_extension, dir=self.upload_dir) as tmp_file:
            tmp_file.write(file_content)
            return tmp_file.name

    @staticmethod
    def _remove_temporary_file(file_path: str) -> None:
        try:
            os.unlink(file_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove temporary file {file_path}: {str(e)}")
