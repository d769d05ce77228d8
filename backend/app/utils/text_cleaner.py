"""Text cleaning utilities for extracted document text."""
import re


def normalize_line_breaks(text: str) -> str:
    """Convert Windows and old Mac line endings to ``\\n``."""
    text = re.sub(r"\r\n", "\n", text)
    return re.sub(r"\r", "\n", text)


def clean_text(text: str) -> str:
    """
    Clean extracted text while keeping its line structure.

    Line-level overlap detection reports source line numbers, so only
    horizontal whitespace is collapsed and leading or blank lines are kept.

    Args:
        text: Raw text to clean

    Returns:
        Cleaned text with normalized whitespace
    """
    if not text:
        return ""

    text = normalize_line_breaks(text)

    # Remove special control characters but keep newlines and tabs
    text = re.sub(r"[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f]", "", text)

    # Collapse runs of spaces and tabs
    text = re.sub(r"[ \t\f\v]+", " ", text)

    # Trim each line; blank lines stay so line numbers match the source
    text = "\n".join(line.strip() for line in text.split("\n"))

    return text.rstrip()
