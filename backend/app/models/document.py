"""Document data models."""
from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class TextChunk:
    """A non-empty line of a document's raw text."""

    text: str
    index: int
    line_number: int


@dataclass(frozen=True)
class Document:
    """Represents an extracted document ready for comparison."""

    name: str
    raw_text: str
    tokens: Tuple[str, ...] = field(default=(), repr=False)
    chunks: Tuple[TextChunk, ...] = field(default=(), repr=False)

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)
