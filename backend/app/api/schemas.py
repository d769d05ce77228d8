"""Pydantic schemas for API requests and responses."""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SimilarSection(CamelModel):
    """Schema for a pair of similar lines."""

    text_document1: str = Field(..., description="Line from the first document")
    text_document2: str = Field(..., description="Line from the second document")
    chunk_index1: int = Field(..., ge=0, description="Chunk index in the first document")
    chunk_index2: int = Field(..., ge=0, description="Chunk index in the second document")
    line_document1: int = Field(..., ge=1, description="1-based line number in the first document")
    line_document2: int = Field(..., ge=1, description="1-based line number in the second document")
    similarity: str = Field(..., description="Line similarity as a percentage with two decimals")


class PlagiarismResult(CamelModel):
    """Schema for one reported document pair."""

    document1: str = Field(..., description="Name of the first document")
    document2: str = Field(..., description="Name of the second document")
    similarity_percentage: str = Field(..., description="Cosine similarity as a percentage with two decimals")
    overlap_percentage: Optional[str] = Field(None, description="Share of matching lines as a percentage")
    similar_sections: Optional[List[SimilarSection]] = Field(None, description="Matching lines")


class PlagiarismResponse(CamelModel):
    """Response schema for a plagiarism check."""

    message: str = Field(default="Plagiarism check complete.")
    plagiarism_results: List[PlagiarismResult] = Field(..., description="Pairs above the similarity threshold")
    global_similarity: str = Field(..., description="Mean similarity of reported pairs as a percentage")
    documents_compared: int = Field(..., description="Number of documents in the batch")
    pairs_compared: int = Field(..., description="Number of document pairs compared")


class TextDocument(BaseModel):
    """A named, already extracted document."""

    name: str = Field(..., min_length=1, description="Document name")
    text: str = Field(..., description="Document text")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Document name cannot be empty")
        return v


class CompareTextsRequest(BaseModel):
    """Request schema for comparing raw texts."""

    documents: List[TextDocument] = Field(..., description="Documents to compare")


class ErrorDetail(BaseModel):
    """Structured error returned in the ``detail`` field."""

    error: str = Field(..., description="Error kind")
    message: str = Field(..., description="Human readable explanation")
