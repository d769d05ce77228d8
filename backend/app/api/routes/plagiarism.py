"""Plagiarism check endpoints."""
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from starlette.concurrency import run_in_threadpool

from app.api.schemas import CompareTextsRequest, ErrorDetail, PlagiarismResponse
from app.exceptions import DocumentProcessingError
from app.services.document_processor import DocumentProcessor
from app.services.plagiarism_service import PlagiarismService
from app.utils.logger import logger


router = APIRouter()


def get_document_processor() -> DocumentProcessor:
    """Get document processor service."""
    from app.main import document_processor
    if document_processor is None:
        raise HTTPException(status_code=503, detail=_error_detail("ServiceUnavailable", "Document processor not initialized"))
    return document_processor


def get_app_settings():
    """Get application settings from main app."""
    from app.main import settings
    if settings is None:
        raise HTTPException(status_code=503, detail=_error_detail("ServiceUnavailable", "Settings not initialized"))
    return settings


def get_plagiarism_service(
    document_processor: DocumentProcessor = Depends(get_document_processor),
    app_settings=Depends(get_app_settings),
) -> PlagiarismService:
    """Get plagiarism service with dependencies."""
    return PlagiarismService(document_processor=document_processor, settings=app_settings)


def _error_detail(error: str, message: str) -> dict:
    return ErrorDetail(error=error, message=message).model_dump()


def to_http_exception(e: DocumentProcessingError) -> HTTPException:
    """Convert a document processing error to an HTTP error with a structured detail."""
    return HTTPException(status_code=e.status_code, detail=_error_detail(e.error_code, str(e)))


@router.post("/check-plagiarism", response_model=PlagiarismResponse)
async def check_plagiarism(
    files: Annotated[Optional[List[UploadFile]], File()] = None,
    plagiarism_service: PlagiarismService = Depends(get_plagiarism_service),
):
    """
    Compare uploaded documents (PDF, DOCX, or TXT) with each other.

    Args:
        files: Two or more documents
        plagiarism_service: Plagiarism service instance

    Returns:
        PlagiarismResponse with every pair above the similarity threshold
    """
    files = files or []
    try:
        # Count, type and declared size are checked before any body is read
        plagiarism_service.precheck_uploads([(file.filename or "", file.size) for file in files])

        uploads = [(file.filename or "", await file.read()) for file in files]

        result = await run_in_threadpool(plagiarism_service.check_plagiarism, uploads)

        return PlagiarismResponse(**result)

    except DocumentProcessingError as e:
        raise to_http_exception(e)

    except Exception as e:
        logger.error(f"Unexpected error checking plagiarism: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=_error_detail("InternalError", "Error processing files"))


@router.post("/compare-texts", response_model=PlagiarismResponse)
async def compare_texts(
    request: CompareTextsRequest,
    plagiarism_service: PlagiarismService = Depends(get_plagiarism_service),
):
    """Compare already extracted texts without uploading files."""
    try:
        texts = [(document.name, document.text) for document in request.documents]

        result = await run_in_threadpool(plagiarism_service.compare_texts, texts)

        return PlagiarismResponse(**result)

    except DocumentProcessingError as e:
        raise to_http_exception(e)

    except Exception as e:
        logger.error(f"Unexpected error comparing texts: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=_error_detail("InternalError", "Error comparing texts"))
