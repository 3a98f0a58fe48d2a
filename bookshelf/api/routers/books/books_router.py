"""
Book API endpoints.

Routes:
- POST /books/upload - Upload a PDF and register the book
- POST /books/process - Extract, chunk and store a book's text
- POST /books/embed - Generate embeddings and set the final status

Dependencies: bookshelf.application.services, bookshelf.core, bookshelf.models
System role: Book ingestion HTTP API
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile

from bookshelf.api.deps.dependencies import (
    get_book_upload_service,
    get_ingestion_pipeline,
)
from bookshelf.application.services import BookUploadService
from bookshelf.core.document_processing.models import EmbedResult, ProcessResult
from bookshelf.models.book import (
    BookActionRequest,
    BookResponse,
    ErrorResponse,
    UploadBookResponse,
)

from .book_error_handling import handle_book_errors

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/books", tags=["books"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


@router.post("/upload", response_model=UploadBookResponse, responses=_ERROR_RESPONSES)
@handle_book_errors
async def upload_book(
    file: UploadFile | None = File(default=None),
    user_id: str | None = Form(default=None),
    title: str | None = Form(default=None),
    upload_service: BookUploadService = Depends(get_book_upload_service),
) -> UploadBookResponse:
    """
    Upload a PDF book.

    Args:
        file: PDF file (multipart)
        user_id: Owner of the new book
        title: Optional display title
        upload_service: Injected BookUploadService

    Returns:
        UploadBookResponse: Created book in processing status
    """
    data = await file.read() if file is not None else None
    book = await upload_service.upload(
        user_id=user_id,
        filename=file.filename if file is not None else None,
        content_type=file.content_type if file is not None else None,
        data=data,
        title=title,
    )
    return UploadBookResponse(book=BookResponse.model_validate(book))


@router.post("/process", response_model=ProcessResult, responses=_ERROR_RESPONSES)
@handle_book_errors
async def process_book(
    request: BookActionRequest,
    pipeline=Depends(get_ingestion_pipeline),
) -> ProcessResult:
    """
    Extract and chunk an uploaded book.

    Args:
        request: Book and owner identifiers
        pipeline: Injected BookIngestionPipeline

    Returns:
        ProcessResult: Number of chunks stored and processing time
    """
    logger.info("Processing book", extra={"book_id": str(request.book_id)})
    return await pipeline.process(request.book_id, request.user_id)


@router.post("/embed", response_model=EmbedResult, responses=_ERROR_RESPONSES)
@handle_book_errors
async def embed_book(
    request: BookActionRequest,
    pipeline=Depends(get_ingestion_pipeline),
) -> EmbedResult:
    """
    Generate embeddings for a processed book.

    Args:
        request: Book and owner identifiers
        pipeline: Injected BookIngestionPipeline

    Returns:
        EmbedResult: Embedded count, success rate and final status
    """
    logger.info("Embedding book", extra={"book_id": str(request.book_id)})
    return await pipeline.embed(request.book_id, request.user_id)
