"""
FastAPI routes for documents: upload, status, lessons and processing.
"""

from fastapi import APIRouter, UploadFile, File
from typing import List
import logging

from services.document_processor import DocumentProcessor
from services.document_service import DocumentService
from models.lesson_models import Document, Lesson, ProcessDocumentResponse, UploadDocumentResponse
from utils.background import run_detached
from utils.exceptions import ValidationError

logger = logging.getLogger(__name__)
router = APIRouter(tags=["documents"])

# Initialize services
document_service = DocumentService()
document_processor = DocumentProcessor()


@router.post("/documents", status_code=201, response_model=UploadDocumentResponse)
async def upload_document(file: UploadFile = File(...)):
    """
    Upload a source document (PDF, slides, text) and register it as pending.
    Call POST /process/{document_id} afterwards to build its lessons.
    """
    if not file.filename:
        raise ValidationError("A file is required", error_code="FILE_REQUIRED")

    data = await file.read()
    document = await document_service.upload(file.filename, data, file.content_type)
    return UploadDocumentResponse(id=document.id, name=document.name, status=document.status)


@router.get("/documents/{document_id}", response_model=Document)
async def get_document(document_id: str):
    """Document row including its processing status"""
    return await document_service.get_document(document_id)


@router.get("/documents/{document_id}/lessons", response_model=List[Lesson])
async def list_document_lessons(document_id: str):
    """Lessons of a document ordered by order_index"""
    return await document_service.list_lessons(document_id)


@router.post("/process/{document_id}", response_model=ProcessDocumentResponse, response_model_exclude_none=True)
async def process_document(document_id: str):
    """
    Extract pages, store chunks and create the lesson sequence.

    Idempotent by status:
    - completed: returns {success, cached} without doing any work
    - processing: returns {success, inProgress}
    - failed: 409, the document must be uploaded again

    On error the document is left `failed` and a 500 {error} is returned.
    The run continues even if the client disconnects.
    """
    logger.info(f"Process requested for document {document_id}")
    return await run_detached(document_processor.process(document_id), name=f"process-{document_id}")
