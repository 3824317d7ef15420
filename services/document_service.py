"""
Document upload and read access for documents and their lessons.
"""

import asyncio
import logging
from typing import List, Optional

from clients.s3_client import build_s3_key, get_content_type, get_object_store
from models.lesson_models import Document, DocumentStatus, Lesson
from utils.exceptions import NotFoundError, StorageError, ValidationError
from utils.lesson_storage import DocumentStorage, LessonStorage, generate_uuid

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 50 * 1024 * 1024


class DocumentService:
    def __init__(
        self,
        object_store=None,
        documents: Optional[DocumentStorage] = None,
        lessons: Optional[LessonStorage] = None,
    ):
        self.object_store = object_store or get_object_store()
        self.documents = documents or DocumentStorage()
        self.lessons = lessons or LessonStorage()

    async def upload(self, filename: str, data: bytes, content_type: Optional[str] = None) -> Document:
        """Store the file and create a pending document row for it"""
        if not data:
            raise ValidationError("Uploaded file is empty", error_code="EMPTY_FILE")
        if len(data) > MAX_UPLOAD_BYTES:
            raise ValidationError(
                f"File exceeds {MAX_UPLOAD_BYTES // (1024 * 1024)}MB limit",
                error_code="FILE_TOO_LARGE",
                context={"size": len(data)},
            )

        mime_type = content_type if content_type and content_type != "application/octet-stream" else get_content_type(filename)
        path = build_s3_key(generate_uuid(), filename)
        if not await self.object_store.upload(path, data, mime_type):
            raise StorageError("Failed to store uploaded file", error_code="UPLOAD_FAILED", context={"path": path})

        row = await asyncio.to_thread(self.documents.create, {
            "name": filename,
            "path": path,
            "size": len(data),
            "mime_type": mime_type,
            "status": DocumentStatus.PENDING.value,
        })
        logger.info(f"Uploaded document {row['id']} ({filename}, {len(data)} bytes)")
        return Document.model_validate(row)

    async def get_document(self, document_id: str) -> Document:
        row = await asyncio.to_thread(self.documents.get, document_id)
        if not row:
            raise NotFoundError("Document not found", error_code="DOCUMENT_NOT_FOUND", context={"document_id": document_id})
        return Document.model_validate(row)

    async def list_lessons(self, document_id: str) -> List[Lesson]:
        await self.get_document(document_id)
        rows = await asyncio.to_thread(self.lessons.list_for_document, document_id)
        return [Lesson.model_validate(row) for row in rows]
