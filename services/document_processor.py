"""
Document processing pipeline.

pending -> processing -> completed, or processing -> failed on any error.
Steps run strictly in order: download, page extraction, chunk storage,
lesson segmentation, lesson storage. Only this module writes Document.status.
Taking over a stale processing run first deletes the chunks and lessons it wrote.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from clients.gemini_client import InlineAttachment
from clients.generative_client import get_generative_client
from clients.s3_client import get_object_store
from models.lesson_models import Document, DocumentStatus, LessonSegment, LessonStatus, ProcessDocumentResponse
from prompts.lesson_prompts import build_lesson_segmentation_prompt, build_page_extraction_prompt
from services.chunking import build_chunk_rows, compute_chunk_ranges, normalize_pages
from utils.exceptions import ConflictError, ExtractionError, GenerationError, LessonLoomError, NotFoundError
from utils.lesson_storage import ChunkStorage, DocumentStorage, LessonStorage
from utils.model_config import ModelRole
from utils.pipeline_config import DOCUMENT_PROCESSING_TTL_SECONDS, PAGE_SEPARATOR
from utils.response_parsing import extract_json_list

logger = logging.getLogger(__name__)

FALLBACK_LESSONS = [
    LessonSegment(title="Getting Started", description="Introduction to the topic"),
    LessonSegment(title="Core Concepts", description="Understanding the fundamentals"),
    LessonSegment(title="Practice & Application", description="Apply what you've learned"),
]


def parse_pages(text: str) -> List[str]:
    """
    Parse the extraction response into page texts.
    Anything that is not a usable JSON array becomes a single page.
    """
    if not text or not text.strip():
        raise ExtractionError("Extraction returned no content")
    try:
        pages = normalize_pages(extract_json_list(text, key="pages"))
    except GenerationError:
        logger.warning("[process] Extraction output is not a JSON array, storing it as a single page")
        return [text.strip()]
    if not pages:
        logger.warning("[process] Extraction returned an empty page list, storing raw output as a single page")
        return [text.strip()]
    return pages


def parse_segments(text: str) -> List[LessonSegment]:
    """Parse segmentation output; invalid entries are skipped, nothing usable means fallback lessons."""
    try:
        entries = extract_json_list(text, key="lessons")
    except GenerationError:
        logger.warning("[process] Segmentation output unparseable, using fallback lessons")
        return list(FALLBACK_LESSONS)

    segments = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        title = entry.get("title")
        if not isinstance(title, str) or not title.strip():
            continue
        description = entry.get("description")
        segments.append(LessonSegment(
            title=title.strip(),
            description=description.strip() if isinstance(description, str) else "",
        ))

    if not segments:
        logger.warning("[process] Segmentation produced no lessons, using fallback lessons")
        return list(FALLBACK_LESSONS)
    return segments


class DocumentProcessor:
    """Turns an uploaded document into page chunks and an ordered lesson sequence"""

    def __init__(
        self,
        client=None,
        object_store=None,
        documents: Optional[DocumentStorage] = None,
        chunks: Optional[ChunkStorage] = None,
        lessons: Optional[LessonStorage] = None,
        processing_ttl_seconds: int = DOCUMENT_PROCESSING_TTL_SECONDS,
    ):
        self.client = client or get_generative_client()
        self.object_store = object_store or get_object_store()
        self.documents = documents or DocumentStorage()
        self.chunks = chunks or ChunkStorage()
        self.lessons = lessons or LessonStorage()
        self.processing_ttl_seconds = processing_ttl_seconds

    async def process(self, document_id: str) -> ProcessDocumentResponse:
        row = await asyncio.to_thread(self.documents.get, document_id)
        if not row:
            raise NotFoundError("Document not found", error_code="DOCUMENT_NOT_FOUND", context={"document_id": document_id})
        document = Document.model_validate(row)

        if document.status == DocumentStatus.COMPLETED:
            logger.info(f"[process] Document {document_id} already processed")
            return ProcessDocumentResponse(success=True, cached=True)

        if document.status == DocumentStatus.FAILED:
            raise ConflictError(
                "Document processing failed previously; upload the document again to retry",
                error_code="DOCUMENT_FAILED",
                context={"document_id": document_id},
            )

        if not await self._claim(document):
            logger.info(f"[process] Document {document_id} is already being processed")
            return ProcessDocumentResponse(success=True, in_progress=True)

        logger.info(f"[process] Processing document {document_id} ({document.name})")
        try:
            if document.status == DocumentStatus.PROCESSING:
                await self._clear_partial_output(document_id)

            pages = await self._extract_pages(document)
            await asyncio.to_thread(self.chunks.insert_many, build_chunk_rows(document_id, pages))
            logger.info(f"[process] Stored {len(pages)} chunks")

            segments = await self._segment_lessons(pages)
            created = await self._store_lessons(document_id, segments, len(pages))

            await asyncio.to_thread(self.documents.set_status, document_id, DocumentStatus.COMPLETED.value)
        except Exception as e:
            logger.error(f"[process] Document {document_id} failed: {e}")
            await self._mark_failed(document_id)
            message = e.message if isinstance(e, LessonLoomError) else str(e)
            raise GenerationError(
                f"Document processing failed: {message}",
                error_code="PROCESSING_FAILED",
                context={"document_id": document_id},
            ) from e

        logger.info(f"[process] Document {document_id} completed with {created} lessons")
        return ProcessDocumentResponse(success=True, lessons_created=created)

    async def _claim(self, document: Document) -> bool:
        """pending -> processing, or take over a processing run that has gone stale."""
        pending = DocumentStatus.PENDING.value
        processing = DocumentStatus.PROCESSING.value

        if document.status == DocumentStatus.PENDING:
            return await asyncio.to_thread(self.documents.claim, document.id, pending, processing)

        stale_before = datetime.now(timezone.utc) - timedelta(seconds=self.processing_ttl_seconds)
        claimed = await asyncio.to_thread(self.documents.claim, document.id, processing, processing, stale_before)
        if claimed:
            logger.warning(f"[process] Reclaiming stale processing run for document {document.id}")
        return claimed

    async def _clear_partial_output(self, document_id: str) -> None:
        """Remove chunks and lessons left behind by a run that was taken over."""
        await asyncio.to_thread(self.lessons.delete_for_document, document_id)
        await asyncio.to_thread(self.chunks.delete_for_document, document_id)
        logger.info(f"[process] Cleared partial output of document {document_id}")

    async def _extract_pages(self, document: Document) -> List[str]:
        raw = await self.object_store.download(document.path)
        if not raw:
            raise ExtractionError("Document file is empty", context={"path": document.path})
        attachment = InlineAttachment(data=raw, mime_type=document.mime_type)

        response = await self.client.generate_multimodal(
            build_page_extraction_prompt(),
            role=ModelRole.EXTRACTION,
            attachment=attachment,
        )
        pages = parse_pages(response.text)
        logger.info(f"[process] Extracted {len(pages)} pages from {document.name}")
        return pages

    async def _segment_lessons(self, pages: List[str]) -> List[LessonSegment]:
        prompt = build_lesson_segmentation_prompt(PAGE_SEPARATOR.join(pages))
        raw = await self.client.generate_text(prompt, role=ModelRole.SEGMENTATION)
        segments = parse_segments(raw)
        logger.info(f"[process] Segmented into {len(segments)} lessons")
        return segments

    async def _store_lessons(self, document_id: str, segments: List[LessonSegment], total_chunks: int) -> int:
        ranges = compute_chunk_ranges(total_chunks, len(segments))
        prev_lesson_id = None
        for order_index, (segment, chunk_range) in enumerate(zip(segments, ranges)):
            row: Dict[str, Any] = {
                "document_id": document_id,
                "title": segment.title,
                "description": segment.description,
                "order_index": order_index,
                "start_chunk_index": chunk_range.start_chunk_index,
                "end_chunk_index": chunk_range.end_chunk_index,
                "prev_lesson_id": prev_lesson_id,
                "status": LessonStatus.PENDING.value,
                "is_completed": False,
                "best_score": None,
            }
            created = await asyncio.to_thread(self.lessons.create, row)
            prev_lesson_id = created["id"]
            logger.info(
                f"[process] Lesson {order_index + 1}: {segment.title} "
                f"(chunks {chunk_range.start_chunk_index}-{chunk_range.end_chunk_index})"
            )
        return len(ranges)

    async def _mark_failed(self, document_id: str) -> None:
        try:
            await asyncio.to_thread(self.documents.set_status, document_id, DocumentStatus.FAILED.value)
        except Exception as e:
            logger.error(f"[process] Could not mark document {document_id} as failed: {e}")
