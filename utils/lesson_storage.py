"""
Storage utilities for the lesson pipeline.
Supabase-backed storage for documents, chunks, lessons and cards.

Methods are synchronous; async callers run them with asyncio.to_thread.
Failures are logged and re-raised as StorageError so the owning pipeline
stage can record them as a status transition.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from clients.supabase_client import (
    insert_document,
    get_document_by_id,
    update_document_status,
    claim_document_status,
    insert_chunks,
    get_chunks_in_range,
    delete_chunks_by_document,
    insert_lesson,
    get_lesson_by_id,
    list_lessons_by_document,
    delete_lessons_by_document,
    update_lesson,
    claim_lesson_status,
    insert_cards,
    list_cards_by_lesson,
)
from utils.exceptions import StorageError

logger = logging.getLogger(__name__)


def generate_uuid() -> str:
    """Generate unique ID for documents and stored assets"""
    return str(uuid.uuid4())


def _storage_error(action: str, e: Exception, **context) -> StorageError:
    logger.error(f"Error {action}: {e}")
    return StorageError(f"Failed {action}: {e}", context=context)


# Document Storage Operations
class DocumentStorage:
    """Handle document rows via Supabase"""

    @staticmethod
    def create(row: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return insert_document(row)
        except Exception as e:
            raise _storage_error("creating document", e)

    @staticmethod
    def get(document_id: str) -> Optional[Dict[str, Any]]:
        try:
            return get_document_by_id(document_id)
        except Exception as e:
            raise _storage_error(f"loading document {document_id}", e, document_id=document_id)

    @staticmethod
    def set_status(document_id: str, status: str) -> None:
        try:
            update_document_status(document_id, status)
        except Exception as e:
            raise _storage_error(f"setting document {document_id} to {status}", e, document_id=document_id)

    @staticmethod
    def claim(
        document_id: str,
        from_status: str,
        to_status: str,
        stale_before: Optional[datetime] = None,
    ) -> bool:
        """Compare-and-set on the status column. True if the transition happened."""
        try:
            return claim_document_status(document_id, from_status, to_status, stale_before)
        except Exception as e:
            raise _storage_error(f"claiming document {document_id}", e, document_id=document_id)


# Chunk Storage Operations
class ChunkStorage:
    """Ordered page chunks for a document"""

    @staticmethod
    def insert_many(rows: List[Dict[str, Any]]) -> int:
        try:
            return len(insert_chunks(rows))
        except Exception as e:
            raise _storage_error("storing chunks", e)

    @staticmethod
    def get_range(document_id: str, start_index: int, end_index: int) -> List[Dict[str, Any]]:
        try:
            return get_chunks_in_range(document_id, start_index, end_index)
        except Exception as e:
            raise _storage_error(f"loading chunks {start_index}-{end_index} of {document_id}", e, document_id=document_id)

    @staticmethod
    def delete_for_document(document_id: str) -> None:
        try:
            delete_chunks_by_document(document_id)
        except Exception as e:
            raise _storage_error(f"deleting chunks of {document_id}", e, document_id=document_id)


# Lesson Storage Operations
class LessonStorage:
    """Handle lesson rows via Supabase"""

    @staticmethod
    def create(row: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return insert_lesson(row)
        except Exception as e:
            raise _storage_error(f"creating lesson '{row.get('title')}'", e)

    @staticmethod
    def get(lesson_id: str) -> Optional[Dict[str, Any]]:
        try:
            return get_lesson_by_id(lesson_id)
        except Exception as e:
            raise _storage_error(f"loading lesson {lesson_id}", e, lesson_id=lesson_id)

    @staticmethod
    def list_for_document(document_id: str) -> List[Dict[str, Any]]:
        try:
            return list_lessons_by_document(document_id)
        except Exception as e:
            raise _storage_error(f"listing lessons of {document_id}", e, document_id=document_id)

    @staticmethod
    def delete_for_document(document_id: str) -> None:
        try:
            delete_lessons_by_document(document_id)
        except Exception as e:
            raise _storage_error(f"deleting lessons of {document_id}", e, document_id=document_id)

    @staticmethod
    def update(lesson_id: str, fields: Dict[str, Any]) -> None:
        try:
            update_lesson(lesson_id, fields)
        except Exception as e:
            raise _storage_error(f"updating lesson {lesson_id}", e, lesson_id=lesson_id)

    @staticmethod
    def set_status(lesson_id: str, status: str) -> None:
        LessonStorage.update(lesson_id, {"status": status})

    @staticmethod
    def claim(
        lesson_id: str,
        from_status: str,
        to_status: str,
        stale_before: Optional[datetime] = None,
    ) -> bool:
        try:
            return claim_lesson_status(lesson_id, from_status, to_status, stale_before)
        except Exception as e:
            raise _storage_error(f"claiming lesson {lesson_id}", e, lesson_id=lesson_id)


# Card Storage Operations
class CardStorage:
    """Generated cards, written once per lesson in a single batch"""

    @staticmethod
    def insert_many(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        try:
            return insert_cards(rows)
        except Exception as e:
            raise _storage_error("storing cards", e)

    @staticmethod
    def list_for_lesson(lesson_id: str) -> List[Dict[str, Any]]:
        try:
            return list_cards_by_lesson(lesson_id)
        except Exception as e:
            raise _storage_error(f"listing cards of {lesson_id}", e, lesson_id=lesson_id)
