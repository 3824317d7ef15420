"""
Lesson generation trigger and learner-facing lesson operations.

pending -> generating -> ready; generating -> pending on any failure so the
learner can simply retry. A ready lesson is never regenerated by a trigger.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from cards.registry import CardTypeRegistry, get_registry
from clients.generative_client import get_generative_client
from clients.s3_client import get_object_store
from models.lesson_models import (
    Card, CompleteLessonResponse, GenerateLessonResponse, Lesson, LessonStatus,
)
from services.card_generator import CardGenerator
from services.lesson_planner import LessonPlanner
from utils.exceptions import ConflictError, GenerationError, LessonLoomError, NotFoundError, ValidationError
from utils.lesson_storage import CardStorage, ChunkStorage, LessonStorage
from utils.pipeline_config import (
    CHUNK_SEPARATOR,
    LESSON_GENERATION_TTL_SECONDS,
    PASSING_SCORE,
    SIGNED_URL_TTL_SECONDS,
)

logger = logging.getLogger(__name__)


class LessonGenerationService:
    """Drives planning + card generation for a lesson and serves its cards"""

    def __init__(
        self,
        client=None,
        registry: Optional[CardTypeRegistry] = None,
        object_store=None,
        lessons: Optional[LessonStorage] = None,
        chunks: Optional[ChunkStorage] = None,
        cards: Optional[CardStorage] = None,
        generation_ttl_seconds: int = LESSON_GENERATION_TTL_SECONDS,
    ):
        self.client = client or get_generative_client()
        self.registry = registry or get_registry()
        self.object_store = object_store or get_object_store()
        self.lessons = lessons or LessonStorage()
        self.chunks = chunks or ChunkStorage()
        self.cards = cards or CardStorage()
        self.generation_ttl_seconds = generation_ttl_seconds

        self.planner = LessonPlanner(self.client, self.registry)
        self.generator = CardGenerator(self.client, self.registry, self.object_store)

    async def _get_lesson(self, lesson_id: str) -> Lesson:
        row = await asyncio.to_thread(self.lessons.get, lesson_id)
        if not row:
            raise NotFoundError("Lesson not found", error_code="LESSON_NOT_FOUND", context={"lesson_id": lesson_id})
        return Lesson.model_validate(row)

    async def generate(self, lesson_id: str) -> GenerateLessonResponse:
        lesson = await self._get_lesson(lesson_id)

        if lesson.status == LessonStatus.READY:
            logger.info(f"[lesson] Lesson {lesson_id} already ready")
            return GenerateLessonResponse(success=True, cached=True)

        if not await self._claim(lesson):
            current = await self._get_lesson(lesson_id)
            if current.status == LessonStatus.READY:
                return GenerateLessonResponse(success=True, cached=True)
            logger.info(f"[lesson] Lesson {lesson_id} is already generating")
            return GenerateLessonResponse(success=True, in_progress=True)

        logger.info(f"[lesson] Generating cards for lesson {lesson_id}: {lesson.title}")
        try:
            content = await self._load_content(lesson)
            plan = await self.planner.plan(lesson.title, lesson.description, content)
            result = await self.generator.generate(
                plan,
                lesson_id=lesson.id,
                lesson_title=lesson.title,
                lesson_description=lesson.description,
                lesson_content=content,
            )
            if not result.cards:
                raise GenerationError(
                    "No cards could be generated",
                    context={"errors": [error.model_dump() for error in result.errors]},
                )

            rows = [
                {
                    "lesson_id": lesson.id,
                    "order_index": order_index,
                    "type": card.type,
                    "content": card.content,
                }
                for order_index, card in enumerate(result.cards)
            ]
            await asyncio.to_thread(self.cards.insert_many, rows)
            await asyncio.to_thread(self.lessons.set_status, lesson.id, LessonStatus.READY.value)
        except Exception as e:
            logger.error(f"[lesson] Generation failed for lesson {lesson_id}: {e}")
            await self._reset(lesson_id)
            message = e.message if isinstance(e, LessonLoomError) else str(e)
            raise GenerationError(
                f"Lesson generation failed: {message}",
                context={"lesson_id": lesson_id},
            ) from e

        logger.info(f"[lesson] Lesson {lesson_id} ready with {len(rows)} cards")
        return GenerateLessonResponse(
            success=True,
            cards_generated=len(rows),
            errors=result.errors or None,
        )

    async def _claim(self, lesson: Lesson) -> bool:
        """pending -> generating, or take over a generating run that has gone stale."""
        pending = LessonStatus.PENDING.value
        generating = LessonStatus.GENERATING.value

        if lesson.status == LessonStatus.PENDING:
            return await asyncio.to_thread(self.lessons.claim, lesson.id, pending, generating)

        stale_before = datetime.now(timezone.utc) - timedelta(seconds=self.generation_ttl_seconds)
        claimed = await asyncio.to_thread(self.lessons.claim, lesson.id, generating, generating, stale_before)
        if claimed:
            logger.warning(f"[lesson] Reclaiming stale generation run for lesson {lesson.id}")
        return claimed

    async def _load_content(self, lesson: Lesson) -> str:
        chunks = await asyncio.to_thread(
            self.chunks.get_range, lesson.document_id, lesson.start_chunk_index, lesson.end_chunk_index
        )
        if not chunks:
            raise GenerationError(
                "No content found for lesson",
                error_code="LESSON_CONTENT_MISSING",
                context={"start": lesson.start_chunk_index, "end": lesson.end_chunk_index},
            )
        return CHUNK_SEPARATOR.join(chunk["content"] for chunk in chunks)

    async def _reset(self, lesson_id: str) -> None:
        try:
            await asyncio.to_thread(self.lessons.set_status, lesson_id, LessonStatus.PENDING.value)
        except Exception as e:
            logger.error(f"[lesson] Could not reset lesson {lesson_id} to pending: {e}")

    async def complete(self, lesson_id: str, score: float) -> CompleteLessonResponse:
        """Record a learner's score; passing marks the lesson completed"""
        if not 0 <= score <= 100:
            raise ValidationError(
                "Invalid score. Must be a number between 0 and 100.",
                error_code="INVALID_SCORE",
                context={"score": score},
            )

        lesson = await self._get_lesson(lesson_id)
        if lesson.status != LessonStatus.READY:
            raise ConflictError(
                "Lesson cards have not been generated yet",
                error_code="LESSON_NOT_READY",
                context={"lesson_id": lesson_id, "status": lesson.status.value},
            )

        passed = score >= PASSING_SCORE
        new_best_score = lesson.best_score is None or score > lesson.best_score

        updates = {}
        if passed:
            updates["is_completed"] = True
        if new_best_score:
            updates["best_score"] = score
        if updates:
            await asyncio.to_thread(self.lessons.update, lesson_id, updates)

        logger.info(f"[lesson] Lesson {lesson_id}: {'PASSED' if passed else 'FAILED'} with {score}%")
        return CompleteLessonResponse(success=True, passed=passed, score=score, new_best_score=new_best_score)

    async def list_cards(self, lesson_id: str) -> List[Card]:
        """Cards in order; infographic images get a short-lived signed URL"""
        await self._get_lesson(lesson_id)
        rows = await asyncio.to_thread(self.cards.list_for_lesson, lesson_id)
        cards = [Card.model_validate(row) for row in rows]

        for card in cards:
            image_path = card.content.get("image_path")
            if not image_path:
                continue
            try:
                card.image_url = await self.object_store.create_signed_url(image_path, SIGNED_URL_TTL_SECONDS)
            except Exception as e:
                logger.warning(f"[lesson] Could not sign {image_path}: {e}")
        return cards
